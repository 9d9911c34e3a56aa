import asyncio
import json
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from sse_starlette.sse import AppStatus

from analyzers.fetcher import FetchError, PageFetcher
from api.dependencies import (
    get_audit_repository,
    get_job_runner,
    get_page_fetcher,
    get_progress_broker,
)
from conftest import BASE_URL, SiteTransport, build_page
from db.models import AuditStatus
from main import app
from reports.assembler import AuditTimeoutError
from reports.jobs import InlineJobRunner, JobHandle, JobStatus
from reports.progress import AuditStage, ProgressBroker


class FakeRepository:
    def __init__(self):
        self.records = []

    def _add(self, **fields):
        record = SimpleNamespace(
            id=uuid.uuid4(),
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self.records.append(record)
        return record

    async def save_report(self, report):
        return self._add(
            url=report.url,
            status=AuditStatus.COMPLETED,
            seo_score=report.seo_score,
            report=report.model_dump(mode="json", by_alias=True),
            error_message=None,
        )

    async def save_failure(self, url, error):
        return self._add(
            url=url,
            status=AuditStatus.FAILED,
            seo_score=None,
            report=None,
            error_message=error,
        )

    async def get_by_id(self, audit_id):
        return next((r for r in self.records if r.id == audit_id), None)

    async def list_recent(self, limit=20):
        return list(reversed(self.records))[:limit]


class RaisingRunner:
    def __init__(self, error):
        self.error = error

    async def submit(self, url, progress=None):
        raise self.error

    async def status(self, job_id):
        return None


class QueueingRunner:
    async def submit(self, url, progress=None):
        if progress is not None:
            progress.emit(AuditStage.QUEUED, "Audit queued for processing...")
        return JobHandle(job_id="job-1", url=url, status=JobStatus.QUEUED)

    async def status(self, job_id):
        if job_id == "job-1":
            return JobHandle(job_id=job_id, status=JobStatus.RUNNING)
        return None


@pytest.fixture
def repo():
    return FakeRepository()


@pytest.fixture
def site():
    return SiteTransport(page=build_page(images=["a"], links=["/x"]))


@pytest.fixture(autouse=True)
def fresh_sse_exit_event(monkeypatch):
    # The shutdown event binds to the first loop that waits on it
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)


@pytest.fixture
def broker():
    return ProgressBroker()


@pytest.fixture
def client(make_assembler, repo, site, broker):
    runner = InlineJobRunner(make_assembler(site))
    app.dependency_overrides[get_job_runner] = lambda: runner
    app.dependency_overrides[get_progress_broker] = lambda: broker
    app.dependency_overrides[get_page_fetcher] = lambda: PageFetcher(transport=site.transport())
    app.dependency_overrides[get_audit_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    for path in ("/api/v1/health", "/api/v1/healthz"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


def test_create_audit_returns_report(client, repo):
    response = client.post("/api/v1/audits", json={"url": "https://example.com"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["url"] == "https://example.com/"
    assert body["report"]["seoScore"] == 100
    assert body["report"]["technical"]["hasRobotsTxt"] is True
    assert body["report"]["aiRecommendations"] is None
    assert repo.records[0].seo_score == 100


def test_create_audit_rejects_invalid_url(client):
    for url in ("example.com", "ftp://example.com/", ""):
        response = client.post("/api/v1/audits", json={"url": url})
        assert response.status_code == 422


def test_create_audit_fetch_failure(client, repo):
    app.dependency_overrides[get_job_runner] = lambda: RaisingRunner(
        FetchError("https://example.com/", "HTTP 503")
    )

    response = client.post("/api/v1/audits", json={"url": "https://example.com/"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to analyze website: HTTP 503"
    assert repo.records[0].status is AuditStatus.FAILED


def test_create_audit_timeout(client):
    app.dependency_overrides[get_job_runner] = lambda: RaisingRunner(
        AuditTimeoutError("https://example.com/", 120)
    )

    response = client.post("/api/v1/audits", json={"url": "https://example.com/"})

    assert response.status_code == 504


def test_queued_audit_and_job_status(client, repo):
    app.dependency_overrides[get_job_runner] = lambda: QueueingRunner()

    response = client.post("/api/v1/audits", json={"url": "https://example.com/"})

    assert response.status_code == 202
    assert response.json()["jobId"] == "job-1"
    assert repo.records == []
    assert client.get("/api/v1/audits/jobs/job-1").json()["status"] == "running"
    assert client.get("/api/v1/audits/jobs/nope").status_code == 404


def test_inline_runner_has_no_job_history(client):
    assert client.get("/api/v1/audits/jobs/anything").status_code == 404


def test_stored_audits_listed_and_fetched(client, repo):
    client.post("/api/v1/audits", json={"url": "https://example.com/"})

    listing = client.get("/api/v1/audits").json()
    assert listing["count"] == 1
    audit_id = listing["audits"][0]["id"]

    stored = client.get(f"/api/v1/audits/{audit_id}").json()
    assert stored["seoScore"] == 100
    assert stored["status"] == "completed"
    assert client.get(f"/api/v1/audits/{uuid.uuid4()}").status_code == 404


def test_progress_rejects_bad_url(client):
    response = client.get("/api/v1/audits/progress", params={"url": "not a url"})

    assert response.status_code == 400


def test_meta_check(client):
    response = client.post("/api/v1/meta-check", json={"url": "https://example.com/"})

    assert response.status_code == 200
    body = response.json()
    assert body["title"]["length"] == 45
    assert body["title"]["status"] == "warning"
    assert body["description"]["status"] == "warning"


def test_headings_check(client):
    body = client.post("/api/v1/headings", json={"url": "https://example.com/"}).json()

    assert body["summary"]["h1"] == 1
    assert body["headings"] == [{"tag": "H1", "text": "Heading", "level": 1}]


def test_social_tags_check(client):
    body = client.post("/api/v1/social-tags", json={"url": "https://example.com/"}).json()

    assert body["summary"]["openGraphComplete"] is True
    assert body["summary"]["twitterCardComplete"] is False


def test_check_fetch_failure(client):
    failing = SiteTransport(page="", page_status=500)
    app.dependency_overrides[get_page_fetcher] = lambda: PageFetcher(transport=failing.transport())

    response = client.post("/api/v1/headings", json={"url": "https://example.com/"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to analyze headings: HTTP 500"


@pytest.mark.parametrize("limit", [0, -1, 101])
def test_list_audits_rejects_out_of_range_limit(client, limit):
    response = client.get("/api/v1/audits", params={"limit": limit})

    assert response.status_code == 422


async def wait_for_subscriber(broker, url):
    while broker.subscriber_count(url) == 0:
        await asyncio.sleep(0.01)


def sse_data(body: str) -> list[dict]:
    return [json.loads(line[len("data:"):]) for line in body.splitlines() if line.startswith("data:")]


async def test_progress_stream_follows_an_audit_to_completion(client, broker):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        stream = asyncio.create_task(
            http.get("/api/v1/audits/progress", params={"url": BASE_URL})
        )
        await asyncio.wait_for(wait_for_subscriber(broker, BASE_URL), timeout=5)

        audit = await http.post("/api/v1/audits", json={"url": BASE_URL})
        progress = await asyncio.wait_for(stream, timeout=5)

    assert audit.status_code == 200
    assert progress.status_code == 200
    assert [event["stage"] for event in sse_data(progress.text)] == [
        "initial",
        "fetching",
        "analyzing",
        "pagespeed",
        "analyzing",
        "analyzing",
        "complete",
    ]
    assert broker.subscriber_count(BASE_URL) == 0
    assert len(broker) == 0


async def test_progress_stream_ends_when_audit_is_queued(client, broker):
    app.dependency_overrides[get_job_runner] = lambda: QueueingRunner()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        stream = asyncio.create_task(
            http.get("/api/v1/audits/progress", params={"url": BASE_URL})
        )
        await asyncio.wait_for(wait_for_subscriber(broker, BASE_URL), timeout=5)

        await http.post("/api/v1/audits", json={"url": BASE_URL})
        progress = await asyncio.wait_for(stream, timeout=5)

    assert [event["stage"] for event in sse_data(progress.text)] == ["initial", "queued"]
    assert broker.subscriber_count(BASE_URL) == 0
