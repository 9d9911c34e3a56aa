import random

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from analyzers.fetcher import PageFetcher
from analyzers.models import PerformanceScores
from analyzers.signals import SignalExtractor
from recommendations.engine import ScoringEngine
from reports.assembler import ReportAssembler

BASE_URL = "https://example.com/"


def build_page(
    title: str | None = "T" * 45,
    description: str | None = "D" * 140,
    h1_count: int = 1,
    images: list[str | None] | None = None,
    links: list[str] | None = None,
    open_graph: tuple[str, ...] = ("og:title", "og:description", "og:image", "og:url"),
    viewport: bool = True,
    charset: bool = True,
    extra_head: str = "",
) -> str:
    """Build an HTML page; `images` holds alt values (None = no alt attribute)."""
    head = []
    if charset:
        head.append('<meta charset="utf-8">')
    if viewport:
        head.append('<meta name="viewport" content="width=device-width">')
    if title is not None:
        head.append(f"<title>{title}</title>")
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    for prop in open_graph:
        head.append(f'<meta property="{prop}" content="x">')
    head.append(extra_head)

    body = ["<h1>Heading</h1>" for _ in range(h1_count)]
    for i, alt in enumerate(images or []):
        alt_attr = "" if alt is None else f' alt="{alt}"'
        body.append(f'<img src="/img/{i}.png"{alt_attr}>')
    for href in links if links is not None else ["/a", "/b", "/c"]:
        body.append(f'<a href="{href}">link</a>')

    return f"<html><head>{''.join(head)}</head><body>{''.join(body)}</body></html>"


class SiteTransport:
    """Serves a fake site: a page, optional robots.txt/sitemap.xml, PageSpeed."""

    def __init__(
        self,
        page: str = "",
        page_status: int = 200,
        robots: bool = True,
        sitemap: bool = True,
    ):
        self.page = page
        self.page_status = page_status
        self.robots = robots
        self.sitemap = sitemap
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/robots.txt":
            return httpx.Response(200 if self.robots else 404, text="User-agent: *")
        if path == "/sitemap.xml":
            return httpx.Response(200 if self.sitemap else 404, text="<urlset/>")
        return httpx.Response(self.page_status, text=self.page)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FixedPerformance:
    """PerformanceProvider stand-in returning fixed scores."""

    def __init__(self, mobile: int | None = 95, desktop: int | None = 95):
        self.scores = PerformanceScores(mobile=mobile, desktop=desktop)
        self.calls = 0

    async def get_scores(self, url: str) -> PerformanceScores:
        self.calls += 1
        return self.scores


class FakeRedis:
    """Minimal async Redis client; `fail` makes every call raise."""

    def __init__(self, fail: bool = False):
        self.store = {}
        self.fail = fail
        self.expiries = {}

    async def get(self, key):
        if self.fail:
            raise RedisConnectionError("down")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self.fail:
            raise RedisConnectionError("down")
        self.store[key] = value.encode()
        self.expiries[key] = ex


class RecordingSink:
    def __init__(self):
        self.events = []

    def emit(self, stage, message):
        self.events.append((stage, message))

    @property
    def stages(self):
        return [stage.value for stage, _ in self.events]


@pytest.fixture
def extractor() -> SignalExtractor:
    return SignalExtractor(image_cap=20, link_cap=50)


@pytest.fixture
def scorer() -> ScoringEngine:
    return ScoringEngine()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_assembler(extractor, scorer):
    def _make(site: SiteTransport, performance=None, recommender=None, deadline=30):
        fetcher = PageFetcher(timeout=5, probe_timeout=5, transport=site.transport())
        return ReportAssembler(
            fetcher=fetcher,
            extractor=extractor,
            performance=performance or FixedPerformance(),
            scorer=scorer,
            recommender=recommender,
            deadline=deadline,
        )

    return _make

