"""Job runners: execute an audit now, or hand it to a Celery worker."""

import enum
import logging
import uuid
from abc import ABC, abstractmethod

from analyzers.models import FrozenModel, SEOReport
from config import settings
from reports.assembler import ReportAssembler
from reports.progress import AuditStage, ProgressSink

logger = logging.getLogger(__name__)


class JobStatus(str, enum.Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class JobHandle(FrozenModel):
    """Where an audit job stands, plus its report once completed."""

    job_id: str
    url: str | None = None
    status: JobStatus
    report: SEOReport | None = None
    error: str | None = None


class JobRunner(ABC):
    """Runs audits. Implementations are chosen by settings.job_runner."""

    @abstractmethod
    async def submit(self, url: str, progress: ProgressSink | None = None) -> JobHandle:
        """Start an audit of url."""
        pass

    @abstractmethod
    async def status(self, job_id: str) -> JobHandle | None:
        """Look up a previously submitted job, or None if unknown."""
        pass


class InlineJobRunner(JobRunner):
    """
    Runs the audit in the calling request and returns the finished report.

    FetchError and AuditTimeoutError propagate to the caller. No job
    history is kept, so status() always returns None.
    """

    def __init__(self, assembler: ReportAssembler):
        self.assembler = assembler

    async def submit(self, url: str, progress: ProgressSink | None = None) -> JobHandle:
        report = await self.assembler.build_report(url, progress)
        return JobHandle(
            job_id=str(uuid.uuid4()),
            url=url,
            status=JobStatus.COMPLETED,
            report=report,
        )

    async def status(self, job_id: str) -> JobHandle | None:
        return None


class CeleryJobRunner(JobRunner):
    """
    Enqueues the audit as the `worker.tasks.run_audit` Celery task.

    Progress events are not relayed from workers. The sink hears a single
    terminal `queued` event; clients then poll status().
    """

    # Celery state -> job status
    STATE_MAP = {
        "PENDING": JobStatus.QUEUED,
        "RECEIVED": JobStatus.QUEUED,
        "STARTED": JobStatus.RUNNING,
        "RETRY": JobStatus.RUNNING,
        "SUCCESS": JobStatus.COMPLETED,
        "FAILURE": JobStatus.FAILED,
        "REVOKED": JobStatus.FAILED,
    }

    def __init__(self, task=None, celery_app=None):
        if task is None or celery_app is None:
            from worker.celery_app import celery_app as default_app
            from worker.tasks import run_audit

            task = task or run_audit
            celery_app = celery_app or default_app
        self.task = task
        self.celery_app = celery_app

    async def submit(self, url: str, progress: ProgressSink | None = None) -> JobHandle:
        result = self.task.delay(url)
        logger.info(f"Audit of {url} queued as job {result.id}")
        if progress is not None:
            progress.emit(AuditStage.QUEUED, "Audit queued for processing...")
        return JobHandle(job_id=result.id, url=url, status=JobStatus.QUEUED)

    async def status(self, job_id: str) -> JobHandle | None:
        result = self.celery_app.AsyncResult(job_id)
        status = self.STATE_MAP.get(result.state, JobStatus.RUNNING)

        if status is JobStatus.COMPLETED:
            payload = result.result or {}
            if payload.get("status") == JobStatus.FAILED.value:
                return JobHandle(
                    job_id=job_id,
                    url=payload.get("url"),
                    status=JobStatus.FAILED,
                    error=payload.get("error"),
                )
            return JobHandle(
                job_id=job_id,
                url=payload.get("url"),
                status=JobStatus.COMPLETED,
                report=SEOReport.model_validate(payload["report"]),
            )
        if status is JobStatus.FAILED:
            return JobHandle(job_id=job_id, status=status, error=str(result.result))
        return JobHandle(job_id=job_id, status=status)


def build_job_runner(assembler: ReportAssembler) -> JobRunner:
    """Select the job runner named by settings.job_runner."""
    if settings.job_runner == "celery":
        return CeleryJobRunner()
    return InlineJobRunner(assembler)
