"""Celery tasks for running audits outside the request cycle."""

import asyncio

from celery.utils.log import get_task_logger
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from analyzers.cache import MemoryTTLCache
from analyzers.fetcher import FetchError
from config import settings
from db.models import AuditRecord, AuditStatus
from reports.assembler import AuditTimeoutError, ReportAssembler, build_assembler
from worker.celery_app import celery_app

logger = get_task_logger(__name__)

# Celery tasks are synchronous, so persistence uses sync SQLAlchemy
sync_database_url = settings.database_url.replace("+asyncpg", "+psycopg2")
sync_engine = create_engine(sync_database_url, pool_pre_ping=True)
SyncSessionLocal = sessionmaker(bind=sync_engine)

# Shared across tasks in this worker process when the cache is in-memory
_memory_cache = MemoryTTLCache()


def get_sync_session() -> Session:
    """Get a synchronous database session for Celery tasks."""
    return SyncSessionLocal()


def get_assembler() -> ReportAssembler:
    """
    Build an assembler for one task.

    Each task runs its own event loop, so network clients are created per
    task. The in-memory PageSpeed cache outlives them.
    """
    if settings.cache_backend == "memory":
        return build_assembler(cache=_memory_cache)
    return build_assembler()


@celery_app.task(bind=True, name="worker.tasks.run_audit")
def run_audit(self, url: str) -> dict:
    """
    Audit a URL and return the report as JSON-ready data.

    A page that cannot be fetched is a normal outcome for this task: it
    returns status "failed" with the error rather than raising, so the
    job is not retried.
    """
    logger.info(f"Running audit for {url}")

    try:
        report = asyncio.run(get_assembler().build_report(url))
    except (FetchError, AuditTimeoutError) as e:
        logger.error(f"Audit of {url} failed: {e}")
        if settings.persist_reports:
            _save_audit(AuditRecord(url=url, status=AuditStatus.FAILED, error_message=str(e)))
        return {"url": url, "status": "failed", "error": str(e)}

    payload = report.model_dump(mode="json", by_alias=True)
    if settings.persist_reports:
        _save_audit(
            AuditRecord(
                url=url,
                status=AuditStatus.COMPLETED,
                seo_score=report.seo_score,
                report=payload,
            )
        )

    return {"url": url, "status": "completed", "report": payload}


def _save_audit(record: AuditRecord) -> None:
    """Best-effort write of an audit record."""
    try:
        with get_sync_session() as session:
            session.add(record)
            session.commit()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Could not persist audit of {record.url}: {e}")
