"""FastAPI dependencies backed by objects created at startup."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from analyzers.fetcher import PageFetcher
from db.repositories import AuditRepository
from db.session import get_db_session
from reports.jobs import JobRunner
from reports.progress import ProgressBroker


def get_job_runner(request: Request) -> JobRunner:
    return request.app.state.job_runner


def get_progress_broker(request: Request) -> ProgressBroker:
    return request.app.state.progress_broker


def get_page_fetcher(request: Request) -> PageFetcher:
    return request.app.state.page_fetcher


async def get_audit_repository(
    db: AsyncSession = Depends(get_db_session),
) -> AuditRepository:
    return AuditRepository(db)
