"""Audit API endpoints."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sse_starlette.sse import EventSourceResponse

from analyzers.fetcher import FetchError
from api.dependencies import get_audit_repository, get_job_runner, get_progress_broker
from api.schemas import (
    AuditCreateRequest,
    AuditListResponse,
    AuditRecordResponse,
    normalize_url,
)
from config import settings
from db.repositories import AuditRepository
from reports.assembler import AuditTimeoutError
from reports.jobs import JobHandle, JobRunner, JobStatus
from reports.progress import ProgressBroker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audits", tags=["Audits"])


@router.post(
    "",
    response_model=JobHandle,
    summary="Audit a URL",
    description=(
        "Run an SEO audit. With the inline runner the finished report is "
        "returned; with the Celery runner the job is queued (202) and can be "
        "polled at /audits/jobs/{job_id}."
    ),
)
async def create_audit(
    request: AuditCreateRequest,
    response: Response,
    runner: JobRunner = Depends(get_job_runner),
    broker: ProgressBroker = Depends(get_progress_broker),
    repo: AuditRepository = Depends(get_audit_repository),
) -> JobHandle:
    """Submit an audit through the configured job runner."""
    url = str(request.url)

    try:
        handle = await runner.submit(url, broker.sink(url))
    except FetchError as e:
        if settings.persist_reports:
            await repo.save_failure(url, str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to analyze website: {e.cause}",
        )
    except AuditTimeoutError as e:
        if settings.persist_reports:
            await repo.save_failure(url, str(e))
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"Failed to analyze website: {e}",
        )

    if handle.report is not None and settings.persist_reports:
        await repo.save_report(handle.report)
    if handle.status is JobStatus.QUEUED:
        response.status_code = status.HTTP_202_ACCEPTED
    return handle


@router.get(
    "/progress",
    summary="Stream audit progress",
    description="Server-Sent Events with {stage, message} updates for an audit of `url`.",
)
async def stream_progress(
    url: str,
    broker: ProgressBroker = Depends(get_progress_broker),
) -> EventSourceResponse:
    """Subscribe to progress for a URL until the audit completes or fails."""
    try:
        key = normalize_url(url)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid URL format. Please include http:// or https://",
        )

    async def event_stream():
        queue = broker.subscribe(key)
        try:
            while True:
                event = await queue.get()
                yield {"event": "progress", "data": event.model_dump_json(by_alias=True)}
                if event.stage.is_terminal:
                    break
        finally:
            # Runs on normal completion and on client disconnect
            broker.unsubscribe(key, queue)

    return EventSourceResponse(event_stream(), ping=15)


@router.get(
    "/jobs/{job_id}",
    response_model=JobHandle,
    summary="Get audit job status",
)
async def get_job(
    job_id: str,
    runner: JobRunner = Depends(get_job_runner),
) -> JobHandle:
    """Look up a queued audit."""
    handle = await runner.status(job_id)
    if handle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found",
        )
    return handle


@router.get(
    "",
    response_model=AuditListResponse,
    summary="List recent audits",
    description="Stored audits, newest first.",
)
async def list_audits(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of audits to return"),
    repo: AuditRepository = Depends(get_audit_repository),
) -> AuditListResponse:
    audits = await repo.list_recent(limit=limit)
    return AuditListResponse(
        audits=[AuditRecordResponse.model_validate(a) for a in audits],
        count=len(audits),
    )


@router.get(
    "/{audit_id}",
    response_model=AuditRecordResponse,
    summary="Get a stored audit",
)
async def get_audit(
    audit_id: uuid.UUID,
    repo: AuditRepository = Depends(get_audit_repository),
) -> AuditRecordResponse:
    audit = await repo.get_by_id(audit_id)
    if not audit:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Audit {audit_id} not found",
        )
    return AuditRecordResponse.model_validate(audit)
