"""Pydantic schemas for API request/response validation."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter
from pydantic.alias_generators import to_camel

from db.models import AuditStatus

_http_url = TypeAdapter(HttpUrl)


def normalize_url(url: str) -> str:
    """Canonical string form used to key audits and progress streams."""
    return str(_http_url.validate_python(url))


# =============================================================================
# Request Schemas (what clients send to us)
# =============================================================================


class AuditCreateRequest(BaseModel):
    """Request body for auditing a URL."""

    url: HttpUrl = Field(
        ...,
        description="The URL of the page to audit (http or https)",
        examples=["https://example.com"],
    )


class PageCheckRequest(BaseModel):
    """Request body for the single-purpose page checkers."""

    url: HttpUrl = Field(
        ...,
        description="The URL of the page to check",
        examples=["https://example.com"],
    )


# =============================================================================
# Response Schemas (what we send back to clients)
# =============================================================================


class AuditRecordResponse(BaseModel):
    """A stored audit."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: uuid.UUID
    url: str
    status: AuditStatus
    seo_score: int | None
    report: dict | None
    error_message: str | None
    created_at: datetime


class AuditListResponse(BaseModel):
    """Response for listing stored audits."""

    audits: list[AuditRecordResponse]
    count: int


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = "healthy"
    service: str = "sitelens"
    version: str = "0.1.0"
