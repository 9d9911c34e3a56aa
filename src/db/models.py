"""SQLAlchemy database models for SiteLens."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AuditStatus(str, enum.Enum):
    """Outcome of a stored audit."""

    COMPLETED = "completed"  # Report produced
    FAILED = "failed"        # Page could not be fetched or audit timed out


class AuditRecord(Base):
    """
    A finished audit of one URL.

    Persistence is best effort: the report is returned to the caller
    whether or not this row is written.
    """

    __tablename__ = "audits"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    url: Mapped[str] = mapped_column(String(2048), nullable=False, index=True)

    status: Mapped[AuditStatus] = mapped_column(
        Enum(AuditStatus),
        nullable=False,
        index=True,
    )

    # Copied out of the report for listing and sorting
    seo_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Full SEOReport as serialized for the API (camelCase keys)
    report: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
