"""Repository pattern for database operations."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from analyzers.models import SEOReport
from db.models import AuditRecord, AuditStatus

logger = logging.getLogger(__name__)


class AuditRepository:
    """Handles all AuditRecord database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_report(self, report: SEOReport) -> AuditRecord | None:
        """Store a completed audit. Returns None if the write failed."""
        return await self._save(
            AuditRecord(
                url=report.url,
                status=AuditStatus.COMPLETED,
                seo_score=report.seo_score,
                report=report.model_dump(mode="json", by_alias=True),
            )
        )

    async def save_failure(self, url: str, error: str) -> AuditRecord | None:
        """Store a failed audit. Returns None if the write failed."""
        return await self._save(
            AuditRecord(url=url, status=AuditStatus.FAILED, error_message=error)
        )

    async def _save(self, record: AuditRecord) -> AuditRecord | None:
        try:
            self.session.add(record)
            await self.session.commit()
            return record
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Could not persist audit of {record.url}: {e}")
            try:
                await self.session.rollback()
            except (SQLAlchemyError, OSError) as rollback_error:
                logger.debug(f"Rollback after failed write also failed: {rollback_error}")
            return None

    async def get_by_id(self, audit_id: uuid.UUID) -> AuditRecord | None:
        """Retrieve an audit by its ID."""
        result = await self.session.execute(
            select(AuditRecord).where(AuditRecord.id == audit_id)
        )
        return result.scalar_one_or_none()

    async def list_recent(self, limit: int = 20) -> list[AuditRecord]:
        """Get the most recent audits."""
        result = await self.session.execute(
            select(AuditRecord).order_by(AuditRecord.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())
