"""Async engine and sessions for the audit store."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config import settings
from db.models import Base

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.debug,
)

# Records stay readable after the repository commits them
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    AuditRepository commits its own writes; anything else left pending
    is committed here, or rolled back if the request raised.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_schema() -> bool:
    """
    Create the audits table if it does not exist.

    Returns False when the database is unreachable. Audits still run
    without it; they just are not stored.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Audit store unavailable, reports will not be persisted: {e}")
        return False


async def dispose_engine() -> None:
    await engine.dispose()
