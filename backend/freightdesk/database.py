"""Database engine, session factory, and declarative base.

All tables live in a single schema. Routers get a session through the
`get_db()` dependency, which commits when the request handler returns and
rolls back if it raises.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from freightdesk.config import settings
from freightdesk.middleware.exceptions import IntegrationError

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """Declarative base for every FreightDesk table."""
    pass


async def get_db() -> AsyncSession:
    """Yield a session for the duration of one request."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_all_tables() -> None:
    """Create any missing tables (development and first boot)."""
    import freightdesk.models  # noqa: F401  ensure models are registered

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def commit_or_raise(db: AsyncSession, what: str) -> None:
    """Commit the primary write of a request, or abandon it.

    A failed commit is rolled back, logged, and reported to the caller as a
    generic IntegrationError naming ``what`` ("create job", ...).
    """
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to %s", what)
        raise IntegrationError(f"Failed to {what}. Please try again.")
