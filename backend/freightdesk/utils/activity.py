"""Helper for recording activity log entries.

Usage:
    await log_activity(
        db, session, action="created", entity_type="job",
        entity_id=job.id, entity_code=job.job_number,
        summary="Created Export job for MSC LINE",
    )

Called after the primary write has been committed. The log row is committed
on its own; if that fails it is rolled back and logged, and the request
carries on.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.session import Session
from freightdesk.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


async def log_activity(
    db: AsyncSession,
    session: Session,
    *,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    entity_code: str | None = None,
    summary: str | None = None,
    details: dict | None = None,
) -> None:
    """Append and commit an activity log entry."""
    entry = ActivityLog(
        user_id=session.subject_id,
        user_name=session.display_name,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_code=entity_code,
        summary=summary,
        details=details,
    )
    try:
        db.add(entry)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Failed to record activity %s on %s %s", action, entity_type, entity_id
        )
