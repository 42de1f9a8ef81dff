"""Runtime configuration editable by the superadmin.

Endpoints:
    GET  /api/config/job-number-prefixes   Current shipment type → prefix map
    PUT  /api/config/job-number-prefixes   Replace (merged over the defaults)
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.deps import require_role
from freightdesk.auth.session import Session
from freightdesk.database import commit_or_raise, get_db
from freightdesk.models.app_config import AppConfig
from freightdesk.models.user import UserRole
from freightdesk.schemas.config import JobNumberPrefixes
from freightdesk.utils.activity import log_activity
from freightdesk.utils.numbering import PREFIX_CONFIG_KEY, get_prefixes

router = APIRouter()


@router.get("/job-number-prefixes", response_model=JobNumberPrefixes)
async def get_job_number_prefixes(
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_role(UserRole.SUPERADMIN)),
):
    return JobNumberPrefixes(prefixes=await get_prefixes(db))


@router.put("/job-number-prefixes", response_model=JobNumberPrefixes)
async def set_job_number_prefixes(
    body: JobNumberPrefixes,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_role(UserRole.SUPERADMIN)),
):
    """Change prefixes for new jobs; issued job numbers are untouched."""
    result = await db.execute(select(AppConfig).where(AppConfig.key == PREFIX_CONFIG_KEY))
    config = result.scalar_one_or_none()
    if config:
        config.value = body.prefixes
    else:
        db.add(AppConfig(key=PREFIX_CONFIG_KEY, value=body.prefixes))
    await commit_or_raise(db, "update job number prefixes")

    await log_activity(
        db, session,
        action="updated",
        entity_type="config",
        entity_code=PREFIX_CONFIG_KEY,
        summary="Updated job number prefixes",
        details=body.prefixes,
    )
    return JobNumberPrefixes(prefixes=await get_prefixes(db))
