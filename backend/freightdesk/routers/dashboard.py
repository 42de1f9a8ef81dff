"""Dashboard summary: job counts, directory sizes and a six-month trend."""

from datetime import date, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.deps import require_role
from freightdesk.auth.session import Session
from freightdesk.database import get_db
from freightdesk.models.entity import Entity, EntityType
from freightdesk.models.job import Job, JobStatus, ShipmentType
from freightdesk.models.relationship_manager import RelationshipManager
from freightdesk.models.user import UserRole
from freightdesk.schemas.dashboard import DashboardStats
from freightdesk.utils.cache import cached

router = APIRouter()

TREND_MONTHS = 6


def _month_starts(today: date, months: int) -> list[date]:
    """First day of each of the last ``months`` months, oldest first."""
    starts = []
    year, month = today.year, today.month
    for _ in range(months):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


async def _monthly_trend(db: AsyncSession, today: date) -> list[dict]:
    starts = _month_starts(today, TREND_MONTHS)
    buckets = {
        s.strftime("%Y-%m"): {"month": s.strftime("%Y-%m"), "imports": 0, "exports": 0, "total": 0}
        for s in starts
    }
    result = await db.execute(
        select(Job.created_at, Job.shipment_type).where(
            Job.created_at >= datetime.combine(starts[0], datetime.min.time())
        )
    )
    for created_at, shipment_type in result.all():
        bucket = buckets.get(created_at.strftime("%Y-%m"))
        if bucket is None:
            continue
        bucket["total"] += 1
        if shipment_type == ShipmentType.IMPORT:
            bucket["imports"] += 1
        elif shipment_type == ShipmentType.EXPORT:
            bucket["exports"] += 1
    return list(buckets.values())


@cached(ttl=60, prefix="dashboard")
async def _compute_stats(db: AsyncSession, today: str) -> dict:
    status_counts = dict(
        (await db.execute(select(Job.status, func.count()).group_by(Job.status))).all()
    )
    entity_counts = dict(
        (await db.execute(
            select(Entity.entity_type, func.count()).group_by(Entity.entity_type)
        )).all()
    )
    rm_count = (await db.execute(select(func.count()).select_from(RelationshipManager))).scalar() or 0

    return DashboardStats(
        total_jobs=sum(status_counts.values()),
        active_jobs=status_counts.get(JobStatus.ACTIVE, 0),
        pending_jobs=status_counts.get(JobStatus.PENDING, 0),
        completed_jobs=status_counts.get(JobStatus.COMPLETED, 0),
        cancelled_jobs=status_counts.get(JobStatus.CANCELLED, 0),
        relationship_managers=rm_count,
        shippers=entity_counts.get(EntityType.SHIPPERS, 0),
        consignees=entity_counts.get(EntityType.CONSIGNEES, 0),
        overseas_agents=entity_counts.get(EntityType.OVERSEAS_AGENTS, 0),
        monthly_trend=await _monthly_trend(db, date.fromisoformat(today)),
    ).model_dump()


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_role(UserRole.RMS)),
):
    return await _compute_stats(db, today=date.today().isoformat())
