"""Job routes: list, filter, table projection, CSV export, create, edit.

Endpoints:
    GET    /api/jobs/                 Filtered + searched list (paginated)
    GET    /api/jobs/filter-options   Distinct values for the filter dropdowns
    GET    /api/jobs/columns          Master column list with labels
    GET    /api/jobs/table            Filtered jobs as formatted table rows
    GET    /api/jobs/export           Same projection as CSV
    GET    /api/jobs/{id}             Single job
    POST   /api/jobs/                 Create (assigns the job number)
    PATCH  /api/jobs/{id}             Edit; the job number never changes

Jobs are not deleted; closing a job is a status change. Every list view
loads jobs newest first and filters them with `apply_filters`, so list,
table and export always agree on which jobs match.
"""

import csv
import io
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.auth.deps import require_permission
from freightdesk.auth.session import Session
from freightdesk.database import commit_or_raise, get_db
from freightdesk.middleware.exceptions import (
    BusinessLogicError,
    ResourceNotFoundError,
)
from freightdesk.models.job import Job, JobStatus
from freightdesk.schemas.common import PaginatedResponse
from freightdesk.schemas.job import (
    ColumnOut,
    FilterOptions,
    JobCreate,
    JobOut,
    JobTable,
    JobUpdate,
)
from freightdesk.services.columns import ColumnSelection
from freightdesk.services.fields import JOB_COLUMNS, JOB_FIELDS
from freightdesk.services.formatting import format_row
from freightdesk.services.job_filters import JobFilters, apply_filters, extract_unique_values
from freightdesk.utils.activity import log_activity
from freightdesk.utils.cache import invalidate_cache
from freightdesk.utils.numbering import generate_job_number

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def job_filter_params(
    rm_name: str | None = None,
    shipment_type: str | None = None,
    mode_of_shipment: str | None = None,
    status: str | None = None,
    date_from: str | None = Query(None, description="YYYY-MM-DD, inclusive"),
    date_to: str | None = Query(None, description="YYYY-MM-DD, inclusive"),
    shipper: str | None = None,
    consignee: str | None = None,
    overseas_agent: str | None = None,
    port_of_loading: str | None = None,
    final_destination: str | None = None,
) -> JobFilters:
    """Collect the structured filters from the query string."""
    return JobFilters(
        rm_name=rm_name,
        shipment_type=shipment_type,
        mode_of_shipment=mode_of_shipment,
        status=status,
        date_from=date_from,
        date_to=date_to,
        shipper=shipper,
        consignee=consignee,
        overseas_agent=overseas_agent,
        port_of_loading=port_of_loading,
        final_destination=final_destination,
    )


async def _load_jobs(db: AsyncSession) -> list[Job]:
    result = await db.execute(select(Job).order_by(Job.created_at.desc()))
    return list(result.scalars().all())


async def _get_job(db: AsyncSession, job_id: str) -> Job:
    job = await db.get(Job, job_id)
    if not job:
        raise ResourceNotFoundError("Job", job_id)
    return job


async def _filtered_jobs(db: AsyncSession, q: str, filters: JobFilters) -> list[Job]:
    return apply_filters(await _load_jobs(db), q, filters)


def _selection(columns: list[str] | None) -> ColumnSelection:
    try:
        return ColumnSelection(selected=columns or None)
    except ValueError as e:
        raise BusinessLogicError(str(e), error_code="UNKNOWN_COLUMN")


# ── List / filter ────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[JobOut])
async def list_jobs(
    q: str = Query("", description="Case-insensitive search"),
    filters: JobFilters = Depends(job_filter_params),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_permission("jobs.read")),
):
    """List jobs newest first, after search and filters."""
    jobs = await _filtered_jobs(db, q, filters)
    return PaginatedResponse[JobOut].from_rows(jobs, limit, offset, JobOut.model_validate)


@router.get("/filter-options", response_model=FilterOptions)
async def filter_options(
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_permission("jobs.read")),
):
    """Dropdown values, recomputed from all jobs on every call."""
    return FilterOptions(**extract_unique_values(await _load_jobs(db)))


@router.get("/columns", response_model=list[ColumnOut])
async def list_columns(
    _session: Session = Depends(require_permission("jobs.read")),
):
    return [ColumnOut(key=name, label=JOB_FIELDS[name].label) for name in JOB_COLUMNS]


@router.get("/table", response_model=JobTable)
async def job_table(
    q: str = Query("", description="Case-insensitive search"),
    filters: JobFilters = Depends(job_filter_params),
    columns: list[str] | None = Query(None, description="Visible columns; all when omitted"),
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_permission("jobs.read")),
):
    """Filtered jobs projected onto the chosen columns, as display strings."""
    visible = _selection(columns).visible()
    jobs = await _filtered_jobs(db, q, filters)
    return JobTable(
        columns=[ColumnOut(key=name, label=JOB_FIELDS[name].label) for name in visible],
        rows=[format_row(job, visible) for job in jobs],
        job_ids=[job.id for job in jobs],
        total=len(jobs),
    )


@router.get("/export")
async def export_jobs(
    q: str = Query("", description="Case-insensitive search"),
    filters: JobFilters = Depends(job_filter_params),
    columns: list[str] | None = Query(None, description="Visible columns; all when omitted"),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_permission("jobs.export")),
):
    """Export the filtered jobs as CSV (header row of labels, every cell quoted)."""
    visible = _selection(columns).visible()
    jobs = await _filtered_jobs(db, q, filters)

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow([JOB_FIELDS[name].label for name in visible])
    for job in jobs:
        writer.writerow(format_row(job, visible))

    await log_activity(
        db, session,
        action="exported",
        entity_type="job",
        summary=f"Exported {len(jobs)} jobs",
        details={"count": len(jobs), "columns": visible},
    )

    filename = f"jobs_export_{date.today().isoformat()}.csv"
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{job_id}", response_model=JobOut)
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_permission("jobs.read")),
):
    return JobOut.model_validate(await _get_job(db, job_id))


# ── Create / edit ────────────────────────────────────────────

@router.post("/", response_model=JobOut, status_code=201)
async def create_job(
    body: JobCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_permission("jobs.create")),
):
    """Create a job. The job number is generated here, once."""
    data = body.model_dump()
    if not data.get("rm_name") and session.source == "directory":
        data["rm_name"] = session.display_name

    job_number = await generate_job_number(db, body.shipment_type)
    job = Job(job_number=job_number, created_by=session.subject_id, **data)

    db.add(job)
    await commit_or_raise(db, f"create job {job_number}")
    logger.info("Job %s created by %s", job_number, session.subject_id)

    await log_activity(
        db, session,
        action="created",
        entity_type="job",
        entity_id=job.id,
        entity_code=job.job_number,
        summary=f"Created {job.shipment_type.value} job {job.job_number}",
    )
    await invalidate_cache("dashboard:*")
    return JobOut.model_validate(job)


@router.patch("/{job_id}", response_model=JobOut)
async def update_job(
    job_id: str,
    body: JobUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_permission("jobs.update")),
):
    """Edit a job. Last writer wins."""
    job = await _get_job(db, job_id)
    old_status = job.status

    updates = body.model_dump(exclude_unset=True)
    # Explicit nulls cannot clear the type or status.
    for required in ("shipment_type", "status"):
        if required in updates and updates[required] is None:
            del updates[required]
    for key, value in updates.items():
        setattr(job, key, value)

    await commit_or_raise(db, f"update job {job.job_number}")

    status_changed = "status" in updates and job.status != old_status
    await log_activity(
        db, session,
        action="status_changed" if status_changed else "updated",
        entity_type="job",
        entity_id=job.id,
        entity_code=job.job_number,
        summary=(
            f"{job.job_number}: {_status_value(old_status)} → {_status_value(job.status)}"
            if status_changed
            else f"Updated job {job.job_number}"
        ),
        details={"fields": sorted(updates)},
    )
    await invalidate_cache("dashboard:*")
    return JobOut.model_validate(job)


def _status_value(value: JobStatus | str | None) -> str:
    return value.value if isinstance(value, JobStatus) else str(value)
