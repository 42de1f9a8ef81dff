"""Job number generation.

Format: ``<PREFIX>-<N>/<YY-YY>``, e.g. ``IMP-10042/25-26``.

  PREFIX  per shipment type, from app_config "job_number_prefixes"
          (defaults: Import → IMP, Export → EXP)
  N       highest N already issued for the prefix, plus one; starts at 10001
          and does not reset between financial years
  YY-YY   April–March financial year of the creation date
"""

import logging
import re
import time
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.models.app_config import AppConfig
from freightdesk.models.job import Job, ShipmentType

logger = logging.getLogger(__name__)

PREFIX_CONFIG_KEY = "job_number_prefixes"

DEFAULT_PREFIXES = {
    ShipmentType.IMPORT.value: "IMP",
    ShipmentType.EXPORT.value: "EXP",
}

FIRST_SEQUENCE = 10001


def fiscal_year_label(day: date) -> str:
    """April–March financial year, e.g. 2025-04-15 and 2026-02-01 → "25-26"."""
    start = day.year if day.month >= 4 else day.year - 1
    return f"{start % 100:02d}-{(start + 1) % 100:02d}"


async def get_prefixes(db: AsyncSession) -> dict[str, str]:
    result = await db.execute(
        select(AppConfig).where(AppConfig.key == PREFIX_CONFIG_KEY)
    )
    config = result.scalar_one_or_none()
    prefixes = dict(DEFAULT_PREFIXES)
    if config and isinstance(config.value, dict):
        prefixes.update({k: v for k, v in config.value.items() if v})
    return prefixes


async def _next_sequence(db: AsyncSession, prefix: str) -> int:
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)/")
    result = await db.execute(
        select(Job.job_number).where(Job.job_number.like(f"{prefix}-%"))
    )
    highest = FIRST_SEQUENCE - 1
    for (number,) in result.all():
        match = pattern.match(number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1


def _fallback_sequence() -> int:
    # Time-derived, not guaranteed unique; the unique index catches clashes.
    return FIRST_SEQUENCE + int(time.time() * 1000) % 900000


async def generate_job_number(
    db: AsyncSession,
    shipment_type: ShipmentType | str,
    today: date | None = None,
) -> str:
    """Generate the next job number for a shipment type.

    Args:
        db: Database session
        shipment_type: Import or Export
        today: Creation date (defaults to today)

    Returns:
        Job number string, e.g. "EXP-10001/25-26"
    """
    type_value = shipment_type.value if isinstance(shipment_type, ShipmentType) else str(shipment_type)
    today = today or date.today()

    try:
        prefixes = await get_prefixes(db)
        prefix = prefixes.get(type_value) or DEFAULT_PREFIXES.get(type_value, "JOB")
        sequence = await _next_sequence(db, prefix)
    except SQLAlchemyError as e:
        prefix = DEFAULT_PREFIXES.get(type_value, "JOB")
        sequence = _fallback_sequence()
        logger.warning("Job number sequence lookup failed, using fallback %s: %s", sequence, e)

    return f"{prefix}-{sequence}/{fiscal_year_label(today)}"
