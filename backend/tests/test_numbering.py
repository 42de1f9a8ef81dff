"""Tests for job number generation."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from freightdesk.models.app_config import AppConfig
from freightdesk.models.job import ShipmentType
from freightdesk.utils import numbering
from freightdesk.utils.numbering import fiscal_year_label, generate_job_number


@pytest.mark.unit
class TestFiscalYearLabel:

    @pytest.mark.parametrize("day, label", [
        (date(2025, 4, 1), "25-26"),
        (date(2025, 4, 15), "25-26"),
        (date(2026, 2, 1), "25-26"),
        (date(2026, 3, 31), "25-26"),
        (date(2026, 4, 1), "26-27"),
        (date(1999, 12, 31), "99-00"),
    ])
    def test_april_to_march(self, day, label):
        assert fiscal_year_label(day) == label


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateJobNumber:

    async def test_first_number(self, db_session):
        number = await generate_job_number(db_session, ShipmentType.EXPORT, today=date(2025, 4, 15))
        assert number == "EXP-10001/25-26"

    async def test_increments_from_highest_for_prefix(self, db_session, make_job):
        await make_job(job_number="EXP-10007/24-25")
        await make_job(job_number="EXP-10003/25-26")
        await make_job(job_number="IMP-10050/25-26", shipment_type=ShipmentType.IMPORT)

        assert await generate_job_number(db_session, "Export", today=date(2025, 6, 1)) == "EXP-10008/25-26"
        assert await generate_job_number(db_session, "Import", today=date(2025, 6, 1)) == "IMP-10051/25-26"

    async def test_ignores_numbers_in_other_formats(self, db_session, make_job):
        await make_job(job_number="EXP-legacy")
        await make_job(job_number="FF-10010/25-26")
        assert await generate_job_number(db_session, ShipmentType.EXPORT, today=date(2025, 6, 1)) == "EXP-10001/25-26"

    async def test_configured_prefix(self, db_session):
        db_session.add(AppConfig(key="job_number_prefixes", value={"Import": "FFI"}))
        await db_session.commit()

        assert await generate_job_number(db_session, ShipmentType.IMPORT, today=date(2025, 4, 1)) == "FFI-10001/25-26"
        assert await generate_job_number(db_session, ShipmentType.EXPORT, today=date(2025, 4, 1)) == "EXP-10001/25-26"

    async def test_fallback_when_lookup_fails(self, db_session, monkeypatch):
        async def broken(db):
            raise OperationalError("SELECT", {}, Exception("db down"))

        monkeypatch.setattr(numbering, "get_prefixes", broken)
        number = await generate_job_number(db_session, ShipmentType.EXPORT, today=date(2025, 4, 15))

        prefix, rest = number.split("-", 1)
        sequence, year = rest.split("/")
        assert prefix == "EXP"
        assert int(sequence) >= 10001
        assert year == "25-26"
