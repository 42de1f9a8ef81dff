"""Dashboard, job-number configuration and health endpoint tests."""

from datetime import datetime

import pytest

from freightdesk.models.entity import Entity, EntityType
from freightdesk.models.job import JobStatus, ShipmentType


@pytest.mark.api
@pytest.mark.asyncio
class TestDashboardStats:

    async def test_counts(self, client, db_session, rm_headers, make_job):
        now = datetime.now()
        await make_job(created_at=now)
        await make_job(created_at=now, status=JobStatus.PENDING, shipment_type=ShipmentType.IMPORT)
        await make_job(created_at=now, status=JobStatus.COMPLETED)
        await make_job(created_at=datetime(2001, 1, 1))
        db_session.add_all([
            Entity(entity_type=EntityType.SHIPPERS, name="Acme Exports"),
            Entity(entity_type=EntityType.OVERSEAS_AGENTS, name="Hamburg Agent"),
        ])
        await db_session.commit()

        response = await client.get("/api/dashboard/stats", headers=rm_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_jobs"] == 4
        assert data["active_jobs"] == 2
        assert data["pending_jobs"] == 1
        assert data["completed_jobs"] == 1
        assert data["cancelled_jobs"] == 0
        assert data["relationship_managers"] == 1
        assert data["shippers"] == 1
        assert data["consignees"] == 0
        assert data["overseas_agents"] == 1

        trend = data["monthly_trend"]
        assert len(trend) == 6
        assert trend[-1] == {"month": now.strftime("%Y-%m"), "imports": 1, "exports": 2, "total": 3}
        assert sum(m["total"] for m in trend) == 3

    async def test_cached_until_a_write(self, client, rm_headers, make_job):
        await make_job()
        first = (await client.get("/api/dashboard/stats", headers=rm_headers)).json()
        assert first["total_jobs"] == 1

        # Written behind the API's back: still served from cache
        await make_job()
        assert (await client.get("/api/dashboard/stats", headers=rm_headers)).json()["total_jobs"] == 1

        await client.post("/api/jobs/", headers=rm_headers, json={"shipment_type": "Export"})
        assert (await client.get("/api/dashboard/stats", headers=rm_headers)).json()["total_jobs"] == 3

    async def test_superadmin_passes_role_gate(self, client, superadmin_headers):
        response = await client.get("/api/dashboard/stats", headers=superadmin_headers)
        assert response.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
class TestJobNumberPrefixes:

    async def test_defaults(self, client, superadmin_headers):
        response = await client.get("/api/config/job-number-prefixes", headers=superadmin_headers)

        assert response.status_code == 200
        assert response.json() == {"prefixes": {"Import": "IMP", "Export": "EXP"}}

    async def test_update_applies_to_new_jobs(self, client, superadmin_headers, rm_headers):
        response = await client.put("/api/config/job-number-prefixes", headers=superadmin_headers, json={
            "prefixes": {"Export": " fx "},
        })

        assert response.status_code == 200
        assert response.json() == {"prefixes": {"Import": "IMP", "Export": "FX"}}

        job = (await client.post("/api/jobs/", headers=rm_headers, json={"shipment_type": "Export"})).json()
        assert job["job_number"].startswith("FX-10001/")

    @pytest.mark.parametrize("prefixes", [{"Courier": "CR"}, {"Export": "EX-P"}, {"Import": ""}])
    async def test_invalid_prefixes(self, client, superadmin_headers, prefixes):
        response = await client.put("/api/config/job-number-prefixes", headers=superadmin_headers, json={
            "prefixes": prefixes,
        })
        assert response.status_code == 422

    async def test_rm_cannot_configure(self, client, rm_headers):
        response = await client.get("/api/config/job-number-prefixes", headers=rm_headers)
        assert response.status_code == 403


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:

    async def test_liveness(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.headers["x-content-type-options"] == "nosniff"

    async def test_readiness(self, client):
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"service": "ok", "database": "ok", "redis": "ok"}
