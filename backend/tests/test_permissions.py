"""Tests for capability maps and the role/permission gates."""

import pytest

from freightdesk.auth.jwt import create_access_token
from freightdesk.auth.permissions import (
    ALL_PERMISSIONS,
    ROLE_DEFAULTS,
    has_permission,
    resolve_permissions,
)
from freightdesk.auth.session import Session


@pytest.mark.unit
class TestResolvePermissions:

    def test_superadmin_gets_everything(self):
        perms = resolve_permissions("superadmin")
        assert set(perms) == ALL_PERMISSIONS
        assert all(perms.values())

    def test_rms_defaults(self):
        perms = resolve_permissions("rms")
        assert perms["jobs.read"] is True
        assert perms["jobs.create"] is True
        assert perms["entities.delete"] is False
        assert perms["users.manage"] is False

    def test_overrides_grant_and_revoke(self):
        perms = resolve_permissions("rms", {"entities.write": True, "jobs.export": False})
        assert perms["entities.write"] is True
        assert perms["jobs.export"] is False

    def test_unknown_role_has_nothing(self):
        assert not any(resolve_permissions("visitor").values())

    def test_role_defaults_are_known_capabilities(self):
        for caps in ROLE_DEFAULTS.values():
            assert caps <= ALL_PERMISSIONS


@pytest.mark.unit
class TestHasPermission:

    def test_requires_every_capability(self):
        perms = {"jobs.read": True, "jobs.export": False}
        assert has_permission(perms, "jobs.read")
        assert not has_permission(perms, "jobs.read", "jobs.export")
        assert not has_permission(perms, "jobs.create")

    def test_only_true_counts(self):
        assert not has_permission({"jobs.read": "yes"}, "jobs.read")
        assert not has_permission(None, "jobs.read")
        assert not has_permission({}, "jobs.read")

    def test_session_can(self):
        session = Session(
            subject_id="1", source="account", role="superadmin",
            permissions={"jobs.read": True, "config.manage": False},
        )
        assert session.is_superadmin
        assert session.can("jobs.read")
        # Superadmin role does not bypass the capability map.
        assert not session.can("config.manage")


@pytest.mark.auth
@pytest.mark.asyncio
class TestGates:

    async def test_permission_gate_rejects_missing_capability(
        self, client, relationship_manager, rm_headers
    ):
        # RMs cannot delete entities by default.
        response = await client.delete("/api/entities/shippers/missing", headers=rm_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    async def test_role_gate_lets_superadmin_through(self, client, superadmin_headers):
        response = await client.get("/api/dashboard/stats", headers=superadmin_headers)
        assert response.status_code == 200

    async def test_role_gate_rejects_rm_on_admin_routes(self, client, rm_headers):
        response = await client.get("/api/users/", headers=rm_headers)
        assert response.status_code == 403

    async def test_gate_uses_permissions_reread_from_profile(self, client, superadmin):
        token = create_access_token(
            subject_id=superadmin.id,
            role="superadmin",
            source="account",
            permissions={"jobs.read": False},
        )
        # The gate uses the map re-read from the profile, which grants everything
        # unless the profile overrides it.
        response = await client.get("/api/jobs/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    async def test_profile_override_revokes_capability_for_superadmin(
        self, client, db_session, superadmin, superadmin_headers
    ):
        superadmin.permissions = {"jobs.read": False}
        db_session.add(superadmin)
        await db_session.commit()

        response = await client.get("/api/jobs/", headers=superadmin_headers)
        assert response.status_code == 403

    async def test_missing_token(self, client):
        response = await client.get("/api/jobs/")
        assert response.status_code == 401
