"""Capability maps for FreightDesk RBAC.

Design:
  - Each role has a set of DEFAULT capabilities (defined here, not in DB).
  - Admins can grant/revoke individual capabilities per user through the
    stored `permissions` map ({capability: True/False} overrides).
  - `resolve_permissions(role, overrides)` computes the full effective map,
    which is embedded in the JWT so gate checks are token-only.

Capability naming: `<resource>.<action>`
"""

from __future__ import annotations


ALL_PERMISSIONS: set[str] = {
    # Jobs
    "jobs.read",
    "jobs.create",
    "jobs.update",
    "jobs.export",

    # Shippers / consignees / overseas agents
    "entities.read",
    "entities.write",
    "entities.delete",

    # Account users and the RM directory
    "users.manage",

    "dashboard.read",
    "config.manage",
}


ROLE_DEFAULTS: dict[str, set[str]] = {
    "superadmin": ALL_PERMISSIONS.copy(),

    "rms": {
        "jobs.read", "jobs.create", "jobs.update", "jobs.export",
        "entities.read",
        "dashboard.read",
    },
}


def resolve_permissions(
    role: str,
    overrides: dict[str, bool] | None = None,
) -> dict[str, bool]:
    """Compute the effective capability map for a role plus overrides.

    Unknown capabilities in ``overrides`` are kept as given, so an admin can
    grant a capability that is introduced later without a data migration.
    """
    defaults = ROLE_DEFAULTS.get(role, set())
    effective = {perm: perm in defaults for perm in sorted(ALL_PERMISSIONS)}
    if overrides:
        for perm, granted in overrides.items():
            effective[perm] = bool(granted)
    return effective


def has_permission(permissions: dict[str, bool] | None, *required: str) -> bool:
    """True only when every required capability is explicitly True."""
    if not permissions:
        return False
    return all(permissions.get(perm) is True for perm in required)
