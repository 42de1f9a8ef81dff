"""Aggregate model imports for Alembic auto-detection."""

# Identities
from freightdesk.models.user import UserAccount, UserProfile, UserRole  # noqa: F401
from freightdesk.models.relationship_manager import RelationshipManager  # noqa: F401

# Operational
from freightdesk.models.job import (  # noqa: F401
    Incoterm,
    Job,
    JobStatus,
    LoadType,
    ShipmentMode,
    ShipmentType,
)
from freightdesk.models.entity import Entity, EntityType  # noqa: F401

# Support
from freightdesk.models.activity_log import ActivityLog  # noqa: F401
from freightdesk.models.app_config import AppConfig  # noqa: F401
