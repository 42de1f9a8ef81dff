"""Schemas for account users and the relationship-manager directory."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from freightdesk.auth.password import check_password_length
from freightdesk.config import settings
from freightdesk.models.user import UserRole


# ── Account users (email + password) ─────────────────────────

class AccountUserCreate(BaseModel):
    """Superadmin creates an email/password user."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.RMS
    permissions: dict[str, bool] | None = None

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str) -> str:
        return check_password_length(v)


class AccountUserOut(BaseModel):
    id: str
    email: str
    full_name: str
    role: UserRole
    permissions: dict[str, bool]
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Relationship-manager directory (login codes) ─────────────

class RelationshipManagerCreate(BaseModel):
    login_code: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    status: str = "active"
    permissions: dict[str, bool] | None = None

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str) -> str:
        return check_password_length(v)

    @field_validator("login_code")
    @classmethod
    def _normalize_code(cls, v: str) -> str:
        v = v.strip().lower()
        marker = settings.superadmin_marker
        if not v or marker in v or " " in v:
            raise ValueError(f"Login code must be a single word without '{marker}'")
        return v


class RelationshipManagerUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    status: str | None = None
    password: str | None = Field(None, min_length=6)
    permissions: dict[str, bool] | None = None

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str | None) -> str | None:
        return v if v is None else check_password_length(v)


class RelationshipManagerOut(BaseModel):
    id: str
    login_code: str
    full_name: str
    email: str | None
    phone: str | None
    status: str
    permissions: dict[str, bool]
    last_login_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
