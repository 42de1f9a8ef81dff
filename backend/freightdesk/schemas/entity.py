"""Pydantic schemas for shipper / consignee / overseas agent CRUD."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from freightdesk.models.entity import EntityType


class EntityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class EntityUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class EntityOut(BaseModel):
    id: str
    entity_type: EntityType
    name: str
    phone: str | None
    email: str | None
    document_url: str | None
    document_name: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
