"""Pydantic schemas for jobs and the job table views."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from freightdesk.models.job import Incoterm, JobStatus, LoadType, ShipmentMode, ShipmentType


class _JobFields(BaseModel):
    booking_no: str | None = Field(None, max_length=100)
    invoice_no: str | None = Field(None, max_length=100)
    air_shipping_line: str | None = Field(None, max_length=255)
    mode_of_shipment: ShipmentMode | None = None
    lcl_fcl_air: LoadType | None = None
    container_flight_numbers: list[str] | None = None
    port_of_loading: str | None = Field(None, max_length=255)
    final_destination: str | None = Field(None, max_length=255)
    vessel_voy_details: str | None = Field(None, max_length=255)
    eta_pod: str | None = Field(None, max_length=30)
    gross_weight: str | None = Field(None, max_length=50)
    net_weight: str | None = Field(None, max_length=50)
    total_packages: str | None = Field(None, max_length=100)
    terms: Incoterm | None = None
    hbl_no: str | None = Field(None, max_length=100)
    hbl_date: str | None = Field(None, max_length=30)
    mbl_no: str | None = Field(None, max_length=100)
    mbl_date: str | None = Field(None, max_length=30)
    rm_name: str | None = Field(None, max_length=255)
    shipper_details: str | None = None
    consignee_details: str | None = None
    overseas_agent_details: str | None = None
    remarks: str | None = None

    @field_validator("container_flight_numbers")
    @classmethod
    def _drop_blank_numbers(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [n.strip() for n in v if n and n.strip()]


class JobCreate(_JobFields):
    shipment_type: ShipmentType
    status: JobStatus = JobStatus.ACTIVE


class JobUpdate(_JobFields):
    """Partial update. The job number is fixed at creation and not editable."""
    shipment_type: ShipmentType | None = None
    status: JobStatus | None = None


class JobOut(_JobFields):
    id: str
    job_number: str
    status: JobStatus
    shipment_type: ShipmentType
    created_by: str | None
    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}


# ── Table views ──────────────────────────────────────────────

class ColumnOut(BaseModel):
    key: str
    label: str


class JobTable(BaseModel):
    """Filtered jobs projected onto the visible columns, as display strings."""
    columns: list[ColumnOut]
    rows: list[list[str]]
    job_ids: list[str]
    total: int


class FilterOptions(BaseModel):
    rm_names: list[str]
    shippers: list[str]
    consignees: list[str]
    overseas_agents: list[str]
    ports_of_loading: list[str]
    final_destinations: list[str]
