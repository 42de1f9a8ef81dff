"""Job — one freight shipment tracked from booking to closure.

Party fields (shipper, consignee, overseas agent) are display strings copied
from the entity lists at entry time, not foreign keys. Weights and package
counts are kept as entered ("10148.00", "15 PLTS"). Jobs are never deleted;
closing a job is a status change.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from freightdesk.database import Base


class JobStatus(str, enum.Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ShipmentType(str, enum.Enum):
    IMPORT = "Import"
    EXPORT = "Export"


class ShipmentMode(str, enum.Enum):
    SEA = "Sea"
    AIR = "Air"
    ROAD = "Road"
    RAIL = "Rail"


class LoadType(str, enum.Enum):
    LCL = "LCL"
    FCL = "FCL"
    AIR = "Air"


class Incoterm(str, enum.Enum):
    FOB = "FOB"
    CIF = "CIF"
    CFR = "CFR"
    EXW = "EXW"


def _enum(cls):
    # Persist the human-readable values ("Active", "Sea"), not member names.
    return SAEnum(cls, values_callable=lambda e: [m.value for m in e], native_enum=False)


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    job_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )

    # ── References ─────────────────────────────────────────────
    booking_no: Mapped[str | None] = mapped_column(String(100))
    invoice_no: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[JobStatus] = mapped_column(
        _enum(JobStatus), default=JobStatus.ACTIVE, index=True
    )

    # ── Routing ────────────────────────────────────────────────
    air_shipping_line: Mapped[str | None] = mapped_column(String(255))
    mode_of_shipment: Mapped[ShipmentMode | None] = mapped_column(_enum(ShipmentMode))
    shipment_type: Mapped[ShipmentType] = mapped_column(_enum(ShipmentType), nullable=False)
    lcl_fcl_air: Mapped[LoadType | None] = mapped_column(_enum(LoadType))
    container_flight_numbers: Mapped[list | None] = mapped_column(JSON, default=list)
    port_of_loading: Mapped[str | None] = mapped_column(String(255))
    final_destination: Mapped[str | None] = mapped_column(String(255))
    vessel_voy_details: Mapped[str | None] = mapped_column(String(255))
    eta_pod: Mapped[str | None] = mapped_column(String(30))

    # ── Cargo ──────────────────────────────────────────────────
    gross_weight: Mapped[str | None] = mapped_column(String(50))
    net_weight: Mapped[str | None] = mapped_column(String(50))
    total_packages: Mapped[str | None] = mapped_column(String(100))
    terms: Mapped[Incoterm | None] = mapped_column(_enum(Incoterm))

    # ── Bills of lading (dates kept as entered, ISO yyyy-mm-dd) ─
    hbl_no: Mapped[str | None] = mapped_column(String(100))
    hbl_date: Mapped[str | None] = mapped_column(String(30))
    mbl_no: Mapped[str | None] = mapped_column(String(100))
    mbl_date: Mapped[str | None] = mapped_column(String(30))

    # ── Parties ────────────────────────────────────────────────
    rm_name: Mapped[str | None] = mapped_column(String(255), index=True)
    shipper_details: Mapped[str | None] = mapped_column(Text)
    consignee_details: Mapped[str | None] = mapped_column(Text)
    overseas_agent_details: Mapped[str | None] = mapped_column(Text)
    remarks: Mapped[str | None] = mapped_column(Text)

    # ── Audit ──────────────────────────────────────────────────
    created_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
