"""Typed field-accessor table for job records.

Job data reaches the services in several shapes: ORM rows, Pydantic
schemas, and plain mappings imported from older documents that still use
camelCase keys ("jobNumber", "createdAt"). `JOB_FIELDS` maps every job field
to its label, its camelCase alias and its kind, and `JobField.get()` reads
it from any of those shapes.

Date values are decoded once into a small tagged union so callers never
have to sniff shapes themselves:

    NativeDate    a date or datetime
    EpochSeconds  a provider timestamp, {"seconds": ..., "nanoseconds": ...}
    IsoString     any string, parsed lazily; may turn out not to be a date
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Union


class FieldKind(str, enum.Enum):
    TEXT = "text"
    LIST = "list"
    DATE = "date"


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def read_field(record: Any, name: str, alias: str | None = None) -> Any:
    """Read ``name`` (or its camelCase ``alias``) from a record of any shape."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        return record.get(alias or to_camel(name))
    return getattr(record, name, None)


# ── Date union ───────────────────────────────────────────────

@dataclass(frozen=True)
class NativeDate:
    value: date

    def as_date(self) -> date | None:
        if isinstance(self.value, datetime):
            return self.value.date()
        return self.value


@dataclass(frozen=True)
class EpochSeconds:
    seconds: float
    nanoseconds: int = 0

    def as_date(self) -> date | None:
        try:
            return datetime.fromtimestamp(self.seconds, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None


@dataclass(frozen=True)
class IsoString:
    raw: str

    def as_date(self) -> date | None:
        text = self.raw.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None


DateValue = Union[NativeDate, EpochSeconds, IsoString]


def _timestamp_parts(value: Any) -> tuple[Any, Any] | None:
    if isinstance(value, Mapping):
        return value.get("seconds"), value.get("nanoseconds")
    if hasattr(value, "seconds") and hasattr(value, "nanoseconds"):
        return getattr(value, "seconds"), getattr(value, "nanoseconds")
    return None


def is_timestamp_shaped(value: Any) -> bool:
    """True for ``{seconds, nanoseconds}`` pairs, as mappings or objects."""
    parts = _timestamp_parts(value)
    if parts is None:
        return False
    seconds, nanoseconds = parts
    return (
        isinstance(seconds, (int, float)) and not isinstance(seconds, bool)
        and (nanoseconds is None or isinstance(nanoseconds, (int, float)))
    )


def decode_date_value(value: Any) -> DateValue | None:
    """Decode a raw date-ish value; None when the shape is not a date at all."""
    if isinstance(value, (date, datetime)):
        return NativeDate(value)
    if isinstance(value, str):
        return IsoString(value)
    if is_timestamp_shaped(value):
        seconds, nanoseconds = _timestamp_parts(value)
        return EpochSeconds(seconds, int(nanoseconds or 0))
    return None


def calendar_day(value: Any) -> date | None:
    decoded = decode_date_value(value)
    return decoded.as_date() if decoded is not None else None


# ── Accessor table ───────────────────────────────────────────

@dataclass(frozen=True)
class JobField:
    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT

    @property
    def alias(self) -> str:
        return to_camel(self.name)

    def get(self, record: Any) -> Any:
        return read_field(record, self.name, self.alias)


_FIELDS = [
    JobField("job_number", "Job Number"),
    JobField("status", "Status"),
    JobField("rm_name", "RM Name"),
    JobField("shipment_type", "Shipment Type"),
    JobField("mode_of_shipment", "Mode of Shipment"),
    JobField("lcl_fcl_air", "LCL/FCL/Air"),
    JobField("shipper_details", "Shipper"),
    JobField("consignee_details", "Consignee"),
    JobField("overseas_agent_details", "Overseas Agent"),
    JobField("booking_no", "Booking No"),
    JobField("invoice_no", "Invoice No"),
    JobField("gross_weight", "Gross Weight"),
    JobField("net_weight", "Net Weight"),
    JobField("total_packages", "Total Packages"),
    JobField("port_of_loading", "Port of Loading"),
    JobField("eta_pod", "ETA POD", FieldKind.DATE),
    JobField("final_destination", "Final Destination"),
    JobField("vessel_voy_details", "Vessel/Voy Details"),
    JobField("air_shipping_line", "Air/Shipping Line"),
    JobField("container_flight_numbers", "Container/Flight Numbers", FieldKind.LIST),
    JobField("mbl_no", "MBL No"),
    JobField("mbl_date", "MBL Date", FieldKind.DATE),
    JobField("hbl_no", "HBL No"),
    JobField("hbl_date", "HBL Date", FieldKind.DATE),
    JobField("terms", "Terms"),
    JobField("remarks", "Remarks"),
    JobField("created_at", "Created At", FieldKind.DATE),
]

# Master display order for tables and exports.
JOB_COLUMNS: tuple[str, ...] = tuple(f.name for f in _FIELDS)

JOB_FIELDS: dict[str, JobField] = {f.name: f for f in _FIELDS}
JOB_FIELDS.update({
    f.name: f
    for f in (
        JobField("id", "ID"),
        JobField("created_by", "Created By"),
        JobField("updated_at", "Updated At", FieldKind.DATE),
    )
})

_BY_ALIAS = {f.alias: f for f in JOB_FIELDS.values()}


def lookup_field(key: str) -> JobField | None:
    """Find a field by snake_case name or camelCase alias."""
    return JOB_FIELDS.get(key) or _BY_ALIAS.get(key)
