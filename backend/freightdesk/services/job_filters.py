"""Job search and filtering.

`apply_filters` combines a free-text search with an all-optional set of
equality filters and an inclusive created-at day range. Every constraint is
independent, so the result never depends on the order they are applied in,
and the output keeps the input order.

`extract_unique_values` builds the option lists for filter dropdowns.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from freightdesk.services.fields import calendar_day, read_field

T = TypeVar("T")

# Fields searched by the free-text query (case-insensitive substring).
SEARCH_FIELDS = (
    "job_number",
    "booking_no",
    "invoice_no",
    "shipper_details",
    "consignee_details",
    "rm_name",
    "mode_of_shipment",
    "shipment_type",
    "port_of_loading",
    "final_destination",
)

# Filter name → job field it must equal exactly.
EQUALITY_FILTERS = {
    "rm_name": "rm_name",
    "shipment_type": "shipment_type",
    "mode_of_shipment": "mode_of_shipment",
    "status": "status",
    "shipper": "shipper_details",
    "consignee": "consignee_details",
    "overseas_agent": "overseas_agent_details",
    "port_of_loading": "port_of_loading",
    "final_destination": "final_destination",
}

# Dropdown key → job field.
UNIQUE_VALUE_FIELDS = {
    "rm_names": "rm_name",
    "shippers": "shipper_details",
    "consignees": "consignee_details",
    "overseas_agents": "overseas_agent_details",
    "ports_of_loading": "port_of_loading",
    "final_destinations": "final_destination",
}


class JobFilters(BaseModel):
    """Structured job filters. Blank and missing both mean "any"."""

    rm_name: str | None = None
    shipment_type: str | None = None
    mode_of_shipment: str | None = None
    status: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    shipper: str | None = None
    consignee: str | None = None
    overseas_agent: str | None = None
    port_of_loading: str | None = None
    final_destination: str | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, enum.Enum):
            return v.value
        return v


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)


def _coerce_filters(filters: JobFilters | Mapping | None) -> JobFilters:
    if filters is None:
        return JobFilters()
    if isinstance(filters, JobFilters):
        return filters
    return JobFilters.model_validate(dict(filters))


def matches_search(job: Any, search_query: str | None) -> bool:
    needle = (search_query or "").lower()
    if not needle:
        return True
    for name in SEARCH_FIELDS:
        value = _text(read_field(job, name))
        if value and needle in value.lower():
            return True
    return False


def matches_filters(job: Any, filters: JobFilters) -> bool:
    for filter_name, field_name in EQUALITY_FILTERS.items():
        wanted = getattr(filters, filter_name)
        if wanted is not None and _text(read_field(job, field_name)) != wanted:
            return False

    if filters.date_from is None and filters.date_to is None:
        return True
    day = calendar_day(read_field(job, "created_at"))
    if day is None:
        return False
    if filters.date_from is not None and day < filters.date_from:
        return False
    if filters.date_to is not None and day > filters.date_to:
        return False
    return True


def apply_filters(
    jobs: Iterable[T],
    search_query: str | None = "",
    filters: JobFilters | Mapping | None = None,
) -> list[T]:
    """Return the jobs matching the search and every active filter."""
    filters = _coerce_filters(filters)
    return [
        job for job in jobs
        if matches_search(job, search_query) and matches_filters(job, filters)
    ]


def extract_unique_values(jobs: Iterable[Any]) -> dict[str, list[str]]:
    """Sorted, distinct, non-blank values per dropdown, in one pass."""
    seen: dict[str, set[str]] = {key: set() for key in UNIQUE_VALUE_FIELDS}
    for job in jobs:
        for key, field_name in UNIQUE_VALUE_FIELDS.items():
            value = _text(read_field(job, field_name))
            if value and value.strip():
                seen[key].add(value)
    return {key: sorted(values) for key, values in seen.items()}
