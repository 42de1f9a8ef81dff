"""Display formatting for job fields.

`format_field` turns any job field of any record shape into the string
shown in tables and exports. It is total: unknown keys, missing values and
malformed dates all produce a string.
"""

import enum
import json
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from freightdesk.config import settings
from freightdesk.services.fields import (
    EpochSeconds,
    FieldKind,
    IsoString,
    decode_date_value,
    is_timestamp_shaped,
    lookup_field,
    read_field,
)

logger = logging.getLogger(__name__)


def format_date(day: date) -> str:
    return day.strftime(settings.date_format)


def _format_date_value(value: Any) -> str:
    decoded = decode_date_value(value)
    if decoded is None:
        return _format_generic(value)
    day = decoded.as_date()
    if day is not None:
        return format_date(day)
    if isinstance(decoded, IsoString):
        # Not a date after all; show what was entered.
        return decoded.raw
    if isinstance(decoded, EpochSeconds):
        return str(decoded.seconds)
    return ""


def _format_list_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_generic(v) for v in value)
    if isinstance(value, str):
        # Legacy single-string container field
        return value if value.strip() else ""
    return _format_generic(value)


def _format_generic(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, (list, tuple)):
        return _format_list_value(value)
    if is_timestamp_shaped(value):
        return _format_date_value(value)
    try:
        if isinstance(value, Mapping):
            try:
                return json.dumps(value, default=str, sort_keys=True)
            except (TypeError, ValueError):
                return str(dict(value))
        return str(value)
    except Exception:
        logger.debug("Unprintable value of type %s", type(value).__name__)
        return ""


_FORMATTERS = {
    FieldKind.TEXT: _format_generic,
    FieldKind.LIST: _format_list_value,
    FieldKind.DATE: _format_date_value,
}


def format_field(record: Any, field_key: str) -> str:
    """Format one field of a job record for display.

    ``field_key`` may be the snake_case name or the camelCase alias. Keys
    outside the job field table are read as-is and formatted generically.
    """
    field = lookup_field(field_key)
    if field is None:
        return _format_generic(read_field(record, field_key, field_key))
    value = field.get(record)
    if value is None:
        return ""
    return _FORMATTERS[field.kind](value)


def format_container_numbers(record: Any) -> str:
    """Container/flight numbers, falling back to the legacy single field."""
    value = read_field(record, "container_flight_numbers")
    if isinstance(value, (list, tuple)) and value:
        return ", ".join(_format_generic(v) for v in value if v is not None)
    if isinstance(value, str) and value.strip():
        return value.strip()

    legacy = read_field(record, "container_flight_no", "containerFlightNo")
    if isinstance(legacy, str) and legacy.strip():
        return legacy.strip()
    return ""


def format_row(record: Any, columns) -> list[str]:
    return [format_field(record, column) for column in columns]
