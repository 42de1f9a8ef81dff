import re

from pydantic import BaseModel, field_validator

from freightdesk.models.job import ShipmentType

_PREFIX_RE = re.compile(r"^[A-Z0-9]{1,10}$")


class JobNumberPrefixes(BaseModel):
    """Shipment type → job number prefix, e.g. {"Import": "IMP"}."""
    prefixes: dict[str, str]

    @field_validator("prefixes")
    @classmethod
    def _check_prefixes(cls, v: dict[str, str]) -> dict[str, str]:
        allowed = {t.value for t in ShipmentType}
        cleaned = {}
        for shipment_type, prefix in v.items():
            if shipment_type not in allowed:
                raise ValueError(f"Unknown shipment type: {shipment_type}")
            prefix = prefix.strip().upper()
            if not _PREFIX_RE.match(prefix):
                raise ValueError(f"Invalid prefix for {shipment_type}: {prefix!r}")
            cleaned[shipment_type] = prefix
        return cleaned
