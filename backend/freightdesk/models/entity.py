"""Entity — reusable counterparties offered on the job form.

Shippers, consignees and overseas agents share one table, discriminated by
`entity_type`. Names are unique per type, but that is checked by the entity
routes before writing rather than by a constraint here.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column

from freightdesk.database import Base


class EntityType(str, enum.Enum):
    SHIPPERS = "shippers"
    CONSIGNEES = "consignees"
    OVERSEAS_AGENTS = "overseas_agents"

    @property
    def label(self) -> str:
        return ENTITY_LABELS[self]


ENTITY_LABELS = {
    EntityType.SHIPPERS: "Shipper",
    EntityType.CONSIGNEES: "Consignee",
    EntityType.OVERSEAS_AGENTS: "Overseas Agent",
}


class Entity(Base):
    __tablename__ = "entities"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    entity_type: Mapped[EntityType] = mapped_column(
        SAEnum(EntityType, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))

    # Attached document (KYC, agency agreement, ...) in blob storage.
    document_url: Mapped[str | None] = mapped_column(String(500))
    document_name: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
