"""Application-wide key-value settings editable at runtime."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from freightdesk.database import Base


class AppConfig(Base):
    """Key-value configuration.

    Used for:
      - job_number_prefixes: {"Import": "IMP", "Export": "EXP"}
    """
    __tablename__ = "app_config"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
