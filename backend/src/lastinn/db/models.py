from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base


class ProgressRecord(Base):
    __tablename__ = "progress"

    # one row per namespace, e.g. "thelastinn-progress"
    namespace: Mapped[str] = mapped_column(String(100), primary_key=True)

    # {"echoes": int, "upgrades": {"bonus_hp": int}}
    data_json: Mapped[dict] = mapped_column(JSON, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
