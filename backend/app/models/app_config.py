from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.core.database import Base
from backend.app.core.timezone import local_now


class AppConfig(Base):
    """PIN hashes for the app, admin and price-master gates.

    Singleton-style: the system expects at most one row.
    """

    __tablename__ = "app_config"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    app_pin_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    admin_pin_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price_pin_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now, onupdate=local_now
    )
