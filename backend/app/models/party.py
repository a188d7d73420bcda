from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.core.database import Base
from backend.app.core.timezone import local_now
from backend.app.models.money import Money


class PartyGrade(str, enum.Enum):
    PURCHASE_PARTY = "purchase_party"  # we buy from them
    SUPPLY_PARTY = "supply_party"  # we supply to them


class PriceType(str, enum.Enum):
    PURCHASE = "purchase"
    SUPPLY = "supply"


class Party(Base):
    __tablename__ = "parties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    grade: Mapped[PartyGrade] = mapped_column(Enum(PartyGrade), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    __table_args__ = (
        Index("ix_parties_name", "name"),
        Index("ix_parties_grade", "grade"),
    )


class Product(Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_grade: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gst_slab: Mapped[Decimal | None] = mapped_column(
        Money(), nullable=True
    )
    confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    __table_args__ = (Index("ix_products_name", "product_name"),)


class PurchasePrice(Base):
    """Rate per kg we pay a purchase party for a product."""

    __tablename__ = "purchase_prices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    price_per_kg: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now, onupdate=local_now
    )

    party: Mapped[Party] = relationship()
    product: Mapped[Product] = relationship()

    __table_args__ = (
        UniqueConstraint("party_id", "product_id", name="uq_purchase_prices_party_product"),
    )


class SupplyPrice(Base):
    """Rate per kg a supply party pays us for a product."""

    __tablename__ = "supply_prices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    price_per_kg: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now, onupdate=local_now
    )

    party: Mapped[Party] = relationship()
    product: Mapped[Product] = relationship()

    __table_args__ = (
        UniqueConstraint("party_id", "product_id", name="uq_supply_prices_party_product"),
    )


class PriceHistory(Base):
    __tablename__ = "price_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    price_type: Mapped[PriceType] = mapped_column(Enum(PriceType), nullable=False)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    old_price: Mapped[Decimal | None] = mapped_column(
        Money(), nullable=True
    )
    new_price: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    __table_args__ = (
        Index("ix_price_history_type_changed", "price_type", "changed_at"),
    )
