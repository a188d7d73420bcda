from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.core.database import Base
from backend.app.core.timezone import local_now
from backend.app.models.money import Money
from backend.app.models.party import Party, Product


class PurchaseTransaction(Base):
    """Goods bought from a purchase party, priced per kg."""

    __tablename__ = "purchase_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id"), nullable=False
    )
    purchase_voucher_number: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    vehicle_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_built: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    party: Mapped[Party] = relationship()
    items: Mapped[list[PurchaseTransactionItem]] = relationship(
        back_populates="purchase_transaction", cascade="all, delete-orphan"
    )
    supply: Mapped[SupplyTransaction | None] = relationship(
        back_populates="purchase_transaction"
    )

    __table_args__ = (
        Index("ix_purchase_tx_party", "party_id"),
        Index("ix_purchase_tx_created_at", "created_at"),
    )


class PurchaseTransactionItem(Base):
    __tablename__ = "purchase_transaction_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    purchase_transaction_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("purchase_transactions.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id"), nullable=False
    )
    weight_kg: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    price_per_kg: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    gst_percent: Mapped[Decimal | None] = mapped_column(
        Money(), nullable=True
    )

    purchase_transaction: Mapped[PurchaseTransaction] = relationship(
        back_populates="items"
    )
    product: Mapped[Product] = relationship()

    __table_args__ = (
        Index("ix_purchase_items_tx", "purchase_transaction_id"),
    )


class SupplyTransaction(Base):
    """Goods from exactly one purchase transaction supplied onward to a party."""

    __tablename__ = "supply_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id"), nullable=False
    )
    # unique: a purchase is supplied at most once
    purchase_transaction_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("purchase_transactions.id"), unique=True, nullable=False
    )
    is_built: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    party: Mapped[Party] = relationship()
    purchase_transaction: Mapped[PurchaseTransaction] = relationship(
        back_populates="supply"
    )
    items: Mapped[list[SupplyTransactionItem]] = relationship(
        back_populates="supply_transaction", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_supply_tx_party", "party_id"),
        Index("ix_supply_tx_created_at", "created_at"),
    )


class SupplyTransactionItem(Base):
    __tablename__ = "supply_transaction_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    supply_transaction_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("supply_transactions.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id"), nullable=False
    )
    weight_kg: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    price_per_kg: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    gst_percent: Mapped[Decimal | None] = mapped_column(
        Money(), nullable=True
    )

    supply_transaction: Mapped[SupplyTransaction] = relationship(
        back_populates="items"
    )
    product: Mapped[Product] = relationship()

    __table_args__ = (
        Index("ix_supply_items_tx", "supply_transaction_id"),
    )
