"""Cash-moving entries: money received, money paid to parties, expenses."""
from __future__ import annotations

import uuid
import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.core.database import Base
from backend.app.core.timezone import local_now
from backend.app.models.money import Money
from backend.app.models.party import Party


class Receipt(Base):
    __tablename__ = "receipts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    receipt_number: Mapped[str] = mapped_column(String(100), nullable=False)
    mode: Mapped[str] = mapped_column(String(50), nullable=False, default="cash")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    party: Mapped[Party] = relationship()

    __table_args__ = (
        Index("ix_receipts_date", "date"),
        Index("ix_receipts_party", "party_id"),
    )


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parties.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    mode: Mapped[str] = mapped_column(String(50), nullable=False, default="cash")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    party: Mapped[Party] = relationship()

    __table_args__ = (
        Index("ix_payments_date", "date"),
        Index("ix_payments_party", "party_id"),
    )


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    voucher_number: Mapped[str] = mapped_column(String(100), nullable=False)
    pay_to: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    expense_grade: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=local_now
    )

    __table_args__ = (Index("ix_expenses_date", "date"),)
