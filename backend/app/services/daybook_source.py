"""Read-only data access consumed by the daybook engine.

The engine never touches the ORM directly; it talks to a ``DaybookSource``.
``SqlDaybookSource`` is the production implementation over a SQLAlchemy
session. Every fetch is wrapped so that driver errors surface as
``DataSourceError`` and slow fetches as ``DataSourceTimeoutError``.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, TypeVar
from uuid import UUID

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.models.cashbook import Expense, Payment, Receipt
from backend.app.models.party import Party
from backend.app.models.transaction import (
    PurchaseTransaction,
    PurchaseTransactionItem,
    SupplyTransaction,
    SupplyTransactionItem,
)
from backend.app.services.errors import DataSourceError, DataSourceTimeoutError

logger = logging.getLogger(__name__)

Q = Decimal("0.0001")
T = TypeVar("T")

# PostgreSQL SQLSTATE for "canceling statement due to statement timeout"
_PG_QUERY_CANCELED = "57014"


# ── Records ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TransactionRecord:
    """A purchase or supply header; ``voucher_number`` is the purchase voucher."""

    id: UUID
    party_name: str | None
    voucher_number: str | None
    is_built: bool
    created_at: datetime


@dataclass(frozen=True)
class ItemRecord:
    transaction_id: UUID
    weight_kg: Decimal
    price_per_kg: Decimal
    gst_percent: Decimal | None


@dataclass(frozen=True)
class ReceiptRecord:
    id: UUID
    party_name: str | None
    date: date
    amount: Decimal
    receipt_number: str


@dataclass(frozen=True)
class PaymentRecord:
    id: UUID
    party_name: str | None
    date: date
    paid_amount: Decimal
    mode: str


@dataclass(frozen=True)
class ExpenseRecord:
    id: UUID
    date: date
    amount: Decimal
    voucher_number: str
    pay_to: str


class DaybookSource(Protocol):
    """Everything the daybook reads. All listings are ordered oldest first."""

    def list_purchases(self, start: datetime, end: datetime) -> list[TransactionRecord]: ...

    def list_purchase_items(self, purchase_ids: Sequence[UUID]) -> list[ItemRecord]: ...

    def list_supplies(self, start: datetime, end: datetime) -> list[TransactionRecord]: ...

    def list_supply_items(self, supply_ids: Sequence[UUID]) -> list[ItemRecord]: ...

    def list_receipts(self, from_date: date, to_date: date) -> list[ReceiptRecord]: ...

    def list_payments(self, from_date: date, to_date: date) -> list[PaymentRecord]: ...

    def list_expenses(self, from_date: date, to_date: date) -> list[ExpenseRecord]: ...

    def total_receipts_before(self, before: date) -> Decimal: ...

    def total_payments_before(self, before: date) -> Decimal: ...

    def total_expenses_before(self, before: date) -> Decimal: ...


# ── SQLAlchemy implementation ────────────────────────────────────────────────


def _dec(value: object) -> Decimal:
    return Decimal(str(value)).quantize(Q, rounding=ROUND_HALF_UP)


def _is_statement_timeout(exc: SQLAlchemyError) -> bool:
    return getattr(getattr(exc, "orig", None), "pgcode", None) == _PG_QUERY_CANCELED


class SqlDaybookSource:
    """``DaybookSource`` backed by the application's own tables."""

    def __init__(self, db: Session, timeout_seconds: float | None = None) -> None:
        self.db = db
        self.timeout_seconds = (
            settings.DAYBOOK_FETCH_TIMEOUT_SECONDS
            if timeout_seconds is None
            else timeout_seconds
        )

    @property
    def _dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def _limit_statement_time(self) -> None:
        # Server-side guard for the fetch deadline, scoped to this transaction
        if self._dialect == "postgresql":
            timeout_ms = int(self.timeout_seconds * 1000)
            self.db.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))

    def _fetch(self, source: str, query: Callable[[], T]) -> T:
        started = time.monotonic()
        try:
            self._limit_statement_time()
            result = query()
        except SQLAlchemyError as exc:
            logger.error("Daybook fetch failed for %s: %s", source, exc)
            if _is_statement_timeout(exc):
                raise DataSourceTimeoutError(source, "statement timed out") from exc
            raise DataSourceError(source, str(exc)) from exc
        elapsed = time.monotonic() - started
        if elapsed > self.timeout_seconds:
            logger.error(
                "Daybook fetch for %s took %.2fs (limit %.2fs)",
                source, elapsed, self.timeout_seconds,
            )
            raise DataSourceTimeoutError(
                source, f"fetch took {elapsed:.2f}s, limit is {self.timeout_seconds:.2f}s"
            )
        return result

    # -- purchases / supplies ------------------------------------------------

    def list_purchases(self, start: datetime, end: datetime) -> list[TransactionRecord]:
        def run() -> list[TransactionRecord]:
            rows = (
                self.db.query(
                    PurchaseTransaction.id,
                    Party.name,
                    PurchaseTransaction.purchase_voucher_number,
                    PurchaseTransaction.is_built,
                    PurchaseTransaction.created_at,
                )
                .outerjoin(Party, PurchaseTransaction.party_id == Party.id)
                .filter(
                    PurchaseTransaction.created_at >= start,
                    PurchaseTransaction.created_at < end,
                )
                .order_by(PurchaseTransaction.created_at.asc(), PurchaseTransaction.id)
                .all()
            )
            return [
                TransactionRecord(
                    id=r.id,
                    party_name=r.name,
                    voucher_number=r.purchase_voucher_number,
                    is_built=r.is_built,
                    created_at=r.created_at,
                )
                for r in rows
            ]

        return self._fetch("purchases", run)

    def list_purchase_items(self, purchase_ids: Sequence[UUID]) -> list[ItemRecord]:
        if not purchase_ids:
            return []

        def run() -> list[ItemRecord]:
            items = (
                self.db.query(PurchaseTransactionItem)
                .filter(PurchaseTransactionItem.purchase_transaction_id.in_(list(purchase_ids)))
                .all()
            )
            return [
                ItemRecord(
                    transaction_id=i.purchase_transaction_id,
                    weight_kg=i.weight_kg,
                    price_per_kg=i.price_per_kg,
                    gst_percent=i.gst_percent,
                )
                for i in items
            ]

        return self._fetch("purchase_items", run)

    def list_supplies(self, start: datetime, end: datetime) -> list[TransactionRecord]:
        def run() -> list[TransactionRecord]:
            rows = (
                self.db.query(
                    SupplyTransaction.id,
                    Party.name,
                    PurchaseTransaction.purchase_voucher_number,
                    SupplyTransaction.is_built,
                    SupplyTransaction.created_at,
                )
                .outerjoin(Party, SupplyTransaction.party_id == Party.id)
                .outerjoin(
                    PurchaseTransaction,
                    SupplyTransaction.purchase_transaction_id == PurchaseTransaction.id,
                )
                .filter(
                    SupplyTransaction.created_at >= start,
                    SupplyTransaction.created_at < end,
                )
                .order_by(SupplyTransaction.created_at.asc(), SupplyTransaction.id)
                .all()
            )
            return [
                TransactionRecord(
                    id=r.id,
                    party_name=r.name,
                    voucher_number=r.purchase_voucher_number,
                    is_built=r.is_built,
                    created_at=r.created_at,
                )
                for r in rows
            ]

        return self._fetch("supplies", run)

    def list_supply_items(self, supply_ids: Sequence[UUID]) -> list[ItemRecord]:
        if not supply_ids:
            return []

        def run() -> list[ItemRecord]:
            items = (
                self.db.query(SupplyTransactionItem)
                .filter(SupplyTransactionItem.supply_transaction_id.in_(list(supply_ids)))
                .all()
            )
            return [
                ItemRecord(
                    transaction_id=i.supply_transaction_id,
                    weight_kg=i.weight_kg,
                    price_per_kg=i.price_per_kg,
                    gst_percent=i.gst_percent,
                )
                for i in items
            ]

        return self._fetch("supply_items", run)

    # -- cash events ---------------------------------------------------------

    def list_receipts(self, from_date: date, to_date: date) -> list[ReceiptRecord]:
        def run() -> list[ReceiptRecord]:
            rows = (
                self.db.query(
                    Receipt.id,
                    Party.name,
                    Receipt.date,
                    Receipt.amount,
                    Receipt.receipt_number,
                )
                .outerjoin(Party, Receipt.party_id == Party.id)
                .filter(Receipt.date >= from_date, Receipt.date <= to_date)
                .order_by(Receipt.date.asc(), Receipt.created_at.asc())
                .all()
            )
            return [
                ReceiptRecord(
                    id=r.id,
                    party_name=r.name,
                    date=r.date,
                    amount=r.amount,
                    receipt_number=r.receipt_number,
                )
                for r in rows
            ]

        return self._fetch("receipts", run)

    def list_payments(self, from_date: date, to_date: date) -> list[PaymentRecord]:
        def run() -> list[PaymentRecord]:
            rows = (
                self.db.query(
                    Payment.id,
                    Party.name,
                    Payment.date,
                    Payment.paid_amount,
                    Payment.mode,
                )
                .outerjoin(Party, Payment.party_id == Party.id)
                .filter(Payment.date >= from_date, Payment.date <= to_date)
                .order_by(Payment.date.asc(), Payment.created_at.asc())
                .all()
            )
            return [
                PaymentRecord(
                    id=r.id,
                    party_name=r.name,
                    date=r.date,
                    paid_amount=r.paid_amount,
                    mode=r.mode,
                )
                for r in rows
            ]

        return self._fetch("payments", run)

    def list_expenses(self, from_date: date, to_date: date) -> list[ExpenseRecord]:
        def run() -> list[ExpenseRecord]:
            rows = (
                self.db.query(Expense)
                .filter(Expense.date >= from_date, Expense.date <= to_date)
                .order_by(Expense.date.asc(), Expense.created_at.asc())
                .all()
            )
            return [
                ExpenseRecord(
                    id=e.id,
                    date=e.date,
                    amount=e.amount,
                    voucher_number=e.voucher_number,
                    pay_to=e.pay_to,
                )
                for e in rows
            ]

        return self._fetch("expenses", run)

    # -- history before a cutoff ----------------------------------------------

    def _total_before(self, source: str, amount, date_column, before: date) -> Decimal:
        def run() -> Decimal:
            if self._dialect == "sqlite":
                # SUM() over SQLite columns is float arithmetic
                rows = self.db.query(amount).filter(date_column < before).all()
                return sum((row[0] for row in rows), Decimal("0"))
            return _dec(
                self.db.query(func.coalesce(func.sum(amount), 0))
                .filter(date_column < before)
                .scalar()
            )

        return self._fetch(source, run)

    def total_receipts_before(self, before: date) -> Decimal:
        return self._total_before("receipts", Receipt.amount, Receipt.date, before)

    def total_payments_before(self, before: date) -> Decimal:
        return self._total_before("payments", Payment.paid_amount, Payment.date, before)

    def total_expenses_before(self, before: date) -> Decimal:
        return self._total_before("expenses", Expense.amount, Expense.date, before)
