"""Row builders and request helpers shared by the test modules."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.core.timezone import local_tz
from backend.app.models.cashbook import Expense, Payment, Receipt
from backend.app.models.party import Party, Product
from backend.app.models.transaction import (
    PurchaseTransaction,
    PurchaseTransactionItem,
    SupplyTransaction,
    SupplyTransactionItem,
)

ADMIN_PIN = "4321"
PRICE_PIN = "8765"


def at(day: date, hour: int = 10, minute: int = 0) -> datetime:
    """Local-time moment on *day*."""
    return datetime.combine(day, time(hour, minute), tzinfo=local_tz())


def admin_headers() -> dict[str, str]:
    return {"X-Admin-Pin": ADMIN_PIN}


def price_headers() -> dict[str, str]:
    return {"X-Price-Pin": PRICE_PIN}


def purchase(
    db: Session,
    party: Party,
    voucher: str,
    created_at: datetime,
    lines: list[tuple[Product, str, str]],
    is_built: bool = False,
) -> PurchaseTransaction:
    """Insert a purchase directly; ``lines`` are (product, weight, rate)."""
    tx = PurchaseTransaction(
        party_id=party.id,
        purchase_voucher_number=voucher,
        is_built=is_built,
        created_at=created_at,
    )
    for product, weight, rate in lines:
        tx.items.append(PurchaseTransactionItem(
            product_id=product.id,
            weight_kg=Decimal(weight),
            price_per_kg=Decimal(rate),
            gst_percent=product.gst_slab if is_built else None,
        ))
    db.add(tx)
    db.commit()
    return tx


def supply(
    db: Session,
    party: Party,
    source: PurchaseTransaction,
    created_at: datetime,
    rate: str,
    is_built: bool = False,
) -> SupplyTransaction:
    """Supply every item of *source* at a flat *rate*."""
    tx = SupplyTransaction(
        party_id=party.id,
        purchase_transaction_id=source.id,
        is_built=is_built,
        created_at=created_at,
    )
    for item in source.items:
        tx.items.append(SupplyTransactionItem(
            product_id=item.product_id,
            weight_kg=item.weight_kg,
            price_per_kg=Decimal(rate),
            gst_percent=item.product.gst_slab if is_built else None,
        ))
    db.add(tx)
    db.commit()
    return tx


def receipt(db: Session, party: Party, day: date, amount: str, number: str = "R-1") -> Receipt:
    r = Receipt(party_id=party.id, date=day, receipt_number=number, amount=Decimal(amount))
    db.add(r)
    db.commit()
    return r


def payment(db: Session, party: Party, day: date, amount: str, mode: str = "cash") -> Payment:
    p = Payment(party_id=party.id, date=day, paid_amount=Decimal(amount), mode=mode)
    db.add(p)
    db.commit()
    return p


def expense(db: Session, day: date, amount: str, voucher: str = "E-1", pay_to: str = "Porter") -> Expense:
    e = Expense(date=day, voucher_number=voucher, pay_to=pay_to, amount=Decimal(amount))
    db.add(e)
    db.commit()
    return e
