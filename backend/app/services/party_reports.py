"""Per-party ledgers.

Purchase-party ledger: each purchase is a credit (we owe the party), each
payment to the party a debit. Sales-party ledger: each supply is a debit
(the party owes us), each receipt from the party a credit. In both,
``balance = total_credit - total_debit``.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from backend.app.core.timezone import day_bounds, local_date
from backend.app.models.cashbook import Payment, Receipt
from backend.app.models.party import PartyGrade
from backend.app.models.transaction import PurchaseTransaction, SupplyTransaction
from backend.app.services.errors import InvalidRangeError
from backend.app.services.masters import get_party
from backend.app.services.totals import item_amount, item_gst, transaction_total

Q = Decimal("0.0001")
ZERO = Decimal("0")


def _q(value: Decimal) -> str:
    return str(Decimal(value).quantize(Q, rounding=ROUND_HALF_UP))


def _moment_bounds(
    from_date: date | None, to_date: date | None,
) -> tuple[datetime | None, datetime | None]:
    if from_date and to_date and from_date > to_date:
        raise InvalidRangeError("from_date must be on or before to_date")
    start = day_bounds(from_date)[0] if from_date else None
    end = day_bounds(to_date)[1] if to_date else None
    return start, end


def _items(tx: PurchaseTransaction | SupplyTransaction) -> list[dict]:
    return [
        {
            "product_name": i.product.product_name if i.product else None,
            "weight_kg": _q(i.weight_kg),
            "price_per_kg": _q(i.price_per_kg),
            "gst_amount": _q(item_gst(i, tx.is_built)),
            "amount": _q(item_amount(i)),
        }
        for i in tx.items
    ]


def _finish(party_name: str, grade: PartyGrade, lines: list[dict],
            from_date: date | None, to_date: date | None) -> dict:
    # Stable sort keeps transactions ahead of cash lines on the same date
    lines.sort(key=lambda line: line["date"])
    total_credit = sum((line["credit"] for line in lines), ZERO)
    total_debit = sum((line["debit"] for line in lines), ZERO)
    for line in lines:
        line["date"] = line["date"].isoformat()
        line["credit"] = _q(line["credit"])
        line["debit"] = _q(line["debit"])
    return {
        "party_name": party_name,
        "grade": grade.value,
        "from_date": from_date.isoformat() if from_date else None,
        "to_date": to_date.isoformat() if to_date else None,
        "lines": lines,
        "total_credit": _q(total_credit),
        "total_debit": _q(total_debit),
        "balance": _q(total_credit - total_debit),
    }


def get_purchase_party_report(
    db: Session,
    party_id: UUID,
    from_date: date | None = None,
    to_date: date | None = None,
) -> dict:
    party = get_party(db, party_id)
    if party.grade != PartyGrade.PURCHASE_PARTY:
        raise ValueError(f"Party '{party.name}' is not a purchase party")
    start, end = _moment_bounds(from_date, to_date)

    tx_query = db.query(PurchaseTransaction).options(
        joinedload(PurchaseTransaction.items)
    ).filter(PurchaseTransaction.party_id == party_id)
    if start:
        tx_query = tx_query.filter(PurchaseTransaction.created_at >= start)
    if end:
        tx_query = tx_query.filter(PurchaseTransaction.created_at < end)

    pay_query = db.query(Payment).filter(Payment.party_id == party_id)
    if from_date:
        pay_query = pay_query.filter(Payment.date >= from_date)
    if to_date:
        pay_query = pay_query.filter(Payment.date <= to_date)

    lines: list[dict] = []
    for tx in tx_query.order_by(PurchaseTransaction.created_at).all():
        lines.append({
            "date": local_date(tx.created_at),
            "kind": "purchase",
            "voucher": tx.purchase_voucher_number,
            "description": f"Purchase ({tx.vehicle_number or '-'})",
            "credit": transaction_total(tx.items, tx.is_built),
            "debit": ZERO,
            "items": _items(tx),
        })
    for p in pay_query.order_by(Payment.date, Payment.created_at).all():
        lines.append({
            "date": p.date,
            "kind": "payment",
            "voucher": None,
            "description": f"Payment ({p.mode})",
            "credit": ZERO,
            "debit": Decimal(p.paid_amount),
            "items": [],
        })
    return _finish(party.name, party.grade, lines, from_date, to_date)


def get_sales_party_report(
    db: Session,
    party_id: UUID,
    from_date: date | None = None,
    to_date: date | None = None,
) -> dict:
    party = get_party(db, party_id)
    if party.grade != PartyGrade.SUPPLY_PARTY:
        raise ValueError(f"Party '{party.name}' is not a supply party")
    start, end = _moment_bounds(from_date, to_date)

    tx_query = db.query(SupplyTransaction).options(
        joinedload(SupplyTransaction.items),
        joinedload(SupplyTransaction.purchase_transaction),
    ).filter(SupplyTransaction.party_id == party_id)
    if start:
        tx_query = tx_query.filter(SupplyTransaction.created_at >= start)
    if end:
        tx_query = tx_query.filter(SupplyTransaction.created_at < end)

    rec_query = db.query(Receipt).filter(Receipt.party_id == party_id)
    if from_date:
        rec_query = rec_query.filter(Receipt.date >= from_date)
    if to_date:
        rec_query = rec_query.filter(Receipt.date <= to_date)

    lines: list[dict] = []
    for tx in tx_query.order_by(SupplyTransaction.created_at).all():
        purchase = tx.purchase_transaction
        vehicle = purchase.vehicle_number if purchase else None
        lines.append({
            "date": local_date(tx.created_at),
            "kind": "supply",
            "voucher": purchase.purchase_voucher_number if purchase else None,
            "description": f"Supply ({vehicle or '-'})",
            "credit": ZERO,
            "debit": transaction_total(tx.items, tx.is_built),
            "items": _items(tx),
        })
    for r in rec_query.order_by(Receipt.date, Receipt.created_at).all():
        lines.append({
            "date": r.date,
            "kind": "receipt",
            "voucher": r.receipt_number,
            "description": f"Receipt ({r.mode})",
            "credit": Decimal(r.amount),
            "debit": ZERO,
            "items": [],
        })
    return _finish(party.name, party.grade, lines, from_date, to_date)
