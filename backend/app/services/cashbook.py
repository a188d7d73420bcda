from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from backend.app.core.timezone import local_today
from backend.app.models.cashbook import Expense, Payment, Receipt
from backend.app.services.audit import log_action
from backend.app.services.masters import get_party

Q = Decimal("0.0001")
ZERO = Decimal("0")


def _amount(value: Decimal) -> Decimal:
    if value <= ZERO:
        raise ValueError("Amount must be greater than 0")
    return Decimal(str(value)).quantize(Q, rounding=ROUND_HALF_UP)


def receipt_to_dict(r: Receipt) -> dict:
    return {
        "id": str(r.id),
        "party_id": str(r.party_id),
        "party_name": r.party.name if r.party else None,
        "date": r.date.isoformat(),
        "receipt_number": r.receipt_number,
        "mode": r.mode,
        "description": r.description,
        "amount": str(r.amount),
    }


def payment_to_dict(p: Payment) -> dict:
    return {
        "id": str(p.id),
        "party_id": str(p.party_id),
        "party_name": p.party.name if p.party else None,
        "date": p.date.isoformat(),
        "paid_amount": str(p.paid_amount),
        "mode": p.mode,
        "description": p.description,
    }


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": str(e.id),
        "date": e.date.isoformat(),
        "voucher_number": e.voucher_number,
        "pay_to": e.pay_to,
        "amount": str(e.amount),
        "description": e.description,
        "expense_grade": e.expense_grade,
    }


# ── Receipts ─────────────────────────────────────────────────────────────────


def record_receipt(
    db: Session,
    *,
    party_id: UUID,
    receipt_number: str,
    amount: Decimal,
    entry_date: date | None = None,
    mode: str = "cash",
    description: str | None = None,
    ip_address: str | None = None,
) -> dict:
    """Money received from a party. Always a credit in the daybook."""
    amt = _amount(amount)
    if not receipt_number.strip():
        raise ValueError("Receipt number is required")
    party = get_party(db, party_id)

    receipt = Receipt(
        party_id=party.id,
        date=entry_date or local_today(),
        receipt_number=receipt_number.strip(),
        mode=mode or "cash",
        description=description,
        amount=amt,
    )
    db.add(receipt)
    db.flush()
    log_action(
        db,
        action="RECEIPT_RECORDED",
        resource_type="receipts",
        resource_id=str(receipt.id),
        ip_address=ip_address,
        changes={
            "receipt_number": receipt.receipt_number,
            "party": party.name,
            "amount": str(amt),
        },
    )
    db.commit()
    db.refresh(receipt)
    return receipt_to_dict(receipt)


def list_receipts(db: Session) -> list[dict]:
    rows = (
        db.query(Receipt)
        .options(joinedload(Receipt.party))
        .order_by(Receipt.date.desc(), Receipt.created_at.desc())
        .all()
    )
    return [receipt_to_dict(r) for r in rows]


def delete_receipt(db: Session, receipt_id: UUID, ip_address: str | None = None) -> None:
    receipt = db.query(Receipt).filter(Receipt.id == receipt_id).first()
    if not receipt:
        raise LookupError("Receipt not found")
    log_action(
        db,
        action="RECEIPT_DELETED",
        resource_type="receipts",
        resource_id=str(receipt.id),
        ip_address=ip_address,
        changes={"receipt_number": receipt.receipt_number, "amount": str(receipt.amount)},
    )
    db.delete(receipt)
    db.commit()


# ── Payments ─────────────────────────────────────────────────────────────────


def record_payment(
    db: Session,
    *,
    party_id: UUID,
    paid_amount: Decimal,
    entry_date: date | None = None,
    mode: str = "cash",
    description: str | None = None,
    ip_address: str | None = None,
) -> dict:
    """Money paid to a party. Always a debit in the daybook."""
    amt = _amount(paid_amount)
    party = get_party(db, party_id)

    payment = Payment(
        party_id=party.id,
        date=entry_date or local_today(),
        paid_amount=amt,
        mode=mode or "cash",
        description=description,
    )
    db.add(payment)
    db.flush()
    log_action(
        db,
        action="PAYMENT_RECORDED",
        resource_type="payments",
        resource_id=str(payment.id),
        ip_address=ip_address,
        changes={"party": party.name, "paid_amount": str(amt), "mode": payment.mode},
    )
    db.commit()
    db.refresh(payment)
    return payment_to_dict(payment)


def get_payment(db: Session, payment_id: UUID) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise LookupError("Payment not found")
    return payment


def update_payment(
    db: Session,
    payment_id: UUID,
    *,
    paid_amount: Decimal | None = None,
    entry_date: date | None = None,
    mode: str | None = None,
    description: str | None = None,
    ip_address: str | None = None,
) -> dict:
    """Correct a recorded payment. Only the given fields change."""
    payment = get_payment(db, payment_id)
    old = {
        "paid_amount": str(payment.paid_amount),
        "date": payment.date.isoformat(),
        "mode": payment.mode,
    }

    if paid_amount is not None:
        payment.paid_amount = _amount(paid_amount)
    if entry_date is not None:
        payment.date = entry_date
    if mode is not None:
        payment.mode = mode
    if description is not None:
        payment.description = description

    log_action(
        db,
        action="PAYMENT_UPDATED",
        resource_type="payments",
        resource_id=str(payment.id),
        ip_address=ip_address,
        changes={
            "old": old,
            "new": {
                "paid_amount": str(payment.paid_amount),
                "date": payment.date.isoformat(),
                "mode": payment.mode,
            },
        },
    )
    db.commit()
    db.refresh(payment)
    return payment_to_dict(payment)


def list_payments(db: Session) -> list[dict]:
    rows = (
        db.query(Payment)
        .options(joinedload(Payment.party))
        .order_by(Payment.date.desc(), Payment.created_at.desc())
        .all()
    )
    return [payment_to_dict(p) for p in rows]


def delete_payment(db: Session, payment_id: UUID, ip_address: str | None = None) -> None:
    payment = get_payment(db, payment_id)
    log_action(
        db,
        action="PAYMENT_DELETED",
        resource_type="payments",
        resource_id=str(payment.id),
        ip_address=ip_address,
        changes={"paid_amount": str(payment.paid_amount), "date": payment.date.isoformat()},
    )
    db.delete(payment)
    db.commit()


# ── Expenses ─────────────────────────────────────────────────────────────────


def record_expense(
    db: Session,
    *,
    voucher_number: str,
    pay_to: str,
    amount: Decimal,
    entry_date: date | None = None,
    description: str | None = None,
    expense_grade: str | None = None,
    ip_address: str | None = None,
) -> dict:
    amt = _amount(amount)
    if not voucher_number.strip():
        raise ValueError("Voucher number is required")
    if not pay_to.strip():
        raise ValueError("Pay to is required")

    expense = Expense(
        date=entry_date or local_today(),
        voucher_number=voucher_number.strip(),
        pay_to=pay_to.strip(),
        amount=amt,
        description=description,
        expense_grade=expense_grade,
    )
    db.add(expense)
    db.flush()
    log_action(
        db,
        action="EXPENSE_RECORDED",
        resource_type="expenses",
        resource_id=str(expense.id),
        ip_address=ip_address,
        changes={
            "voucher_number": expense.voucher_number,
            "pay_to": expense.pay_to,
            "amount": str(amt),
        },
    )
    db.commit()
    db.refresh(expense)
    return expense_to_dict(expense)


def list_expenses(db: Session) -> list[dict]:
    rows = (
        db.query(Expense)
        .order_by(Expense.date.desc(), Expense.created_at.desc())
        .all()
    )
    return [expense_to_dict(e) for e in rows]


def delete_expense(db: Session, expense_id: UUID, ip_address: str | None = None) -> None:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise LookupError("Expense not found")
    log_action(
        db,
        action="EXPENSE_DELETED",
        resource_type="expenses",
        resource_id=str(expense.id),
        ip_address=ip_address,
        changes={"voucher_number": expense.voucher_number, "amount": str(expense.amount)},
    )
    db.delete(expense)
    db.commit()
