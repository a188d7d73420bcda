from __future__ import annotations

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, field_validator


def _positive(v: Decimal) -> Decimal:
    if v <= 0:
        raise ValueError("Amount must be greater than 0")
    return v


class ReceiptCreate(BaseModel):
    party_id: UUID
    receipt_number: str
    amount: Decimal
    date: dt.date | None = None
    mode: str = "cash"
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal) -> Decimal:
        return _positive(v)


class ReceiptOut(BaseModel):
    id: str
    party_id: str
    party_name: str | None
    date: str
    receipt_number: str
    mode: str
    description: str | None
    amount: str


class PaymentCreate(BaseModel):
    party_id: UUID
    paid_amount: Decimal
    date: dt.date | None = None
    mode: str = "cash"
    description: str | None = None

    @field_validator("paid_amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal) -> Decimal:
        return _positive(v)


class PaymentUpdate(BaseModel):
    paid_amount: Decimal | None = None
    date: dt.date | None = None
    mode: str | None = None
    description: str | None = None

    @field_validator("paid_amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal | None) -> Decimal | None:
        return v if v is None else _positive(v)


class PaymentOut(BaseModel):
    id: str
    party_id: str
    party_name: str | None
    date: str
    paid_amount: str
    mode: str
    description: str | None


class ExpenseCreate(BaseModel):
    voucher_number: str
    pay_to: str
    amount: Decimal
    date: dt.date | None = None
    description: str | None = None
    expense_grade: str | None = None

    @field_validator("pay_to")
    @classmethod
    def pay_to_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Pay to must not be empty")
        return v

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal) -> Decimal:
        return _positive(v)


class ExpenseOut(BaseModel):
    id: str
    date: str
    voucher_number: str
    pay_to: str
    amount: str
    description: str | None
    expense_grade: str | None
