from __future__ import annotations

from pydantic import BaseModel


class LedgerItemOut(BaseModel):
    product_name: str | None
    weight_kg: str
    price_per_kg: str
    gst_amount: str
    amount: str


class LedgerLineOut(BaseModel):
    date: str
    kind: str
    voucher: str | None
    description: str
    credit: str
    debit: str
    items: list[LedgerItemOut]


class PartyLedgerOut(BaseModel):
    party_name: str
    grade: str
    from_date: str | None
    to_date: str | None
    lines: list[LedgerLineOut]
    total_credit: str
    total_debit: str
    balance: str
