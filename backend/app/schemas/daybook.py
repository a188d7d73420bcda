from __future__ import annotations

from pydantic import BaseModel


class DaybookEntryOut(BaseModel):
    type: str
    section: str | None
    description: str
    credit: str
    debit: str
    voucher: str | None
    date: str


class DaySummaryOut(BaseModel):
    date: str
    entries: list[DaybookEntryOut]
    opening_cash_in_hand: str
    total_credit: str
    total_debit: str
    closing_cash_in_hand: str


class DaybookOut(BaseModel):
    from_date: str
    to_date: str
    opening_cash_in_hand: str
    days: list[DaySummaryOut]
    total_credit: str
    total_debit: str
    final_cash_in_hand: str


class OpeningBalanceOut(BaseModel):
    before: str
    opening_cash_in_hand: str
