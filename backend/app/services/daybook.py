"""Daybook: day-by-day cash-in-hand reconciliation over a date range.

Each day opens with a "Cash in Hand" line, lists the day's purchases and
supplies together with their balancing account entries, then receipts,
payments and expenses. Only receipts, payments and expenses move cash;
purchase debits are cancelled by the "Purchase A/C Credit" line and supply
credits by the "Sales A/C Debit" line, so for every day::

    closing == opening + receipts - payments - expenses

The first day's opening balance is computed from all earlier cash events;
every later day opens with the previous day's closing balance.
"""
from __future__ import annotations

import enum
import logging
from collections import defaultdict
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from backend.app.core.config import settings
from backend.app.core.timezone import day_bounds, local_date
from backend.app.services.daybook_source import (
    DaybookSource,
    ItemRecord,
    TransactionRecord,
)
from backend.app.services.errors import InvalidRangeError
from backend.app.services.totals import transaction_total

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
Q = Decimal("0.0001")

PURCHASE_AC_DESCRIPTION = "Purchase A/C Credit"
SALES_AC_DESCRIPTION = "Sales A/C Debit"
CASH_IN_HAND_DESCRIPTION = "Cash in Hand"


class EntryType(str, enum.Enum):
    CASH_IN_HAND = "cash_in_hand"
    PURCHASE = "purchase"
    PURCHASE_AC = "purchase_ac"
    SUPPLY = "supply"
    SALES_AC = "sales_ac"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    EXPENSE = "expense"


class Section(str, enum.Enum):
    PURCHASE = "PURCHASE"
    SALES = "SALES"
    RECEIPTS = "RECEIPTS"
    PAYMENTS = "PAYMENTS"
    EXPENSES = "EXPENSES"


# entry type -> (preceding types that open the section, section label)
_SECTION_TRANSITIONS: dict[EntryType, tuple[frozenset[EntryType], Section]] = {
    EntryType.PURCHASE: (frozenset({EntryType.CASH_IN_HAND}), Section.PURCHASE),
    EntryType.SUPPLY: (
        frozenset({EntryType.PURCHASE_AC, EntryType.PURCHASE, EntryType.CASH_IN_HAND}),
        Section.SALES,
    ),
    EntryType.RECEIPT: (frozenset({EntryType.SALES_AC}), Section.RECEIPTS),
    EntryType.PAYMENT: (frozenset({EntryType.RECEIPT}), Section.PAYMENTS),
    EntryType.EXPENSE: (frozenset({EntryType.PAYMENT}), Section.EXPENSES),
}


def section_for(previous: EntryType | None, current: EntryType) -> Section | None:
    """Header to print before *current* when it follows *previous*, if any."""
    if previous is None:
        return None
    transition = _SECTION_TRANSITIONS.get(current)
    if transition is None:
        return None
    openers, section = transition
    return section if previous in openers else None


# ── Results ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DaybookEntry:
    type: EntryType
    description: str
    credit: Decimal
    debit: Decimal
    date: date
    voucher: str | None = None


def entries_with_sections(
    entries: Sequence[DaybookEntry],
) -> list[tuple[Section | None, DaybookEntry]]:
    """Pair every entry with the section header that precedes it."""
    rows: list[tuple[Section | None, DaybookEntry]] = []
    previous: EntryType | None = None
    for entry in entries:
        rows.append((section_for(previous, entry.type), entry))
        previous = entry.type
    return rows


@dataclass(frozen=True)
class DaySummary:
    date: date
    entries: tuple[DaybookEntry, ...]
    opening_cash_in_hand: Decimal
    total_credit: Decimal
    total_debit: Decimal
    closing_cash_in_hand: Decimal

    def with_sections(self) -> list[tuple[Section | None, DaybookEntry]]:
        return entries_with_sections(self.entries)


@dataclass(frozen=True)
class RangeSummary:
    from_date: date
    to_date: date
    days: tuple[DaySummary, ...]
    total_credit: Decimal
    total_debit: Decimal
    final_cash_in_hand: Decimal

    @property
    def opening_cash_in_hand(self) -> Decimal:
        return self.days[0].opening_cash_in_hand


# ── Opening balance ──────────────────────────────────────────────────────────


def resolve_opening_balance(source: DaybookSource, before: date) -> Decimal:
    """Cash in hand accumulated from every cash event dated strictly before *before*.

    Purchases and supplies are accrual entries and never counted here.
    Fetch failures propagate as ``DataSourceError``.
    """
    receipts = source.total_receipts_before(before)
    payments = source.total_payments_before(before)
    expenses = source.total_expenses_before(before)
    return receipts - payments - expenses


# ── One day ──────────────────────────────────────────────────────────────────


def _cash_in_hand_entry(day: date, opening: Decimal) -> DaybookEntry:
    return DaybookEntry(
        type=EntryType.CASH_IN_HAND,
        description=CASH_IN_HAND_DESCRIPTION,
        credit=opening if opening >= ZERO else ZERO,
        debit=abs(opening) if opening < ZERO else ZERO,
        date=day,
    )


def _priced_transactions(
    transactions: list[TransactionRecord], items: list[ItemRecord],
) -> list[tuple[TransactionRecord, Decimal]]:
    """Transactions with their totals, keeping only those that total above zero."""
    by_tx: dict[UUID, list[ItemRecord]] = defaultdict(list)
    for item in items:
        by_tx[item.transaction_id].append(item)

    priced: list[tuple[TransactionRecord, Decimal]] = []
    for tx in transactions:
        total = transaction_total(by_tx.get(tx.id, []), tx.is_built)
        if total > ZERO:
            priced.append((tx, total))
    return priced


def _purchase_entries(source: DaybookSource, day: date) -> list[DaybookEntry]:
    start, end = day_bounds(day)
    purchases = source.list_purchases(start, end)
    if not purchases:
        return []
    items = source.list_purchase_items([p.id for p in purchases])

    entries: list[DaybookEntry] = []
    day_total = ZERO
    for tx, total in _priced_transactions(purchases, items):
        day_total += total
        entries.append(DaybookEntry(
            type=EntryType.PURCHASE,
            description=f"{tx.party_name or 'Unknown'} ({tx.voucher_number})",
            credit=ZERO,
            debit=total,
            date=local_date(tx.created_at),
            voucher=tx.voucher_number,
        ))
    if day_total > ZERO:
        entries.append(DaybookEntry(
            type=EntryType.PURCHASE_AC,
            description=PURCHASE_AC_DESCRIPTION,
            credit=day_total,
            debit=ZERO,
            date=day,
        ))
    return entries


def _supply_entries(source: DaybookSource, day: date) -> list[DaybookEntry]:
    start, end = day_bounds(day)
    supplies = source.list_supplies(start, end)
    if not supplies:
        return []
    items = source.list_supply_items([s.id for s in supplies])

    entries: list[DaybookEntry] = []
    day_total = ZERO
    for tx, total in _priced_transactions(supplies, items):
        day_total += total
        voucher = tx.voucher_number or "N/A"
        entries.append(DaybookEntry(
            type=EntryType.SUPPLY,
            description=f"{tx.party_name or 'Unknown'} ({voucher})",
            credit=total,
            debit=ZERO,
            date=local_date(tx.created_at),
            voucher=voucher,
        ))
    if day_total > ZERO:
        entries.append(DaybookEntry(
            type=EntryType.SALES_AC,
            description=SALES_AC_DESCRIPTION,
            credit=ZERO,
            debit=day_total,
            date=day,
        ))
    return entries


def _cash_entries(source: DaybookSource, day: date) -> list[DaybookEntry]:
    entries: list[DaybookEntry] = []
    for r in source.list_receipts(day, day):
        entries.append(DaybookEntry(
            type=EntryType.RECEIPT,
            description=f"Receipt - {r.party_name or 'Unknown'} ({r.receipt_number})",
            credit=Decimal(r.amount),
            debit=ZERO,
            date=r.date,
            voucher=r.receipt_number,
        ))
    for p in source.list_payments(day, day):
        entries.append(DaybookEntry(
            type=EntryType.PAYMENT,
            description=f"Payment - {p.party_name or 'Unknown'} ({p.mode})",
            credit=ZERO,
            debit=Decimal(p.paid_amount),
            date=p.date,
        ))
    for e in source.list_expenses(day, day):
        entries.append(DaybookEntry(
            type=EntryType.EXPENSE,
            description=f"Expense - {e.pay_to} ({e.voucher_number})",
            credit=ZERO,
            debit=Decimal(e.amount),
            date=e.date,
            voucher=e.voucher_number,
        ))
    return entries


def aggregate_day(source: DaybookSource, day: date, opening_balance: Decimal) -> DaySummary:
    """Build the ordered entry list and totals for a single calendar day."""
    entries = [_cash_in_hand_entry(day, opening_balance)]
    entries.extend(_purchase_entries(source, day))
    entries.extend(_supply_entries(source, day))
    entries.extend(_cash_entries(source, day))

    total_credit = sum((e.credit for e in entries), ZERO)
    total_debit = sum((e.debit for e in entries), ZERO)

    return DaySummary(
        date=day,
        entries=tuple(entries),
        opening_cash_in_hand=opening_balance,
        total_credit=total_credit,
        total_debit=total_debit,
        closing_cash_in_hand=total_credit - total_debit,
    )


# ── Date range ───────────────────────────────────────────────────────────────


def _iter_days(from_date: date, to_date: date) -> Iterator[date]:
    day = from_date
    while day <= to_date:
        yield day
        day += timedelta(days=1)


def validate_range(from_date: date, to_date: date, max_days: int | None = None) -> None:
    if from_date > to_date:
        raise InvalidRangeError("from_date must be on or before to_date")
    limit = settings.DAYBOOK_MAX_RANGE_DAYS if max_days is None else max_days
    span = (to_date - from_date).days + 1
    if span > limit:
        raise InvalidRangeError(f"Date range spans {span} days; the limit is {limit}")


def generate_daybook(
    source: DaybookSource,
    from_date: date,
    to_date: date,
    max_days: int | None = None,
) -> RangeSummary:
    """Daybook for the closed interval ``[from_date, to_date]``.

    Days are computed strictly in order because each day opens with the
    previous day's closing balance. Any fetch failure aborts the whole range.
    """
    validate_range(from_date, to_date, max_days)
    logger.info("Generating daybook %s..%s", from_date, to_date)

    days: list[DaySummary] = []
    opening = resolve_opening_balance(source, from_date)
    for day in _iter_days(from_date, to_date):
        summary = aggregate_day(source, day, opening)
        days.append(summary)
        opening = summary.closing_cash_in_hand

    result = RangeSummary(
        from_date=from_date,
        to_date=to_date,
        days=tuple(days),
        total_credit=sum((d.total_credit for d in days), ZERO),
        total_debit=sum((d.total_debit for d in days), ZERO),
        final_cash_in_hand=days[-1].closing_cash_in_hand,
    )
    logger.info(
        "Daybook %s..%s: %d day(s), final cash in hand %s",
        from_date, to_date, len(days), result.final_cash_in_hand,
    )
    return result


# ── Serialization ────────────────────────────────────────────────────────────


def _money(value: Decimal) -> str:
    return str(value.quantize(Q, rounding=ROUND_HALF_UP))


def _entry_to_dict(section: Section | None, entry: DaybookEntry) -> dict[str, object]:
    return {
        "type": entry.type.value,
        "section": section.value if section else None,
        "description": entry.description,
        "credit": _money(entry.credit),
        "debit": _money(entry.debit),
        "voucher": entry.voucher,
        "date": entry.date.isoformat(),
    }


def day_to_dict(day: DaySummary) -> dict[str, object]:
    return {
        "date": day.date.isoformat(),
        "entries": [_entry_to_dict(s, e) for s, e in day.with_sections()],
        "opening_cash_in_hand": _money(day.opening_cash_in_hand),
        "total_credit": _money(day.total_credit),
        "total_debit": _money(day.total_debit),
        "closing_cash_in_hand": _money(day.closing_cash_in_hand),
    }


def daybook_to_dict(summary: RangeSummary) -> dict[str, object]:
    return {
        "from_date": summary.from_date.isoformat(),
        "to_date": summary.to_date.isoformat(),
        "opening_cash_in_hand": _money(summary.opening_cash_in_hand),
        "days": [day_to_dict(d) for d in summary.days],
        "total_credit": _money(summary.total_credit),
        "total_debit": _money(summary.total_debit),
        "final_cash_in_hand": _money(summary.final_cash_in_hand),
    }
