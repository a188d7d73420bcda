"""Line-total rule shared by the daybook, party reports and invoices."""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PricedItem(Protocol):
    weight_kg: Decimal
    price_per_kg: Decimal
    gst_percent: Decimal | None


def item_amount(item: PricedItem) -> Decimal:
    return Decimal(item.weight_kg) * Decimal(item.price_per_kg)


def item_gst(item: PricedItem, is_built: bool) -> Decimal:
    """GST is added only for built transactions whose item carries a rate."""
    if not is_built or not item.gst_percent:
        return ZERO
    return item_amount(item) * Decimal(item.gst_percent) / HUNDRED


def item_total(item: PricedItem, is_built: bool) -> Decimal:
    return item_amount(item) + item_gst(item, is_built)


def transaction_total(items: Iterable[PricedItem], is_built: bool) -> Decimal:
    return sum((item_total(i, is_built) for i in items), ZERO)
