from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

Q = Decimal("0.0001")


class Money(TypeDecorator):
    """Decimal amount with four places, stored as ``NUMERIC(20, 4)``.

    SQLite has no exact decimal storage: a NUMERIC column there holds a
    binary float, so wide amounts come back rounded. On that dialect the
    value is kept as its decimal text instead.
    """

    impl = Numeric(precision=20, scale=4)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(32))
        return dialect.type_descriptor(Numeric(precision=20, scale=4))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        amount = Decimal(str(value)).quantize(Q, rounding=ROUND_HALF_UP)
        if dialect.name == "sqlite":
            return str(amount)
        return amount

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value)).quantize(Q, rounding=ROUND_HALF_UP)
