# backend/app/models/ledger.py: single import point for every mapped class.
#
# Importing this module registers all tables on ``Base.metadata`` so that
# relationship strings resolve and ``create_all`` sees the full schema.

from backend.app.models.app_config import AppConfig
from backend.app.models.audit import AuditLog
from backend.app.models.cashbook import Expense, Payment, Receipt
from backend.app.models.party import (
    Party,
    PartyGrade,
    PriceHistory,
    PriceType,
    Product,
    PurchasePrice,
    SupplyPrice,
)
from backend.app.models.transaction import (
    PurchaseTransaction,
    PurchaseTransactionItem,
    SupplyTransaction,
    SupplyTransactionItem,
)

__all__ = [
    "AppConfig",
    "AuditLog",
    "Expense",
    "Party",
    "PartyGrade",
    "Payment",
    "PriceHistory",
    "PriceType",
    "Product",
    "PurchasePrice",
    "PurchaseTransaction",
    "PurchaseTransactionItem",
    "Receipt",
    "SupplyPrice",
    "SupplyTransaction",
    "SupplyTransactionItem",
]
