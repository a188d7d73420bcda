"""initial_ledger_schema

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, nullable: bool = False) -> sa.Column:
    # SQLite keeps amounts as decimal text, matching the Money column type
    money = sa.Numeric(precision=20, scale=4).with_variant(sa.String(32), "sqlite")
    return sa.Column(name, money, nullable=nullable)


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade() -> None:
    party_grade = sa.Enum("PURCHASE_PARTY", "SUPPLY_PARTY", name="partygrade")
    price_type = sa.Enum("PURCHASE", "SUPPLY", name="pricetype")

    # ── Masters ──────────────────────────────────────────────────────────
    op.create_table(
        "parties",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("mobile_number", sa.String(20), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("grade", party_grade, nullable=False),
        _timestamp(),
    )
    op.create_index("ix_parties_name", "parties", ["name"])
    op.create_index("ix_parties_grade", "parties", ["grade"])

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("product_grade", sa.String(100), nullable=True),
        _money("gst_slab", nullable=True),
        sa.Column("confirmed", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp(),
    )
    op.create_index("ix_products_name", "products", ["product_name"])

    for table in ("purchase_prices", "supply_prices"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), primary_key=True),
            sa.Column(
                "party_id", sa.Uuid(),
                sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False,
            ),
            sa.Column(
                "product_id", sa.Uuid(),
                sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False,
            ),
            _money("price_per_kg"),
            _timestamp("updated_at"),
            sa.UniqueConstraint("party_id", "product_id", name=f"uq_{table}_party_product"),
        )

    op.create_table(
        "price_history",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("price_type", price_type, nullable=False),
        sa.Column(
            "party_id", sa.Uuid(),
            sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "product_id", sa.Uuid(),
            sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False,
        ),
        _money("old_price", nullable=True),
        _money("new_price"),
        _timestamp("changed_at"),
    )
    op.create_index(
        "ix_price_history_type_changed", "price_history", ["price_type", "changed_at"]
    )

    # ── Purchases and supplies ───────────────────────────────────────────
    op.create_table(
        "purchase_transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("party_id", sa.Uuid(), sa.ForeignKey("parties.id"), nullable=False),
        sa.Column("purchase_voucher_number", sa.String(100), nullable=False, unique=True),
        sa.Column("vehicle_number", sa.String(50), nullable=True),
        sa.Column("is_built", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp(),
    )
    op.create_index("ix_purchase_tx_party", "purchase_transactions", ["party_id"])
    op.create_index("ix_purchase_tx_created_at", "purchase_transactions", ["created_at"])

    op.create_table(
        "purchase_transaction_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "purchase_transaction_id", sa.Uuid(),
            sa.ForeignKey("purchase_transactions.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id"), nullable=False),
        _money("weight_kg"),
        _money("price_per_kg"),
        _money("gst_percent", nullable=True),
        sa.CheckConstraint("weight_kg > 0", name="ck_purchase_item_weight_positive"),
    )
    op.create_index(
        "ix_purchase_items_tx", "purchase_transaction_items", ["purchase_transaction_id"]
    )

    op.create_table(
        "supply_transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("party_id", sa.Uuid(), sa.ForeignKey("parties.id"), nullable=False),
        # A purchase is supplied at most once
        sa.Column(
            "purchase_transaction_id", sa.Uuid(),
            sa.ForeignKey("purchase_transactions.id"), nullable=False, unique=True,
        ),
        sa.Column("is_built", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp(),
    )
    op.create_index("ix_supply_tx_party", "supply_transactions", ["party_id"])
    op.create_index("ix_supply_tx_created_at", "supply_transactions", ["created_at"])

    op.create_table(
        "supply_transaction_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "supply_transaction_id", sa.Uuid(),
            sa.ForeignKey("supply_transactions.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id"), nullable=False),
        _money("weight_kg"),
        _money("price_per_kg"),
        _money("gst_percent", nullable=True),
    )
    op.create_index(
        "ix_supply_items_tx", "supply_transaction_items", ["supply_transaction_id"]
    )

    # ── Cash book ────────────────────────────────────────────────────────
    op.create_table(
        "receipts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("party_id", sa.Uuid(), sa.ForeignKey("parties.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("receipt_number", sa.String(100), nullable=False),
        sa.Column("mode", sa.String(50), nullable=False, server_default="cash"),
        sa.Column("description", sa.Text(), nullable=True),
        _money("amount"),
        _timestamp(),
        sa.CheckConstraint("amount > 0", name="ck_receipt_amount_positive"),
    )
    op.create_index("ix_receipts_date", "receipts", ["date"])
    op.create_index("ix_receipts_party", "receipts", ["party_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("party_id", sa.Uuid(), sa.ForeignKey("parties.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        _money("paid_amount"),
        sa.Column("mode", sa.String(50), nullable=False, server_default="cash"),
        sa.Column("description", sa.Text(), nullable=True),
        _timestamp(),
        sa.CheckConstraint("paid_amount > 0", name="ck_payment_amount_positive"),
    )
    op.create_index("ix_payments_date", "payments", ["date"])
    op.create_index("ix_payments_party", "payments", ["party_id"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("voucher_number", sa.String(100), nullable=False),
        sa.Column("pay_to", sa.String(255), nullable=False),
        _money("amount"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("expense_grade", sa.String(100), nullable=True),
        _timestamp(),
        sa.CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
    )
    op.create_index("ix_expenses_date", "expenses", ["date"])

    # ── Settings and audit ───────────────────────────────────────────────
    op.create_table(
        "app_config",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("app_pin_hash", sa.String(255), nullable=True),
        sa.Column("admin_pin_hash", sa.String(255), nullable=True),
        sa.Column("price_pin_hash", sa.String(255), nullable=True),
        _timestamp("updated_at"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("table_name", sa.String(100), nullable=False),
        sa.Column("record_id", sa.String(255), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        _timestamp(),
    )
    op.create_index("ix_audit_table_record", "audit_logs", ["table_name", "record_id"])
    op.create_index("ix_audit_created_at", "audit_logs", ["created_at"])
    op.create_index("ix_audit_action", "audit_logs", ["action"])


def downgrade() -> None:
    for table in (
        "audit_logs",
        "app_config",
        "expenses",
        "payments",
        "receipts",
        "supply_transaction_items",
        "supply_transactions",
        "purchase_transaction_items",
        "purchase_transactions",
        "price_history",
        "supply_prices",
        "purchase_prices",
        "products",
        "parties",
    ):
        op.drop_table(table)
    sa.Enum(name="pricetype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="partygrade").drop(op.get_bind(), checkfirst=True)
