"""Daybook over the SQL data source and the /daybook endpoints."""
from __future__ import annotations

import itertools
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import Session

from backend.app.core.database import _engine_kwargs
from backend.app.core.timezone import local_today
from backend.app.models.cashbook import Receipt
from backend.app.models.party import Party, Product
from backend.app.services import daybook_source
from backend.app.services.daybook import EntryType, generate_daybook, resolve_opening_balance
from backend.app.services.daybook_source import SqlDaybookSource
from backend.app.services.errors import DataSourceError, DataSourceTimeoutError
from backend.tests.helpers import at, expense, payment, purchase, receipt, supply

ZERO = Decimal("0")
D1 = date(2026, 3, 10)
D2 = date(2026, 3, 11)


class _RecordingPostgresSession:
    def __init__(self) -> None:
        self.statements: list[str] = []

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))

    def execute(self, statement) -> None:
        self.statements.append(str(statement))


@pytest.fixture()
def ledger(db: Session, farmer: Party, market: Party, onion: Product, potato: Product) -> None:
    """Two days of activity with history before them.

    Before D1: receipts 1000, payments 300, expenses 100 -> opening 600.
    D1: purchase 500 (built, no GST on potato) supplied same day for 600,
        receipt 200, payment 150, expense 50 -> closing 600.
    D2: purchase 18 x 20 = 360 plus 5% GST = 378, receipt 40 -> closing 640.
    """
    receipt(db, market, date(2026, 2, 1), "1000", number="R-0")
    payment(db, farmer, date(2026, 2, 2), "300")
    expense(db, date(2026, 2, 3), "100", voucher="E-0")
    # accruals before the range never affect the opening balance
    purchase(db, farmer, "P-0", at(date(2026, 2, 5)), [(onion, "100", "20")])

    p1 = purchase(db, farmer, "P-1", at(D1, 9), [(potato, "25", "20")], is_built=True)
    supply(db, market, p1, at(D1, 15), rate="24", is_built=True)
    receipt(db, market, D1, "200", number="R-1")
    payment(db, farmer, D1, "150", mode="bank")
    expense(db, D1, "50", voucher="E-1")

    purchase(db, farmer, "P-2", at(D2, 11), [(onion, "18", "20")], is_built=True)
    receipt(db, market, D2, "40", number="R-2")


# ── SQL data source ─────────────────────────────────────────────────────────


class TestSqlDaybook:

    def test_opening_balance_counts_only_cash(self, db, ledger):
        assert resolve_opening_balance(SqlDaybookSource(db), D1) == Decimal("600")

    def test_two_day_range(self, db, ledger):
        result = generate_daybook(SqlDaybookSource(db), D1, D2)

        d1, d2 = result.days
        assert d1.opening_cash_in_hand == Decimal("600")
        assert d1.closing_cash_in_hand == Decimal("600")
        assert d2.opening_cash_in_hand == Decimal("600")
        assert d2.closing_cash_in_hand == Decimal("640")
        assert result.final_cash_in_hand == Decimal("640")

    def test_day_entries_in_order(self, db, ledger):
        day = generate_daybook(SqlDaybookSource(db), D1, D1).days[0]

        assert [(e.type, e.credit, e.debit) for e in day.entries] == [
            (EntryType.CASH_IN_HAND, Decimal("600"), ZERO),
            (EntryType.PURCHASE, ZERO, Decimal("500")),
            (EntryType.PURCHASE_AC, Decimal("500"), ZERO),
            (EntryType.SUPPLY, Decimal("600"), ZERO),
            (EntryType.SALES_AC, ZERO, Decimal("600")),
            (EntryType.RECEIPT, Decimal("200"), ZERO),
            (EntryType.PAYMENT, ZERO, Decimal("150")),
            (EntryType.EXPENSE, ZERO, Decimal("50")),
        ]
        assert day.entries[1].description == "Ravi Farms (P-1)"
        assert day.entries[3].description == "City Market (P-1)"

    def test_gst_on_built_purchase(self, db, ledger):
        day = generate_daybook(SqlDaybookSource(db), D2, D2).days[0]
        purchase_entry = next(e for e in day.entries if e.type == EntryType.PURCHASE)
        assert purchase_entry.debit == Decimal("378")

    def test_missing_table_raises_data_source_error(self, db, ledger):
        db.execute(text("DROP TABLE expenses"))
        with pytest.raises(DataSourceError) as exc_info:
            resolve_opening_balance(SqlDaybookSource(db), D1)
        assert exc_info.value.source == "expenses"
        assert exc_info.value.__cause__ is not None

    def test_slow_fetch_raises_timeout(self, db, ledger, monkeypatch):
        ticks = itertools.count(0.0, 30.0)
        monkeypatch.setattr(daybook_source.time, "monotonic", lambda: next(ticks))
        with pytest.raises(DataSourceTimeoutError) as exc_info:
            SqlDaybookSource(db, timeout_seconds=10).total_receipts_before(D1)
        assert exc_info.value.source == "receipts"

    def test_wide_amounts_stay_exact(self, db, market):
        receipt(db, market, D1, "1234567890123456.7891", number="R-1")
        receipt(db, market, D1, "0.0001", number="R-2")
        db.expire_all()

        assert db.query(Receipt.amount).filter(Receipt.receipt_number == "R-1").scalar() == (
            Decimal("1234567890123456.7891")
        )
        result = generate_daybook(SqlDaybookSource(db), D1, D2)
        receipts = [e.credit for e in result.days[0].entries if e.type == EntryType.RECEIPT]
        assert receipts == [Decimal("1234567890123456.7891"), Decimal("0.0001")]
        assert result.days[1].opening_cash_in_hand == Decimal("1234567890123456.7892")

    def test_statement_timeout_is_set_per_transaction_on_postgres(self):
        session = _RecordingPostgresSession()
        source = SqlDaybookSource(session, timeout_seconds=2.5)

        assert source._fetch("receipts", lambda: "rows") == "rows"
        assert session.statements == ["SET LOCAL statement_timeout = 2500"]

    def test_engine_carries_no_global_statement_timeout(self):
        assert _engine_kwargs("postgresql://ledger@localhost/ledger") == {}


# ── Endpoints ───────────────────────────────────────────────────────────────


class TestDaybookEndpoints:

    def test_range_json(self, client: TestClient, ledger):
        res = client.get(
            "/api/v1/daybook",
            params={"from_date": D1.isoformat(), "to_date": D2.isoformat()},
        )
        assert res.status_code == 200
        data = res.json()
        assert data["opening_cash_in_hand"] == "600.0000"
        assert data["final_cash_in_hand"] == "640.0000"
        assert len(data["days"]) == 2
        sections = [e["section"] for e in data["days"][0]["entries"] if e["section"]]
        assert sections == ["PURCHASE", "SALES", "RECEIPTS", "PAYMENTS", "EXPENSES"]

    def test_defaults_to_today(self, client: TestClient, db):
        res = client.get("/api/v1/daybook")
        assert res.status_code == 200
        data = res.json()
        assert data["from_date"] == data["to_date"] == local_today().isoformat()
        assert len(data["days"]) == 1

    def test_inverted_range_is_400(self, client: TestClient, db):
        res = client.get(
            "/api/v1/daybook",
            params={"from_date": D2.isoformat(), "to_date": D1.isoformat()},
        )
        assert res.status_code == 400

    def test_opening_balance_endpoint(self, client: TestClient, ledger):
        res = client.get("/api/v1/daybook/opening-balance", params={"before": D2.isoformat()})
        assert res.status_code == 200
        assert Decimal(res.json()["opening_cash_in_hand"]) == Decimal("600")

    def test_data_source_failure_is_503(self, client: TestClient, db, monkeypatch):
        def boom(self, before):
            raise DataSourceError("receipts", "connection refused")

        monkeypatch.setattr(SqlDaybookSource, "total_receipts_before", boom)
        res = client.get("/api/v1/daybook", params={"from_date": D1.isoformat()})
        assert res.status_code == 503
        assert "receipts" in res.json()["detail"]

    def test_data_source_timeout_is_504(self, client: TestClient, db, monkeypatch):
        def slow(self, before):
            raise DataSourceTimeoutError("payments", "statement timed out")

        monkeypatch.setattr(SqlDaybookSource, "total_payments_before", slow)
        res = client.get("/api/v1/daybook/opening-balance", params={"before": D1.isoformat()})
        assert res.status_code == 504

    def test_export_pdf(self, client: TestClient, ledger):
        res = client.get(
            "/api/v1/daybook/export/pdf",
            params={"from_date": D1.isoformat(), "to_date": D2.isoformat()},
        )
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert res.content[:5] == b"%PDF-"
        assert "daybook-2026-03-10-to-2026-03-11.pdf" in res.headers["content-disposition"]

    def test_export_excel(self, client: TestClient, ledger):
        res = client.get(
            "/api/v1/daybook/export/excel",
            params={"from_date": D1.isoformat(), "to_date": D1.isoformat()},
        )
        assert res.status_code == 200
        assert "spreadsheetml" in res.headers["content-type"]
        # XLSX files are ZIP archives starting with PK
        assert res.content[:2] == b"PK"
        assert "daybook-2026-03-10.xlsx" in res.headers["content-disposition"]

    def test_request_id_is_echoed(self, client: TestClient, db):
        res = client.get("/api/v1/daybook", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"
        generated = client.get("/api/v1/daybook")
        assert len(generated.headers["X-Request-ID"]) == 32
