"""Receipts, payments and expenses, and how they move cash in hand."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from backend.app.models.audit import AuditLog
from backend.app.services.cashbook import (
    record_expense,
    record_payment,
    record_receipt,
    update_payment,
)
from backend.app.services.daybook import resolve_opening_balance
from backend.app.services.daybook_source import SqlDaybookSource
from backend.tests.helpers import admin_headers

DAY = date(2026, 4, 1)


# ── Service ─────────────────────────────────────────────────────────────────


class TestCashbookService:

    @pytest.mark.parametrize("amount", ["0", "-10"])
    def test_amount_must_be_positive(self, db, market, amount):
        with pytest.raises(ValueError, match="greater than 0"):
            record_receipt(
                db, party_id=market.id, receipt_number="R-1", amount=Decimal(amount),
            )

    def test_receipt_defaults_to_today_and_cash(self, db, market):
        result = record_receipt(
            db, party_id=market.id, receipt_number=" R-1 ", amount=Decimal("99.5"),
        )
        assert result["receipt_number"] == "R-1"
        assert result["mode"] == "cash"
        assert result["party_name"] == "City Market"
        assert Decimal(result["amount"]) == Decimal("99.5")

    def test_unknown_party(self, db):
        with pytest.raises(LookupError):
            record_payment(
                db,
                party_id=UUID("00000000-0000-0000-0000-000000000001"),
                paid_amount=Decimal("10"),
            )

    def test_expense_requires_pay_to(self, db):
        with pytest.raises(ValueError, match="Pay to"):
            record_expense(db, voucher_number="E-1", pay_to="  ", amount=Decimal("10"))

    def test_cash_movements_drive_opening_balance(self, db, farmer, market):
        record_receipt(
            db, party_id=market.id, receipt_number="R-1", amount=Decimal("500"),
            entry_date=DAY,
        )
        record_payment(db, party_id=farmer.id, paid_amount=Decimal("120"), entry_date=DAY)
        record_expense(
            db, voucher_number="E-1", pay_to="Porter", amount=Decimal("30"),
            entry_date=DAY,
        )

        source = SqlDaybookSource(db)
        assert resolve_opening_balance(source, DAY) == Decimal("0")
        assert resolve_opening_balance(source, date(2026, 4, 2)) == Decimal("350")

    def test_update_payment_changes_only_given_fields(self, db, farmer):
        created = record_payment(
            db, party_id=farmer.id, paid_amount=Decimal("100"), entry_date=DAY,
            mode="bank", description="advance",
        )
        updated = update_payment(db, UUID(created["id"]), paid_amount=Decimal("80"))

        assert Decimal(updated["paid_amount"]) == Decimal("80")
        assert updated["mode"] == "bank"
        assert updated["description"] == "advance"
        assert updated["date"] == DAY.isoformat()

        row = db.query(AuditLog).filter(AuditLog.action == "PAYMENT_UPDATED").one()
        assert row.new_values["old"]["paid_amount"] != row.new_values["new"]["paid_amount"]


# ── Endpoints ───────────────────────────────────────────────────────────────


def test_receipt_roundtrip(client: TestClient, pins, market):
    res = client.post("/api/v1/receipts", json={
        "party_id": str(market.id),
        "receipt_number": "R-10",
        "amount": "250",
        "date": DAY.isoformat(),
        "mode": "upi",
    })
    assert res.status_code == 201
    receipt_id = res.json()["id"]

    listed = client.get("/api/v1/receipts").json()
    assert [r["receipt_number"] for r in listed] == ["R-10"]

    assert client.delete(f"/api/v1/receipts/{receipt_id}").status_code == 401
    res = client.delete(f"/api/v1/receipts/{receipt_id}", headers=admin_headers())
    assert res.status_code == 204
    assert client.get("/api/v1/receipts").json() == []


def test_receipt_zero_amount_is_422(client: TestClient, market):
    res = client.post("/api/v1/receipts", json={
        "party_id": str(market.id), "receipt_number": "R-1", "amount": "0",
    })
    assert res.status_code == 422


def test_payment_edit_requires_admin_pin(client: TestClient, pins, farmer):
    payment_id = client.post("/api/v1/payments", json={
        "party_id": str(farmer.id), "paid_amount": "75", "date": DAY.isoformat(),
    }).json()["id"]

    res = client.patch(f"/api/v1/payments/{payment_id}", json={"paid_amount": "70"})
    assert res.status_code == 401

    res = client.patch(
        f"/api/v1/payments/{payment_id}",
        json={"paid_amount": "70", "mode": "cheque"},
        headers=admin_headers(),
    )
    assert res.status_code == 200
    assert Decimal(res.json()["paid_amount"]) == Decimal("70")
    assert res.json()["mode"] == "cheque"


def test_payment_for_unknown_party_is_404(client: TestClient, db):
    res = client.post("/api/v1/payments", json={
        "party_id": "00000000-0000-0000-0000-000000000001", "paid_amount": "5",
    })
    assert res.status_code == 404


def test_expenses_listed_newest_first(client: TestClient, db):
    for voucher, day in [("E-1", "2026-04-01"), ("E-2", "2026-04-03"), ("E-3", "2026-04-02")]:
        res = client.post("/api/v1/expenses", json={
            "voucher_number": voucher, "pay_to": "Porter", "amount": "10", "date": day,
        })
        assert res.status_code == 201

    listed = client.get("/api/v1/expenses").json()
    assert [e["voucher_number"] for e in listed] == ["E-2", "E-3", "E-1"]


def test_writes_are_audited(client: TestClient, pins, farmer):
    client.post("/api/v1/payments", json={
        "party_id": str(farmer.id), "paid_amount": "12.5", "date": DAY.isoformat(),
    })

    assert client.get("/api/v1/audit").status_code == 401
    res = client.get(
        "/api/v1/audit", params={"action": "PAYMENT_RECORDED"}, headers=admin_headers(),
    )
    assert res.status_code == 200
    rows = res.json()
    assert len(rows) == 1
    assert rows[0]["table_name"] == "payments"
    assert rows[0]["new_values"]["paid_amount"] == "12.5000"
