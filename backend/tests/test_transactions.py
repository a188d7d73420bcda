"""Purchase and supply entry: pricing from the masters, GST, supply linkage."""
from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from backend.app.models.audit import AuditLog
from backend.app.models.party import Party, PartyGrade, Product
from backend.app.models.transaction import PurchaseTransaction
from backend.app.services import transactions
from backend.app.services.errors import DuplicateSupplyError, MissingPriceError
from backend.app.services.transactions import (
    list_unsupplied_purchases,
    record_purchase,
    record_supply,
)
from backend.tests.helpers import admin_headers


def _buy(db: Session, farmer: Party, onion: Product, potato: Product,
         voucher: str = "P-100", is_built: bool = False) -> dict:
    return record_purchase(
        db,
        party_id=farmer.id,
        purchase_voucher_number=voucher,
        items=[(onion.id, Decimal("100")), (potato.id, Decimal("40"))],
        vehicle_number="MH15 AB 1234",
        is_built=is_built,
    )


# ── Purchases ───────────────────────────────────────────────────────────────


class TestRecordPurchase:

    def test_prices_come_from_master(self, db, prices, farmer, onion, potato):
        result = _buy(db, farmer, onion, potato)

        # 100 x 20 + 40 x 15
        assert Decimal(result["total"]) == Decimal("2600")
        assert [i["price_per_kg"] for i in result["items"]] == ["20.0000", "15.0000"]
        assert result["is_supplied"] is False
        assert result["party_name"] == "Ravi Farms"

    def test_gst_applies_only_when_built(self, db, prices, farmer, onion, potato):
        plain = _buy(db, farmer, onion, potato, voucher="P-1")
        built = _buy(db, farmer, onion, potato, voucher="P-2", is_built=True)

        assert plain["items"][0]["gst_percent"] is None
        assert Decimal(built["items"][0]["gst_percent"]) == Decimal("5")
        # onion 2000 + 5% GST, potato has no slab
        assert Decimal(built["total"]) == Decimal("2700")
        assert Decimal(built["items"][1]["gst_amount"]) == Decimal("0")

    def test_missing_price_lists_products_and_writes_nothing(
        self, db, prices, farmer, onion,
    ):
        tomato = Product(product_name="Tomato", gst_slab=None)
        cabbage = Product(product_name="Cabbage", gst_slab=None)
        db.add_all([tomato, cabbage])
        db.commit()

        with pytest.raises(MissingPriceError) as exc_info:
            record_purchase(
                db,
                party_id=farmer.id,
                purchase_voucher_number="P-9",
                items=[
                    (onion.id, Decimal("10")),
                    (tomato.id, Decimal("5")),
                    (cabbage.id, Decimal("5")),
                ],
            )
        assert exc_info.value.product_names == ["Tomato", "Cabbage"]
        assert db.query(PurchaseTransaction).count() == 0

    def test_duplicate_voucher_rejected(self, db, prices, farmer, onion, potato):
        _buy(db, farmer, onion, potato, voucher="P-7")
        with pytest.raises(ValueError, match="already exists"):
            _buy(db, farmer, onion, potato, voucher="P-7")

    def test_voucher_taken_concurrently_is_rejected(
        self, db, prices, farmer, onion, potato, monkeypatch,
    ):
        priced_lines = transactions._priced_lines

        def competing_request(*args, **kwargs):
            # the voucher is claimed between the uniqueness check and the insert
            db.add(PurchaseTransaction(party_id=farmer.id, purchase_voucher_number="P-8"))
            db.commit()
            return priced_lines(*args, **kwargs)

        monkeypatch.setattr(transactions, "_priced_lines", competing_request)
        with pytest.raises(ValueError, match="already exists"):
            _buy(db, farmer, onion, potato, voucher="P-8")

        assert db.query(PurchaseTransaction).count() == 1

    def test_supply_party_cannot_sell_to_us(self, db, prices, market, onion, potato):
        with pytest.raises(ValueError, match="not a purchase party"):
            _buy(db, market, onion, potato)

    @pytest.mark.parametrize("weight", ["0", "-3"])
    def test_weight_must_be_positive(self, db, prices, farmer, onion, weight):
        with pytest.raises(ValueError, match="Weight"):
            record_purchase(
                db,
                party_id=farmer.id,
                purchase_voucher_number="P-1",
                items=[(onion.id, Decimal(weight))],
            )

    def test_audit_row_written(self, db, prices, farmer, onion, potato):
        result = _buy(db, farmer, onion, potato)
        row = db.query(AuditLog).filter(AuditLog.action == "PURCHASE_RECORDED").one()
        assert row.record_id == result["id"]
        assert row.new_values["total"] == "2600.0000"


# ── Supplies ────────────────────────────────────────────────────────────────


class TestRecordSupply:

    def test_copies_weights_and_uses_supply_prices(
        self, db, prices, farmer, market, onion, potato,
    ):
        bought = _buy(db, farmer, onion, potato)
        sold = record_supply(db, party_id=market.id, purchase_transaction_id=UUID(bought["id"]))

        # 100 x 25 + 40 x 18
        assert Decimal(sold["total"]) == Decimal("3220")
        assert [i["weight_kg"] for i in sold["items"]] == ["100.0000", "40.0000"]
        assert sold["purchase_voucher_number"] == "P-100"
        assert sold["vehicle_number"] == "MH15 AB 1234"

    def test_built_supply_adds_gst(self, db, prices, farmer, market, onion, potato):
        bought = _buy(db, farmer, onion, potato)
        sold = record_supply(
            db, party_id=market.id, purchase_transaction_id=UUID(bought["id"]), is_built=True,
        )
        assert Decimal(sold["total"]) == Decimal("3345")

    def test_purchase_supplied_only_once(self, db, prices, farmer, market, onion, potato):
        bought = _buy(db, farmer, onion, potato)
        record_supply(db, party_id=market.id, purchase_transaction_id=UUID(bought["id"]))
        with pytest.raises(DuplicateSupplyError):
            record_supply(db, party_id=market.id, purchase_transaction_id=UUID(bought["id"]))

    def test_unsupplied_list(self, db, prices, farmer, market, onion, potato):
        first = _buy(db, farmer, onion, potato, voucher="P-1")
        _buy(db, farmer, onion, potato, voucher="P-2")
        record_supply(db, party_id=market.id, purchase_transaction_id=UUID(first["id"]))

        remaining = list_unsupplied_purchases(db)
        assert [p["purchase_voucher_number"] for p in remaining] == ["P-2"]

    def test_missing_supply_price(self, db, prices, farmer, onion, potato):
        other = Party(name="Station Traders", grade=PartyGrade.SUPPLY_PARTY)
        db.add(other)
        db.commit()
        bought = _buy(db, farmer, onion, potato)
        with pytest.raises(MissingPriceError) as exc_info:
            record_supply(db, party_id=other.id, purchase_transaction_id=UUID(bought["id"]))
        assert exc_info.value.product_names == ["Onion", "Potato"]

    def test_unknown_purchase(self, db, prices, market):
        with pytest.raises(LookupError):
            record_supply(
                db,
                party_id=market.id,
                purchase_transaction_id=uuid4(),
            )


# ── Endpoints ───────────────────────────────────────────────────────────────


def _post_purchase(client: TestClient, farmer: Party, onion: Product, voucher: str = "P-1"):
    return client.post("/api/v1/purchases", json={
        "party_id": str(farmer.id),
        "purchase_voucher_number": voucher,
        "items": [{"product_id": str(onion.id), "weight_kg": "12.5"}],
    })


def test_create_and_fetch_purchase(client: TestClient, prices, farmer, onion):
    res = _post_purchase(client, farmer, onion)
    assert res.status_code == 201
    purchase_id = res.json()["id"]
    assert res.json()["total"] == "250.0000"

    res = client.get(f"/api/v1/purchases/{purchase_id}")
    assert res.status_code == 200
    assert res.json()["purchase_voucher_number"] == "P-1"

    res = client.get("/api/v1/purchases", params={"party_id": str(farmer.id)})
    assert [p["id"] for p in res.json()] == [purchase_id]


def test_purchase_without_price_is_400(client: TestClient, farmer, onion):
    res = _post_purchase(client, farmer, onion)
    assert res.status_code == 400
    assert "Onion" in res.json()["detail"]


def test_purchase_rejects_zero_weight(client: TestClient, prices, farmer, onion):
    res = client.post("/api/v1/purchases", json={
        "party_id": str(farmer.id),
        "purchase_voucher_number": "P-1",
        "items": [{"product_id": str(onion.id), "weight_kg": "0"}],
    })
    assert res.status_code == 422


def test_duplicate_supply_is_409(client: TestClient, prices, farmer, market, onion):
    purchase_id = _post_purchase(client, farmer, onion).json()["id"]
    body = {"party_id": str(market.id), "purchase_transaction_id": purchase_id}

    assert client.post("/api/v1/supplies", json=body).status_code == 201
    res = client.post("/api/v1/supplies", json=body)
    assert res.status_code == 409


def test_unsupplied_endpoint(client: TestClient, prices, farmer, market, onion):
    first = _post_purchase(client, farmer, onion, "P-1").json()["id"]
    _post_purchase(client, farmer, onion, "P-2")
    client.post("/api/v1/supplies", json={
        "party_id": str(market.id), "purchase_transaction_id": first,
    })

    res = client.get("/api/v1/purchases/unsupplied")
    assert [p["purchase_voucher_number"] for p in res.json()] == ["P-2"]
    assert client.get(f"/api/v1/purchases/{first}").json()["is_supplied"] is True


def test_delete_purchase_needs_admin_pin(client: TestClient, pins, prices, farmer, onion):
    purchase_id = _post_purchase(client, farmer, onion).json()["id"]

    assert client.delete(f"/api/v1/purchases/{purchase_id}").status_code == 401
    res = client.delete(f"/api/v1/purchases/{purchase_id}", headers={"X-Admin-Pin": "0000"})
    assert res.status_code == 403

    res = client.delete(f"/api/v1/purchases/{purchase_id}", headers=admin_headers())
    assert res.status_code == 204
    assert client.get(f"/api/v1/purchases/{purchase_id}").status_code == 404


def test_supplied_purchase_cannot_be_deleted(
    client: TestClient, pins, prices, farmer, market, onion,
):
    purchase_id = _post_purchase(client, farmer, onion).json()["id"]
    supply_id = client.post("/api/v1/supplies", json={
        "party_id": str(market.id), "purchase_transaction_id": purchase_id,
    }).json()["id"]

    res = client.delete(f"/api/v1/purchases/{purchase_id}", headers=admin_headers())
    assert res.status_code == 400

    assert client.delete(f"/api/v1/supplies/{supply_id}", headers=admin_headers()).status_code == 204
    res = client.delete(f"/api/v1/purchases/{purchase_id}", headers=admin_headers())
    assert res.status_code == 204


def test_invoice_pdfs(client: TestClient, prices, farmer, market, onion):
    purchase_id = _post_purchase(client, farmer, onion).json()["id"]
    supply_id = client.post("/api/v1/supplies", json={
        "party_id": str(market.id), "purchase_transaction_id": purchase_id, "is_built": True,
    }).json()["id"]

    res = client.get(f"/api/v1/purchases/{purchase_id}/invoice/pdf")
    assert res.status_code == 200
    assert res.content[:5] == b"%PDF-"
    assert "purchase-P-1.pdf" in res.headers["content-disposition"]

    res = client.get(f"/api/v1/supplies/{supply_id}/invoice/pdf")
    assert res.status_code == 200
    assert res.content[:5] == b"%PDF-"
