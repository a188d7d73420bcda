"""Seed the database with sample parties, products, price masters and PINs.

Usage:
    python -m backend.scripts.seed
"""

from __future__ import annotations

from decimal import Decimal

import backend.app.models.ledger  # noqa: F401
from backend.app.core.database import SessionLocal
from backend.app.models.party import Party, PartyGrade, PriceType, Product
from backend.app.services.masters import find_price, set_price
from backend.app.services.pin import PinKind, pin_exists, set_pin

PRODUCTS: list[tuple[str, str | None, Decimal | None]] = [
    ("Onion", "A", Decimal("5")),
    ("Potato", "A", None),
    ("Tomato", "B", None),
    ("Garlic", "A", Decimal("5")),
]

PARTIES: list[tuple[str, PartyGrade, str]] = [
    ("Ravi Farms", PartyGrade.PURCHASE_PARTY, "Nashik"),
    ("Green Valley Growers", PartyGrade.PURCHASE_PARTY, "Satara"),
    ("City Market", PartyGrade.SUPPLY_PARTY, "Pune"),
    ("Station Traders", PartyGrade.SUPPLY_PARTY, "Mumbai"),
]

# (party, product, rate per kg)
PURCHASE_PRICES: list[tuple[str, str, str]] = [
    ("Ravi Farms", "Onion", "20"),
    ("Ravi Farms", "Potato", "15"),
    ("Green Valley Growers", "Tomato", "12"),
    ("Green Valley Growers", "Garlic", "80"),
]
SUPPLY_PRICES: list[tuple[str, str, str]] = [
    ("City Market", "Onion", "25"),
    ("City Market", "Potato", "18"),
    ("Station Traders", "Tomato", "16"),
    ("Station Traders", "Garlic", "95"),
]

# Development defaults, change them through PUT /api/v1/pin/{kind}
DEFAULT_PINS: dict[PinKind, str] = {
    PinKind.APP: "1111",
    PinKind.ADMIN: "2222",
    PinKind.PRICE: "3333",
}


def seed() -> None:
    db = SessionLocal()
    try:
        # ── Products ───────────────────────────────────────────────────
        products: dict[str, Product] = {}
        for name, grade, gst in PRODUCTS:
            existing = db.query(Product).filter_by(product_name=name).first()
            if existing:
                products[name] = existing
            else:
                product = Product(product_name=name, product_grade=grade, gst_slab=gst)
                db.add(product)
                products[name] = product
                print(f"Created product: {name}")

        # ── Parties ────────────────────────────────────────────────────
        parties: dict[str, Party] = {}
        for name, grade, city in PARTIES:
            existing = db.query(Party).filter_by(name=name).first()
            if existing:
                parties[name] = existing
            else:
                party = Party(name=name, grade=grade, city=city)
                db.add(party)
                parties[name] = party
                print(f"Created party: {name}")
        db.commit()

        # ── Price masters ──────────────────────────────────────────────
        for price_type, rows in (
            (PriceType.PURCHASE, PURCHASE_PRICES),
            (PriceType.SUPPLY, SUPPLY_PRICES),
        ):
            for party_name, product_name, rate in rows:
                party, product = parties[party_name], products[product_name]
                if find_price(db, price_type, party.id, product.id) is not None:
                    continue
                set_price(
                    db,
                    price_type=price_type,
                    party_id=party.id,
                    product_id=product.id,
                    price_per_kg=Decimal(rate),
                )
                print(f"Set {price_type.value} price: {party_name} / {product_name} = {rate}")

        # ── PINs ───────────────────────────────────────────────────────
        for kind, pin in DEFAULT_PINS.items():
            if not pin_exists(db, kind):
                set_pin(db, kind, pin)
                print(f"Set default {kind.value} PIN")

        print("Seed complete.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
