"""Shared test fixtures.

Every test gets a fresh in-memory SQLite schema: tables are created before
the test and dropped afterwards, so tests never see each other's rows.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import backend.app.models.ledger  # noqa: F401  (registers every table)
from backend.app.api.deps import pin_limiter
from backend.app.core.database import Base, SessionLocal, engine, get_db
from backend.app.main import app
from backend.app.models.party import Party, PartyGrade, PriceType, Product
from backend.app.services.masters import set_price
from backend.app.services.pin import PinKind, set_pin
from backend.tests.helpers import ADMIN_PIN, PRICE_PIN


# ─── DB session on a fresh schema per test ──────────────────────────────────


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_pin_limiter() -> Generator[None, None, None]:
    pin_limiter.reset()
    yield
    pin_limiter.reset()


# ─── PINs ────────────────────────────────────────────────────────────────────


@pytest.fixture()
def pins(db: Session) -> None:
    set_pin(db, PinKind.ADMIN, ADMIN_PIN)
    set_pin(db, PinKind.PRICE, PRICE_PIN)


# ─── Masters ─────────────────────────────────────────────────────────────────


@pytest.fixture()
def farmer(db: Session) -> Party:
    p = Party(name="Ravi Farms", grade=PartyGrade.PURCHASE_PARTY, city="Nashik")
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def market(db: Session) -> Party:
    p = Party(name="City Market", grade=PartyGrade.SUPPLY_PARTY, city="Pune")
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def onion(db: Session) -> Product:
    p = Product(product_name="Onion", gst_slab=Decimal("5"))
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def potato(db: Session) -> Product:
    p = Product(product_name="Potato", gst_slab=None)
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def prices(
    db: Session, farmer: Party, market: Party, onion: Product, potato: Product,
) -> None:
    """Onion 20/kg and potato 15/kg bought; 25/kg and 18/kg supplied."""
    for price_type, party, product, rate in [
        (PriceType.PURCHASE, farmer, onion, "20"),
        (PriceType.PURCHASE, farmer, potato, "15"),
        (PriceType.SUPPLY, market, onion, "25"),
        (PriceType.SUPPLY, market, potato, "18"),
    ]:
        set_price(
            db,
            price_type=price_type,
            party_id=party.id,
            product_id=product.id,
            price_per_kg=Decimal(rate),
        )
