"""Party, product and price masters."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from backend.app.models.cashbook import Payment, Receipt
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
from backend.app.services.audit import log_action

Q = Decimal("0.0001")
ZERO = Decimal("0")

_PRICE_MODELS: dict[PriceType, type[PurchasePrice] | type[SupplyPrice]] = {
    PriceType.PURCHASE: PurchasePrice,
    PriceType.SUPPLY: SupplyPrice,
}

# Purchase prices are agreed with purchase parties, supply prices with supply parties
_PRICE_PARTY_GRADE: dict[PriceType, PartyGrade] = {
    PriceType.PURCHASE: PartyGrade.PURCHASE_PARTY,
    PriceType.SUPPLY: PartyGrade.SUPPLY_PARTY,
}


# ── Parties ──────────────────────────────────────────────────────────────────


def create_party(
    db: Session,
    *,
    name: str,
    grade: PartyGrade,
    mobile_number: str | None = None,
    city: str | None = None,
) -> Party:
    if not name.strip():
        raise ValueError("Party name must not be empty")
    party = Party(
        name=name.strip(), grade=grade, mobile_number=mobile_number, city=city,
    )
    db.add(party)
    db.commit()
    db.refresh(party)
    return party


def list_parties(db: Session, grade: PartyGrade | None = None) -> list[Party]:
    query = db.query(Party)
    if grade is not None:
        query = query.filter(Party.grade == grade)
    return query.order_by(Party.name).all()


def get_party(db: Session, party_id: UUID) -> Party:
    party = db.query(Party).filter(Party.id == party_id).first()
    if not party:
        raise LookupError("Party not found")
    return party


def delete_party(db: Session, party_id: UUID, ip_address: str | None = None) -> None:
    party = get_party(db, party_id)
    referenced = any(
        db.query(model.id).filter(model.party_id == party_id).first()
        for model in (PurchaseTransaction, SupplyTransaction, Receipt, Payment)
    )
    if referenced:
        raise ValueError(f"Party '{party.name}' has transactions and cannot be deleted")
    log_action(
        db,
        action="PARTY_DELETED",
        resource_type="parties",
        resource_id=str(party.id),
        ip_address=ip_address,
        changes={"name": party.name, "grade": party.grade.value},
    )
    db.delete(party)
    db.commit()


# ── Products ─────────────────────────────────────────────────────────────────


def create_product(
    db: Session,
    *,
    product_name: str,
    product_grade: str | None = None,
    gst_slab: Decimal | None = None,
) -> Product:
    if not product_name.strip():
        raise ValueError("Product name must not be empty")
    if gst_slab is not None and gst_slab < ZERO:
        raise ValueError("GST slab cannot be negative")
    product = Product(
        product_name=product_name.strip(),
        product_grade=product_grade,
        gst_slab=gst_slab,
        confirmed=True,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def list_products(db: Session, confirmed_only: bool = False) -> list[Product]:
    query = db.query(Product)
    if confirmed_only:
        query = query.filter(Product.confirmed.is_(True))
    return query.order_by(Product.product_name).all()


def get_product(db: Session, product_id: UUID) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise LookupError("Product not found")
    return product


def delete_product(db: Session, product_id: UUID, ip_address: str | None = None) -> None:
    product = get_product(db, product_id)
    referenced = any(
        db.query(model.id).filter(model.product_id == product_id).first()
        for model in (PurchaseTransactionItem, SupplyTransactionItem)
    )
    if referenced:
        raise ValueError(
            f"Product '{product.product_name}' is used in transactions and cannot be deleted"
        )
    log_action(
        db,
        action="PRODUCT_DELETED",
        resource_type="products",
        resource_id=str(product.id),
        ip_address=ip_address,
        changes={"product_name": product.product_name},
    )
    db.delete(product)
    db.commit()


# ── Prices ───────────────────────────────────────────────────────────────────


def find_price(
    db: Session, price_type: PriceType, party_id: UUID, product_id: UUID,
) -> Decimal | None:
    """Configured rate per kg for a party/product pair, or None."""
    model = _PRICE_MODELS[price_type]
    row = (
        db.query(model)
        .filter(model.party_id == party_id, model.product_id == product_id)
        .first()
    )
    return row.price_per_kg if row else None


def set_price(
    db: Session,
    *,
    price_type: PriceType,
    party_id: UUID,
    product_id: UUID,
    price_per_kg: Decimal,
    ip_address: str | None = None,
) -> dict[str, str | None]:
    """Insert or update a rate and append the change to the price history."""
    if price_per_kg < ZERO:
        raise ValueError("Price cannot be negative")

    party = get_party(db, party_id)
    if party.grade != _PRICE_PARTY_GRADE[price_type]:
        raise ValueError(
            f"Party '{party.name}' cannot hold {price_type.value} prices"
        )
    get_product(db, product_id)

    price = Decimal(str(price_per_kg)).quantize(Q, rounding=ROUND_HALF_UP)
    model = _PRICE_MODELS[price_type]
    row = (
        db.query(model)
        .filter(model.party_id == party_id, model.product_id == product_id)
        .first()
    )
    old_price = row.price_per_kg if row else None
    if row:
        row.price_per_kg = price
    else:
        db.add(model(party_id=party_id, product_id=product_id, price_per_kg=price))

    db.add(PriceHistory(
        price_type=price_type,
        party_id=party_id,
        product_id=product_id,
        old_price=old_price,
        new_price=price,
    ))
    log_action(
        db,
        action="PRICE_SET",
        resource_type=model.__tablename__,
        resource_id=f"{party_id}:{product_id}",
        ip_address=ip_address,
        changes={
            "old_price": str(old_price) if old_price is not None else None,
            "new_price": str(price),
        },
    )
    db.commit()

    return {
        "price_type": price_type.value,
        "party_id": str(party_id),
        "product_id": str(product_id),
        "old_price": str(old_price) if old_price is not None else None,
        "price_per_kg": str(price),
    }


def get_price_matrix(db: Session, price_type: PriceType) -> list[dict[str, str]]:
    model = _PRICE_MODELS[price_type]
    return [
        {
            "party_id": str(row.party_id),
            "product_id": str(row.product_id),
            "price_per_kg": str(row.price_per_kg),
        }
        for row in db.query(model).all()
    ]


def list_price_history(
    db: Session, price_type: PriceType, limit: int = 50,
) -> list[PriceHistory]:
    return (
        db.query(PriceHistory)
        .filter(PriceHistory.price_type == price_type)
        .order_by(PriceHistory.changed_at.desc())
        .limit(limit)
        .all()
    )
