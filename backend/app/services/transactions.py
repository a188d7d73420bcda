"""Purchase and supply entry.

A purchase is priced from the purchase-price master of its party. A supply
takes the goods of exactly one earlier purchase and prices them from the
supply-price master of the receiving party; a purchase can be supplied at
most once.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backend.app.models.party import PartyGrade, PriceType, Product
from backend.app.models.transaction import (
    PurchaseTransaction,
    PurchaseTransactionItem,
    SupplyTransaction,
    SupplyTransactionItem,
)
from backend.app.services.audit import log_action
from backend.app.services.errors import DuplicateSupplyError, MissingPriceError
from backend.app.services.masters import find_price, get_party
from backend.app.services.totals import item_amount, item_gst, transaction_total

logger = logging.getLogger(__name__)

Q = Decimal("0.0001")
ZERO = Decimal("0")


def _q(value: Decimal) -> str:
    return str(Decimal(value).quantize(Q, rounding=ROUND_HALF_UP))


def _item_dict(item: PurchaseTransactionItem | SupplyTransactionItem, is_built: bool) -> dict:
    gst = item_gst(item, is_built)
    return {
        "product_id": str(item.product_id),
        "product_name": item.product.product_name if item.product else None,
        "weight_kg": _q(item.weight_kg),
        "price_per_kg": _q(item.price_per_kg),
        "gst_percent": _q(item.gst_percent) if item.gst_percent is not None else None,
        "amount": _q(item_amount(item)),
        "gst_amount": _q(gst),
        "total": _q(item_amount(item) + gst),
    }


def purchase_to_dict(tx: PurchaseTransaction) -> dict:
    return {
        "id": str(tx.id),
        "party_id": str(tx.party_id),
        "party_name": tx.party.name if tx.party else None,
        "purchase_voucher_number": tx.purchase_voucher_number,
        "vehicle_number": tx.vehicle_number,
        "is_built": tx.is_built,
        "created_at": tx.created_at.isoformat(timespec="seconds"),
        "items": [_item_dict(i, tx.is_built) for i in tx.items],
        "total": _q(transaction_total(tx.items, tx.is_built)),
        "is_supplied": tx.supply is not None,
    }


def supply_to_dict(tx: SupplyTransaction) -> dict:
    purchase = tx.purchase_transaction
    return {
        "id": str(tx.id),
        "party_id": str(tx.party_id),
        "party_name": tx.party.name if tx.party else None,
        "purchase_transaction_id": str(tx.purchase_transaction_id),
        "purchase_voucher_number": purchase.purchase_voucher_number if purchase else None,
        "vehicle_number": purchase.vehicle_number if purchase else None,
        "is_built": tx.is_built,
        "created_at": tx.created_at.isoformat(timespec="seconds"),
        "items": [_item_dict(i, tx.is_built) for i in tx.items],
        "total": _q(transaction_total(tx.items, tx.is_built)),
    }


def _priced_lines(
    db: Session,
    price_type: PriceType,
    party_id: UUID,
    lines: list[tuple[UUID, Decimal]],
    is_built: bool,
) -> list[tuple[Product, Decimal, Decimal, Decimal | None]]:
    """Resolve (product, weight, price, gst) for every line or raise MissingPriceError."""
    product_ids = {product_id for product_id, _ in lines}
    products = {
        p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()
    }
    missing_products = [str(pid) for pid in product_ids if pid not in products]
    if missing_products:
        raise LookupError(f"Product not found: {', '.join(sorted(missing_products))}")

    priced: list[tuple[Product, Decimal, Decimal, Decimal | None]] = []
    unpriced: list[str] = []
    for product_id, weight in lines:
        product = products[product_id]
        price = find_price(db, price_type, party_id, product_id)
        if price is None:
            if product.product_name not in unpriced:
                unpriced.append(product.product_name)
            continue
        gst = product.gst_slab if is_built else None
        priced.append((product, weight, price, gst))

    if unpriced:
        raise MissingPriceError(price_type.value, unpriced)
    return priced


# ── Purchases ────────────────────────────────────────────────────────────────


def record_purchase(
    db: Session,
    *,
    party_id: UUID,
    purchase_voucher_number: str,
    items: list[tuple[UUID, Decimal]],
    vehicle_number: str | None = None,
    is_built: bool = False,
    ip_address: str | None = None,
) -> dict:
    """Record goods bought from a purchase party.

    ``items`` is a list of ``(product_id, weight_kg)``; rates come from the
    purchase-price master. Nothing is written when any product lacks a price.
    """
    if not items:
        raise ValueError("At least one item is required")
    if any(weight <= ZERO for _, weight in items):
        raise ValueError("Weight must be greater than 0")
    voucher = purchase_voucher_number.strip()
    if not voucher:
        raise ValueError("Voucher number is required")

    party = get_party(db, party_id)
    if party.grade != PartyGrade.PURCHASE_PARTY:
        raise ValueError(f"Party '{party.name}' is not a purchase party")

    exists = (
        db.query(PurchaseTransaction.id)
        .filter(PurchaseTransaction.purchase_voucher_number == voucher)
        .first()
    )
    if exists:
        raise ValueError(f"Voucher number '{voucher}' already exists")

    lines = _priced_lines(db, PriceType.PURCHASE, party_id, items, is_built)

    tx = PurchaseTransaction(
        party_id=party_id,
        purchase_voucher_number=voucher,
        vehicle_number=vehicle_number,
        is_built=is_built,
    )
    for product, weight, price, gst in lines:
        tx.items.append(PurchaseTransactionItem(
            product_id=product.id,
            weight_kg=Decimal(str(weight)).quantize(Q, rounding=ROUND_HALF_UP),
            price_per_kg=price,
            gst_percent=gst,
        ))
    db.add(tx)
    try:
        db.flush()
    except IntegrityError as exc:
        # Another request took the voucher after the check above
        db.rollback()
        raise ValueError(f"Voucher number '{voucher}' already exists") from exc

    total = transaction_total(tx.items, is_built)
    log_action(
        db,
        action="PURCHASE_RECORDED",
        resource_type="purchase_transactions",
        resource_id=str(tx.id),
        ip_address=ip_address,
        changes={
            "voucher": voucher,
            "party": party.name,
            "is_built": is_built,
            "total": _q(total),
        },
    )
    db.commit()
    db.refresh(tx)
    logger.info("Purchase %s recorded for %s: %s", voucher, party.name, _q(total))
    return purchase_to_dict(tx)


def get_purchase(db: Session, purchase_id: UUID) -> PurchaseTransaction:
    tx = (
        db.query(PurchaseTransaction)
        .options(joinedload(PurchaseTransaction.party))
        .filter(PurchaseTransaction.id == purchase_id)
        .first()
    )
    if not tx:
        raise LookupError("Purchase transaction not found")
    return tx


def list_purchases(db: Session, party_id: UUID | None = None) -> list[dict]:
    """Purchases newest first, with party name and computed total."""
    query = db.query(PurchaseTransaction).options(
        joinedload(PurchaseTransaction.party)
    )
    if party_id is not None:
        query = query.filter(PurchaseTransaction.party_id == party_id)
    rows = query.order_by(PurchaseTransaction.created_at.desc()).all()
    return [purchase_to_dict(tx) for tx in rows]


def list_unsupplied_purchases(db: Session) -> list[dict]:
    """Purchases not yet referenced by any supply, oldest first."""
    rows = (
        db.query(PurchaseTransaction)
        .outerjoin(
            SupplyTransaction,
            SupplyTransaction.purchase_transaction_id == PurchaseTransaction.id,
        )
        .filter(SupplyTransaction.id.is_(None))
        .order_by(PurchaseTransaction.created_at.asc())
        .all()
    )
    return [purchase_to_dict(tx) for tx in rows]


def delete_purchase(db: Session, purchase_id: UUID, ip_address: str | None = None) -> None:
    tx = get_purchase(db, purchase_id)
    if tx.supply is not None:
        raise ValueError(
            f"Purchase '{tx.purchase_voucher_number}' has been supplied; delete the supply first"
        )
    log_action(
        db,
        action="PURCHASE_DELETED",
        resource_type="purchase_transactions",
        resource_id=str(tx.id),
        ip_address=ip_address,
        changes={
            "voucher": tx.purchase_voucher_number,
            "total": _q(transaction_total(tx.items, tx.is_built)),
        },
    )
    db.delete(tx)
    db.commit()


# ── Supplies ─────────────────────────────────────────────────────────────────


def record_supply(
    db: Session,
    *,
    party_id: UUID,
    purchase_transaction_id: UUID,
    is_built: bool = False,
    ip_address: str | None = None,
) -> dict:
    """Supply the goods of one purchase to a supply party.

    Items (product and weight) are copied from the purchase and priced from
    the supply-price master of *party_id*.
    """
    party = get_party(db, party_id)
    if party.grade != PartyGrade.SUPPLY_PARTY:
        raise ValueError(f"Party '{party.name}' is not a supply party")

    purchase = get_purchase(db, purchase_transaction_id)
    already = (
        db.query(SupplyTransaction.id)
        .filter(SupplyTransaction.purchase_transaction_id == purchase.id)
        .first()
    )
    if already:
        raise DuplicateSupplyError(
            f"Purchase '{purchase.purchase_voucher_number}' has already been supplied"
        )

    lines = _priced_lines(
        db,
        PriceType.SUPPLY,
        party_id,
        [(i.product_id, i.weight_kg) for i in purchase.items],
        is_built,
    )

    tx = SupplyTransaction(
        party_id=party_id,
        purchase_transaction_id=purchase.id,
        is_built=is_built,
    )
    for product, weight, price, gst in lines:
        tx.items.append(SupplyTransactionItem(
            product_id=product.id,
            weight_kg=weight,
            price_per_kg=price,
            gst_percent=gst,
        ))
    db.add(tx)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateSupplyError(
            f"Purchase '{purchase.purchase_voucher_number}' has already been supplied"
        ) from exc

    total = transaction_total(tx.items, is_built)
    log_action(
        db,
        action="SUPPLY_RECORDED",
        resource_type="supply_transactions",
        resource_id=str(tx.id),
        ip_address=ip_address,
        changes={
            "purchase_voucher": purchase.purchase_voucher_number,
            "party": party.name,
            "is_built": is_built,
            "total": _q(total),
        },
    )
    db.commit()
    db.refresh(tx)
    logger.info(
        "Supply of %s recorded for %s: %s",
        purchase.purchase_voucher_number, party.name, _q(total),
    )
    return supply_to_dict(tx)


def get_supply(db: Session, supply_id: UUID) -> SupplyTransaction:
    tx = db.query(SupplyTransaction).filter(SupplyTransaction.id == supply_id).first()
    if not tx:
        raise LookupError("Supply transaction not found")
    return tx


def list_supplies(db: Session, party_id: UUID | None = None) -> list[dict]:
    query = db.query(SupplyTransaction).options(
        joinedload(SupplyTransaction.party),
        joinedload(SupplyTransaction.purchase_transaction),
    )
    if party_id is not None:
        query = query.filter(SupplyTransaction.party_id == party_id)
    rows = query.order_by(SupplyTransaction.created_at.desc()).all()
    return [supply_to_dict(tx) for tx in rows]


def delete_supply(db: Session, supply_id: UUID, ip_address: str | None = None) -> None:
    tx = get_supply(db, supply_id)
    log_action(
        db,
        action="SUPPLY_DELETED",
        resource_type="supply_transactions",
        resource_id=str(tx.id),
        ip_address=ip_address,
        changes={
            "purchase_voucher": tx.purchase_transaction.purchase_voucher_number,
            "total": _q(transaction_total(tx.items, tx.is_built)),
        },
    )
    db.delete(tx)
    db.commit()
