from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, field_validator


class PurchaseItemIn(BaseModel):
    product_id: UUID
    weight_kg: Decimal

    @field_validator("weight_kg")
    @classmethod
    def weight_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Weight must be greater than zero")
        return v


class PurchaseCreate(BaseModel):
    party_id: UUID
    purchase_voucher_number: str
    vehicle_number: str | None = None
    is_built: bool = False
    items: list[PurchaseItemIn]

    @field_validator("purchase_voucher_number")
    @classmethod
    def voucher_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Voucher number must not be empty")
        return v

    @field_validator("items")
    @classmethod
    def items_not_empty(cls, v: list[PurchaseItemIn]) -> list[PurchaseItemIn]:
        if not v:
            raise ValueError("At least one item is required")
        return v


class SupplyCreate(BaseModel):
    party_id: UUID
    purchase_transaction_id: UUID
    is_built: bool = False


class TransactionItemOut(BaseModel):
    product_id: str
    product_name: str | None
    weight_kg: str
    price_per_kg: str
    gst_percent: str | None
    amount: str
    gst_amount: str
    total: str


class PurchaseOut(BaseModel):
    id: str
    party_id: str
    party_name: str | None
    purchase_voucher_number: str
    vehicle_number: str | None
    is_built: bool
    created_at: str
    items: list[TransactionItemOut]
    total: str
    is_supplied: bool


class SupplyOut(BaseModel):
    id: str
    party_id: str
    party_name: str | None
    purchase_transaction_id: str
    purchase_voucher_number: str | None
    vehicle_number: str | None
    is_built: bool
    created_at: str
    items: list[TransactionItemOut]
    total: str
