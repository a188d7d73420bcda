from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, field_validator

from backend.app.models.party import PartyGrade, PriceType


# ─── Party ────────────────────────────────────────────────────────────────────


class PartyCreate(BaseModel):
    name: str
    grade: PartyGrade
    mobile_number: str | None = None
    city: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be empty")
        return v


class PartyOut(BaseModel):
    id: UUID
    name: str
    grade: PartyGrade
    mobile_number: str | None
    city: str | None

    class Config:
        from_attributes = True


# ─── Product ──────────────────────────────────────────────────────────────────


class ProductCreate(BaseModel):
    product_name: str
    product_grade: str | None = None
    gst_slab: Decimal | None = None

    @field_validator("product_name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Product name must not be empty")
        return v

    @field_validator("gst_slab")
    @classmethod
    def gst_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("GST slab must be non-negative")
        return v


class ProductOut(BaseModel):
    id: UUID
    product_name: str
    product_grade: str | None
    gst_slab: Decimal | None
    confirmed: bool

    class Config:
        from_attributes = True


# ─── Price master ─────────────────────────────────────────────────────────────


class PriceSet(BaseModel):
    party_id: UUID
    product_id: UUID
    price_per_kg: Decimal

    @field_validator("price_per_kg")
    @classmethod
    def price_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price must be non-negative")
        return v


class PriceOut(BaseModel):
    price_type: PriceType
    party_id: str
    product_id: str
    old_price: str | None = None
    price_per_kg: str


class PriceHistoryOut(BaseModel):
    id: UUID
    price_type: PriceType
    party_id: UUID
    product_id: UUID
    old_price: Decimal | None
    new_price: Decimal
    changed_at: datetime

    class Config:
        from_attributes = True
