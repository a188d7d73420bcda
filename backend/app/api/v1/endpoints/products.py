from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import client_ip, require_admin_pin
from backend.app.core.database import get_db
from backend.app.models.party import Product
from backend.app.schemas.party import ProductCreate, ProductOut
from backend.app.services.masters import create_product, delete_product, list_products

router = APIRouter()


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(payload: ProductCreate, db: Session = Depends(get_db)) -> Product:
    try:
        return create_product(
            db,
            product_name=payload.product_name,
            product_grade=payload.product_grade,
            gst_slab=payload.gst_slab,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[ProductOut])
def get_products(
    confirmed_only: bool = Query(False),
    db: Session = Depends(get_db),
) -> list[Product]:
    return list_products(db, confirmed_only)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_product(
    product_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_product(db, product_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
