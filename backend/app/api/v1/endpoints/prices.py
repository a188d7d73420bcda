from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import client_ip, require_price_pin
from backend.app.core.database import get_db
from backend.app.models.party import PriceHistory, PriceType
from backend.app.schemas.party import PriceHistoryOut, PriceOut, PriceSet
from backend.app.services.masters import get_price_matrix, list_price_history, set_price

router = APIRouter()


@router.get("/{price_type}")
def price_matrix(
    price_type: PriceType, db: Session = Depends(get_db),
) -> list[dict[str, str]]:
    return get_price_matrix(db, price_type)


@router.put(
    "/{price_type}",
    response_model=PriceOut,
    dependencies=[Depends(require_price_pin)],
)
def update_price(
    price_type: PriceType,
    payload: PriceSet,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return set_price(
            db,
            price_type=price_type,
            party_id=payload.party_id,
            product_id=payload.product_id,
            price_per_kg=payload.price_per_kg,
            ip_address=client_ip(request),
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{price_type}/history", response_model=list[PriceHistoryOut])
def price_history(
    price_type: PriceType,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[PriceHistory]:
    return list_price_history(db, price_type, limit)
