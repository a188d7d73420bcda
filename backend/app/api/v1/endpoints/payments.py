from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import client_ip, require_admin_pin
from backend.app.core.database import get_db
from backend.app.schemas.cashbook import PaymentCreate, PaymentOut, PaymentUpdate
from backend.app.services.cashbook import (
    delete_payment,
    list_payments,
    record_payment,
    update_payment,
)

router = APIRouter()


@router.post("", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: PaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return record_payment(
            db,
            party_id=payload.party_id,
            paid_amount=payload.paid_amount,
            entry_date=payload.date,
            mode=payload.mode,
            description=payload.description,
            ip_address=client_ip(request),
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[PaymentOut])
def get_payments(db: Session = Depends(get_db)) -> list[dict]:
    return list_payments(db)


@router.patch(
    "/{payment_id}",
    response_model=PaymentOut,
    dependencies=[Depends(require_admin_pin)],
)
def edit_payment(
    payment_id: UUID,
    payload: PaymentUpdate,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return update_payment(
            db,
            payment_id,
            paid_amount=payload.paid_amount,
            entry_date=payload.date,
            mode=payload.mode,
            description=payload.description,
            ip_address=client_ip(request),
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete(
    "/{payment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_payment(
    payment_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_payment(db, payment_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
