from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import client_ip, require_admin_pin
from backend.app.core.database import get_db
from backend.app.schemas.cashbook import ReceiptCreate, ReceiptOut
from backend.app.services.cashbook import delete_receipt, list_receipts, record_receipt

router = APIRouter()


@router.post("", response_model=ReceiptOut, status_code=status.HTTP_201_CREATED)
def create_receipt(
    payload: ReceiptCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return record_receipt(
            db,
            party_id=payload.party_id,
            receipt_number=payload.receipt_number,
            amount=payload.amount,
            entry_date=payload.date,
            mode=payload.mode,
            description=payload.description,
            ip_address=client_ip(request),
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[ReceiptOut])
def get_receipts(db: Session = Depends(get_db)) -> list[dict]:
    return list_receipts(db)


@router.delete(
    "/{receipt_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_receipt(
    receipt_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_receipt(db, receipt_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
