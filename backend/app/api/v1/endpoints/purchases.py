from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backend.app.api.deps import PDF_MIME, client_ip, export_response, require_admin_pin
from backend.app.core.database import get_db
from backend.app.schemas.transaction import PurchaseCreate, PurchaseOut
from backend.app.services.export_pdf import export_purchase_invoice_pdf
from backend.app.services.transactions import (
    delete_purchase,
    get_purchase,
    list_purchases,
    list_unsupplied_purchases,
    purchase_to_dict,
    record_purchase,
)

router = APIRouter()


@router.post("", response_model=PurchaseOut, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: PurchaseCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return record_purchase(
            db,
            party_id=payload.party_id,
            purchase_voucher_number=payload.purchase_voucher_number,
            vehicle_number=payload.vehicle_number,
            is_built=payload.is_built,
            items=[(i.product_id, i.weight_kg) for i in payload.items],
            ip_address=client_ip(request),
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[PurchaseOut])
def get_purchases(
    party_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
) -> list[dict]:
    return list_purchases(db, party_id)


@router.get("/unsupplied", response_model=list[PurchaseOut])
def get_unsupplied_purchases(db: Session = Depends(get_db)) -> list[dict]:
    return list_unsupplied_purchases(db)


@router.get("/{purchase_id}", response_model=PurchaseOut)
def get_one_purchase(purchase_id: UUID, db: Session = Depends(get_db)) -> dict:
    try:
        return purchase_to_dict(get_purchase(db, purchase_id))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{purchase_id}/invoice/pdf")
def purchase_invoice_pdf(
    purchase_id: UUID, db: Session = Depends(get_db),
) -> StreamingResponse:
    try:
        data = purchase_to_dict(get_purchase(db, purchase_id))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    buf = export_purchase_invoice_pdf(data)
    return export_response(
        buf, PDF_MIME, f"purchase-{data['purchase_voucher_number']}.pdf"
    )


@router.delete(
    "/{purchase_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_purchase(
    purchase_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_purchase(db, purchase_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
