from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backend.app.api.deps import PDF_MIME, client_ip, export_response, require_admin_pin
from backend.app.core.database import get_db
from backend.app.schemas.transaction import SupplyCreate, SupplyOut
from backend.app.services.errors import DuplicateSupplyError
from backend.app.services.export_pdf import export_supply_invoice_pdf
from backend.app.services.transactions import (
    delete_supply,
    get_supply,
    list_supplies,
    record_supply,
    supply_to_dict,
)

router = APIRouter()


@router.post("", response_model=SupplyOut, status_code=status.HTTP_201_CREATED)
def create_supply(
    payload: SupplyCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return record_supply(
            db,
            party_id=payload.party_id,
            purchase_transaction_id=payload.purchase_transaction_id,
            is_built=payload.is_built,
            ip_address=client_ip(request),
        )
    except DuplicateSupplyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[SupplyOut])
def get_supplies(
    party_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
) -> list[dict]:
    return list_supplies(db, party_id)


@router.get("/{supply_id}", response_model=SupplyOut)
def get_one_supply(supply_id: UUID, db: Session = Depends(get_db)) -> dict:
    try:
        return supply_to_dict(get_supply(db, supply_id))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{supply_id}/invoice/pdf")
def supply_invoice_pdf(
    supply_id: UUID, db: Session = Depends(get_db),
) -> StreamingResponse:
    try:
        data = supply_to_dict(get_supply(db, supply_id))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    buf = export_supply_invoice_pdf(data)
    return export_response(buf, PDF_MIME, f"supply-{data['purchase_voucher_number']}.pdf")


@router.delete(
    "/{supply_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_supply(
    supply_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_supply(db, supply_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
