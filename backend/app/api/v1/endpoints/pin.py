from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import check_pin, client_ip
from backend.app.core.database import get_db
from backend.app.schemas.pin import PinSet, PinStatusOut, PinVerify, PinVerifyOut
from backend.app.services.errors import InvalidPinError
from backend.app.services.pin import PinKind, pin_exists, set_pin

router = APIRouter()


@router.get("/{kind}", response_model=PinStatusOut)
def pin_status(kind: PinKind, db: Session = Depends(get_db)) -> dict:
    return {"kind": kind, "exists": pin_exists(db, kind)}


@router.put("/{kind}", status_code=status.HTTP_204_NO_CONTENT)
def change_pin(
    kind: PinKind,
    payload: PinSet,
    request: Request,
    db: Session = Depends(get_db),
) -> None:
    try:
        set_pin(
            db,
            kind,
            payload.new_pin,
            current_pin=payload.current_pin,
            ip_address=client_ip(request),
        )
    except InvalidPinError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{kind}/verify", response_model=PinVerifyOut)
def verify(
    kind: PinKind,
    payload: PinVerify,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    check_pin(db, request, kind, payload.pin)
    return {"kind": kind, "valid": True}
