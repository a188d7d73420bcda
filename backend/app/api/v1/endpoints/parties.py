from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import client_ip, require_admin_pin
from backend.app.core.database import get_db
from backend.app.models.party import Party, PartyGrade
from backend.app.schemas.party import PartyCreate, PartyOut
from backend.app.services.masters import create_party, delete_party, get_party, list_parties

router = APIRouter()


@router.post("", response_model=PartyOut, status_code=status.HTTP_201_CREATED)
def add_party(payload: PartyCreate, db: Session = Depends(get_db)) -> Party:
    try:
        return create_party(
            db,
            name=payload.name,
            grade=payload.grade,
            mobile_number=payload.mobile_number,
            city=payload.city,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[PartyOut])
def get_parties(
    grade: PartyGrade | None = Query(None),
    db: Session = Depends(get_db),
) -> list[Party]:
    return list_parties(db, grade)


@router.get("/{party_id}", response_model=PartyOut)
def get_one_party(party_id: UUID, db: Session = Depends(get_db)) -> Party:
    try:
        return get_party(db, party_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{party_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_party(
    party_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_party(db, party_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
