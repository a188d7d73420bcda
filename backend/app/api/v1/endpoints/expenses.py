from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from backend.app.api.deps import client_ip, require_admin_pin
from backend.app.core.database import get_db
from backend.app.schemas.cashbook import ExpenseCreate, ExpenseOut
from backend.app.services.cashbook import delete_expense, list_expenses, record_expense

router = APIRouter()


@router.post("", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        return record_expense(
            db,
            voucher_number=payload.voucher_number,
            pay_to=payload.pay_to,
            amount=payload.amount,
            entry_date=payload.date,
            description=payload.description,
            expense_grade=payload.expense_grade,
            ip_address=client_ip(request),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[ExpenseOut])
def get_expenses(db: Session = Depends(get_db)) -> list[dict]:
    return list_expenses(db)


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin_pin)],
)
def remove_expense(
    expense_id: UUID, request: Request, db: Session = Depends(get_db),
) -> None:
    try:
        delete_expense(db, expense_id, ip_address=client_ip(request))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
