from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backend.app.api.deps import PDF_MIME, XLSX_MIME, export_response
from backend.app.core.database import get_db
from backend.app.core.timezone import local_today
from backend.app.schemas.daybook import DaybookOut, OpeningBalanceOut
from backend.app.services.daybook import (
    daybook_to_dict,
    generate_daybook,
    resolve_opening_balance,
)
from backend.app.services.daybook_source import SqlDaybookSource
from backend.app.services.errors import DataSourceError, DataSourceTimeoutError
from backend.app.services.export_excel import export_daybook_excel
from backend.app.services.export_pdf import export_daybook_pdf

router = APIRouter()

T = TypeVar("T")


def _run(build: Callable[[], T]) -> T:
    """Map engine errors to HTTP: bad range 400, store timeout 504, store failure 503."""
    try:
        return build()
    except DataSourceTimeoutError as e:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e))
    except DataSourceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not load daybook data ({e})",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _daybook_data(db: Session, from_date: date | None, to_date: date | None) -> dict:
    today = local_today()
    fd = from_date or to_date or today
    td = to_date or from_date or today
    return _run(lambda: daybook_to_dict(generate_daybook(SqlDaybookSource(db), fd, td)))


def _filename(data: dict, ext: str) -> str:
    if data["from_date"] == data["to_date"]:
        return f"daybook-{data['from_date']}.{ext}"
    return f"daybook-{data['from_date']}-to-{data['to_date']}.{ext}"


@router.get("", response_model=DaybookOut)
def daybook(
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> dict:
    return _daybook_data(db, from_date, to_date)


@router.get("/opening-balance", response_model=OpeningBalanceOut)
def opening_balance(
    before: date | None = Query(None),
    db: Session = Depends(get_db),
) -> dict[str, str]:
    cutoff = before or local_today()
    amount = _run(lambda: resolve_opening_balance(SqlDaybookSource(db), cutoff))
    return {"before": cutoff.isoformat(), "opening_cash_in_hand": str(amount)}


@router.get("/export/pdf")
def daybook_export_pdf(
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _daybook_data(db, from_date, to_date)
    return export_response(export_daybook_pdf(data), PDF_MIME, _filename(data, "pdf"))


@router.get("/export/excel")
def daybook_export_excel(
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _daybook_data(db, from_date, to_date)
    return export_response(export_daybook_excel(data), XLSX_MIME, _filename(data, "xlsx"))
