from __future__ import annotations

from collections.abc import Callable
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backend.app.api.deps import PDF_MIME, XLSX_MIME, export_response
from backend.app.core.database import get_db
from backend.app.schemas.reports import PartyLedgerOut
from backend.app.services.export_excel import export_party_report_excel
from backend.app.services.export_pdf import export_party_report_pdf
from backend.app.services.party_reports import (
    get_purchase_party_report,
    get_sales_party_report,
)

router = APIRouter()

_REPORTS: dict[str, Callable[..., dict]] = {
    "purchase-party": get_purchase_party_report,
    "sales-party": get_sales_party_report,
}


def _report(
    kind: str, db: Session, party_id: UUID, from_date: date | None, to_date: date | None,
) -> dict:
    build = _REPORTS.get(kind)
    if build is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown report")
    try:
        return build(db, party_id, from_date, to_date)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ── Party ledgers ───────────────────────────────────────────────────────────


@router.get("/{kind}/{party_id}", response_model=PartyLedgerOut)
def party_ledger(
    kind: str,
    party_id: UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> dict:
    return _report(kind, db, party_id, from_date, to_date)


@router.get("/{kind}/{party_id}/export/pdf")
def party_ledger_export_pdf(
    kind: str,
    party_id: UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _report(kind, db, party_id, from_date, to_date)
    return export_response(export_party_report_pdf(data), PDF_MIME, f"{kind}-ledger.pdf")


@router.get("/{kind}/{party_id}/export/excel")
def party_ledger_export_excel(
    kind: str,
    party_id: UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    data = _report(kind, db, party_id, from_date, to_date)
    return export_response(export_party_report_excel(data), XLSX_MIME, f"{kind}-ledger.xlsx")
