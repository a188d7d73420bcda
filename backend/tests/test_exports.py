"""Tests for the PDF and Excel renderers."""
from __future__ import annotations

import io
from typing import Any

from openpyxl import load_workbook

from backend.app.services.export_excel import export_daybook_excel, export_party_report_excel
from backend.app.services.export_pdf import (
    export_daybook_pdf,
    export_party_report_pdf,
    export_purchase_invoice_pdf,
)


def _entry(type_: str, section: str | None, description: str,
           credit: str = "0.0000", debit: str = "0.0000") -> dict[str, Any]:
    return {
        "type": type_,
        "section": section,
        "description": description,
        "credit": credit,
        "debit": debit,
        "voucher": None,
        "date": "2026-03-10",
    }


def _daybook(closing: str = "-40.0000") -> dict[str, Any]:
    day = {
        "date": "2026-03-10",
        "entries": [
            _entry("CASH_IN_HAND", None, "Cash in Hand", credit="10.0000"),
            _entry("RECEIPT", None, "Receipt - City Market (R-1)", credit="50.0000"),
            _entry("PAYMENT", "PAYMENTS", "Payment - Ravi Farms (cash)", debit="100.0000"),
        ],
        "opening_cash_in_hand": "10.0000",
        "total_credit": "60.0000",
        "total_debit": "100.0000",
        "closing_cash_in_hand": closing,
    }
    return {
        "from_date": "2026-03-10",
        "to_date": "2026-03-11",
        "opening_cash_in_hand": "10.0000",
        "days": [day, {**day, "date": "2026-03-11", "entries": []}],
        "total_credit": "120.0000",
        "total_debit": "200.0000",
        "final_cash_in_hand": closing,
    }


def _ledger() -> dict[str, Any]:
    return {
        "party_name": "Ravi Farms",
        "grade": "purchase_party",
        "from_date": None,
        "to_date": None,
        "lines": [{
            "date": "2026-03-01",
            "kind": "purchase",
            "voucher": "P-1",
            "description": "Purchase (-)",
            "credit": "1000.0000",
            "debit": "0.0000",
            "items": [{
                "product_name": "Onion",
                "weight_kg": "50.0000",
                "price_per_kg": "20.0000",
                "gst_amount": "0.0000",
                "amount": "1000.0000",
            }],
        }],
        "total_credit": "1000.0000",
        "total_debit": "0.0000",
        "balance": "1000.0000",
    }


# ── PDF ─────────────────────────────────────────────────────────────────────


def test_daybook_pdf_is_valid():
    buf = export_daybook_pdf(_daybook())
    assert buf.getvalue()[:5] == b"%PDF-"


def test_party_ledger_pdf_is_valid():
    assert export_party_report_pdf(_ledger()).getvalue()[:5] == b"%PDF-"


def test_invoice_pdf_handles_non_latin_names():
    data = {
        "purchase_voucher_number": "P-1",
        "party_name": "Śrī Farms",
        "created_at": "2026-03-01T10:00:00+05:30",
        "vehicle_number": None,
        "is_built": True,
        "items": [{
            "product_name": "Onion",
            "weight_kg": "10.0000",
            "price_per_kg": "20.0000",
            "gst_percent": "5.0000",
            "gst_amount": "10.0000",
            "total": "210.0000",
        }],
        "total": "210.0000",
    }
    assert export_purchase_invoice_pdf(data).getvalue()[:5] == b"%PDF-"


# ── Excel ───────────────────────────────────────────────────────────────────


def _cells(buf: io.BytesIO) -> list[tuple]:
    ws = load_workbook(buf).active
    return [row for row in ws.iter_rows(values_only=True)]


def test_daybook_excel_layout():
    rows = _cells(export_daybook_excel(_daybook()))

    assert rows[0][0] == "Day Book"
    assert rows[1][0] == "Period: 2026-03-10 to 2026-03-11"
    assert ("PAYMENTS", None, None, None) in rows
    # negative closing cash is shown by magnitude on the debit side
    closing = next(r for r in rows if r[1] == "Closing Cash in Hand")
    assert closing[2] is None
    assert closing[3] == 40.0
    assert any(r[1] == "Final Cash in Hand" for r in rows)


def test_daybook_excel_positive_closing_on_credit_side():
    rows = _cells(export_daybook_excel(_daybook(closing="25.0000")))
    closing = next(r for r in rows if r[1] == "Closing Cash in Hand")
    assert closing[2] == 25.0
    assert closing[3] is None


def test_party_ledger_excel():
    rows = _cells(export_party_report_excel(_ledger()))
    assert rows[0][0] == "Ledger: Ravi Farms"
    balance = next(r for r in rows if r[2] == "Balance")
    assert balance[3] == 1000.0
