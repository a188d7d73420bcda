"""Excel export functions for the daybook and party ledgers using openpyxl."""
from __future__ import annotations

import io
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

# ── Shared styling constants ────────────────────────────────────────────────

_HEADER_FONT = Font(name="Calibri", bold=True, color="FFFFFF", size=11)
_HEADER_FILL = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
_SECTION_FONT = Font(name="Calibri", bold=True, size=11)
_SECTION_FILL = PatternFill(start_color="D6E4F0", end_color="D6E4F0", fill_type="solid")
_TOTAL_FONT = Font(name="Calibri", bold=True, size=11)
_TOTAL_BORDER = Border(
    top=Side(style="thin"),
    bottom=Side(style="double"),
)
_CURRENCY_FMT = '#,##0.00'
_RIGHT = Alignment(horizontal="right")
_LEFT = Alignment(horizontal="left")


def _auto_width(ws: Any) -> None:
    """Auto-fit column widths based on content."""
    for col_idx in range(1, ws.max_column + 1):
        max_len = 0
        col_letter = get_column_letter(col_idx)
        for row in ws.iter_rows(min_col=col_idx, max_col=col_idx, values_only=False):
            cell = row[0]
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_len + 4, 50)


def _write_header_row(ws: Any, row: int, values: list[str], left_cols: int = 1) -> None:
    """Write a styled header row."""
    for col, val in enumerate(values, 1):
        cell = ws.cell(row=row, column=col, value=val)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _RIGHT if col > left_cols else _LEFT


def _write_title(ws: Any, title: str, subtitle: str) -> int:
    """Write report title and subtitle, return next available row."""
    ws.cell(row=1, column=1, value=title).font = Font(name="Calibri", bold=True, size=14)
    ws.cell(row=2, column=1, value=subtitle).font = Font(name="Calibri", size=10, italic=True)
    return 4


def _write_section(ws: Any, row: int, text: str, columns: int) -> None:
    ws.cell(row=row, column=1, value=text).font = _SECTION_FONT
    for col in range(1, columns + 1):
        ws.cell(row=row, column=col).fill = _SECTION_FILL


def _write_amount(ws: Any, row: int, column: int, value: str | None, total: bool = False) -> None:
    """Write a decimal string as a number; zero and None leave the cell blank."""
    if value is None or float(value) == 0:
        return
    c = ws.cell(row=row, column=column, value=float(value))
    c.number_format = _CURRENCY_FMT
    c.alignment = _RIGHT
    if total:
        c.font = _TOTAL_FONT
        c.border = _TOTAL_BORDER


def _write_cash_balance(ws: Any, row: int, label_col: int, label: str, closing: str) -> None:
    """Cash balance on the credit side when >= 0, else its magnitude on the debit side."""
    ws.cell(row=row, column=label_col, value=label).font = _TOTAL_FONT
    amount = float(closing)
    column = label_col + 1 if amount >= 0 else label_col + 2
    c = ws.cell(row=row, column=column, value=abs(amount))
    c.number_format = _CURRENCY_FMT
    c.alignment = _RIGHT
    c.font = _TOTAL_FONT


def _to_workbook(ws: Any, wb: Workbook) -> io.BytesIO:
    """Finalize workbook and return as BytesIO."""
    _auto_width(ws)
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


# ── 1. Daybook ─────────────────────────────────────────────────────────────


def export_daybook_excel(data: dict[str, Any]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Day Book"

    subtitle = (
        f"Date: {data['from_date']}"
        if data["from_date"] == data["to_date"]
        else f"Period: {data['from_date']} to {data['to_date']}"
    )
    row = _write_title(ws, "Day Book", subtitle)

    for day in data["days"]:
        _write_section(ws, row, f"Date: {day['date']}", 4)
        row += 1
        _write_header_row(ws, row, ["Date", "Particulars", "Credit", "Debit"], left_cols=2)
        row += 1
        for entry in day["entries"]:
            if entry["section"]:
                _write_section(ws, row, entry["section"], 4)
                row += 1
            ws.cell(row=row, column=1, value=entry["date"])
            ws.cell(row=row, column=2, value=entry["description"])
            _write_amount(ws, row, 3, entry["credit"])
            _write_amount(ws, row, 4, entry["debit"])
            row += 1
        ws.cell(row=row, column=2, value="Total").font = _TOTAL_FONT
        _write_amount(ws, row, 3, day["total_credit"], total=True)
        _write_amount(ws, row, 4, day["total_debit"], total=True)
        row += 1
        _write_cash_balance(ws, row, 2, "Closing Cash in Hand", day["closing_cash_in_hand"])
        row += 2

    if len(data["days"]) > 1:
        _write_section(ws, row, "Summary", 4)
        row += 1
        ws.cell(row=row, column=2, value="Overall Total").font = _TOTAL_FONT
        _write_amount(ws, row, 3, data["total_credit"], total=True)
        _write_amount(ws, row, 4, data["total_debit"], total=True)
        row += 1
        _write_cash_balance(ws, row, 2, "Final Cash in Hand", data["final_cash_in_hand"])

    return _to_workbook(ws, wb)


# ── 2. Party ledger ────────────────────────────────────────────────────────


def export_party_report_excel(data: dict[str, Any]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Party Ledger"

    period = f"{data['from_date'] or 'beginning'} to {data['to_date'] or 'today'}"
    row = _write_title(ws, f"Ledger: {data['party_name']}", f"Period: {period}")

    _write_header_row(ws, row, ["Date", "Voucher", "Particulars", "Credit", "Debit"], left_cols=3)
    row += 1
    for line in data["lines"]:
        ws.cell(row=row, column=1, value=line["date"])
        ws.cell(row=row, column=2, value=line["voucher"])
        ws.cell(row=row, column=3, value=line["description"])
        _write_amount(ws, row, 4, line["credit"])
        _write_amount(ws, row, 5, line["debit"])
        row += 1

    ws.cell(row=row, column=3, value="Total").font = _TOTAL_FONT
    _write_amount(ws, row, 4, data["total_credit"], total=True)
    _write_amount(ws, row, 5, data["total_debit"], total=True)
    row += 1
    ws.cell(row=row, column=3, value="Balance").font = _TOTAL_FONT
    c = ws.cell(row=row, column=4, value=float(data["balance"]))
    c.number_format = _CURRENCY_FMT
    c.font = _TOTAL_FONT
    c.alignment = _RIGHT

    return _to_workbook(ws, wb)
