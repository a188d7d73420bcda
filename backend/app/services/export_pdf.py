"""PDF export functions for the daybook, party ledgers and invoices using fpdf2."""
from __future__ import annotations

import io
from typing import Any

from fpdf import FPDF

from backend.app.core.config import settings


# ── Shared helpers ──────────────────────────────────────────────────────────

_COL_BG = (31, 78, 121)   # dark blue header
_SEC_BG = (214, 228, 240)  # light blue section
_TOTAL_BG = (242, 242, 242)
_LINE_H = 7
_FONT = "Helvetica"


def _new_pdf(title: str, subtitle: str) -> FPDF:
    """Create a landscape PDF with title and subtitle."""
    pdf = FPDF(orientation="L")
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_font(_FONT, "B", 16)
    pdf.cell(0, 10, _safe_text(title), ln=True)
    pdf.set_font(_FONT, "", 9)
    pdf.cell(0, 6, _safe_text(subtitle), ln=True)
    pdf.ln(4)
    return pdf


def _new_pdf_portrait(title: str, subtitle: str) -> FPDF:
    """Create a portrait PDF with title and subtitle."""
    pdf = FPDF()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_font(_FONT, "B", 16)
    pdf.cell(0, 10, _safe_text(title), ln=True)
    pdf.set_font(_FONT, "", 9)
    pdf.cell(0, 6, _safe_text(subtitle), ln=True)
    pdf.ln(4)
    return pdf


def _header_row(pdf: FPDF, headers: list[str], widths: list[int]) -> None:
    """Draw a colored header row."""
    pdf.set_fill_color(*_COL_BG)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(_FONT, "B", 9)
    for i, (h, w) in enumerate(zip(headers, widths)):
        align = "R" if i > 0 else "L"
        pdf.cell(w, _LINE_H, h, border=1, fill=True, align=align)
    pdf.ln()
    pdf.set_text_color(0, 0, 0)


def _data_row(
    pdf: FPDF,
    values: list[str],
    widths: list[int],
    bold: bool = False,
    fill: bool = False,
    left_cols: int = 1,
) -> None:
    """Draw a data row; the first *left_cols* columns are left aligned."""
    pdf.set_font(_FONT, "B" if bold else "", 8)
    if fill:
        pdf.set_fill_color(*_TOTAL_BG)
    for i, (v, w) in enumerate(zip(values, widths)):
        align = "R" if i >= left_cols else "L"
        pdf.cell(w, _LINE_H, _safe_text(v), border="B", align=align, fill=fill)
    pdf.ln()


def _section_header(pdf: FPDF, text: str, total_width: int) -> None:
    """Draw a section header with light background."""
    pdf.set_fill_color(*_SEC_BG)
    pdf.set_font(_FONT, "B", 9)
    pdf.cell(total_width, _LINE_H, _safe_text(text), fill=True, ln=True)


def _fmt(value: str | None) -> str:
    """Format a decimal string for display; zero renders as blank."""
    if value is None:
        return ""
    try:
        n = float(value)
    except (ValueError, TypeError):
        return str(value)
    if n == 0:
        return ""
    return f"{n:,.2f}"


def _money(value: str) -> str:
    try:
        n = float(value)
    except (ValueError, TypeError):
        return str(value)
    return f"{settings.CURRENCY_SYMBOL} {n:,.2f}"


def _safe_text(text: str) -> str:
    """Replace non-latin-1 characters for PDF built-in fonts."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _to_bytes(pdf: FPDF) -> io.BytesIO:
    """Output PDF to BytesIO."""
    buf = io.BytesIO()
    pdf.output(buf)
    buf.seek(0)
    return buf


def _closing_cells(closing: str) -> tuple[str, str]:
    """(credit, debit) cells for a cash balance: credit side when >= 0."""
    n = float(closing)
    if n >= 0:
        return _fmt(closing) or "0.00", ""
    return "", f"{abs(n):,.2f}"


# ── 1. Daybook ─────────────────────────────────────────────────────────────


def export_daybook_pdf(data: dict[str, Any]) -> io.BytesIO:
    """Render ``daybook_to_dict`` output, one block per day."""
    subtitle = (
        f"Date: {data['from_date']}"
        if data["from_date"] == data["to_date"]
        else f"Period: {data['from_date']} to {data['to_date']}"
    )
    pdf = _new_pdf_portrait("Day Book", subtitle)
    widths = [25, 105, 30, 30]
    total_w = sum(widths)

    for day in data["days"]:
        _section_header(pdf, f"Date: {day['date']}", total_w)
        _header_row(pdf, ["Date", "Particulars", "Credit", "Debit"], widths)
        for entry in day["entries"]:
            if entry["section"]:
                _section_header(pdf, entry["section"], total_w)
            _data_row(
                pdf,
                [entry["date"], entry["description"], _fmt(entry["credit"]), _fmt(entry["debit"])],
                widths,
                left_cols=2,
            )
        _data_row(
            pdf,
            ["", "Total", _fmt(day["total_credit"]), _fmt(day["total_debit"])],
            widths, bold=True, fill=True, left_cols=2,
        )
        credit, debit = _closing_cells(day["closing_cash_in_hand"])
        _data_row(
            pdf, ["", "Closing Cash in Hand", credit, debit],
            widths, bold=True, left_cols=2,
        )
        pdf.ln(4)

    if len(data["days"]) > 1:
        _section_header(pdf, "Summary", total_w)
        _data_row(
            pdf,
            ["", "Overall Total", _fmt(data["total_credit"]), _fmt(data["total_debit"])],
            widths, bold=True, fill=True, left_cols=2,
        )
        credit, debit = _closing_cells(data["final_cash_in_hand"])
        _data_row(
            pdf, ["", "Final Cash in Hand", credit, debit],
            widths, bold=True, left_cols=2,
        )

    return _to_bytes(pdf)


# ── 2. Party ledger ────────────────────────────────────────────────────────


def export_party_report_pdf(data: dict[str, Any]) -> io.BytesIO:
    """Render a purchase-party or sales-party ledger."""
    title = (
        "Purchase Party Ledger"
        if data["grade"] == "purchase_party"
        else "Sales Party Ledger"
    )
    period = (
        f"{data['from_date'] or 'beginning'} to {data['to_date'] or 'today'}"
    )
    pdf = _new_pdf(f"{title}: {data['party_name']}", f"Period: {period}")
    widths = [25, 35, 125, 45, 45]
    total_w = sum(widths)

    _header_row(pdf, ["Date", "Voucher", "Particulars", "Credit", "Debit"], widths)
    for line in data["lines"]:
        _data_row(
            pdf,
            [
                line["date"],
                line["voucher"] or "",
                line["description"],
                _fmt(line["credit"]),
                _fmt(line["debit"]),
            ],
            widths,
            left_cols=3,
        )
        for item in line["items"]:
            _data_row(
                pdf,
                [
                    "",
                    "",
                    f"    {item['product_name']}: {item['weight_kg']} kg x {item['price_per_kg']}",
                    _fmt(item["amount"]),
                    "",
                ],
                widths,
                left_cols=3,
            )
    _data_row(
        pdf,
        ["", "", "Total", _fmt(data["total_credit"]), _fmt(data["total_debit"])],
        widths, bold=True, fill=True, left_cols=3,
    )
    pdf.ln(3)
    pdf.set_font(_FONT, "B", 11)
    pdf.cell(total_w, 8, _safe_text(f"Balance: {_money(data['balance'])}"), align="R", ln=True)

    return _to_bytes(pdf)


# ── 3. Invoices ────────────────────────────────────────────────────────────


def _invoice(title: str, counterparty_label: str, data: dict[str, Any]) -> io.BytesIO:
    pdf = _new_pdf_portrait(title, f"Voucher: {data['purchase_voucher_number']}")
    pdf.set_font(_FONT, "", 10)
    pdf.cell(0, 6, _safe_text(f"{counterparty_label}: {data['party_name'] or ''}"), ln=True)
    pdf.cell(0, 6, f"Date: {data['created_at'][:10]}", ln=True)
    if data.get("vehicle_number"):
        pdf.cell(0, 6, _safe_text(f"Vehicle: {data['vehicle_number']}"), ln=True)
    pdf.ln(4)

    widths = [60, 25, 30, 20, 25, 30]
    _header_row(pdf, ["Product", "Weight (kg)", "Rate/kg", "GST %", "GST", "Amount"], widths)
    for item in data["items"]:
        _data_row(
            pdf,
            [
                item["product_name"] or "",
                item["weight_kg"],
                item["price_per_kg"],
                item["gst_percent"] if data["is_built"] and item["gst_percent"] else "",
                _fmt(item["gst_amount"]),
                _fmt(item["total"]),
            ],
            widths,
        )
    pdf.ln(3)
    pdf.set_font(_FONT, "B", 12)
    pdf.cell(sum(widths), 10, _safe_text(f"Total: {_money(data['total'])}"), align="R", ln=True)
    return _to_bytes(pdf)


def export_purchase_invoice_pdf(data: dict[str, Any]) -> io.BytesIO:
    return _invoice("Purchase Invoice", "Supplier", data)


def export_supply_invoice_pdf(data: dict[str, Any]) -> io.BytesIO:
    return _invoice("Supply Invoice", "Customer", data)
