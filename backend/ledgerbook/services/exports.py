"""Ledger statement exports (CSV and XLSX)."""
from __future__ import annotations

import csv
import io

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ledgerbook.core.config import settings
from ledgerbook.services.reports import Statement

STATEMENT_FIELDS = [
    "date", "type", "ref_type", "ref_id", "remarks", "debit", "credit", "balance_after",
]


def _rows(stmt: Statement) -> list[dict]:
    rows = []
    for e in stmt.entries:
        is_debit = e.entry_type.value == "DEBIT"
        rows.append({
            "date": e.date.strftime("%Y-%m-%d %H:%M"),
            "type": e.entry_type.value,
            "ref_type": e.ref_type.value,
            "ref_id": e.ref_id or "",
            "remarks": e.remarks or "",
            "debit": e.amount if is_debit else "",
            "credit": "" if is_debit else e.amount,
            "balance_after": e.balance_after,
        })
    return rows


def statement_csv(stmt: Statement) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=STATEMENT_FIELDS)
    writer.writeheader()
    for row in _rows(stmt):
        writer.writerow(row)
    return output.getvalue()


def statement_xlsx(stmt: Statement) -> io.BytesIO:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Statement"

    header_fill = PatternFill(start_color="1F3864", end_color="1F3864", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=10)
    row_font = Font(size=10)
    center = Alignment(horizontal="center", vertical="center")

    ws.cell(row=1, column=1, value=f"{settings.ORG_NAME} – {stmt.account_kind.value.title()} ledger").font = Font(bold=True, size=12)
    ws.cell(row=2, column=1, value=stmt.name).font = Font(bold=True, size=10)

    headers = ["Date", "Type", "Ref", "Ref ID", "Remarks", "Debit", "Credit", "Balance"]
    for col_idx, h in enumerate(headers, 1):
        cell = ws.cell(row=4, column=col_idx, value=h)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = center

    rows = _rows(stmt)
    for row_idx, r in enumerate(rows, 5):
        for col_idx, key in enumerate(STATEMENT_FIELDS, 1):
            ws.cell(row=row_idx, column=col_idx, value=r[key]).font = row_font

    total_row = len(rows) + 5
    ws.cell(row=total_row, column=5, value="Totals").font = Font(bold=True, size=10)
    ws.cell(row=total_row, column=6, value=stmt.total_debits).font = Font(bold=True, size=10)
    ws.cell(row=total_row, column=7, value=stmt.total_credits).font = Font(bold=True, size=10)
    ws.cell(row=total_row, column=8, value=stmt.balance).font = Font(bold=True, size=10)

    # Auto column widths
    for col_idx in range(1, len(headers) + 1):
        col_letter = get_column_letter(col_idx)
        max_len = max(
            len(str(ws.cell(row=r, column=col_idx).value or ""))
            for r in range(4, total_row + 1)
        )
        ws.column_dimensions[col_letter].width = min(max_len + 4, 45)

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf
