"""
Spreadsheet (XLSX) export of a table.

Writes the denormalised table to a single worksheet named after the
exported tab, with a styled, frozen header row and columns sized to their
content.
"""

from __future__ import annotations

import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ctrlparfait.reports.base import BaseExporter, ExportFormat, ExportSnapshot

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
MAX_COLUMN_WIDTH = 60

SHEET_TITLES = {
    "framework": "Framework",
    "assessment": "Assessment",
}


def _apply_header_style(ws, col_count: int) -> None:
    """Style the first row as a header."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _auto_width(ws) -> None:
    """Size each column to its longest value, within limits."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max(max_len + 2, 12), MAX_COLUMN_WIDTH)


class XlsxExporter(BaseExporter):
    """
    Exporter for XLSX spreadsheets.

    Example:
        result = XlsxExporter().export(snapshot, Path("./exports"))
    """

    export_format = ExportFormat.XLSX

    def write(self, snapshot: ExportSnapshot, path: Path) -> None:
        """Write the denormalised table to a workbook."""
        headers, rows = snapshot.table()

        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLES.get(snapshot.tab.value, snapshot.tab.value.title())

        ws.append(headers)
        for values in rows:
            ws.append(values)

        _apply_header_style(ws, len(headers))
        ws.freeze_panes = "A2"
        _auto_width(ws)

        wb.save(path)
