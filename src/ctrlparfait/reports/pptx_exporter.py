"""
Slide deck (PPTX) export of a table.

The deck opens with a title slide (document title and generation time),
followed by table slides holding ``rows_per_slide`` rows each. Every table
slide repeats the header row and carries a "Page i of n" counter. A table
with no rows produces the title slide only.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime
from pathlib import Path

from pptx import Presentation
from pptx.enum.text import PP_ALIGN
from pptx.util import Emu, Inches, Pt

from ctrlparfait.reports.base import BaseExporter, ExportFormat, ExportSnapshot

logger = logging.getLogger(__name__)

BLANK_LAYOUT = 6
TABLE_FONT_SIZE = Pt(10)

# Relative widths of the fixed columns; attribute columns share the rest.
BASE_COLUMN_WEIGHTS = [0.8, 2.0, 0.8, 2.0, 1.0, 1.2, 1.2]
ATTRIBUTE_COLUMN_WEIGHT = 1.2


def paginate(rows: list[list[str]], per_page: int) -> list[list[list[str]]]:
    """Split display rows into pages of at most ``per_page`` rows."""
    if per_page < 1:
        raise ValueError("rows per slide must be at least 1")
    total = math.ceil(len(rows) / per_page)
    return [rows[i * per_page:(i + 1) * per_page] for i in range(total)]


def _column_widths(column_count: int, total_width: int) -> list[int]:
    weights = BASE_COLUMN_WEIGHTS[:column_count]
    weights += [ATTRIBUTE_COLUMN_WEIGHT] * (column_count - len(weights))
    scale = total_width / sum(weights)
    return [int(w * scale) for w in weights]


def _add_text(slide, left, top, width, height, text: str, size: int,
              bold: bool = False, align=PP_ALIGN.LEFT) -> None:
    box = slide.shapes.add_textbox(left, top, width, height)
    paragraph = box.text_frame.paragraphs[0]
    paragraph.text = text
    paragraph.alignment = align
    paragraph.font.size = Pt(size)
    paragraph.font.bold = bold


class PptxExporter(BaseExporter):
    """
    Exporter for PPTX slide decks.

    Example:
        exporter = PptxExporter(ReportConfig(rows_per_slide=8))
        result = exporter.export(snapshot, Path("./exports"))
    """

    export_format = ExportFormat.PPTX

    def write(self, snapshot: ExportSnapshot, path: Path) -> None:
        """Build the deck and save it."""
        headers, rows = snapshot.table()
        pages = paginate(rows, self.config.rows_per_slide)

        prs = Presentation()
        self._add_title_slide(prs)
        for number, page in enumerate(pages, start=1):
            self._add_table_slide(prs, snapshot.tab.title, headers, page, number, len(pages))

        logger.debug("Built %d table slides for %d rows", len(pages), len(rows))
        prs.save(path)

    def _add_title_slide(self, prs) -> None:
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
        generated = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
        _add_text(slide, Inches(1.0), Inches(1.5), Inches(8.0), Inches(1.0),
                  self.config.title, 24, bold=True, align=PP_ALIGN.CENTER)
        _add_text(slide, Inches(1.0), Inches(2.5), Inches(8.0), Inches(0.5),
                  f"Generated: {generated}", 14, align=PP_ALIGN.CENTER)

    def _add_table_slide(
        self,
        prs,
        title: str,
        headers: list[str],
        page: list[list[str]],
        number: int,
        total: int,
    ) -> None:
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
        _add_text(slide, Inches(0.5), Inches(0.3), Inches(6.0), Inches(0.5),
                  title, 18, bold=True)
        _add_text(slide, Inches(6.5), Inches(0.3), Inches(3.0), Inches(0.5),
                  f"Page {number} of {total}", 12, align=PP_ALIGN.RIGHT)

        width = Inches(9.0)
        table = slide.shapes.add_table(
            len(page) + 1, len(headers), Inches(0.5), Inches(1.0), width, Inches(0.4)
        ).table

        for col, w in enumerate(_column_widths(len(headers), width)):
            table.columns[col].width = Emu(w)

        for r, values in enumerate([headers] + page):
            for c, value in enumerate(values):
                cell = table.cell(r, c)
                cell.text = value
                for paragraph in cell.text_frame.paragraphs:
                    paragraph.font.size = TABLE_FONT_SIZE
                    paragraph.font.bold = r == 0
