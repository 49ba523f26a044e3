"""
PDF export of a table.

The table is rendered as an HTML document (title, generation timestamp and
the denormalised table) and converted to PDF on landscape A3 pages.

Design Requirements:
    - Monochrome color scheme (black, white, grays)
    - Small table font so attribute columns fit across the page
    - Header row repeated on every page

Requires the weasyprint optional dependency. When it is not installed the
export fails with an explanatory error and no file is written;
``generate_html`` still works.
"""

from __future__ import annotations

import html
import logging
from datetime import UTC, datetime
from pathlib import Path

from ctrlparfait.reports.base import BaseExporter, ExportFormat, ExportSnapshot

logger = logging.getLogger(__name__)

# Check for weasyprint availability
try:
    from weasyprint import CSS, HTML
    WEASYPRINT_AVAILABLE = True
except ImportError:
    WEASYPRINT_AVAILABLE = False
    logger.debug("weasyprint not installed - PDF export unavailable")


REPORT_CSS = """
@page {
    size: A3 landscape;
    margin: 14mm;
    @top-right {
        content: counter(page);
        font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
        font-size: 9pt;
        color: #666666;
    }
}

body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
    font-size: 10pt;
    color: #000000;
    background: #ffffff;
}

h1 {
    font-size: 18pt;
    font-weight: 600;
    margin: 0 0 0.25em 0;
}

.generated {
    font-size: 10pt;
    color: #666666;
    margin-bottom: 1.5em;
}

table {
    width: 100%;
    border-collapse: collapse;
    font-size: 8pt;
}

thead {
    display: table-header-group;
}

th, td {
    border: 1px solid #cccccc;
    padding: 4px 6px;
    text-align: left;
    vertical-align: top;
    overflow-wrap: break-word;
}

th {
    background: #f0f0f0;
    font-weight: 600;
}

tr {
    page-break-inside: avoid;
}

.empty {
    color: #666666;
    font-style: italic;
}
"""


class PdfExporter(BaseExporter):
    """
    Exporter for PDF documents.

    Uses weasyprint for PDF rendering (optional dependency).

    Example:
        exporter = PdfExporter(ReportConfig(title="Control Measurements"))

        # Export a PDF file
        result = exporter.export(snapshot, Path("./exports"))

        # Generate HTML only (no weasyprint required)
        content = exporter.generate_html(snapshot)
    """

    export_format = ExportFormat.PDF

    def write(self, snapshot: ExportSnapshot, path: Path) -> None:
        """Render the snapshot to a PDF file."""
        if not WEASYPRINT_AVAILABLE:
            raise RuntimeError(
                "weasyprint is not installed - install with: pip install 'ctrlparfait[pdf]'"
            )

        html_doc = HTML(string=self.generate_html(snapshot))
        css = CSS(string=REPORT_CSS)
        html_doc.write_pdf(path, stylesheets=[css])

    def generate_html(self, snapshot: ExportSnapshot, generated_at: datetime | None = None) -> str:
        """
        Generate the HTML document for a snapshot.

        Args:
            snapshot: Data to render.
            generated_at: Timestamp shown under the title. Defaults to now.

        Returns:
            HTML content string.
        """
        generated_at = generated_at or datetime.now(UTC)
        headers, rows = snapshot.table()

        sections = [
            self._html_header(),
            f"<h1>{html.escape(self.config.title)}</h1>",
            f'<div class="generated">{html.escape(snapshot.tab.title)} &middot; '
            f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}</div>",
            self._generate_table(headers, rows),
            "</body></html>",
        ]
        return "\n".join(sections)

    def _html_header(self) -> str:
        """Generate HTML document header."""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{html.escape(self.config.title)}</title>
    <style>{REPORT_CSS}</style>
</head>
<body>"""

    def _generate_table(self, headers: list[str], rows: list[list[str]]) -> str:
        """Generate the table HTML."""
        head = "".join(f"<th>{html.escape(h)}</th>" for h in headers)

        if not rows:
            body = f'<tr><td class="empty" colspan="{len(headers)}">No rows</td></tr>'
        else:
            body = "\n".join(
                "<tr>" + "".join(f"<td>{html.escape(v)}</td>" for v in values) + "</tr>"
                for values in rows
            )

        return f"""<table>
<thead><tr>{head}</tr></thead>
<tbody>
{body}
</tbody>
</table>"""
