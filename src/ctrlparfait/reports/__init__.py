"""
Export of the framework and assessment tables.

Rows are resolved against the hierarchy into a denormalised table (names
instead of ids, one column per attribute) and written as a new file.

Supported Formats:
    - JSON: Raw rows with attributes and the full hierarchy.
    - XLSX: Single worksheet with a styled header row. Requires openpyxl.
    - PDF: Landscape A3 table document. Requires weasyprint.
    - PPTX: Title slide plus paginated table slides. Requires python-pptx.

The XLSX and PPTX exporters are not imported here; ReportExporter loads
each exporter on first use.

Example:
    from ctrlparfait.reports import ExportSnapshot, ReportConfig, ReportExporter

    snapshot = ExportSnapshot.from_workbook(workbook, TabType.ASSESSMENT, taxonomy)
    result = ReportExporter(ReportConfig()).export("pptx", snapshot, "./exports")
"""

from ctrlparfait.reports.base import (
    BaseExporter,
    ExportFormat,
    ExportResult,
    ExportSnapshot,
    ReportConfig,
)
from ctrlparfait.reports.exporter import EXPORTERS, ReportExporter
from ctrlparfait.reports.json_exporter import JsonExporter
from ctrlparfait.reports.pdf_generator import WEASYPRINT_AVAILABLE, PdfExporter
from ctrlparfait.reports.tabular import (
    BASE_COLUMNS,
    build_table,
    build_tabular_records,
    export_filename,
    format_timestamp,
    table_headers,
)

__all__ = [
    # Shared types
    "BaseExporter",
    "ExportFormat",
    "ExportResult",
    "ExportSnapshot",
    "ReportConfig",
    # Dispatcher
    "EXPORTERS",
    "ReportExporter",
    # Exporters
    "JsonExporter",
    "PdfExporter",
    "WEASYPRINT_AVAILABLE",
    # Tabular view
    "BASE_COLUMNS",
    "build_table",
    "build_tabular_records",
    "export_filename",
    "format_timestamp",
    "table_headers",
]
