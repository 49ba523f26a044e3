"""
Export dispatcher.

Maps a format tag to its exporter and runs it. Exporter modules are
imported on first use so that a missing optional encoder only affects its
own format.

Example:
    exporter = ReportExporter(ReportConfig(rows_per_slide=10))
    snapshot = ExportSnapshot.from_workbook(workbook, TabType.FRAMEWORK, taxonomy)

    result = exporter.export("xlsx", snapshot, Path("./exports"))
    if not result.success:
        print(result.error)

    # From async code
    result = await exporter.export_async("pdf", snapshot, Path("./exports"))
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from datetime import datetime
from pathlib import Path

from ctrlparfait.reports.base import (
    BaseExporter,
    ExportFormat,
    ExportResult,
    ExportSnapshot,
    ReportConfig,
)

logger = logging.getLogger(__name__)

# Format -> (module, class) of its exporter
EXPORTERS: dict[ExportFormat, tuple[str, str]] = {
    ExportFormat.JSON: ("ctrlparfait.reports.json_exporter", "JsonExporter"),
    ExportFormat.XLSX: ("ctrlparfait.reports.xlsx_exporter", "XlsxExporter"),
    ExportFormat.PDF: ("ctrlparfait.reports.pdf_generator", "PdfExporter"),
    ExportFormat.PPTX: ("ctrlparfait.reports.pptx_exporter", "PptxExporter"),
}


class ReportExporter:
    """
    Runs exports by format tag.

    Attributes:
        config: Configuration handed to every exporter.
    """

    def __init__(self, config: ReportConfig | None = None) -> None:
        self.config = config or ReportConfig()

    def get_exporter(self, export_format: ExportFormat) -> BaseExporter:
        """
        Instantiate the exporter for a format.

        Raises:
            ImportError: If the exporter's encoder library is not installed.
        """
        module_name, class_name = EXPORTERS[export_format]
        module = importlib.import_module(module_name)
        exporter_class = getattr(module, class_name)
        return exporter_class(self.config)

    def export(
        self,
        export_format: str | ExportFormat,
        snapshot: ExportSnapshot,
        output_dir: Path | str,
        now: datetime | None = None,
    ) -> ExportResult:
        """
        Export a snapshot in the given format.

        Unsupported formats and unavailable encoders produce a failed
        result; no file is written in either case.

        Args:
            export_format: Format tag ("json", "xlsx", "pdf" or "pptx").
            snapshot: Data to export.
            output_dir: Directory to write the file to.
            now: Timestamp for the file name. Defaults to the current time.

        Returns:
            ExportResult with export details.
        """
        fmt = ExportFormat.parse(export_format)
        if fmt is None:
            logger.error("Unsupported export format: %s", export_format)
            return ExportResult.failure(str(export_format), f"Unsupported export format: {export_format}")

        try:
            exporter = self.get_exporter(fmt)
        except ImportError as e:
            logger.error("Exporter for %s unavailable: %s", fmt.value, e)
            return ExportResult.failure(fmt.value, f"{fmt.value} export unavailable: {e}")

        return exporter.export(snapshot, output_dir, now=now)

    async def export_async(
        self,
        export_format: str | ExportFormat,
        snapshot: ExportSnapshot,
        output_dir: Path | str,
        now: datetime | None = None,
    ) -> ExportResult:
        """Run ``export`` in a worker thread."""
        return await asyncio.to_thread(self.export, export_format, snapshot, output_dir, now)
