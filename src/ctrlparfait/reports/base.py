"""
Base classes and shared types for table exports.

This module provides the abstract base class for the format-specific
exporters together with the types they share: the closed set of export
formats, the read-only snapshot an export works from, and the result an
export reports back.

Exporters never raise for encoder problems. Failures are logged and
returned as an ExportResult with ``success=False``, and any partially
written file is removed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Any

from ctrlparfait.cis import HierarchyIndex, Taxonomy
from ctrlparfait.config.settings import REPORT_TITLE
from ctrlparfait.reports.tabular import build_table, export_filename
from ctrlparfait.table import Attribute, Row, TabType, Workbook

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    """Supported export formats."""

    JSON = "json"
    XLSX = "xlsx"
    PDF = "pdf"
    PPTX = "pptx"

    @property
    def extension(self) -> str:
        """File extension without the dot."""
        return self.value

    @classmethod
    def parse(cls, value: str | ExportFormat) -> ExportFormat | None:
        """Get the format for a tag, or None if the tag is not supported."""
        if isinstance(value, ExportFormat):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass
class ReportConfig:
    """
    Configuration shared by all exporters.

    Attributes:
        title: Document title for PDF and PPTX exports.
        rows_per_slide: Table rows per PPTX slide.
        version: Application version recorded in JSON exports.
    """

    title: str = REPORT_TITLE
    rows_per_slide: int = 10
    version: str = "0.1.0"


@dataclass
class ExportSnapshot:
    """
    Read-only data an export works from.

    Attributes:
        tab: Which table is exported.
        rows: The table's rows.
        attributes: Registered attributes, in column order.
        taxonomy: Hierarchy the row ids are resolved against.
    """

    tab: TabType
    rows: list[Row]
    attributes: list[Attribute]
    taxonomy: Taxonomy

    @classmethod
    def from_workbook(
        cls,
        workbook: Workbook,
        tab: TabType,
        taxonomy: Taxonomy,
    ) -> ExportSnapshot:
        """Take a snapshot of one table of a workbook."""
        return cls(
            tab=tab,
            rows=workbook.rows(tab),
            attributes=workbook.attributes.to_list(),
            taxonomy=taxonomy,
        )

    @cached_property
    def index(self) -> HierarchyIndex:
        """Hierarchy index over the snapshot's taxonomy."""
        return HierarchyIndex.from_taxonomy(self.taxonomy)

    def table(self) -> tuple[list[str], list[list[str]]]:
        """Denormalised headers and rows."""
        return build_table(self.rows, self.attributes, self.index)


@dataclass
class ExportResult:
    """
    Result of an export operation.

    Attributes:
        success: Whether the export completed successfully.
        path: Path to the exported file.
        size_bytes: Size of the exported file in bytes.
        record_count: Number of rows exported.
        export_format: Format tag requested.
        error: Error message if export failed.
    """

    success: bool
    path: Path | None
    size_bytes: int
    record_count: int
    export_format: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "path": str(self.path) if self.path else None,
            "size_bytes": self.size_bytes,
            "record_count": self.record_count,
            "export_format": self.export_format,
            "error": self.error,
        }

    @classmethod
    def failure(cls, export_format: str, error: str) -> ExportResult:
        """Build a failed result."""
        return cls(
            success=False,
            path=None,
            size_bytes=0,
            record_count=0,
            export_format=export_format,
            error=error,
        )


class BaseExporter(ABC):
    """
    Abstract base class for format-specific exporters.

    Subclasses set ``export_format`` and implement ``write``. The base
    class takes care of the output directory, the file name, error
    handling and the result.

    Example:
        class XlsxExporter(BaseExporter):
            export_format = ExportFormat.XLSX

            def write(self, snapshot, path):
                headers, rows = snapshot.table()
                ...
    """

    export_format: ExportFormat

    def __init__(self, config: ReportConfig | None = None) -> None:
        self.config = config or ReportConfig()

    @abstractmethod
    def write(self, snapshot: ExportSnapshot, path: Path) -> None:
        """
        Encode the snapshot and write it to ``path``.

        Raises:
            Exception: Any encoder error; ``export`` turns it into a failure.
        """
        pass

    def export(
        self,
        snapshot: ExportSnapshot,
        output_dir: Path | str,
        now: datetime | None = None,
    ) -> ExportResult:
        """
        Export a snapshot to a new file in ``output_dir``.

        Args:
            snapshot: Data to export.
            output_dir: Directory to write the file to.
            now: Timestamp for the file name. Defaults to the current time.

        Returns:
            ExportResult with export details.
        """
        fmt = self.export_format.value
        path: Path | None = None
        try:
            output_dir = Path(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)

            path = output_dir / export_filename(
                snapshot.tab, self.export_format.extension, now or datetime.now(UTC)
            )
            self.write(snapshot, path)

            size_bytes = path.stat().st_size
            logger.info(
                "Exported %d %s rows to %s (%d bytes)",
                len(snapshot.rows),
                snapshot.tab.value,
                path,
                size_bytes,
            )
            return ExportResult(
                success=True,
                path=path,
                size_bytes=size_bytes,
                record_count=len(snapshot.rows),
                export_format=fmt,
            )

        except Exception as e:
            logger.error("Failed to export %s as %s: %s", snapshot.tab.value, fmt, e)
            if path is not None:
                path.unlink(missing_ok=True)
            return ExportResult.failure(fmt, str(e))

