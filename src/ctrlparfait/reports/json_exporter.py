"""
JSON export of a table.

Unlike the other formats, the JSON export is not denormalised: it carries
the raw rows together with the attributes and the full hierarchy, so the
file is self-contained and can be re-imported or processed by other tools.

Structure:
    {
        "exportedAt": "2024-01-15T12:00:00.000Z",
        "tabType": "framework",
        "version": "0.1.0",
        "attributes": [...],
        "controlGroups": [...],
        "assetClasses": [...],
        "rows": [...]
    }
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ctrlparfait.reports.base import BaseExporter, ExportFormat, ExportSnapshot

logger = logging.getLogger(__name__)


class JsonExporter(BaseExporter):
    """
    Exporter for JSON format table data.

    Example:
        exporter = JsonExporter(ReportConfig(version="0.1.0"))
        result = exporter.export(snapshot, Path("./exports"))
    """

    export_format = ExportFormat.JSON

    def build_document(self, snapshot: ExportSnapshot) -> dict[str, Any]:
        """Build the JSON document for a snapshot."""
        exported_at = datetime.now(UTC).isoformat(timespec="milliseconds")
        return {
            "exportedAt": exported_at.replace("+00:00", "Z"),
            "tabType": snapshot.tab.value,
            "version": self.config.version,
            "attributes": [a.to_dict() for a in snapshot.attributes],
            "controlGroups": [g.to_dict() for g in snapshot.taxonomy.control_groups],
            "assetClasses": [a.to_dict() for a in snapshot.taxonomy.asset_classes],
            "rows": [r.to_dict() for r in snapshot.rows],
        }

    def write(self, snapshot: ExportSnapshot, path: Path) -> None:
        """Write the snapshot as indented JSON."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.build_document(snapshot), f, indent=2)
