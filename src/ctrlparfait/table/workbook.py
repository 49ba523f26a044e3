"""
Workbook: the application state behind both tables.

A workbook bundles the attribute registry with the framework and
assessment row collections. The core operations never hold on to it; the
caller passes the relevant pieces in and stores what comes back.

Workbooks can be written to and read from a JSON file so that the
command-line interface can carry state between invocations:

    {
        "version": "1.0",
        "attributes": [...],
        "framework": [...rows...],
        "assessment": [...rows...]
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ctrlparfait.table.attributes import Attribute, AttributeRegistry, propagate_attribute
from ctrlparfait.table.models import Row, TabType

logger = logging.getLogger(__name__)

WORKBOOK_FORMAT_VERSION = "1.0"


class WorkbookError(Exception):
    """Raised when a workbook file cannot be read or written."""

    pass


def _check_unique_ids(tab: TabType, rows: Sequence[Row]) -> None:
    seen: set[str] = set()
    for row in rows:
        if row.id in seen:
            raise ValueError(f"Duplicate row id in {tab.value} table: {row.id}")
        seen.add(row.id)


@dataclass
class Workbook:
    """
    Attributes plus the two row collections.

    Attributes:
        attributes: Registered measurement attributes.
        framework_rows: Measurement method definitions.
        assessment_rows: Assessment outcomes.
    """

    attributes: AttributeRegistry = field(default_factory=AttributeRegistry.default)
    framework_rows: list[Row] = field(default_factory=list)
    assessment_rows: list[Row] = field(default_factory=list)

    def rows(self, tab: TabType) -> list[Row]:
        """Get the row collection for a tab."""
        if tab is TabType.FRAMEWORK:
            return list(self.framework_rows)
        return list(self.assessment_rows)

    def with_rows(self, tab: TabType, rows: Sequence[Row]) -> Workbook:
        """Return a copy with the row collection for ``tab`` replaced."""
        if tab is TabType.FRAMEWORK:
            return replace(self, framework_rows=list(rows))
        return replace(self, assessment_rows=list(rows))

    def add_attribute(self, attribute: Attribute) -> Workbook:
        """
        Register an attribute and back-fill it into both row collections.

        Raises:
            DuplicateAttributeError: If the attribute id already exists.
        """
        registry = self.attributes.add_attribute(attribute)
        logger.info("Added attribute %s (%s)", attribute.id, attribute.name)
        return Workbook(
            attributes=registry,
            framework_rows=propagate_attribute(self.framework_rows, attribute.id),
            assessment_rows=propagate_attribute(self.assessment_rows, attribute.id),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": WORKBOOK_FORMAT_VERSION,
            "saved_at": datetime.now(UTC).isoformat(),
            "attributes": [a.to_dict() for a in self.attributes],
            TabType.FRAMEWORK.value: [r.to_dict() for r in self.framework_rows],
            TabType.ASSESSMENT.value: [r.to_dict() for r in self.assessment_rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Workbook:
        """
        Create from dictionary.

        Rows missing an entry for a registered attribute are back-filled.

        Raises:
            ValueError: If a row id repeats within a table.
        """
        registry = AttributeRegistry(Attribute.from_dict(a) for a in data.get("attributes", []))
        framework_rows = [Row.from_dict(r) for r in data.get(TabType.FRAMEWORK.value, [])]
        assessment_rows = [Row.from_dict(r) for r in data.get(TabType.ASSESSMENT.value, [])]
        _check_unique_ids(TabType.FRAMEWORK, framework_rows)
        _check_unique_ids(TabType.ASSESSMENT, assessment_rows)
        for attribute_id in registry.ids:
            framework_rows = propagate_attribute(framework_rows, attribute_id)
            assessment_rows = propagate_attribute(assessment_rows, attribute_id)
        return cls(
            attributes=registry,
            framework_rows=framework_rows,
            assessment_rows=assessment_rows,
        )

    def save(self, path: Path | str) -> None:
        """
        Write the workbook to a JSON file.

        Raises:
            WorkbookError: If the file cannot be written.
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise WorkbookError(f"Cannot write workbook {path}: {e}") from e
        logger.debug("Saved workbook to %s", path)

    @classmethod
    def load(cls, path: Path | str) -> Workbook:
        """
        Read a workbook from a JSON file.

        Raises:
            WorkbookError: If the file is missing, unreadable or malformed.
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise WorkbookError(
                f"Workbook not found: {path}. Run 'ctrlparfait init' first."
            ) from e
        except json.JSONDecodeError as e:
            raise WorkbookError(f"Invalid JSON in workbook {path}: {e}") from e
        except OSError as e:
            raise WorkbookError(f"Cannot read workbook {path}: {e}") from e

        if not isinstance(data, dict):
            raise WorkbookError(f"Workbook {path} must contain a JSON object")

        try:
            return cls.from_dict(data)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise WorkbookError(f"Malformed workbook {path}: {e}") from e
