"""
Measurement attribute registry.

Attributes are the open-ended measurement dimensions recorded per row
(Effectiveness, Coverage, ...). The registry owns their order and keeps
ids unique; ``propagate_attribute`` back-fills a newly registered
attribute into an existing row collection.

Attribute ids are derived from names, so two names that normalise to the
same id collide. Collisions are rejected rather than overwritten.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
from typing import Any

from ctrlparfait.table.models import BASE_COLUMNS, Row

logger = logging.getLogger(__name__)


class DuplicateAttributeError(ValueError):
    """Raised when an attribute id is already registered."""

    def __init__(self, attribute_id: str) -> None:
        super().__init__(f"Attribute already exists: {attribute_id}")
        self.attribute_id = attribute_id


@dataclass(frozen=True)
class Attribute:
    """
    A measurement dimension.

    Attributes:
        id: Unique identifier derived from the name
        name: Display name (column header)
        description: What the attribute measures
        tooltip: Short hint shown next to the column header
    """

    id: str
    name: str
    description: str = ""
    tooltip: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tooltip": self.tooltip,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Attribute:
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            description=str(data.get("description", "")),
            tooltip=str(data.get("tooltip", "")),
        )


RESERVED_NAMES = frozenset(column.lower() for column in BASE_COLUMNS)


def attribute_id_from_name(name: str) -> str:
    """Lower-case a name and collapse whitespace runs to hyphens."""
    return re.sub(r"\s+", "-", name.strip().lower())


def make_attribute(name: str, description: str = "", tooltip: str = "") -> Attribute:
    """
    Create an attribute with an id derived from its name.

    The tooltip falls back to the description when not given. Names are
    column headers, so a name matching one of the fixed columns is refused.

    Raises:
        ValueError: If the name is blank or matches a fixed column.
    """
    name = name.strip()
    if not name:
        raise ValueError("Attribute name must not be empty")
    if name.lower() in RESERVED_NAMES:
        raise ValueError(f"Attribute name {name!r} is reserved for a fixed column")
    description = description.strip()
    return Attribute(
        id=attribute_id_from_name(name),
        name=name,
        description=description,
        tooltip=tooltip.strip() or description,
    )


DEFAULT_ATTRIBUTES: tuple[Attribute, ...] = (
    Attribute(
        id="effectiveness",
        name="Effectiveness",
        description="Measures if the control does what it's supposed to do",
        tooltip="Does the Enforcement Point do what it's supposed to?",
    ),
    Attribute(
        id="efficiency",
        name="Efficiency",
        description="Measures resource usage and cost",
        tooltip=(
            "Is resource usage acceptable (e.g. device resources, unit cost, "
            "time to complete)?"
        ),
    ),
    Attribute(
        id="coverage",
        name="Coverage",
        description="Measures the scope of implementation",
        tooltip="Percent in-scope assets covered",
    ),
    Attribute(
        id="friction",
        name="Friction",
        description="Measures user and business impact",
        tooltip=(
            "Does the Enforcement Point cause friction to end users or business "
            "operations?"
        ),
    ),
)


class AttributeRegistry:
    """
    Ordered, id-unique collection of attributes.

    The registry is treated as a value: ``add_attribute`` returns a new
    registry and leaves the original untouched.

    Example:
        registry = AttributeRegistry.default()
        registry = registry.add_attribute(make_attribute("Resilience"))
        rows = propagate_attribute(rows, "resilience")
    """

    def __init__(self, attributes: Iterable[Attribute] = ()) -> None:
        self._attributes: list[Attribute] = []
        self._index: dict[str, Attribute] = {}
        for attribute in attributes:
            if attribute.id in self._index:
                raise DuplicateAttributeError(attribute.id)
            self._attributes.append(attribute)
            self._index[attribute.id] = attribute

    @classmethod
    def default(cls) -> AttributeRegistry:
        """Registry holding the four default attributes."""
        return cls(DEFAULT_ATTRIBUTES)

    def add_attribute(self, attribute: Attribute) -> AttributeRegistry:
        """
        Return a new registry with ``attribute`` appended.

        Raises:
            DuplicateAttributeError: If the id is already registered.
        """
        if attribute.id in self._index:
            raise DuplicateAttributeError(attribute.id)
        logger.debug("Registering attribute %s", attribute.id)
        return AttributeRegistry([*self._attributes, attribute])

    def get(self, attribute_id: str) -> Attribute | None:
        """Get an attribute by id, or None."""
        return self._index.get(attribute_id)

    @property
    def ids(self) -> list[str]:
        """Attribute ids in registry order."""
        return [a.id for a in self._attributes]

    def to_list(self) -> list[Attribute]:
        """Attributes in registry order."""
        return list(self._attributes)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(list(self._attributes))

    def __len__(self) -> int:
        return len(self._attributes)

    def __contains__(self, attribute_id: object) -> bool:
        return attribute_id in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeRegistry):
            return NotImplemented
        return self._attributes == other._attributes

    def __repr__(self) -> str:
        return f"AttributeRegistry({self.ids!r})"


def propagate_attribute(rows: Sequence[Row], attribute_id: str) -> list[Row]:
    """
    Back-fill an attribute into every row of a collection.

    Rows lacking the attribute get an empty value; existing values are kept.
    Applying this twice gives the same result as applying it once.

    Args:
        rows: Row collection (framework or assessment).
        attribute_id: Attribute to back-fill.

    Returns:
        New list of rows. Input rows are not modified.
    """
    result = []
    for row in rows:
        if attribute_id in row.attributes:
            result.append(row)
        else:
            result.append(replace(row, attributes={**row.attributes, attribute_id: ""}))
    return result
