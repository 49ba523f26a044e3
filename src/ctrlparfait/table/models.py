"""
Row model shared by the framework and assessment tables.

Framework rows hold measurement-method definitions and assessment rows
hold measured outcomes. The two are field-identical, so a single Row type
is used and the table a collection belongs to is tracked by TabType.

The ``attributes`` mapping is open-ended: it is keyed by attribute id and
grows whenever a new attribute is registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TabType(Enum):
    """The two row collections a workbook holds."""

    FRAMEWORK = "framework"
    ASSESSMENT = "assessment"

    @property
    def title(self) -> str:
        """Human-readable table title."""
        return TAB_TITLES[self]


TAB_TITLES = {
    TabType.FRAMEWORK: "Measurement Methods",
    TabType.ASSESSMENT: "Assessment Outcomes",
}

# Fixed display columns of a resolved row; attribute columns follow them
BASE_COLUMNS = [
    "Control Number",
    "Control",
    "Safeguard Number",
    "Safeguard",
    "Asset Class",
    "Asset Subclass",
    "Enforcement Point",
]


@dataclass
class Row:
    """
    One framework or assessment record.

    Relational fields hold ids into the taxonomy, or "" when unset.
    Rows should only be changed through RowConsistencyEngine, which keeps
    the relational fields consistent with each other.

    Attributes:
        id: Unique identifier within its collection
        control_id: Control owning ``safeguard_id``
        safeguard_id: Selected safeguard
        asset_class_id: Selected asset class
        asset_subclass_id: Selected asset subclass (only with asset_class_id)
        enforcement_point: Tool or process enforcing the safeguard
        attributes: Attribute id to value (measurement method or outcome)
    """

    id: str
    control_id: str = ""
    safeguard_id: str = ""
    asset_class_id: str = ""
    asset_subclass_id: str = ""
    enforcement_point: str = ""
    attributes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the workbook wire format."""
        return {
            "id": self.id,
            "controlId": self.control_id,
            "safeguardId": self.safeguard_id,
            "assetClassId": self.asset_class_id,
            "assetSubclassId": self.asset_subclass_id,
            "enforcementPoint": self.enforcement_point,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Row:
        """Create from a dictionary in the workbook wire format."""
        return cls(
            id=str(data["id"]),
            control_id=str(data.get("controlId", "")),
            safeguard_id=str(data.get("safeguardId", "")),
            asset_class_id=str(data.get("assetClassId", "")),
            asset_subclass_id=str(data.get("assetSubclassId", "")),
            enforcement_point=str(data.get("enforcementPoint", "")),
            attributes={
                str(k): "" if v is None else str(v)
                for k, v in (data.get("attributes") or {}).items()
            },
        )
