"""
Flattened lookup indices over the control and asset hierarchies.

Rows reference controls, safeguards and assets by id, and those ids may be
stale (a workbook saved against a different taxonomy, a typo in a
hand-edited file). Every lookup therefore returns None on a miss instead
of raising, and callers degrade gracefully.

Lookups are first-match: when an id appears twice, the entry that comes
first in canonical taxonomy order wins.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ctrlparfait.cis.cis_controls import (
    AssetClass,
    AssetSubclass,
    Control,
    ControlGroup,
    Safeguard,
    Taxonomy,
)

logger = logging.getLogger(__name__)


def flatten_controls(control_groups: Sequence[ControlGroup]) -> list[Control]:
    """Concatenate every control across every group, in source order."""
    return [control for group in control_groups for control in group.controls]


def flatten_safeguards(control_groups: Sequence[ControlGroup]) -> list[Safeguard]:
    """
    Concatenate every safeguard across every control across every group.

    Source order is preserved and duplicates are kept.

    Args:
        control_groups: Control groups in canonical order.

    Returns:
        List of safeguards.
    """
    return [
        safeguard
        for control in flatten_controls(control_groups)
        for safeguard in control.safeguards
    ]


def flatten_subclasses(asset_classes: Sequence[AssetClass]) -> list[AssetSubclass]:
    """
    Concatenate every subclass across every asset class, in source order.

    Args:
        asset_classes: Asset classes in canonical order.

    Returns:
        List of asset subclasses.
    """
    return [subclass for asset_class in asset_classes for subclass in asset_class.subclasses]


def _first_match_index(items: Sequence, key=lambda item: item.id) -> dict:
    index: dict = {}
    for item in items:
        index.setdefault(key(item), item)
    return index


class HierarchyIndex:
    """
    Id-keyed lookup tables for a taxonomy.

    The index is built once from the control groups and asset classes it
    is given. Since the taxonomy is immutable for the lifetime of the
    process, rebuilding from the same inputs always yields the same index.

    Example:
        index = HierarchyIndex.from_taxonomy(get_default_taxonomy())

        safeguard = index.find_safeguard("1.1")
        control = index.find_control(safeguard.control_id)

    Attributes:
        control_groups: Source control groups.
        asset_classes: Source asset classes.
        controls: Flattened controls.
        safeguards: Flattened safeguards.
        subclasses: Flattened asset subclasses.
    """

    def __init__(
        self,
        control_groups: Sequence[ControlGroup],
        asset_classes: Sequence[AssetClass],
    ) -> None:
        self.control_groups = list(control_groups)
        self.asset_classes = list(asset_classes)

        self.controls = flatten_controls(self.control_groups)
        self.safeguards = flatten_safeguards(self.control_groups)
        self.subclasses = flatten_subclasses(self.asset_classes)

        self._control_index: dict[str, Control] = _first_match_index(self.controls)
        self._safeguard_index: dict[str, Safeguard] = _first_match_index(self.safeguards)
        self._asset_class_index: dict[str, AssetClass] = _first_match_index(self.asset_classes)
        self._subclass_index: dict[str, AssetSubclass] = _first_match_index(self.subclasses)
        self._scoped_subclass_index: dict[tuple[str, str], AssetSubclass] = _first_match_index(
            self.subclasses, key=lambda s: (s.class_id, s.id)
        )

        logger.debug(
            "Indexed %d controls, %d safeguards, %d asset classes, %d subclasses",
            len(self.controls),
            len(self.safeguards),
            len(self.asset_classes),
            len(self.subclasses),
        )

    @classmethod
    def from_taxonomy(cls, taxonomy: Taxonomy) -> HierarchyIndex:
        """Build an index from a Taxonomy."""
        return cls(taxonomy.control_groups, taxonomy.asset_classes)

    def find_control(self, control_id: str) -> Control | None:
        """
        Get a control by ID.

        Args:
            control_id: Control identifier (e.g., "cis1")

        Returns:
            Control if found, None otherwise.
        """
        return self._control_index.get(control_id)

    def find_safeguard(self, safeguard_id: str) -> Safeguard | None:
        """
        Get a safeguard by ID.

        Args:
            safeguard_id: Safeguard identifier (e.g., "1.1")

        Returns:
            Safeguard if found, None otherwise.
        """
        return self._safeguard_index.get(safeguard_id)

    def find_asset_class(self, asset_class_id: str) -> AssetClass | None:
        """
        Get an asset class by ID.

        Args:
            asset_class_id: Asset class identifier (e.g., "devices")

        Returns:
            AssetClass if found, None otherwise.
        """
        return self._asset_class_index.get(asset_class_id)

    def find_asset_subclass(
        self,
        subclass_id: str,
        class_id: str | None = None,
    ) -> AssetSubclass | None:
        """
        Get an asset subclass by ID.

        Subclass ids are only unique within their class ("cloud" exists under
        both Data and Applications). Pass ``class_id`` to resolve within one
        class; without it the first match in taxonomy order is returned.

        Args:
            subclass_id: Asset subclass identifier (e.g., "endpoints")
            class_id: Optional owning asset class identifier.

        Returns:
            AssetSubclass if found, None otherwise.
        """
        if class_id is not None:
            return self._scoped_subclass_index.get((class_id, subclass_id))
        return self._subclass_index.get(subclass_id)

    def control_for_safeguard(self, safeguard_id: str) -> Control | None:
        """Get the control that owns a safeguard, or None."""
        safeguard = self.find_safeguard(safeguard_id)
        if safeguard is None:
            return None
        return self.find_control(safeguard.control_id)
