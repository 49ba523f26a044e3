"""
Asset option generation for safeguard-specific asset pickers.

For a given safeguard, the selectable asset targets are:

    1. One class-level option per applicable asset class, in the order the
       safeguard lists them.
    2. One class+subclass option per (applicable class, applicable subclass)
       pair where the class actually contains the subclass, in canonical
       taxonomy order.

Class-level options always precede subclass-level options.

Each option carries a composite key that is also the value a picker sends
back when the user selects it:

    class-<classId>
    subclass-<classId>-<subclassId>

``decode_asset_option`` turns that key back into the pair of ids stored on
a row. Anything it does not recognise decodes to an empty selection.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ctrlparfait.cis.cis_controls import AssetClass, Safeguard

logger = logging.getLogger(__name__)

CLASS_PREFIX = "class"
SUBCLASS_PREFIX = "subclass"
KEY_SEPARATOR = "-"


class AssetLevel(Enum):
    """Granularity of an asset option."""

    ASSET_CLASS = "assetClass"
    ASSET_SUBCLASS = "assetSubclass"


@dataclass(frozen=True)
class AssetSelection:
    """
    The asset fields of a row, as decoded from an option key.

    Attributes:
        asset_class_id: Selected asset class, or "".
        asset_subclass_id: Selected asset subclass, or "".
    """

    asset_class_id: str = ""
    asset_subclass_id: str = ""

    @property
    def is_empty(self) -> bool:
        """True when nothing is selected."""
        return not self.asset_class_id and not self.asset_subclass_id


EMPTY_SELECTION = AssetSelection()


@dataclass(frozen=True)
class AssetOption:
    """
    One selectable entry in a safeguard's asset picker.

    Attributes:
        id: Composite key (``class-<c>`` or ``subclass-<c>-<s>``).
        display_name: Label shown to the user.
        level: Class-level or subclass-level.
        asset_class_id: Referenced asset class.
        asset_subclass_id: Referenced asset subclass, None for class-level.
    """

    id: str
    display_name: str
    level: AssetLevel
    asset_class_id: str
    asset_subclass_id: str | None = None

    @property
    def selection(self) -> AssetSelection:
        """The row asset fields this option stands for."""
        return AssetSelection(self.asset_class_id, self.asset_subclass_id or "")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "id": self.id,
            "displayName": self.display_name,
            "level": self.level.value,
            "assetClassId": self.asset_class_id,
        }
        if self.asset_subclass_id is not None:
            data["assetSubclassId"] = self.asset_subclass_id
        return data


def class_option_id(asset_class_id: str) -> str:
    """Build the composite key for a class-level option."""
    return f"{CLASS_PREFIX}{KEY_SEPARATOR}{asset_class_id}"


def subclass_option_id(asset_class_id: str, asset_subclass_id: str) -> str:
    """Build the composite key for a class+subclass option."""
    return KEY_SEPARATOR.join((SUBCLASS_PREFIX, asset_class_id, asset_subclass_id))


def generate_asset_options(
    safeguard: Safeguard,
    asset_classes: Sequence[AssetClass],
) -> list[AssetOption]:
    """
    Compute the ordered asset options for a safeguard.

    Unknown class or subclass ids referenced by the safeguard are skipped,
    as are subclass ids that do not belong to any applicable class.

    Args:
        safeguard: Safeguard to compute options for.
        asset_classes: Asset classes in canonical taxonomy order.

    Returns:
        Class-level options followed by subclass-level options.
    """
    classes_by_id: dict[str, AssetClass] = {}
    for asset_class in asset_classes:
        classes_by_id.setdefault(asset_class.id, asset_class)

    class_options = []
    for class_id in safeguard.applicable_asset_classes:
        asset_class = classes_by_id.get(class_id)
        if asset_class is None:
            logger.debug(
                "Safeguard %s references unknown asset class %s", safeguard.id, class_id
            )
            continue
        class_options.append(
            AssetOption(
                id=class_option_id(class_id),
                display_name=asset_class.name,
                level=AssetLevel.ASSET_CLASS,
                asset_class_id=class_id,
            )
        )

    applicable_classes = set(safeguard.applicable_asset_classes)
    applicable_subclasses = set(safeguard.applicable_asset_subclasses)

    subclass_options = []
    for asset_class in asset_classes:
        if asset_class.id not in applicable_classes:
            continue
        for subclass in asset_class.subclasses:
            if subclass.id not in applicable_subclasses:
                continue
            subclass_options.append(
                AssetOption(
                    id=subclass_option_id(asset_class.id, subclass.id),
                    display_name=f"{asset_class.name} > {subclass.name}",
                    level=AssetLevel.ASSET_SUBCLASS,
                    asset_class_id=asset_class.id,
                    asset_subclass_id=subclass.id,
                )
            )

    return class_options + subclass_options


def generate_all_asset_options(
    safeguards: Sequence[Safeguard],
    asset_classes: Sequence[AssetClass],
) -> dict[str, list[AssetOption]]:
    """
    Compute asset options for every safeguard, keyed by safeguard id.

    When a safeguard id repeats, the first occurrence wins, matching the
    hierarchy index's lookup rule.
    """
    options: dict[str, list[AssetOption]] = {}
    for safeguard in safeguards:
        if safeguard.id not in options:
            options[safeguard.id] = generate_asset_options(safeguard, asset_classes)
    return options


def decode_asset_option(option_id: str) -> AssetSelection:
    """
    Decode a composite option key into row asset fields.

    Examples:
        "class-devices"               -> ("devices", "")
        "subclass-devices-endpoints"  -> ("devices", "endpoints")
        "" / "garbage" / "class-"     -> ("", "")
        "class-devices-endpoints"     -> ("", "")

    Args:
        option_id: Composite key produced by ``generate_asset_options``.

    Returns:
        AssetSelection. Empty or malformed keys decode to an empty selection.
    """
    if not option_id:
        return EMPTY_SELECTION

    parts = option_id.split(KEY_SEPARATOR, 2)
    level = parts[0]

    if level == CLASS_PREFIX:
        class_id = option_id[len(CLASS_PREFIX) + len(KEY_SEPARATOR):]
        # Class ids never contain the separator
        if class_id and KEY_SEPARATOR not in class_id:
            return AssetSelection(asset_class_id=class_id)
    elif level == SUBCLASS_PREFIX and len(parts) == 3:
        _, class_id, subclass_id = parts
        if class_id and subclass_id:
            return AssetSelection(asset_class_id=class_id, asset_subclass_id=subclass_id)

    logger.debug("Unrecognised asset option key: %r", option_id)
    return EMPTY_SELECTION


def _fingerprint(data: Any) -> str:
    payload = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class AssetOptionCache:
    """
    Memoized asset options keyed by (safeguard fingerprint, asset classes fingerprint).

    Generation is a pure function of its inputs, so the cache never needs
    invalidating: a changed safeguard or asset class set simply produces a
    different key.

    Example:
        cache = AssetOptionCache(taxonomy.asset_classes)
        options = cache.options_for(index.find_safeguard("1.1"))
    """

    def __init__(self, asset_classes: Sequence[AssetClass]) -> None:
        self.asset_classes = list(asset_classes)
        self._asset_classes_key = _fingerprint([a.to_dict() for a in self.asset_classes])
        self._entries: dict[tuple[str, str], list[AssetOption]] = {}

    def options_for(self, safeguard: Safeguard) -> list[AssetOption]:
        """Get the asset options for a safeguard, generating them on first use."""
        key = (_fingerprint(safeguard.to_dict()), self._asset_classes_key)
        options = self._entries.get(key)
        if options is None:
            options = generate_asset_options(safeguard, self.asset_classes)
            self._entries[key] = options
        return list(options)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop all cached entries."""
        self._entries.clear()
