"""
Taxonomy file loading.

A taxonomy file is YAML (or JSON, which YAML parses as well) with two
top-level lists that mirror the dataclasses in ``cis_controls``:

    control_groups:
      - id: ig1
        name: "IG1: Basic"
        controls:
          - id: cis1
            number: "1"
            name: Inventory and Control of Enterprise Assets
            safeguards:
              - id: "1.1"
                number: "1.1"
                name: Establish and Maintain Detailed Enterprise Asset Inventory
                applicable_asset_classes: [devices, networks]
                applicable_asset_subclasses: [endpoints, lan]
    asset_classes:
      - id: devices
        name: Devices
        subclasses:
          - {id: endpoints, name: Endpoints}

Back-references (``control_id`` on safeguards, ``classId`` on subclasses)
may be omitted and are filled from the owning entry. When present they
must match it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ctrlparfait.cis.asset_options import KEY_SEPARATOR
from ctrlparfait.cis.cis_controls import AssetClass, ControlGroup, Taxonomy

logger = logging.getLogger(__name__)


class TaxonomyError(Exception):
    """Raised when a taxonomy file cannot be read or is inconsistent."""

    pass


def load_taxonomy(path: Path | str) -> Taxonomy:
    """
    Load a taxonomy from a YAML or JSON file.

    Args:
        path: Path to the taxonomy file.

    Returns:
        Validated Taxonomy.

    Raises:
        TaxonomyError: If the file cannot be read, cannot be parsed, or
                       describes an inconsistent hierarchy.
    """
    path = Path(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise TaxonomyError(f"Invalid taxonomy file {path}: {e}") from e
    except OSError as e:
        raise TaxonomyError(f"Cannot read taxonomy file {path}: {e}") from e

    taxonomy = parse_taxonomy(data)
    logger.info(
        "Loaded taxonomy from %s (%d control groups, %d asset classes)",
        path,
        len(taxonomy.control_groups),
        len(taxonomy.asset_classes),
    )
    return taxonomy


def parse_taxonomy(data: Any) -> Taxonomy:
    """
    Build a Taxonomy from already-parsed data.

    Raises:
        TaxonomyError: If the data is not a valid taxonomy.
    """
    if not isinstance(data, dict):
        raise TaxonomyError("Taxonomy must be a mapping with control_groups and asset_classes")

    for key in ("control_groups", "asset_classes"):
        if not isinstance(data.get(key), list):
            raise TaxonomyError(f"Taxonomy is missing a '{key}' list")

    try:
        control_groups = [ControlGroup.from_dict(g) for g in data["control_groups"]]
        asset_classes = [AssetClass.from_dict(a) for a in data["asset_classes"]]
    except (KeyError, TypeError, AttributeError) as e:
        raise TaxonomyError(f"Malformed taxonomy entry: {e}") from e

    taxonomy = Taxonomy(control_groups=control_groups, asset_classes=asset_classes)
    _validate_taxonomy(taxonomy)
    return taxonomy


def _validate_taxonomy(taxonomy: Taxonomy) -> None:
    """
    Check back-references and asset class ids.

    Raises:
        TaxonomyError: On the first problem found.
    """
    for group in taxonomy.control_groups:
        for control in group.controls:
            for safeguard in control.safeguards:
                if safeguard.control_id != control.id:
                    raise TaxonomyError(
                        f"Safeguard {safeguard.id} declares control_id "
                        f"{safeguard.control_id!r} but belongs to control {control.id!r}"
                    )

    seen: set[str] = set()
    for asset_class in taxonomy.asset_classes:
        # Option keys are split on the separator, so class ids cannot contain it
        if KEY_SEPARATOR in asset_class.id:
            raise TaxonomyError(
                f"Asset class id {asset_class.id!r} must not contain {KEY_SEPARATOR!r}"
            )
        if asset_class.id in seen:
            raise TaxonomyError(f"Duplicate asset class id: {asset_class.id!r}")
        seen.add(asset_class.id)

        for subclass in asset_class.subclasses:
            if subclass.class_id != asset_class.id:
                raise TaxonomyError(
                    f"Asset subclass {subclass.id} declares classId "
                    f"{subclass.class_id!r} but belongs to {asset_class.id!r}"
                )
