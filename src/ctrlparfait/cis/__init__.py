"""
CIS Critical Security Controls taxonomy, lookups, and asset options.

This module contains the control hierarchy the measurement tables are
built from, flattened lookup indices over it, and the per-safeguard asset
option generator.

Control Hierarchy:
    - Control groups (implementation groups IG1-IG3)
    - Controls (CIS 1-6)
    - Safeguards, each scoped to a set of asset classes and subclasses

Asset Taxonomy:
    - Asset classes (Devices, Networks, Data, Applications, Users)
    - Asset subclasses within each class

Hierarchy Index:
    The HierarchyIndex class flattens the nested taxonomy into id-keyed
    tables. Lookups return None for unknown ids.

Asset Options:
    generate_asset_options computes, for one safeguard, the class-level and
    class+subclass-level asset targets a user may pick. decode_asset_option
    turns a picked option key back into asset ids.
"""

from ctrlparfait.cis.asset_options import (
    AssetLevel,
    AssetOption,
    AssetOptionCache,
    AssetSelection,
    class_option_id,
    decode_asset_option,
    generate_all_asset_options,
    generate_asset_options,
    subclass_option_id,
)
from ctrlparfait.cis.cis_controls import (
    AssetClass,
    AssetSubclass,
    Control,
    ControlGroup,
    Safeguard,
    Taxonomy,
    export_taxonomy_json,
    get_default_taxonomy,
    get_statistics,
)
from ctrlparfait.cis.hierarchy import (
    HierarchyIndex,
    flatten_controls,
    flatten_safeguards,
    flatten_subclasses,
)
from ctrlparfait.cis.loader import TaxonomyError, load_taxonomy, parse_taxonomy

__all__ = [
    # Dataclasses
    "AssetClass",
    "AssetSubclass",
    "Control",
    "ControlGroup",
    "Safeguard",
    "Taxonomy",
    # Shipped data
    "get_default_taxonomy",
    "get_statistics",
    "export_taxonomy_json",
    # Loader
    "load_taxonomy",
    "parse_taxonomy",
    "TaxonomyError",
    # Hierarchy Index
    "HierarchyIndex",
    "flatten_controls",
    "flatten_safeguards",
    "flatten_subclasses",
    # Asset Options
    "AssetLevel",
    "AssetOption",
    "AssetOptionCache",
    "AssetSelection",
    "class_option_id",
    "subclass_option_id",
    "generate_asset_options",
    "generate_all_asset_options",
    "decode_asset_option",
]
