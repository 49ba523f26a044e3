"""
Tests for the CIS taxonomy data and the hierarchy index.

Uses Python's unittest module.
"""

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from ctrlparfait.cis import (
    AssetClass,
    AssetSubclass,
    Control,
    ControlGroup,
    HierarchyIndex,
    Safeguard,
    export_taxonomy_json,
    flatten_controls,
    flatten_safeguards,
    flatten_subclasses,
    get_default_taxonomy,
    get_statistics,
)


class TestDefaultTaxonomy(unittest.TestCase):
    """Tests for the shipped CIS taxonomy."""

    def setUp(self) -> None:
        """Load the shipped taxonomy."""
        self.taxonomy = get_default_taxonomy()

    def test_control_groups(self) -> None:
        """Test the three implementation groups in order."""
        ids = [g.id for g in self.taxonomy.control_groups]
        self.assertEqual(ids, ["ig1", "ig2", "ig3"])

    def test_controls_in_order(self) -> None:
        """Test controls CIS 1-6 in canonical order."""
        controls = flatten_controls(self.taxonomy.control_groups)
        self.assertEqual([c.id for c in controls], ["cis1", "cis2", "cis3", "cis4", "cis5", "cis6"])

    def test_each_control_has_two_safeguards(self) -> None:
        """Test every shipped control has two safeguards."""
        for control in flatten_controls(self.taxonomy.control_groups):
            self.assertEqual(len(control.safeguards), 2, control.id)

    def test_safeguard_back_references(self) -> None:
        """Test every safeguard points back at its owning control."""
        for control in flatten_controls(self.taxonomy.control_groups):
            for safeguard in control.safeguards:
                self.assertEqual(safeguard.control_id, control.id)

    def test_asset_classes(self) -> None:
        """Test the shipped asset classes."""
        ids = [a.id for a in self.taxonomy.asset_classes]
        self.assertEqual(ids, ["devices", "networks", "data", "applications", "users"])

    def test_subclass_back_references(self) -> None:
        """Test every subclass points back at its owning class."""
        for asset_class in self.taxonomy.asset_classes:
            for subclass in asset_class.subclasses:
                self.assertEqual(subclass.class_id, asset_class.id)

    def test_applicable_subclasses_belong_to_applicable_classes(self) -> None:
        """Test shipped safeguards only reference subclasses of their classes."""
        classes = {a.id: {s.id for s in a.subclasses} for a in self.taxonomy.asset_classes}
        for safeguard in flatten_safeguards(self.taxonomy.control_groups):
            allowed = set()
            for class_id in safeguard.applicable_asset_classes:
                allowed |= classes[class_id]
            for subclass_id in safeguard.applicable_asset_subclasses:
                self.assertIn(subclass_id, allowed, safeguard.id)

    def test_fresh_copy_each_call(self) -> None:
        """Test callers do not share taxonomy objects."""
        other = get_default_taxonomy()
        other.control_groups[0].name = "Changed"
        self.assertEqual(self.taxonomy.control_groups[0].name, "IG1: Basic")

    def test_statistics(self) -> None:
        """Test taxonomy counts."""
        stats = get_statistics(self.taxonomy)
        self.assertEqual(stats["control_groups"], 3)
        self.assertEqual(stats["controls"], 6)
        self.assertEqual(stats["safeguards"], 12)
        self.assertEqual(stats["asset_classes"], 5)
        self.assertEqual(stats["asset_subclasses"], 17)

    def test_round_trip_through_dict(self) -> None:
        """Test dataclasses survive to_dict/from_dict."""
        group = self.taxonomy.control_groups[0]
        self.assertEqual(ControlGroup.from_dict(group.to_dict()), group)

        asset_class = self.taxonomy.asset_classes[3]
        self.assertEqual(AssetClass.from_dict(asset_class.to_dict()), asset_class)

    def test_subclass_wire_key(self) -> None:
        """Test subclass back-reference serializes as classId."""
        subclass = self.taxonomy.asset_classes[0].subclasses[0]
        self.assertEqual(subclass.to_dict()["classId"], "devices")


class TestExportTaxonomyJson(unittest.TestCase):
    """Tests for export_taxonomy_json."""

    def setUp(self) -> None:
        """Create temporary directory for tests."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self) -> None:
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_export_writes_hierarchy(self) -> None:
        """Test the exported file holds groups, classes and statistics."""
        path = Path(self.temp_dir) / "taxonomy.json"
        export_taxonomy_json(path)

        data = json.loads(path.read_text())
        self.assertEqual(len(data["control_groups"]), 3)
        self.assertEqual(len(data["asset_classes"]), 5)
        self.assertEqual(data["statistics"]["safeguards"], 12)


class TestFlatten(unittest.TestCase):
    """Tests for the flattening helpers."""

    def test_flatten_safeguards_order(self) -> None:
        """Test safeguards come out in group, control, safeguard order."""
        safeguards = flatten_safeguards(get_default_taxonomy().control_groups)
        self.assertEqual(
            [s.id for s in safeguards],
            ["1.1", "1.2", "2.1", "2.2", "3.1", "3.2",
             "4.1", "4.2", "5.1", "5.2", "6.1", "6.2"],
        )

    def test_flatten_subclasses_keeps_duplicates(self) -> None:
        """Test repeated subclass ids across classes are all kept."""
        subclasses = flatten_subclasses(get_default_taxonomy().asset_classes)
        cloud = [s for s in subclasses if s.id == "cloud"]
        self.assertEqual([s.class_id for s in cloud], ["data", "applications"])

    def test_flatten_empty(self) -> None:
        """Test flattening empty input."""
        self.assertEqual(flatten_safeguards([]), [])
        self.assertEqual(flatten_subclasses([]), [])
        self.assertEqual(flatten_controls([]), [])


class TestHierarchyIndex(unittest.TestCase):
    """Tests for HierarchyIndex lookups."""

    def setUp(self) -> None:
        """Build an index over the shipped taxonomy."""
        self.index = HierarchyIndex.from_taxonomy(get_default_taxonomy())

    def test_find_control(self) -> None:
        """Test control lookup."""
        control = self.index.find_control("cis3")
        self.assertIsNotNone(control)
        self.assertEqual(control.name, "Data Protection")

    def test_find_safeguard(self) -> None:
        """Test safeguard lookup."""
        safeguard = self.index.find_safeguard("5.2")
        self.assertIsNotNone(safeguard)
        self.assertEqual(safeguard.control_id, "cis5")
        self.assertEqual(safeguard.name, "Use Unique Passwords")

    def test_find_asset_class(self) -> None:
        """Test asset class lookup."""
        asset_class = self.index.find_asset_class("networks")
        self.assertIsNotNone(asset_class)
        self.assertEqual(asset_class.name, "Networks")

    def test_unknown_ids_return_none(self) -> None:
        """Test lookups for unknown or empty ids."""
        self.assertIsNone(self.index.find_control("cis99"))
        self.assertIsNone(self.index.find_safeguard(""))
        self.assertIsNone(self.index.find_asset_class("printers"))
        self.assertIsNone(self.index.find_asset_subclass("printers"))

    def test_find_asset_subclass_first_match(self) -> None:
        """Test unscoped subclass lookup returns the first match in taxonomy order."""
        subclass = self.index.find_asset_subclass("cloud")
        self.assertEqual(subclass.name, "Cloud Data")

    def test_find_asset_subclass_scoped(self) -> None:
        """Test scoped subclass lookup disambiguates repeated ids."""
        subclass = self.index.find_asset_subclass("cloud", class_id="applications")
        self.assertEqual(subclass.name, "Cloud Applications")
        self.assertIsNone(self.index.find_asset_subclass("cloud", class_id="devices"))

    def test_control_for_safeguard(self) -> None:
        """Test resolving a safeguard's owning control."""
        self.assertEqual(self.index.control_for_safeguard("4.2").id, "cis4")
        self.assertIsNone(self.index.control_for_safeguard("9.9"))

    def test_duplicate_ids_first_match_wins(self) -> None:
        """Test lookups return the first occurrence of a repeated id."""
        first = Control(id="c1", number="1", name="First", safeguards=[
            Safeguard(id="s1", control_id="c1", number="1.1", name="First safeguard"),
        ])
        second = Control(id="c1", number="2", name="Second", safeguards=[
            Safeguard(id="s1", control_id="c1", number="2.1", name="Second safeguard"),
        ])
        index = HierarchyIndex(
            [ControlGroup(id="g", name="G", controls=[first, second])],
            [AssetClass(id="a", name="A", subclasses=[AssetSubclass(id="x", name="X", class_id="a")])],
        )

        self.assertEqual(index.find_control("c1").name, "First")
        self.assertEqual(index.find_safeguard("s1").name, "First safeguard")

    def test_rebuild_is_deterministic(self) -> None:
        """Test rebuilding from the same inputs gives the same lookups."""
        taxonomy = get_default_taxonomy()
        a = HierarchyIndex.from_taxonomy(taxonomy)
        b = HierarchyIndex.from_taxonomy(taxonomy)

        self.assertEqual([s.id for s in a.safeguards], [s.id for s in b.safeguards])
        self.assertEqual(a.find_safeguard("2.1"), b.find_safeguard("2.1"))


if __name__ == "__main__":
    unittest.main()
