"""
Tests for the sample data generator.

Uses Python's unittest module.
"""

from __future__ import annotations

import re
import unittest

from ctrlparfait.cis import (
    AssetLevel,
    HierarchyIndex,
    flatten_safeguards,
    generate_asset_options,
    get_default_taxonomy,
)
from ctrlparfait.demo import (
    EXAMPLE_METHODS,
    DemoGenerator,
    default_enforcement_point,
    generate_demo_workbook,
)
from ctrlparfait.table import make_attribute


class TestDefaultEnforcementPoint(unittest.TestCase):
    """Tests for default_enforcement_point."""

    def test_known_pair(self) -> None:
        """Test lookup by safeguard and subclass."""
        self.assertEqual(default_enforcement_point("1.1", "endpoints"), "MDM Solution")
        self.assertEqual(default_enforcement_point("5.1", "privileged"), "PAM Solution")

    def test_fallback(self) -> None:
        """Test unknown pairs fall back to a manual process."""
        self.assertEqual(default_enforcement_point("1.2", "wan"), "Manual Process")
        self.assertEqual(default_enforcement_point("9.9", "endpoints"), "Manual Process")


class TestDemoGenerator(unittest.TestCase):
    """Tests for DemoGenerator."""

    def setUp(self) -> None:
        """Create a generator over the shipped taxonomy."""
        self.taxonomy = get_default_taxonomy()
        self.generator = DemoGenerator(seed=7)

    def test_one_row_per_subclass_option(self) -> None:
        """Test a framework row for each safeguard and subclass-level option."""
        expected = [
            (s.id, o.asset_class_id, o.asset_subclass_id)
            for s in flatten_safeguards(self.taxonomy.control_groups)
            for o in generate_asset_options(s, self.taxonomy.asset_classes)
            if o.level is AssetLevel.ASSET_SUBCLASS
        ]
        rows = self.generator.generate_framework_rows()

        self.assertEqual(
            [(r.safeguard_id, r.asset_class_id, r.asset_subclass_id) for r in rows],
            expected,
        )
        for row in rows:
            self.assertRegex(row.id, r"^row-[0-9a-f]{12}$")
        self.assertEqual(len({r.id for r in rows}), len(rows))

    def test_rows_are_consistent(self) -> None:
        """Test generated rows resolve against the hierarchy."""
        index = HierarchyIndex.from_taxonomy(self.taxonomy)
        for row in self.generator.generate_framework_rows():
            safeguard = index.find_safeguard(row.safeguard_id)
            self.assertEqual(row.control_id, safeguard.control_id)
            self.assertIsNotNone(
                index.find_asset_subclass(row.asset_subclass_id, class_id=row.asset_class_id)
            )

    def test_cloud_subclass_under_right_class(self) -> None:
        """Test safeguards on applications get Applications > Cloud rows."""
        rows = [r for r in self.generator.generate_framework_rows() if r.safeguard_id == "2.2"]
        cloud = [r for r in rows if r.asset_subclass_id == "cloud"]

        self.assertEqual(len(cloud), 1)
        self.assertEqual(cloud[0].asset_class_id, "applications")
        self.assertEqual(cloud[0].enforcement_point, "CSPM")

    def test_framework_values_are_example_methods(self) -> None:
        """Test default attributes get example measurement methods."""
        for row in self.generator.generate_framework_rows():
            for attribute_id, value in row.attributes.items():
                self.assertIn(value, EXAMPLE_METHODS[attribute_id])

    def test_assessment_rows_mirror_framework(self) -> None:
        """Test assessment rows keep ids and relational fields."""
        framework = self.generator.generate_framework_rows()
        assessment = self.generator.generate_assessment_rows(framework)

        self.assertEqual(len(assessment), len(framework))
        for f, a in zip(framework, assessment):
            self.assertEqual(a.id, f.id)
            self.assertEqual(a.safeguard_id, f.safeguard_id)
            self.assertEqual(a.asset_subclass_id, f.asset_subclass_id)

    def test_assessment_values(self) -> None:
        """Test coverage is a percentage and the rest are levels."""
        framework = self.generator.generate_framework_rows()
        for row in self.generator.generate_assessment_rows(framework):
            self.assertRegex(row.attributes["coverage"], re.compile(r"^\d{1,2}%$"))
            for attribute_id in ("effectiveness", "efficiency", "friction"):
                self.assertIn(row.attributes[attribute_id], ("High", "Medium", "Low"))

    def test_seed_reproducible(self) -> None:
        """Test the same seed gives the same workbook."""
        a = DemoGenerator(seed=3).generate_workbook()
        b = DemoGenerator(seed=3).generate_workbook()
        self.assertEqual(a, b)

    def test_custom_attribute_left_empty(self) -> None:
        """Test attributes without example methods are empty in the framework table."""
        attributes = [make_attribute("Effectiveness"), make_attribute("Cost")]
        rows = DemoGenerator(attributes=attributes).generate_framework_rows()

        self.assertEqual(rows[0].attributes["cost"], "")
        self.assertIn(rows[0].attributes["effectiveness"], EXAMPLE_METHODS["effectiveness"])

    def test_generate_demo_workbook(self) -> None:
        """Test the convenience function."""
        workbook = generate_demo_workbook(seed=1)

        self.assertEqual(workbook.attributes.ids, ["effectiveness", "efficiency", "coverage", "friction"])
        self.assertGreater(len(workbook.framework_rows), 0)
        self.assertEqual(len(workbook.framework_rows), len(workbook.assessment_rows))


if __name__ == "__main__":
    unittest.main()
