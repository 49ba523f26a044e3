"""
Tests for the workbook state struct and its JSON file format.

Uses Python's unittest module with tempfile for file output tests.
"""

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from ctrlparfait.table import (
    DuplicateAttributeError,
    Row,
    TabType,
    Workbook,
    WorkbookError,
    make_attribute,
)


class TestTabType(unittest.TestCase):
    """Tests for TabType."""

    def test_titles(self) -> None:
        """Test tab titles."""
        self.assertEqual(TabType.FRAMEWORK.title, "Measurement Methods")
        self.assertEqual(TabType.ASSESSMENT.title, "Assessment Outcomes")

    def test_values(self) -> None:
        """Test tab tags."""
        self.assertEqual(TabType("framework"), TabType.FRAMEWORK)
        self.assertEqual(TabType("assessment"), TabType.ASSESSMENT)


class TestRow(unittest.TestCase):
    """Tests for the Row wire format."""

    def test_to_dict_uses_camel_case(self) -> None:
        """Test row keys match the workbook file format."""
        row = Row(id="r", control_id="cis1", safeguard_id="1.1",
                  asset_class_id="devices", enforcement_point="MDM",
                  attributes={"coverage": "80%"})

        self.assertEqual(
            row.to_dict(),
            {
                "id": "r",
                "controlId": "cis1",
                "safeguardId": "1.1",
                "assetClassId": "devices",
                "assetSubclassId": "",
                "enforcementPoint": "MDM",
                "attributes": {"coverage": "80%"},
            },
        )

    def test_from_dict_defaults(self) -> None:
        """Test missing keys default to empty values."""
        row = Row.from_dict({"id": "r", "attributes": {"coverage": None}})

        self.assertEqual(row.safeguard_id, "")
        self.assertEqual(row.attributes, {"coverage": ""})


class TestWorkbook(unittest.TestCase):
    """Tests for Workbook."""

    def setUp(self) -> None:
        """Create a workbook with one row in each table."""
        self.workbook = Workbook(
            framework_rows=[Row(id="f1", attributes={"effectiveness": "Pen test"})],
            assessment_rows=[Row(id="a1", attributes={"effectiveness": "High", "coverage": "50%"})],
        )

    def test_default_attributes(self) -> None:
        """Test a new workbook starts with the default attributes."""
        self.assertEqual(len(Workbook().attributes), 4)
        self.assertEqual(Workbook().framework_rows, [])

    def test_rows_by_tab(self) -> None:
        """Test row collections are addressed by tab."""
        self.assertEqual([r.id for r in self.workbook.rows(TabType.FRAMEWORK)], ["f1"])
        self.assertEqual([r.id for r in self.workbook.rows(TabType.ASSESSMENT)], ["a1"])

    def test_with_rows(self) -> None:
        """Test replacing one collection leaves the other alone."""
        updated = self.workbook.with_rows(TabType.ASSESSMENT, [])

        self.assertEqual(updated.assessment_rows, [])
        self.assertEqual(updated.framework_rows, self.workbook.framework_rows)
        self.assertEqual(len(self.workbook.assessment_rows), 1)

    def test_add_attribute_propagates_to_both_tables(self) -> None:
        """Test a new attribute is back-filled into every row of both tables."""
        updated = self.workbook.add_attribute(make_attribute("Cost"))

        self.assertIn("cost", updated.attributes)
        self.assertEqual(updated.framework_rows[0].attributes["cost"], "")
        self.assertEqual(updated.assessment_rows[0].attributes["cost"], "")
        self.assertEqual(updated.framework_rows[0].attributes["effectiveness"], "Pen test")

    def test_add_duplicate_attribute(self) -> None:
        """Test adding a duplicate attribute raises and changes nothing."""
        with self.assertRaises(DuplicateAttributeError):
            self.workbook.add_attribute(make_attribute("Friction"))
        self.assertEqual(len(self.workbook.attributes), 4)

    def test_from_dict_backfills_attributes(self) -> None:
        """Test loading fills attribute entries missing from stored rows."""
        workbook = Workbook.from_dict(self.workbook.to_dict())

        self.assertEqual(
            workbook.framework_rows[0].attributes,
            {"effectiveness": "Pen test", "efficiency": "", "coverage": "", "friction": ""},
        )

    def test_from_dict_duplicate_row_ids(self) -> None:
        """Test a repeated row id within a table is rejected."""
        data = self.workbook.to_dict()
        data["framework"] = [{"id": "r"}, {"id": "r"}]

        with self.assertRaises(ValueError) as ctx:
            Workbook.from_dict(data)
        self.assertIn("framework", str(ctx.exception))

    def test_from_dict_same_id_across_tables(self) -> None:
        """Test the two tables may share row ids."""
        data = self.workbook.to_dict()
        data["assessment"] = [{"id": "f1"}]

        workbook = Workbook.from_dict(data)
        self.assertEqual(workbook.assessment_rows[0].id, "f1")

    def test_to_dict_keys(self) -> None:
        """Test the workbook document layout."""
        data = self.workbook.to_dict()

        self.assertEqual(data["version"], "1.0")
        self.assertIn("saved_at", data)
        self.assertEqual(len(data["attributes"]), 4)
        self.assertEqual(data["framework"][0]["id"], "f1")
        self.assertEqual(data["assessment"][0]["id"], "a1")


class TestWorkbookFile(unittest.TestCase):
    """Tests for Workbook.save and Workbook.load."""

    def setUp(self) -> None:
        """Create temporary directory for tests."""
        self.temp_dir = tempfile.mkdtemp()
        self.path = Path(self.temp_dir) / "nested" / "workbook.json"

    def tearDown(self) -> None:
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_save_and_load(self) -> None:
        """Test a saved workbook loads back equal."""
        workbook = Workbook().add_attribute(make_attribute("Cost", "Unit cost"))
        workbook = workbook.with_rows(
            TabType.FRAMEWORK,
            [Row(id="r1", control_id="cis1", safeguard_id="1.1",
                 attributes={a: "" for a in workbook.attributes.ids})],
        )
        workbook.save(self.path)

        self.assertEqual(Workbook.load(self.path), workbook)

    def test_load_missing(self) -> None:
        """Test loading a missing file points at init."""
        with self.assertRaises(WorkbookError) as ctx:
            Workbook.load(self.path)
        self.assertIn("ctrlparfait init", str(ctx.exception))

    def test_load_invalid_json(self) -> None:
        """Test loading malformed JSON raises WorkbookError."""
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json")

        with self.assertRaises(WorkbookError) as ctx:
            Workbook.load(self.path)
        self.assertIn("Invalid JSON", str(ctx.exception))

    def test_load_not_an_object(self) -> None:
        """Test a JSON list is rejected."""
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[]")

        with self.assertRaises(WorkbookError):
            Workbook.load(self.path)

    def test_load_duplicate_attributes(self) -> None:
        """Test a file with colliding attribute ids is rejected."""
        self.path.parent.mkdir(parents=True)
        attribute = make_attribute("Cost").to_dict()
        self.path.write_text(json.dumps({"attributes": [attribute, attribute]}))

        with self.assertRaises(WorkbookError):
            Workbook.load(self.path)

    def test_load_duplicate_row_ids(self) -> None:
        """Test a file with repeated row ids is rejected."""
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({"attributes": [], "assessment": [{"id": "r"}, {"id": "r"}]}))

        with self.assertRaises(WorkbookError) as ctx:
            Workbook.load(self.path)
        self.assertIn("Duplicate row id", str(ctx.exception))

    def test_load_row_without_id(self) -> None:
        """Test a row without an id is rejected."""
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({"attributes": [], "framework": [{"controlId": "cis1"}]}))

        with self.assertRaises(WorkbookError) as ctx:
            Workbook.load(self.path)
        self.assertIn("Malformed workbook", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
