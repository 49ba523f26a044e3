"""
Framework and assessment tables.

Rows bind a safeguard, an asset selection, an enforcement point and one
value per measurement attribute. This module contains the row model, the
consistency engine every row change goes through, the attribute registry,
and the workbook that holds both tables.

Example:
    from ctrlparfait.cis import HierarchyIndex, get_default_taxonomy
    from ctrlparfait.table import RowConsistencyEngine, TabType, Workbook

    engine = RowConsistencyEngine(HierarchyIndex.from_taxonomy(get_default_taxonomy()))
    workbook = Workbook()

    rows = engine.add_row(workbook.rows(TabType.FRAMEWORK), workbook.attributes.ids)
    rows = engine.set_safeguard(rows, rows[-1].id, "1.1")
    workbook = workbook.with_rows(TabType.FRAMEWORK, rows)
"""

from ctrlparfait.table.attributes import (
    DEFAULT_ATTRIBUTES,
    Attribute,
    AttributeRegistry,
    DuplicateAttributeError,
    attribute_id_from_name,
    make_attribute,
    propagate_attribute,
)
from ctrlparfait.table.engine import (
    ATTRIBUTE_FIELD_PREFIX,
    RowConsistencyEngine,
    attribute_field,
    new_row_id,
)
from ctrlparfait.table.models import BASE_COLUMNS, TAB_TITLES, Row, TabType
from ctrlparfait.table.workbook import Workbook, WorkbookError

__all__ = [
    # Rows
    "Row",
    "TabType",
    "TAB_TITLES",
    "BASE_COLUMNS",
    # Engine
    "RowConsistencyEngine",
    "ATTRIBUTE_FIELD_PREFIX",
    "attribute_field",
    "new_row_id",
    # Attributes
    "Attribute",
    "AttributeRegistry",
    "DuplicateAttributeError",
    "DEFAULT_ATTRIBUTES",
    "attribute_id_from_name",
    "make_attribute",
    "propagate_attribute",
    # Workbook
    "Workbook",
    "WorkbookError",
]
