"""
Row consistency engine.

This module is the only place row collections are changed. Every
operation takes the current collection and returns a new list; input rows
are never modified in place. After any operation the following hold for
every row:

    - asset_subclass_id is set only together with an asset_class_id that
      owns it (it can only be set through an option key).
    - a non-empty safeguard_id is accompanied by the control_id of the
      control owning that safeguard.

The central cascade rule: choosing a safeguard (directly, or by choosing a
control) always clears the asset selection, because asset options are
safeguard-specific and the previous selection may not be valid any more.

Lookup misses (unknown row, unknown safeguard) are no-ops, not errors.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace

from ctrlparfait.cis.asset_options import decode_asset_option
from ctrlparfait.cis.hierarchy import HierarchyIndex
from ctrlparfait.table.models import Row

logger = logging.getLogger(__name__)

ATTRIBUTE_FIELD_PREFIX = "attribute."

# Top-level fields with no dependents, by accepted name
EDITABLE_FIELDS = {
    "enforcementPoint": "enforcement_point",
    "enforcement_point": "enforcement_point",
}

# Fields with dependents and the operation that maintains them
CASCADING_FIELDS = {
    "controlId": "set_control",
    "control_id": "set_control",
    "safeguardId": "set_safeguard",
    "safeguard_id": "set_safeguard",
    "assetClassId": "set_asset_option",
    "asset_class_id": "set_asset_option",
    "assetSubclassId": "set_asset_option",
    "asset_subclass_id": "set_asset_option",
}


def attribute_field(attribute_id: str) -> str:
    """Build the ``set_cell`` field name addressing an attribute."""
    return f"{ATTRIBUTE_FIELD_PREFIX}{attribute_id}"


def new_row_id(existing_ids: Iterable[str] = (), rng: random.Random | None = None) -> str:
    """
    Generate a row id not present in ``existing_ids``.

    Ids are ``row-<12 hex chars>``. Pass ``rng`` for reproducible ids.
    """
    taken = set(existing_ids)
    while True:
        if rng is None:
            row_id = f"row-{uuid.uuid4().hex[:12]}"
        else:
            row_id = f"row-{rng.getrandbits(48):012x}"
        if row_id not in taken:
            return row_id


def _update_row(
    rows: Sequence[Row],
    row_id: str,
    update: Callable[[Row], Row],
) -> list[Row]:
    """Replace the first row with ``row_id`` by ``update(row)``."""
    result = list(rows)
    for i, row in enumerate(result):
        if row.id == row_id:
            result[i] = update(row)
            return result
    logger.debug("Row %s not found, nothing changed", row_id)
    return result


class RowConsistencyEngine:
    """
    Mutation surface for framework and assessment row collections.

    The engine holds a HierarchyIndex for safeguard and control lookups and
    no other state; row collections are passed in and returned on every
    call.

    Example:
        engine = RowConsistencyEngine(HierarchyIndex.from_taxonomy(taxonomy))

        rows = engine.add_row([], registry.ids)
        row_id = rows[-1].id
        rows = engine.set_control(rows, row_id, "cis1")
        rows = engine.set_asset_option(rows, row_id, "subclass-devices-endpoints")
        rows = engine.set_cell(rows, row_id, "enforcementPoint", "MDM Solution")

    Attributes:
        index: Hierarchy lookups.
    """

    def __init__(self, index: HierarchyIndex) -> None:
        self.index = index

    def set_cell(
        self,
        rows: Sequence[Row],
        row_id: str,
        field: str,
        value: str,
    ) -> list[Row]:
        """
        Set a field that has no dependents.

        ``field`` is either ``attribute.<attributeId>`` or a top-level field
        without dependents (``enforcementPoint``). Relational fields must go
        through the specialised operations.

        Args:
            rows: Row collection.
            row_id: Row to update.
            field: Field name.
            value: New value.

        Returns:
            New row list; unchanged if ``row_id`` is not found.

        Raises:
            ValueError: If ``field`` is relational, unknown, or an empty
                        attribute reference.
        """
        if field.startswith(ATTRIBUTE_FIELD_PREFIX):
            attribute_id = field[len(ATTRIBUTE_FIELD_PREFIX):]
            if not attribute_id:
                raise ValueError(f"Missing attribute id in field: {field!r}")
            return _update_row(
                rows,
                row_id,
                lambda row: replace(row, attributes={**row.attributes, attribute_id: value}),
            )

        if field in CASCADING_FIELDS:
            raise ValueError(
                f"Field {field!r} has dependent fields; use {CASCADING_FIELDS[field]}() instead"
            )

        attr_name = EDITABLE_FIELDS.get(field)
        if attr_name is None:
            raise ValueError(f"Unknown row field: {field!r}")

        return _update_row(rows, row_id, lambda row: replace(row, **{attr_name: value}))

    def set_safeguard(
        self,
        rows: Sequence[Row],
        row_id: str,
        safeguard_id: str,
    ) -> list[Row]:
        """
        Select a safeguard for a row.

        Sets the safeguard, derives the control from it, and clears the
        asset selection.

        Args:
            rows: Row collection.
            row_id: Row to update.
            safeguard_id: Safeguard to select.

        Returns:
            New row list; unchanged if the row or safeguard is not found.
        """
        safeguard = self.index.find_safeguard(safeguard_id)
        if safeguard is None:
            logger.debug("Unknown safeguard %s, row %s unchanged", safeguard_id, row_id)
            return list(rows)

        return _update_row(
            rows,
            row_id,
            lambda row: replace(
                row,
                safeguard_id=safeguard.id,
                control_id=safeguard.control_id,
                asset_class_id="",
                asset_subclass_id="",
            ),
        )

    def set_control(
        self,
        rows: Sequence[Row],
        row_id: str,
        control_id: str,
    ) -> list[Row]:
        """
        Select a control for a row.

        Selecting a control selects its first safeguard, with the same
        cascade as ``set_safeguard``. A control without safeguards sets the
        control and clears the safeguard and asset selection.

        Args:
            rows: Row collection.
            row_id: Row to update.
            control_id: Control to select.

        Returns:
            New row list; unchanged if the row or control is not found.
        """
        control = self.index.find_control(control_id)
        if control is None:
            logger.debug("Unknown control %s, row %s unchanged", control_id, row_id)
            return list(rows)

        if control.safeguards:
            return self.set_safeguard(rows, row_id, control.safeguards[0].id)

        logger.warning(
            "Control %s has no safeguards; clearing safeguard and asset selection on row %s",
            control_id,
            row_id,
        )
        return _update_row(
            rows,
            row_id,
            lambda row: replace(
                row,
                control_id=control.id,
                safeguard_id="",
                asset_class_id="",
                asset_subclass_id="",
            ),
        )

    def set_asset_option(
        self,
        rows: Sequence[Row],
        row_id: str,
        option_id: str,
    ) -> list[Row]:
        """
        Apply an asset option key to a row.

        Both asset fields are set together from the decoded key; an empty or
        unrecognised key clears them.

        Args:
            rows: Row collection.
            row_id: Row to update.
            option_id: Composite key (``class-<c>`` or ``subclass-<c>-<s>``).

        Returns:
            New row list; unchanged if the row is not found.
        """
        selection = decode_asset_option(option_id)
        return _update_row(
            rows,
            row_id,
            lambda row: replace(
                row,
                asset_class_id=selection.asset_class_id,
                asset_subclass_id=selection.asset_subclass_id,
            ),
        )

    def add_row(
        self,
        rows: Sequence[Row],
        attribute_ids: Iterable[str],
    ) -> list[Row]:
        """
        Append an empty row.

        Args:
            rows: Row collection.
            attribute_ids: Currently registered attribute ids; each gets an
                           empty value on the new row.

        Returns:
            New row list with the new row last.
        """
        row = Row(
            id=new_row_id(r.id for r in rows),
            attributes={attribute_id: "" for attribute_id in attribute_ids},
        )
        logger.debug("Added row %s", row.id)
        return [*rows, row]

    def delete_row(self, rows: Sequence[Row], row_id: str) -> list[Row]:
        """
        Remove a row.

        Returns:
            New row list without ``row_id``; unchanged if not found.
        """
        return [row for row in rows if row.id != row_id]
