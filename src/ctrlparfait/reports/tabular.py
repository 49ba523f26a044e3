"""
Denormalised table view of a row collection.

Exports show names rather than ids. Each row is resolved against the
hierarchy into the fixed columns below, followed by one column per
attribute (headed by the attribute name):

    Control Number | Control | Safeguard Number | Safeguard |
    Asset Class | Asset Subclass | Enforcement Point | <attributes...>

Ids that do not resolve render as "" for the control and safeguard
columns and as "Unknown" for the asset columns.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from ctrlparfait.cis import HierarchyIndex
from ctrlparfait.table import BASE_COLUMNS, Attribute, Row, TabType

FILENAME_PREFIX = "ctrl-parfait"
UNKNOWN = "Unknown"


def table_headers(attributes: Sequence[Attribute]) -> list[str]:
    """Column headers: the fixed columns then one per attribute name."""
    return BASE_COLUMNS + [attr.name for attr in attributes]


def resolve_row(row: Row, attributes: Sequence[Attribute], index: HierarchyIndex) -> list[str]:
    """
    Resolve one row into display values, in ``table_headers`` order.

    The control columns come from the safeguard's owning control, falling
    back to the row's own control id when the safeguard does not resolve.
    The subclass is resolved within the row's asset class.
    """
    safeguard = index.find_safeguard(row.safeguard_id)
    if safeguard is not None:
        control = index.find_control(safeguard.control_id)
    else:
        control = index.find_control(row.control_id)

    asset_class = index.find_asset_class(row.asset_class_id)
    asset_subclass = index.find_asset_subclass(row.asset_subclass_id, class_id=row.asset_class_id)

    values = [
        control.number if control else "",
        control.name if control else "",
        safeguard.number if safeguard else "",
        safeguard.name if safeguard else "",
        asset_class.name if asset_class else UNKNOWN,
        asset_subclass.name if asset_subclass else UNKNOWN,
        row.enforcement_point,
    ]
    values.extend(row.attributes.get(attr.id, "") for attr in attributes)
    return values


def build_table(
    rows: Sequence[Row],
    attributes: Sequence[Attribute],
    index: HierarchyIndex,
) -> tuple[list[str], list[list[str]]]:
    """
    Resolve a row collection into headers and display rows.

    Returns:
        Tuple of (headers, rows of cell values).
    """
    return table_headers(attributes), [resolve_row(row, attributes, index) for row in rows]


def build_tabular_records(
    rows: Sequence[Row],
    attributes: Sequence[Attribute],
    index: HierarchyIndex,
) -> list[dict[str, str]]:
    """
    Resolve a row collection into one header-keyed record per row.

    Returns:
        List of dictionaries mapping column header to value.
    """
    headers, table = build_table(rows, attributes, index)
    return [dict(zip(headers, values)) for values in table]


def format_timestamp(moment: datetime) -> str:
    """
    Render a timestamp for use in a file name.

    ISO 8601 in UTC with milliseconds and a ``Z`` suffix, with ``:`` and
    ``.`` replaced by ``-`` (2024-01-15T12-00-00-000Z).
    """
    iso = moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def export_filename(tab: TabType, extension: str, moment: datetime | None = None) -> str:
    """
    Build an export file name.

    Args:
        tab: Exported table.
        extension: File extension without the dot.
        moment: Export time. Defaults to now.

    Returns:
        ``ctrl-parfait-<tab>-<timestamp>.<extension>``
    """
    if moment is None:
        moment = datetime.now(UTC)
    return f"{FILENAME_PREFIX}-{tab.value}-{format_timestamp(moment)}.{extension}"
