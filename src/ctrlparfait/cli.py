"""
Command-line interface for CTRL_PaRFait.

Provides commands for inspecting the control hierarchy, editing the
framework and assessment tables, managing measurement attributes, and
exporting.

The tables live in a workbook file (~/.ctrlparfait/workbook.json by
default). Commands that change the tables load the workbook, apply the
change through the row consistency engine or attribute registry, and
save it back.

Uses Python's argparse module (no external CLI libraries).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

from ctrlparfait import __version__
from ctrlparfait.cis import (
    AssetOptionCache,
    HierarchyIndex,
    Taxonomy,
    TaxonomyError,
    export_taxonomy_json,
    generate_all_asset_options,
    get_default_taxonomy,
    get_statistics,
    load_taxonomy,
)
from ctrlparfait.config.settings import (
    EXPORT_FORMATS,
    ConfigurationError,
    Settings,
    get_config_path,
    load_config,
    save_config,
)
from ctrlparfait.table import (
    DuplicateAttributeError,
    RowConsistencyEngine,
    TabType,
    Workbook,
    WorkbookError,
    make_attribute,
)

# Set up logging
logger = logging.getLogger(__name__)

# Global verbosity settings (set during main() based on args)
_quiet_mode = False
_verbose_level = 0

MAX_CELL_WIDTH = 32


def set_output_mode(quiet: bool = False, verbose: int = 0) -> None:
    """
    Set the output mode for the CLI.

    Args:
        quiet: If True, suppress non-essential output.
        verbose: Verbosity level (0=normal, 1+=verbose).
    """
    global _quiet_mode, _verbose_level
    _quiet_mode = quiet
    _verbose_level = verbose


def output(message: str = "", force: bool = False) -> None:
    """
    Print a message to stdout, respecting quiet mode.

    Args:
        message: The message to print.
        force: If True, print even in quiet mode (for essential output like JSON/CSV).
    """
    if force or not _quiet_mode:
        print(message)


def output_verbose(message: str, level: int = 1) -> None:
    """
    Print a verbose message only if verbosity is high enough.

    Args:
        message: The message to print.
        level: Required verbosity level to show this message.
    """
    if _verbose_level >= level and not _quiet_mode:
        print(message)


def output_error(message: str) -> None:
    """
    Print an error message (always shown, even in quiet mode).

    Args:
        message: The error message to print.
    """
    print(message, file=sys.stderr)


def format_as_csv(headers: list[str], rows: list[list[Any]]) -> str:
    """
    Format data as CSV string.

    Args:
        headers: Column headers.
        rows: List of row data (each row is a list of values).

    Returns:
        CSV formatted string.
    """
    import csv
    import io

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


def format_as_table(headers: list[str], rows: list[list[str]]) -> str:
    """
    Format data as a plain-text table with aligned columns.

    Cells wider than MAX_CELL_WIDTH are truncated.
    """
    def clip(value: str) -> str:
        if len(value) <= MAX_CELL_WIDTH:
            return value
        return value[: MAX_CELL_WIDTH - 3] + "..."

    cells = [[clip(h) for h in headers]] + [[clip(v) for v in row] for row in rows]
    widths = [max(len(row[i]) for row in cells) for i in range(len(headers))]

    lines = []
    for n, row in enumerate(cells):
        lines.append("  ".join(value.ljust(widths[i]) for i, value in enumerate(row)).rstrip())
        if n == 0:
            lines.append("  ".join("-" * w for w in widths))
    return "\n".join(lines)


def _add_tab_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--tab",
        choices=[t.value for t in TabType],
        default=TabType.FRAMEWORK.value,
        help="Table to work on (default: framework)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CTRL_PaRFait CLI."""
    parser = argparse.ArgumentParser(
        prog="ctrlparfait",
        description="Control Performance and Reliability Framework for the CIS Controls",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ctrlparfait {__version__}",
    )

    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Override config file location (default: ~/.ctrlparfait/config.yaml)",
    )

    parser.add_argument(
        "--workbook",
        metavar="PATH",
        help="Override workbook file location (default: from config)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>",
    )

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show system information and diagnostics",
        description="Display version, configuration paths, taxonomy and workbook statistics.",
    )
    info_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    info_parser.set_defaults(func=cmd_info)

    # taxonomy command
    taxonomy_parser = subparsers.add_parser(
        "taxonomy",
        help="Show the control hierarchy",
        description="List control groups, controls, safeguards and asset classes.",
    )
    taxonomy_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    taxonomy_parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write the hierarchy as JSON to PATH instead",
    )
    taxonomy_parser.set_defaults(func=cmd_taxonomy)

    # options command
    options_parser = subparsers.add_parser(
        "options",
        help="List asset options for safeguards",
        description="Show the asset class and subclass targets a safeguard can be applied to.",
    )
    options_parser.add_argument(
        "safeguard_id",
        metavar="SAFEGUARD_ID",
        nargs="?",
        help="Safeguard ID (e.g., 1.1). Omit to list options for every safeguard",
    )
    options_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    options_parser.set_defaults(func=cmd_options)

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Create the configuration and workbook",
        description="Create the config file (if missing) and an empty or sample workbook.",
    )
    init_parser.add_argument(
        "--demo",
        action="store_true",
        help="Fill the workbook with sample rows",
    )
    init_parser.add_argument(
        "--seed",
        type=int,
        metavar="N",
        help="Random seed for sample rows (default: from config)",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing workbook",
    )
    init_parser.set_defaults(func=cmd_init)

    # rows command
    rows_parser = subparsers.add_parser(
        "rows",
        help="Show the rows of a table",
        description="Display a table with names resolved from the control hierarchy.",
    )
    _add_tab_argument(rows_parser)
    rows_parser.add_argument(
        "--format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format (default: table)",
    )
    rows_parser.set_defaults(func=cmd_rows)

    # row command
    row_parser = subparsers.add_parser(
        "row",
        help="Add, delete or edit a row",
        description="Edit a single row. Dependent fields are kept consistent.",
    )
    row_subparsers = row_parser.add_subparsers(
        title="actions",
        dest="action",
        metavar="<action>",
        required=True,
    )

    row_add = row_subparsers.add_parser("add", help="Append an empty row")
    _add_tab_argument(row_add)

    row_delete = row_subparsers.add_parser("delete", help="Delete a row")
    _add_tab_argument(row_delete)
    row_delete.add_argument("row_id", metavar="ROW_ID")

    row_set = row_subparsers.add_parser(
        "set",
        help="Set an attribute value or enforcement point",
        description="FIELD is attribute.<id> (e.g., attribute.coverage) or enforcementPoint.",
    )
    _add_tab_argument(row_set)
    row_set.add_argument("row_id", metavar="ROW_ID")
    row_set.add_argument("field", metavar="FIELD")
    row_set.add_argument("value", metavar="VALUE")

    row_control = row_subparsers.add_parser(
        "control",
        help="Select a control (selects its first safeguard)",
    )
    _add_tab_argument(row_control)
    row_control.add_argument("row_id", metavar="ROW_ID")
    row_control.add_argument("control_id", metavar="CONTROL_ID")

    row_safeguard = row_subparsers.add_parser(
        "safeguard",
        help="Select a safeguard (clears the asset selection)",
    )
    _add_tab_argument(row_safeguard)
    row_safeguard.add_argument("row_id", metavar="ROW_ID")
    row_safeguard.add_argument("safeguard_id", metavar="SAFEGUARD_ID")

    row_asset = row_subparsers.add_parser(
        "asset",
        help="Select an asset option (see 'ctrlparfait options')",
    )
    _add_tab_argument(row_asset)
    row_asset.add_argument("row_id", metavar="ROW_ID")
    row_asset.add_argument("option_id", metavar="OPTION_ID")

    row_parser.set_defaults(func=cmd_row)

    # attribute command
    attribute_parser = subparsers.add_parser(
        "attribute",
        help="Manage measurement attributes",
        description="List attributes or add a new one to both tables.",
    )
    attribute_subparsers = attribute_parser.add_subparsers(
        title="actions",
        dest="action",
        metavar="<action>",
        required=True,
    )

    attribute_add = attribute_subparsers.add_parser("add", help="Add an attribute")
    attribute_add.add_argument("name", metavar="NAME")
    attribute_add.add_argument("--description", default="", help="Attribute description")
    attribute_add.add_argument(
        "--tooltip",
        default="",
        help="Tooltip text (default: the description)",
    )

    attribute_list = attribute_subparsers.add_parser("list", help="List attributes")
    attribute_list.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    attribute_parser.set_defaults(func=cmd_attribute)

    # export command
    export_parser = subparsers.add_parser(
        "export",
        help="Export a table",
        description="Write a table to a new JSON, XLSX, PDF or PPTX file.",
    )
    _add_tab_argument(export_parser)
    export_parser.add_argument(
        "--format",
        choices=list(EXPORT_FORMATS),
        help="Export format (default: from config)",
    )
    export_parser.add_argument(
        "--output",
        metavar="DIR",
        help="Output directory (default: from config)",
    )
    export_parser.set_defaults(func=cmd_export)

    return parser


def setup_logging(verbose: int, quiet: bool) -> None:
    """Configure logging based on verbosity level."""
    if quiet:
        level = logging.WARNING
    elif verbose == 0:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_settings(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config) if args.config else None
    return load_config(config_path)


def _workbook_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.workbook or settings.workbook_path).expanduser()


def _load_taxonomy(settings: Settings) -> Taxonomy:
    """The configured taxonomy file, or the shipped CIS data."""
    if settings.taxonomy_path:
        return load_taxonomy(Path(settings.taxonomy_path).expanduser())
    return get_default_taxonomy()


def _row_exists(workbook: Workbook, tab: TabType, row_id: str) -> bool:
    return any(row.id == row_id for row in workbook.rows(tab))


def cmd_info(args: argparse.Namespace) -> int:
    """Show system information and diagnostics."""
    import platform as platform_module

    from ctrlparfait.reports import pdf_generator

    settings = _load_settings(args)
    taxonomy = _load_taxonomy(settings)
    workbook_path = _workbook_path(args, settings)

    info: dict[str, Any] = {
        "version": __version__,
        "python_version": platform_module.python_version(),
        "platform": platform_module.platform(),
        "config_file": str(Path(args.config) if args.config else get_config_path()),
        "workbook_file": str(workbook_path),
        "taxonomy_file": settings.taxonomy_path or None,
        "taxonomy": get_statistics(taxonomy),
        "workbook": None,
        "optional_dependencies": {
            "weasyprint": pdf_generator.WEASYPRINT_AVAILABLE,
        },
    }

    if workbook_path.exists():
        workbook = Workbook.load(workbook_path)
        info["workbook"] = {
            "attributes": len(workbook.attributes),
            "framework_rows": len(workbook.framework_rows),
            "assessment_rows": len(workbook.assessment_rows),
        }

    if args.json:
        output(json.dumps(info, indent=2, default=str), force=True)
        return 0

    output("CTRL_PaRFait System Information")
    output("=" * 60)
    output()
    output(f"Version: {info['version']}")
    output(f"Python: {info['python_version']}")
    output(f"Platform: {info['platform']}")
    output()
    output("Paths:")
    output(f"  Config file: {info['config_file']}")
    output(f"  Workbook file: {info['workbook_file']}")
    output(f"  Taxonomy file: {info['taxonomy_file'] or '(shipped CIS controls)'}")
    output()
    output("Taxonomy:")
    for key, count in info["taxonomy"].items():
        output(f"  {key.replace('_', ' ').capitalize()}: {count}")
    output()
    if info["workbook"]:
        output("Workbook:")
        output(f"  Attributes: {info['workbook']['attributes']}")
        output(f"  Framework rows: {info['workbook']['framework_rows']}")
        output(f"  Assessment rows: {info['workbook']['assessment_rows']}")
    else:
        output("Workbook: not created (run 'ctrlparfait init')")
    output()
    output("Optional Dependencies:")
    for dep, available in info["optional_dependencies"].items():
        status = "installed" if available else "not installed"
        output(f"  {dep}: {status}")

    return 0


def cmd_taxonomy(args: argparse.Namespace) -> int:
    """Show the control hierarchy."""
    settings = _load_settings(args)
    taxonomy = _load_taxonomy(settings)

    if args.output:
        export_taxonomy_json(args.output, taxonomy)
        output(f"Taxonomy written to: {args.output}")
        return 0

    if args.format == "json":
        output(json.dumps(taxonomy.to_dict(), indent=2), force=True)
        return 0

    output("Control Hierarchy")
    output("=" * 60)
    for group in taxonomy.control_groups:
        output()
        output(f"{group.name} ({group.id})")
        for control in group.controls:
            output(f"  {control.number}  {control.name} ({control.id})")
            for safeguard in control.safeguards:
                output(f"    {safeguard.number:<6} {safeguard.name}")
    output()
    output("Asset Classes")
    output("=" * 60)
    for asset_class in taxonomy.asset_classes:
        subclasses = ", ".join(s.name for s in asset_class.subclasses)
        output(f"  {asset_class.name} ({asset_class.id}): {subclasses}")

    return 0


def cmd_options(args: argparse.Namespace) -> int:
    """List asset options for one safeguard or for all of them."""
    settings = _load_settings(args)
    taxonomy = _load_taxonomy(settings)
    index = HierarchyIndex.from_taxonomy(taxonomy)

    if args.safeguard_id is None:
        all_options = generate_all_asset_options(index.safeguards, taxonomy.asset_classes)
        if args.format == "json":
            data = {sid: [o.to_dict() for o in opts] for sid, opts in all_options.items()}
            output(json.dumps(data, indent=2), force=True)
            return 0
        output(format_as_table(
            ["Safeguard", "Option ID", "Target"],
            [[sid, o.id, o.display_name] for sid, opts in all_options.items() for o in opts],
        ))
        return 0

    safeguard = index.find_safeguard(args.safeguard_id)
    if safeguard is None:
        output_error(f"Unknown safeguard: {args.safeguard_id}")
        return 1

    options = AssetOptionCache(taxonomy.asset_classes).options_for(safeguard)

    if args.format == "json":
        output(json.dumps([o.to_dict() for o in options], indent=2), force=True)
        return 0

    output(f"Asset options for {safeguard.number} {safeguard.name}")
    output()
    if not options:
        output("No applicable asset classes.")
        return 0
    output(format_as_table(["Option ID", "Target"], [[o.id, o.display_name] for o in options]))
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Create the configuration and workbook."""
    from ctrlparfait.demo import DemoGenerator

    config_path = Path(args.config) if args.config else get_config_path()
    settings = _load_settings(args)

    if not config_path.exists():
        save_config(settings, config_path)
        output(f"Configuration file created: {config_path}")

    workbook_path = _workbook_path(args, settings)
    if workbook_path.exists() and not args.force:
        output_error(f"Workbook already exists: {workbook_path}")
        output_error("Use --force to overwrite it.")
        return 1

    if args.demo:
        seed = args.seed if args.seed is not None else settings.demo.seed
        generator = DemoGenerator(taxonomy=_load_taxonomy(settings), seed=seed)
        workbook = generator.generate_workbook()
        output_verbose(f"Generated sample rows with seed {seed}")
    else:
        workbook = Workbook()

    workbook.save(workbook_path)

    output(f"Workbook created: {workbook_path}")
    output(f"  Attributes: {', '.join(a.name for a in workbook.attributes)}")
    output(f"  Framework rows: {len(workbook.framework_rows)}")
    output(f"  Assessment rows: {len(workbook.assessment_rows)}")
    output()
    output("Next steps:")
    output("  1. Run 'ctrlparfait rows' to view the framework table")
    output("  2. Run 'ctrlparfait row add' to start a new row")
    output("  3. Run 'ctrlparfait export --format xlsx' to export it")

    return 0


def cmd_rows(args: argparse.Namespace) -> int:
    """Show the rows of a table."""
    from ctrlparfait.reports import build_table

    settings = _load_settings(args)
    taxonomy = _load_taxonomy(settings)
    workbook = Workbook.load(_workbook_path(args, settings))
    tab = TabType(args.tab)
    rows = workbook.rows(tab)

    if args.format == "json":
        output(json.dumps([r.to_dict() for r in rows], indent=2), force=True)
        return 0

    headers, table = build_table(
        rows, workbook.attributes.to_list(), HierarchyIndex.from_taxonomy(taxonomy)
    )
    headers = ["Row ID"] + headers
    table = [[row.id] + values for row, values in zip(rows, table)]

    if args.format == "csv":
        output(format_as_csv(headers, table), force=True)
        return 0

    output(f"{tab.title} ({len(rows)} rows)")
    output()
    if not rows:
        output("No rows. Run 'ctrlparfait row add' to add one.")
        return 0
    output(format_as_table(headers, table))
    return 0


def cmd_row(args: argparse.Namespace) -> int:
    """Add, delete or edit a row."""
    settings = _load_settings(args)
    taxonomy = _load_taxonomy(settings)
    workbook_path = _workbook_path(args, settings)
    workbook = Workbook.load(workbook_path)

    index = HierarchyIndex.from_taxonomy(taxonomy)
    engine = RowConsistencyEngine(index)
    tab = TabType(args.tab)
    rows = workbook.rows(tab)

    if args.action == "add":
        rows = engine.add_row(rows, workbook.attributes.ids)
        workbook.with_rows(tab, rows).save(workbook_path)
        output(rows[-1].id, force=True)
        return 0

    if not _row_exists(workbook, tab, args.row_id):
        output_error(f"Row not found in {tab.value} table: {args.row_id}")
        return 1

    if args.action == "delete":
        rows = engine.delete_row(rows, args.row_id)
        message = f"Deleted row {args.row_id}"

    elif args.action == "set":
        try:
            rows = engine.set_cell(rows, args.row_id, args.field, args.value)
        except ValueError as e:
            output_error(f"Error: {e}")
            return 1
        message = f"Set {args.field} on row {args.row_id}"

    elif args.action == "control":
        if index.find_control(args.control_id) is None:
            output_error(f"Unknown control: {args.control_id}")
            return 1
        rows = engine.set_control(rows, args.row_id, args.control_id)
        message = f"Selected control {args.control_id} on row {args.row_id}"

    elif args.action == "safeguard":
        if index.find_safeguard(args.safeguard_id) is None:
            output_error(f"Unknown safeguard: {args.safeguard_id}")
            return 1
        rows = engine.set_safeguard(rows, args.row_id, args.safeguard_id)
        message = f"Selected safeguard {args.safeguard_id} on row {args.row_id}"

    else:
        current = next(row for row in rows if row.id == args.row_id)
        safeguard = index.find_safeguard(current.safeguard_id)
        if safeguard is None:
            output_error(f"Row {args.row_id} has no safeguard; select one first.")
            return 1
        options = AssetOptionCache(taxonomy.asset_classes).options_for(safeguard)
        option_ids = [o.id for o in options]
        if args.option_id not in option_ids:
            output_error(f"Invalid asset option for safeguard {safeguard.id}: {args.option_id}")
            output_error(f"Run 'ctrlparfait options {safeguard.id}' to list valid options.")
            return 1
        rows = engine.set_asset_option(rows, args.row_id, args.option_id)
        message = f"Selected asset {args.option_id} on row {args.row_id}"

    workbook.with_rows(tab, rows).save(workbook_path)
    output(message)
    return 0


def cmd_attribute(args: argparse.Namespace) -> int:
    """Manage measurement attributes."""
    settings = _load_settings(args)
    workbook_path = _workbook_path(args, settings)
    workbook = Workbook.load(workbook_path)

    if args.action == "list":
        attributes = workbook.attributes.to_list()
        if args.format == "json":
            output(json.dumps([a.to_dict() for a in attributes], indent=2), force=True)
        else:
            output(format_as_table(
                ["ID", "Name", "Description"],
                [[a.id, a.name, a.description] for a in attributes],
            ))
        return 0

    try:
        attribute = make_attribute(args.name, args.description, args.tooltip)
        workbook = workbook.add_attribute(attribute)
    except DuplicateAttributeError as e:
        output_error(f"Error: attribute already exists: {e.attribute_id}")
        return 1
    except ValueError as e:
        output_error(f"Error: {e}")
        return 1

    workbook.save(workbook_path)
    output(f"Added attribute {attribute.name} ({attribute.id})")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export a table."""
    from ctrlparfait.reports import ExportSnapshot, ReportConfig, ReportExporter

    settings = _load_settings(args)
    taxonomy = _load_taxonomy(settings)
    workbook = Workbook.load(_workbook_path(args, settings))
    tab = TabType(args.tab)

    export_format = args.format or settings.export.default_format
    output_path = Path(args.output or settings.export.output_dir).expanduser()

    exporter = ReportExporter(
        ReportConfig(
            title=settings.export.title,
            rows_per_slide=settings.export.rows_per_slide,
            version=__version__,
        )
    )
    snapshot = ExportSnapshot.from_workbook(workbook, tab, taxonomy)

    output(f"Exporting {tab.title} as {export_format}...")
    result = exporter.export(export_format, snapshot, output_path)

    if result.success:
        output(f"Export complete: {result.path}")
        output(f"Size: {result.size_bytes:,} bytes")
        output(f"Records: {result.record_count}")
    else:
        output_error(f"Error: {result.error}")
        return 1

    return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for CTRL_PaRFait CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Set up logging and output mode
    setup_logging(args.verbose, args.quiet)
    set_output_mode(args.quiet, args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        output("\nOperation cancelled.")
        sys.exit(130)
    except ConfigurationError as e:
        output_error(f"Configuration error: {e}")
        sys.exit(2)
    except TaxonomyError as e:
        output_error(f"Taxonomy error: {e}")
        sys.exit(2)
    except WorkbookError as e:
        output_error(f"Workbook error: {e}")
        sys.exit(2)
    except Exception as e:
        if args.verbose > 0:
            raise
        output_error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
