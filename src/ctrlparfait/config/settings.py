"""
Configuration settings management for CTRL_PaRFait.

This module handles loading, validating, and saving configuration settings
from YAML files with support for environment variable overrides.

Configuration is loaded from ~/.ctrlparfait/config.yaml by default, with the
path overridable via the CTRLPARFAIT_CONFIG environment variable.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Default configuration directory
DEFAULT_CONFIG_DIR = Path.home() / ".ctrlparfait"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_WORKBOOK_FILE = DEFAULT_CONFIG_DIR / "workbook.json"

EXPORT_FORMATS = ("json", "xlsx", "pdf", "pptx")
REPORT_TITLE = "Control Performance and Reliability Framework (CTRL_PaRFait)"


@dataclass
class ExportConfig:
    """Export settings."""

    output_dir: str = "."
    default_format: str = "xlsx"
    rows_per_slide: int = 10
    title: str = REPORT_TITLE


@dataclass
class DemoConfig:
    """Sample data settings."""

    seed: int = 42


@dataclass
class Settings:
    """
    Complete CTRL_PaRFait configuration settings.

    Settings are loaded from a YAML configuration file and can be overridden
    by environment variables prefixed with CTRLPARFAIT_.

    Attributes:
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR).
        workbook_path: Workbook file used by the CLI.
        taxonomy_path: Optional taxonomy file replacing the shipped CIS data.
        export: Export settings.
        demo: Sample data settings.
    """

    log_level: str = "INFO"
    workbook_path: str = str(DEFAULT_WORKBOOK_FILE)
    taxonomy_path: str = ""

    export: ExportConfig = field(default_factory=ExportConfig)
    demo: DemoConfig = field(default_factory=DemoConfig)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


def get_config_path() -> Path:
    """
    Get the configuration file path.

    Returns the path from CTRLPARFAIT_CONFIG environment variable if set,
    otherwise returns the default path (~/.ctrlparfait/config.yaml).

    Returns:
        Path to the configuration file.
    """
    env_path = os.environ.get("CTRLPARFAIT_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def load_config(config_path: Path | None = None) -> Settings:
    """
    Load configuration from YAML file.

    Reads configuration from the specified path (or default if not provided),
    applies environment variable overrides, and validates the configuration.
    A missing file yields the defaults.

    Args:
        config_path: Optional path to configuration file. If not provided,
                    uses CTRLPARFAIT_CONFIG environment variable or default path.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If the configuration file cannot be read or
                          contains invalid settings.
    """
    if config_path is None:
        config_path = get_config_path()

    settings = Settings()

    if config_path.exists():
        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError("Config file must contain a mapping")

        settings = _apply_config_data(settings, config_data)

    settings = _apply_environment_overrides(settings)

    _validate_config(settings)

    return settings


def save_config(settings: Settings, config_path: Path | None = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        settings: Settings instance to save.
        config_path: Optional path to configuration file.

    Raises:
        ConfigurationError: If the configuration cannot be written.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_data = _settings_to_dict(settings)

    try:
        with open(config_path, "w") as f:
            yaml.safe_dump(config_data, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file: {e}") from e


def _apply_config_data(settings: Settings, data: dict[str, Any]) -> Settings:
    """Apply configuration data from parsed YAML to settings."""
    general = data.get("ctrlparfait", {}) or {}

    if "log_level" in general:
        settings.log_level = str(general["log_level"]).upper()
    if "workbook_path" in general:
        settings.workbook_path = str(general["workbook_path"])
    if "taxonomy_path" in general:
        settings.taxonomy_path = str(general["taxonomy_path"] or "")

    export = data.get("export", {}) or {}
    if "output_dir" in export:
        settings.export.output_dir = str(export["output_dir"])
    if "default_format" in export:
        settings.export.default_format = str(export["default_format"]).lower()
    if "rows_per_slide" in export:
        try:
            settings.export.rows_per_slide = int(export["rows_per_slide"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"rows_per_slide must be an integer: {e}") from e
    if "title" in export:
        settings.export.title = str(export["title"])

    demo = data.get("demo", {}) or {}
    if "seed" in demo:
        try:
            settings.demo.seed = int(demo["seed"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"demo seed must be an integer: {e}") from e

    return settings


def _apply_environment_overrides(settings: Settings) -> Settings:
    """Apply environment variable overrides to settings."""
    env_map: dict[str, tuple[str, Callable[[str], Any]]] = {
        "CTRLPARFAIT_LOG_LEVEL": ("log_level", lambda x: x.upper()),
        "CTRLPARFAIT_WORKBOOK": ("workbook_path", str),
        "CTRLPARFAIT_TAXONOMY": ("taxonomy_path", str),
        "CTRLPARFAIT_OUTPUT_DIR": ("export.output_dir", str),
        "CTRLPARFAIT_EXPORT_FORMAT": ("export.default_format", lambda x: x.lower()),
    }

    for env_var, (attr_path, converter) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested_attr(settings, attr_path, converter(value))

    return settings


def _set_nested_attr(obj: Any, path: str, value: Any) -> None:
    """Set a nested attribute on an object using dot notation."""
    parts = path.split(".")
    for part in parts[:-1]:
        obj = getattr(obj, part)
    setattr(obj, parts[-1], value)


def _validate_config(settings: Settings) -> None:
    """
    Validate configuration settings.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if settings.log_level not in valid_log_levels:
        raise ConfigurationError(
            f"Invalid log_level: {settings.log_level}. "
            f"Must be one of: {', '.join(sorted(valid_log_levels))}"
        )

    if settings.export.default_format not in EXPORT_FORMATS:
        raise ConfigurationError(
            f"Invalid default_format: {settings.export.default_format}. "
            f"Must be one of: {', '.join(EXPORT_FORMATS)}"
        )

    if settings.export.rows_per_slide < 1:
        raise ConfigurationError("rows_per_slide must be at least 1")


def _settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings instance to dictionary for YAML serialization."""
    return {
        "ctrlparfait": {
            "log_level": settings.log_level,
            "workbook_path": settings.workbook_path,
            "taxonomy_path": settings.taxonomy_path,
        },
        "export": {
            "output_dir": settings.export.output_dir,
            "default_format": settings.export.default_format,
            "rows_per_slide": settings.export.rows_per_slide,
            "title": settings.export.title,
        },
        "demo": {
            "seed": settings.demo.seed,
        },
    }
