"""
Configuration management for CTRL_PaRFait.

This module handles loading, validating, and saving configuration settings.
"""

from ctrlparfait.config.settings import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    EXPORT_FORMATS,
    ConfigurationError,
    DemoConfig,
    ExportConfig,
    Settings,
    load_config,
    save_config,
)

__all__ = [
    "Settings",
    "ExportConfig",
    "DemoConfig",
    "load_config",
    "save_config",
    "ConfigurationError",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILE",
    "EXPORT_FORMATS",
]
