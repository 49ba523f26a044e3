"""
CTRL_PaRFait - Control Performance and Reliability Framework

Measure how well your CIS safeguards actually perform.

CTRL_PaRFait keeps two tables over the CIS Critical Security Controls: a
framework table describing how each safeguard is measured on a given asset
and enforcement point, and an assessment table recording the outcomes.

Key Features:
    - Ships the CIS control hierarchy and asset taxonomy (or loads your own)
    - Per-safeguard asset options at class and subclass level
    - Row edits go through a consistency engine that keeps the control,
      safeguard and asset selection of every row valid
    - User-defined measurement attributes back-filled into every row
    - Exports to JSON, XLSX, PDF and PPTX
"""

__version__ = "0.1.0"

from ctrlparfait.config.settings import Settings, load_config

__all__ = [
    "__version__",
    "Settings",
    "load_config",
]
