"""
Sample data generator for CTRL_PaRFait.

Provides a pre-filled workbook for quick demos and evaluation.

Usage:
    from ctrlparfait.demo import generate_demo_workbook

    workbook = generate_demo_workbook(seed=42)
    workbook.save("workbook.json")
"""

from ctrlparfait.demo.generator import (
    DEFAULT_ENFORCEMENT_POINTS,
    EXAMPLE_METHODS,
    DemoGenerator,
    default_enforcement_point,
    generate_demo_workbook,
)

__all__ = [
    "DemoGenerator",
    "generate_demo_workbook",
    "default_enforcement_point",
    "DEFAULT_ENFORCEMENT_POINTS",
    "EXAMPLE_METHODS",
]
