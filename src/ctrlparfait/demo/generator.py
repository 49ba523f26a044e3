"""
Sample data generator for CTRL_PaRFait.

Builds a workbook pre-filled with example framework rows (one per
safeguard and applicable asset subclass) and matching assessment rows, for
demonstrations and evaluation.

Framework rows get a typical enforcement point for their safeguard and
subclass, and an example measurement method per default attribute.
Assessment rows copy the framework rows and fill in outcomes: a
percentage for Coverage, High/Medium/Low for everything else.

Generation is seeded, so the same seed always produces the same workbook.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from ctrlparfait.cis import (
    AssetLevel,
    Taxonomy,
    flatten_safeguards,
    generate_asset_options,
    get_default_taxonomy,
)
from ctrlparfait.table import Attribute, AttributeRegistry, Row, Workbook, new_row_id

logger = logging.getLogger(__name__)

FALLBACK_ENFORCEMENT_POINT = "Manual Process"
ASSESSMENT_LEVELS = ("High", "Medium", "Low")
PERCENTAGE_ATTRIBUTES = frozenset({"coverage"})

# Example measurement methods per default attribute
EXAMPLE_METHODS: dict[str, list[str]] = {
    "effectiveness": [
        "Penetration testing to assess control bypass",
        "Independent verification of inventory accuracy",
        "Automated scanning vs. manual inventory comparison",
        "Regular audits with management review",
        "Periodic data classification accuracy review",
    ],
    "efficiency": [
        "CPU/memory usage monitoring",
        "Labor hours required for maintenance",
        "Licensing cost per protected asset",
        "Time to complete inventory updates",
        "Storage requirements for configuration backups",
    ],
    "coverage": [
        "Percentage of assets with agent installed",
        "Number of assets inventoried / total assets",
        "Scan coverage across network segments",
        "Percentage of data classified according to policy",
        "Percentage of accounts with MFA enabled",
    ],
    "friction": [
        "User satisfaction surveys",
        "Number of help desk tickets related to control",
        "Time added to common workflows",
        "Business process interruptions",
        "System performance impact during scans",
    ],
}

# Typical enforcement point by safeguard id, then asset subclass id
DEFAULT_ENFORCEMENT_POINTS: dict[str, dict[str, str]] = {
    "1.1": {
        "endpoints": "MDM Solution",
        "servers": "CMDB",
        "mobile": "MDM Solution",
        "iot": "Network Discovery Tool",
        "lan": "IPAM",
        "wan": "Network Inventory System",
        "wireless": "Wireless Controller",
    },
    "1.2": {
        "endpoints": "NAC",
        "servers": "CMDB + NAC",
        "mobile": "MDM Solution",
        "iot": "IoT Security Gateway",
        "lan": "NAC",
        "wireless": "Wireless IPS",
    },
    "2.1": {
        "endpoints": "SCCM/EPP",
        "servers": "SCCM/Vulnerability Scanner",
        "mobile": "MDM Solution",
        "onprem": "SAM Tool",
        "cloud": "CSPM",
        "custom": "SDLC Process",
        "thirdparty": "Vendor Management System",
    },
    "2.2": {
        "onprem": "Vulnerability Scanner",
        "cloud": "CSPM",
        "custom": "SDLC Process",
        "thirdparty": "Vendor Risk Management",
    },
    "3.1": {
        "structured": "DLP Solution",
        "unstructured": "File Classification Tool",
        "cloud": "CASB",
    },
    "3.2": {
        "structured": "Database Discovery Tool",
        "unstructured": "Data Discovery Solution",
        "cloud": "CASB/CSPM",
    },
    "4.1": {
        "endpoints": "GPO/MDM",
        "servers": "Configuration Compliance Tool",
        "mobile": "MDM",
        "iot": "IoT Security Platform",
        "onprem": "Application Hardening Tool",
        "cloud": "CSPM",
    },
    "4.2": {
        "lan": "Network Configuration Manager",
        "wan": "SD-WAN Controller",
        "wireless": "Wireless Controller",
    },
    "5.1": {
        "employees": "IAM System",
        "contractors": "IAM System",
        "privileged": "PAM Solution",
    },
    "5.2": {
        "employees": "Password Manager",
        "contractors": "Password Manager",
        "privileged": "PAM Solution",
        "endpoints": "Password Manager",
        "servers": "PAM Solution",
    },
    "6.1": {
        "employees": "IAM/IGA Solution",
        "contractors": "IAM/IGA Solution",
        "privileged": "PAM Solution",
    },
    "6.2": {
        "employees": "IAM/IGA Solution",
        "contractors": "IAM/IGA Solution",
        "privileged": "PAM Solution",
    },
}


def default_enforcement_point(safeguard_id: str, subclass_id: str) -> str:
    """Typical enforcement point for a safeguard and subclass, or "Manual Process"."""
    return DEFAULT_ENFORCEMENT_POINTS.get(safeguard_id, {}).get(
        subclass_id, FALLBACK_ENFORCEMENT_POINT
    )


class DemoGenerator:
    """
    Generator for sample framework and assessment rows.

    Example:
        generator = DemoGenerator(seed=7)
        workbook = generator.generate_workbook()

    Attributes:
        taxonomy: Taxonomy rows are generated from.
        attributes: Attributes each row gets a value for.
        seed: Random seed.
    """

    def __init__(
        self,
        taxonomy: Taxonomy | None = None,
        attributes: Sequence[Attribute] | None = None,
        seed: int = 42,
    ) -> None:
        self.taxonomy = taxonomy or get_default_taxonomy()
        if attributes is None:
            attributes = AttributeRegistry.default().to_list()
        self.attributes = list(attributes)
        self.seed = seed

    def generate_framework_rows(self) -> list[Row]:
        """
        Create one framework row per safeguard and subclass-level asset option.

        Returns:
            Rows in taxonomy order, with ids drawn from the seeded generator.
        """
        rng = random.Random(self.seed)
        rows = []

        for safeguard in flatten_safeguards(self.taxonomy.control_groups):
            options = generate_asset_options(safeguard, self.taxonomy.asset_classes)
            for option in options:
                if option.level is not AssetLevel.ASSET_SUBCLASS:
                    continue
                rows.append(
                    Row(
                        id=new_row_id((r.id for r in rows), rng=rng),
                        control_id=safeguard.control_id,
                        safeguard_id=safeguard.id,
                        asset_class_id=option.asset_class_id,
                        asset_subclass_id=option.asset_subclass_id or "",
                        enforcement_point=default_enforcement_point(
                            safeguard.id, option.asset_subclass_id or ""
                        ),
                        attributes={
                            attr.id: rng.choice(EXAMPLE_METHODS[attr.id])
                            if attr.id in EXAMPLE_METHODS
                            else ""
                            for attr in self.attributes
                        },
                    )
                )

        logger.debug("Generated %d framework rows", len(rows))
        return rows

    def generate_assessment_rows(self, framework_rows: Sequence[Row]) -> list[Row]:
        """
        Create assessment rows mirroring ``framework_rows`` with sample outcomes.

        Args:
            framework_rows: Rows to mirror.

        Returns:
            Rows with the same ids and relational fields.
        """
        rng = random.Random(self.seed)
        rows = []

        for row in framework_rows:
            values = {}
            for attr in self.attributes:
                if attr.id in PERCENTAGE_ATTRIBUTES:
                    values[attr.id] = f"{rng.randrange(100)}%"
                else:
                    values[attr.id] = rng.choice(ASSESSMENT_LEVELS)
            rows.append(
                Row(
                    id=row.id,
                    control_id=row.control_id,
                    safeguard_id=row.safeguard_id,
                    asset_class_id=row.asset_class_id,
                    asset_subclass_id=row.asset_subclass_id,
                    enforcement_point=row.enforcement_point,
                    attributes=values,
                )
            )

        return rows

    def generate_workbook(self) -> Workbook:
        """Create a workbook with sample framework and assessment rows."""
        framework_rows = self.generate_framework_rows()
        return Workbook(
            attributes=AttributeRegistry(self.attributes),
            framework_rows=framework_rows,
            assessment_rows=self.generate_assessment_rows(framework_rows),
        )


def generate_demo_workbook(taxonomy: Taxonomy | None = None, seed: int = 42) -> Workbook:
    """
    Generate a sample workbook with the default attributes.

    Args:
        taxonomy: Taxonomy to build rows from. Defaults to the shipped CIS data.
        seed: Random seed.

    Returns:
        Workbook with framework and assessment rows.
    """
    workbook = DemoGenerator(taxonomy=taxonomy, seed=seed).generate_workbook()
    logger.info(
        "Generated demo workbook with %d framework and %d assessment rows",
        len(workbook.framework_rows),
        len(workbook.assessment_rows),
    )
    return workbook
