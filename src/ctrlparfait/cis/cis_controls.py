"""
CIS Critical Security Controls taxonomy definitions.

This module contains the control hierarchy used by the measurement tables:
implementation groups, controls and their safeguards, plus the two-level
asset taxonomy (asset classes and asset subclasses) that scopes where each
safeguard applies.

Reference: CIS Critical Security Controls v8
https://www.cisecurity.org/controls

Structure:
    - 3 Control groups: IG1 Basic, IG2 Foundational, IG3 Organizational
    - 6 Controls: CIS 1 through CIS 6
    - 12 Safeguards: two per control
    - 5 Asset classes: Devices, Networks, Data, Applications, Users

Each safeguard lists the asset classes and asset subclasses it applies to.
The subclass list is flat: a subclass id is only meaningful in combination
with one of the safeguard's applicable classes that actually contains it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class AssetSubclass:
    """
    A second-level asset type (e.g. Devices > Servers).

    Attributes:
        id: Identifier, unique within its asset class only
        name: Display name
        class_id: Owning asset class ID
    """

    id: str
    name: str
    class_id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "name": self.name, "classId": self.class_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any], class_id: str = "") -> AssetSubclass:
        """Create from dictionary, defaulting the back-reference to ``class_id``."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            class_id=str(data.get("classId", data.get("class_id", class_id))),
        )


@dataclass
class AssetClass:
    """
    A top-level asset type owning an ordered list of subclasses.

    Attributes:
        id: Unique identifier (e.g., "devices")
        name: Display name
        subclasses: Subclasses in canonical order
    """

    id: str
    name: str
    subclasses: list[AssetSubclass] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "subclasses": [s.to_dict() for s in self.subclasses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetClass:
        """Create from dictionary."""
        class_id = str(data["id"])
        return cls(
            id=class_id,
            name=str(data.get("name", class_id)),
            subclasses=[
                AssetSubclass.from_dict(s, class_id) for s in data.get("subclasses", [])
            ],
        )


@dataclass
class Safeguard:
    """
    A numbered security practice within a control.

    Attributes:
        id: Unique identifier (e.g., "1.1")
        control_id: Owning control ID
        number: Display number
        name: Short name
        description: Official CIS description
        applicable_asset_classes: Asset class IDs this safeguard applies to
        applicable_asset_subclasses: Asset subclass IDs this safeguard applies to
    """

    id: str
    control_id: str
    number: str
    name: str
    description: str = ""
    applicable_asset_classes: list[str] = field(default_factory=list)
    applicable_asset_subclasses: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "control_id": self.control_id,
            "number": self.number,
            "name": self.name,
            "description": self.description,
            "applicable_asset_classes": list(self.applicable_asset_classes),
            "applicable_asset_subclasses": list(self.applicable_asset_subclasses),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], control_id: str = "") -> Safeguard:
        """Create from dictionary, defaulting the back-reference to ``control_id``."""
        safeguard_id = str(data["id"])
        return cls(
            id=safeguard_id,
            control_id=str(data.get("control_id", control_id)),
            number=str(data.get("number", safeguard_id)),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            applicable_asset_classes=[str(c) for c in data.get("applicable_asset_classes", [])],
            applicable_asset_subclasses=[
                str(s) for s in data.get("applicable_asset_subclasses", [])
            ],
        )


@dataclass
class Control:
    """
    A CIS control owning an ordered list of safeguards.

    Attributes:
        id: Unique identifier (e.g., "cis1")
        number: Display number
        name: Control name
        safeguards: Safeguards in canonical order
    """

    id: str
    number: str
    name: str
    safeguards: list[Safeguard] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "number": self.number,
            "name": self.name,
            "safeguards": [s.to_dict() for s in self.safeguards],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Control:
        """Create from dictionary."""
        control_id = str(data["id"])
        return cls(
            id=control_id,
            number=str(data.get("number", "")),
            name=str(data.get("name", "")),
            safeguards=[
                Safeguard.from_dict(s, control_id) for s in data.get("safeguards", [])
            ],
        )


@dataclass
class ControlGroup:
    """
    A top-level grouping of controls (implementation group tier).

    Attributes:
        id: Unique identifier (e.g., "ig1")
        name: Group name
        controls: Controls in canonical order
    """

    id: str
    name: str
    controls: list[Control] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "controls": [c.to_dict() for c in self.controls],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ControlGroup:
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            controls=[Control.from_dict(c) for c in data.get("controls", [])],
        )


@dataclass
class Taxonomy:
    """The complete hierarchy: control groups plus asset classes."""

    control_groups: list[ControlGroup] = field(default_factory=list)
    asset_classes: list[AssetClass] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "control_groups": [g.to_dict() for g in self.control_groups],
            "asset_classes": [a.to_dict() for a in self.asset_classes],
        }


# =============================================================================
# ASSET TAXONOMY
# =============================================================================

def _build_asset_classes() -> list[AssetClass]:
    """Build the asset class hierarchy."""

    def _subclasses(class_id: str, entries: list[tuple[str, str]]) -> list[AssetSubclass]:
        return [AssetSubclass(id=sid, name=name, class_id=class_id) for sid, name in entries]

    return [
        AssetClass(
            id="devices",
            name="Devices",
            subclasses=_subclasses("devices", [
                ("endpoints", "Endpoints"),
                ("servers", "Servers"),
                ("mobile", "Mobile Devices"),
                ("iot", "IoT Devices"),
            ]),
        ),
        AssetClass(
            id="networks",
            name="Networks",
            subclasses=_subclasses("networks", [
                ("lan", "LAN"),
                ("wan", "WAN"),
                ("wireless", "Wireless Networks"),
            ]),
        ),
        AssetClass(
            id="data",
            name="Data",
            subclasses=_subclasses("data", [
                ("structured", "Structured Data"),
                ("unstructured", "Unstructured Data"),
                ("cloud", "Cloud Data"),
            ]),
        ),
        AssetClass(
            id="applications",
            name="Applications",
            subclasses=_subclasses("applications", [
                ("onprem", "On-Premises Applications"),
                ("cloud", "Cloud Applications"),
                ("custom", "Custom Applications"),
                ("thirdparty", "Third-Party Applications"),
            ]),
        ),
        AssetClass(
            id="users",
            name="Users",
            subclasses=_subclasses("users", [
                ("employees", "Employees"),
                ("contractors", "Contractors"),
                ("privileged", "Privileged Users"),
            ]),
        ),
    ]


# =============================================================================
# CIS CONTROLS
# =============================================================================

def _build_control_groups() -> list[ControlGroup]:
    """
    Build the CIS control hierarchy.

    Returns the three implementation groups with their controls and safeguards.
    """
    groups = []

    # =========================================================================
    # IG1 - Basic cyber hygiene
    # =========================================================================
    ig1 = ControlGroup(id="ig1", name="IG1: Basic", controls=[])

    ig1.controls.append(Control(
        id="cis1",
        number="1",
        name="Inventory and Control of Enterprise Assets",
        safeguards=[
            Safeguard(
                id="1.1",
                control_id="cis1",
                number="1.1",
                name="Establish and Maintain Detailed Enterprise Asset Inventory",
                description=(
                    "Establish and maintain an accurate, detailed, and up-to-date "
                    "inventory of all enterprise assets with the potential to store, "
                    "process, or transmit data, including: end-user devices (including "
                    "portable and mobile), network devices, non-computing/IoT devices, "
                    "and servers. Ensure the inventory records the network address, "
                    "hardware address, machine name, enterprise asset owner, department "
                    "for each asset, and whether the asset has been approved to connect "
                    "to the network. For mobile end-user devices, MDM type tools can "
                    "support this process, where appropriate."
                ),
                applicable_asset_classes=["devices", "networks"],
                applicable_asset_subclasses=[
                    "endpoints", "servers", "mobile", "iot", "lan", "wan", "wireless",
                ],
            ),
            Safeguard(
                id="1.2",
                control_id="cis1",
                number="1.2",
                name="Address Unauthorized Assets",
                description=(
                    "Ensure that a process exists to address unauthorized assets on a "
                    "weekly basis. The enterprise may choose to remove the asset from "
                    "the network, deny the asset from connecting remotely to the "
                    "network, or quarantine the asset."
                ),
                applicable_asset_classes=["devices", "networks"],
                applicable_asset_subclasses=[
                    "endpoints", "servers", "mobile", "iot", "lan", "wireless",
                ],
            ),
        ],
    ))

    ig1.controls.append(Control(
        id="cis2",
        number="2",
        name="Inventory and Control of Software Assets",
        safeguards=[
            Safeguard(
                id="2.1",
                control_id="cis2",
                number="2.1",
                name="Establish and Maintain Software Inventory",
                description=(
                    "Establish and maintain a detailed inventory of all licensed "
                    "software installed on enterprise assets. The software inventory "
                    "must document the title, publisher, initial installation/use date, "
                    "and business purpose for each entry; where appropriate, include "
                    "the Uniform Resource Locator (URL), app store(s), version(s), "
                    "deployment mechanism, and decommission date."
                ),
                applicable_asset_classes=["devices", "applications"],
                applicable_asset_subclasses=[
                    "endpoints", "servers", "mobile", "onprem", "cloud", "custom", "thirdparty",
                ],
            ),
            Safeguard(
                id="2.2",
                control_id="cis2",
                number="2.2",
                name="Ensure Authorized Software is Currently Supported",
                description=(
                    "Ensure that only currently supported software is designated as "
                    "authorized in the software inventory for enterprise assets. If "
                    "software is unsupported, yet necessary for the fulfillment of the "
                    "enterprise's mission, document an exception detailing mitigating "
                    "controls and residual risk acceptance."
                ),
                applicable_asset_classes=["applications"],
                applicable_asset_subclasses=["onprem", "cloud", "custom", "thirdparty"],
            ),
        ],
    ))

    ig1.controls.append(Control(
        id="cis3",
        number="3",
        name="Data Protection",
        safeguards=[
            Safeguard(
                id="3.1",
                control_id="cis3",
                number="3.1",
                name="Establish and Maintain Data Management Process",
                description=(
                    "Establish and maintain a data management process. In the process, "
                    "address data sensitivity, data owner, handling of data, data "
                    "retention limits, and disposal requirements, based on sensitivity "
                    "and retention standards for the enterprise."
                ),
                applicable_asset_classes=["data"],
                applicable_asset_subclasses=["structured", "unstructured", "cloud"],
            ),
            Safeguard(
                id="3.2",
                control_id="cis3",
                number="3.2",
                name="Establish and Maintain a Data Inventory",
                description=(
                    "Establish and maintain a data inventory, based on the enterprise's "
                    "data management process."
                ),
                applicable_asset_classes=["data"],
                applicable_asset_subclasses=["structured", "unstructured", "cloud"],
            ),
        ],
    ))

    groups.append(ig1)

    # =========================================================================
    # IG2 - Foundational
    # =========================================================================
    ig2 = ControlGroup(id="ig2", name="IG2: Foundational", controls=[])

    ig2.controls.append(Control(
        id="cis4",
        number="4",
        name="Secure Configuration of Enterprise Assets and Software",
        safeguards=[
            Safeguard(
                id="4.1",
                control_id="cis4",
                number="4.1",
                name="Establish and Maintain a Secure Configuration Process",
                description=(
                    "Establish and maintain a secure configuration process for "
                    "enterprise assets (end-user devices, including portable and "
                    "mobile; network devices; non-computing/IoT devices; and servers) "
                    "and software (operating systems and applications)."
                ),
                applicable_asset_classes=["devices", "applications"],
                applicable_asset_subclasses=[
                    "endpoints", "servers", "mobile", "iot", "onprem", "cloud",
                ],
            ),
            Safeguard(
                id="4.2",
                control_id="cis4",
                number="4.2",
                name=(
                    "Establish and Maintain a Secure Configuration Process for "
                    "Network Infrastructure"
                ),
                description=(
                    "Establish and maintain a secure configuration process for network "
                    "infrastructure."
                ),
                applicable_asset_classes=["networks"],
                applicable_asset_subclasses=["lan", "wan", "wireless"],
            ),
        ],
    ))

    ig2.controls.append(Control(
        id="cis5",
        number="5",
        name="Account Management",
        safeguards=[
            Safeguard(
                id="5.1",
                control_id="cis5",
                number="5.1",
                name="Establish and Maintain an Inventory of Accounts",
                description=(
                    "Establish and maintain an inventory of all accounts managed in "
                    "the enterprise."
                ),
                applicable_asset_classes=["users"],
                applicable_asset_subclasses=["employees", "contractors", "privileged"],
            ),
            Safeguard(
                id="5.2",
                control_id="cis5",
                number="5.2",
                name="Use Unique Passwords",
                description="Use unique passwords for all enterprise assets.",
                applicable_asset_classes=["users", "devices"],
                applicable_asset_subclasses=[
                    "employees", "contractors", "privileged", "endpoints", "servers",
                ],
            ),
        ],
    ))

    groups.append(ig2)

    # =========================================================================
    # IG3 - Organizational
    # =========================================================================
    ig3 = ControlGroup(id="ig3", name="IG3: Organizational", controls=[])

    ig3.controls.append(Control(
        id="cis6",
        number="6",
        name="Access Control Management",
        safeguards=[
            Safeguard(
                id="6.1",
                control_id="cis6",
                number="6.1",
                name="Establish an Access Granting Process",
                description=(
                    "Establish and follow a process to grant access to enterprise "
                    "assets upon new hire, rights grant, or role change of a user."
                ),
                applicable_asset_classes=["users"],
                applicable_asset_subclasses=["employees", "contractors", "privileged"],
            ),
            Safeguard(
                id="6.2",
                control_id="cis6",
                number="6.2",
                name="Establish an Access Revoking Process",
                description=(
                    "Establish and follow a process, following the principle of least "
                    "privilege, for revoking access to enterprise assets, through "
                    "disable, delete, or modify accounts, upon separation, or upon "
                    "role change of a user."
                ),
                applicable_asset_classes=["users"],
                applicable_asset_subclasses=["employees", "contractors", "privileged"],
            ),
        ],
    ))

    groups.append(ig3)

    return groups


# =============================================================================
# PUBLIC API
# =============================================================================

def get_default_taxonomy() -> Taxonomy:
    """
    Get the shipped CIS taxonomy.

    A fresh copy is built on every call so callers may hold on to it
    without sharing state.

    Returns:
        Taxonomy with the CIS control groups and asset classes.
    """
    return Taxonomy(
        control_groups=_build_control_groups(),
        asset_classes=_build_asset_classes(),
    )


def get_statistics(taxonomy: Taxonomy | None = None) -> dict[str, int]:
    """
    Get counts for a taxonomy.

    Args:
        taxonomy: Taxonomy to count. Defaults to the shipped taxonomy.

    Returns:
        Dictionary with counts of groups, controls, safeguards, asset classes
        and asset subclasses.
    """
    if taxonomy is None:
        taxonomy = get_default_taxonomy()

    controls = [c for g in taxonomy.control_groups for c in g.controls]
    return {
        "control_groups": len(taxonomy.control_groups),
        "controls": len(controls),
        "safeguards": sum(len(c.safeguards) for c in controls),
        "asset_classes": len(taxonomy.asset_classes),
        "asset_subclasses": sum(len(a.subclasses) for a in taxonomy.asset_classes),
    }


def export_taxonomy_json(path: Path | str, taxonomy: Taxonomy | None = None) -> None:
    """
    Export a control hierarchy to a JSON file.

    The output can be read back with ``load_taxonomy``.

    Args:
        path: Output file path.
        taxonomy: Taxonomy to export. Defaults to the shipped taxonomy.
    """
    path = Path(path)
    if taxonomy is None:
        taxonomy = get_default_taxonomy()

    data = {
        "source": "CIS Critical Security Controls",
        **taxonomy.to_dict(),
        "statistics": get_statistics(taxonomy),
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
