"""Build manifest loading and unit enum generation.

The build manifest is the ordered list of unit files shipped with the
application. Each unit's name is its file stem and its index is its position
in the list.

Usage:
    catalog = load_manifest("build/units.json")
    Units = build_unit_enum(catalog)
    coordinator.load_single(Units.Level_01)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any

from scenecoord.core.units import UnitCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """One unit file in the build list."""

    path: str
    enabled: bool = True

    @property
    def name(self) -> str:
        return Path(self.path).stem

    @classmethod
    def from_raw(cls, raw: Any) -> ManifestEntry:
        """Create from a manifest item: a bare path or a {"path", "enabled"} object."""
        if isinstance(raw, str):
            return cls(path=raw)
        if isinstance(raw, dict) and isinstance(raw.get("path"), str):
            return cls(path=raw["path"], enabled=bool(raw.get("enabled", True)))
        raise ValueError(f"Invalid manifest entry: {raw!r}")


def catalog_from_entries(entries: Iterable[ManifestEntry]) -> UnitCatalog:
    """Build a catalog from manifest entries, preserving build order."""
    entries = list(entries)
    return UnitCatalog(
        (entry.name for entry in entries),
        disabled=(entry.name for entry in entries if not entry.enabled),
    )


def load_manifest(path: str | Path) -> UnitCatalog:
    """Load a JSON build manifest into a UnitCatalog.

    Args:
        path: JSON file holding a list of unit paths or {"path", "enabled"} objects.

    Raises:
        ValueError: If the file is not a JSON list or an entry is malformed.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Build manifest {path} must contain a JSON list")
    entries = [ManifestEntry.from_raw(item) for item in data]
    if not entries:
        logger.warning("Build manifest %s lists no units", path)
    return catalog_from_entries(entries)


def sanitize_identifier(name: str) -> str:
    """Turn a unit name into a valid Python identifier.

    Spaces become underscores, other non-alphanumeric characters are dropped,
    and a leading digit gets an underscore prefix.
    """
    name = name.replace(" ", "_")
    cleaned = "".join(c for c in name if c.isalnum() or c == "_")
    if cleaned and cleaned[0].isdigit():
        cleaned = "_" + cleaned
    return cleaned


def build_unit_enum(catalog: UnitCatalog, name: str = "Units") -> type[IntEnum]:
    """Generate an IntEnum with one member per enabled unit.

    Member values are build indices, so members can be passed anywhere a
    unit reference is accepted.

    Raises:
        ValueError: If two unit names sanitize to the same identifier, or a
            name sanitizes to nothing.
    """
    members: dict[str, int] = {}
    for entry in catalog.entries():
        if not entry.enabled:
            continue
        identifier = sanitize_identifier(entry.unit.name)
        if not identifier:
            raise ValueError(f"Unit name {entry.unit.name!r} has no valid identifier characters")
        if identifier in members:
            raise ValueError(f"Unit names collide after sanitizing: {identifier!r}")
        members[identifier] = entry.unit.index
    if not members:
        logger.warning("No enabled units in catalog; generated enum %s is empty", name)
    return IntEnum(name, members)  # type: ignore[return-value]
