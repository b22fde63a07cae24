"""Unit identity and the static unit catalog.

A unit is one loadable scene. Callers refer to units by name or by build
index; the catalog resolves either form to a canonical UnitId once, so
nothing downstream branches on the reference type.

Usage:
    catalog = UnitCatalog(["Boot", "Menu", "Level_01"])
    unit = catalog.resolve("Level_01")  # UnitId(name="Level_01", index=2)
    same = catalog.resolve(2)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

UnitRef = str | int
"""Symbolic name or build index. IntEnum members count as indices."""


class UnknownUnitError(KeyError):
    """Raised when a unit reference is not in the catalog."""

    pass


@dataclass(frozen=True, slots=True)
class UnitId:
    """Canonical unit identifier. Only produced by UnitCatalog.resolve()."""

    name: str
    index: int

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One slot of the build list."""

    unit: UnitId
    enabled: bool = True


class UnitCatalog:
    """Static name <-> index table of known units.

    Index is the unit's position in the build list. Disabled entries keep
    their index and remain known, but are not loadable.

    Args:
        names: Unit names in build order.
        disabled: Names present in the build list but not loadable.
    """

    def __init__(self, names: Iterable[str] = (), disabled: Iterable[str] = ()) -> None:
        disabled_names = set(disabled)
        self._entries: list[CatalogEntry] = []
        self._by_name: dict[str, CatalogEntry] = {}
        for index, name in enumerate(names):
            if name in self._by_name:
                raise ValueError(f"Duplicate unit name in catalog: {name!r}")
            entry = CatalogEntry(UnitId(name, index), enabled=name not in disabled_names)
            self._entries.append(entry)
            self._by_name[name] = entry

    def _entry(self, ref: UnitRef) -> CatalogEntry:
        # bool is an int subclass but never a valid build index
        if isinstance(ref, bool):
            raise UnknownUnitError(ref)
        if isinstance(ref, int):
            if 0 <= ref < len(self._entries):
                return self._entries[ref]
            raise UnknownUnitError(ref)
        if isinstance(ref, str):
            entry = self._by_name.get(ref)
            if entry is None:
                raise UnknownUnitError(ref)
            return entry
        raise UnknownUnitError(ref)

    def resolve(self, ref: UnitRef) -> UnitId:
        """Resolve a name or build index to its canonical UnitId.

        Raises:
            UnknownUnitError: If the reference names no unit in the build list.
        """
        return self._entry(ref).unit

    def is_enabled(self, ref: UnitRef) -> bool:
        """Check if a known unit is enabled. Raises UnknownUnitError if unknown."""
        return self._entry(ref).enabled

    def can_load(self, ref: UnitRef) -> bool:
        """Check if the reference names a known, enabled unit."""
        try:
            return self._entry(ref).enabled
        except UnknownUnitError:
            return False

    def names(self) -> list[str]:
        """All unit names in build order, disabled ones included."""
        return [entry.unit.name for entry in self._entries]

    def entries(self) -> list[CatalogEntry]:
        return list(self._entries)

    def __contains__(self, ref: object) -> bool:
        if not isinstance(ref, (str, int)):
            return False
        try:
            self._entry(ref)
        except UnknownUnitError:
            return False
        return True

    def __iter__(self) -> Iterator[UnitId]:
        return (entry.unit for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"UnitCatalog({self.names()!r})"
