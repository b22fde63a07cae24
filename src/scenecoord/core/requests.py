"""Operation requests and their resolved form.

Usage:
    request = UnloadThenLoad(unload="Hub", load="Level_02")
    coordinator.submit(request)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from scenecoord.core.units import UnitId, UnitRef


class LoadMode(Enum):
    """How a loaded unit relates to the units already active."""

    SINGLE = auto()  # Replaces all active units
    ADDITIVE = auto()  # Layers on top of active units


@dataclass(frozen=True, slots=True)
class LoadSingle:
    """Load a unit, replacing every active unit."""

    unit: UnitRef


@dataclass(frozen=True, slots=True)
class LoadAdditive:
    """Load a unit on top of the active units."""

    unit: UnitRef


@dataclass(frozen=True, slots=True)
class Unload:
    """Unload an active unit by name."""

    unit: str


@dataclass(frozen=True, slots=True)
class UnloadThenLoad:
    """Unload one unit, then load another additively, as one operation."""

    unload: str
    load: UnitRef


OperationRequest = LoadSingle | LoadAdditive | Unload | UnloadThenLoad


@dataclass(frozen=True, slots=True)
class ResolvedLoad:
    """A validated load with its unit resolved."""

    unit: UnitId
    mode: LoadMode

    def describe(self) -> str:
        return f"load {self.unit} ({self.mode.name.lower()})"


@dataclass(frozen=True, slots=True)
class ResolvedUnload:
    """A validated unload with its unit resolved."""

    unit: UnitId

    def describe(self) -> str:
        return f"unload {self.unit}"


@dataclass(frozen=True, slots=True)
class ResolvedUnloadThenLoad:
    """A validated unload-then-load; the load step is always additive."""

    unload: UnitId
    load: UnitId

    def describe(self) -> str:
        return f"unload {self.unload} then load {self.load}"


ResolvedOperation = ResolvedLoad | ResolvedUnload | ResolvedUnloadThenLoad
