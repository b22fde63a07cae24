"""Event values broadcast by the coordinator.

Every event is an immutable value. Observers subscribe by event type.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OperationStarted:
    """A load began. Fired before any progress; show the loading screen here."""

    unit: str


@dataclass(frozen=True, slots=True)
class LoadProgress:
    """Normalized load progress in [0, 1]. Non-decreasing within one operation."""

    fraction: float


@dataclass(frozen=True, slots=True)
class OperationComplete:
    """The loaded unit is active. The coordinator is already idle."""

    unit: str


@dataclass(frozen=True, slots=True)
class UnloadStarted:
    unit: str


@dataclass(frozen=True, slots=True)
class UnloadComplete:
    unit: str


@dataclass(frozen=True, slots=True)
class OperationCancelled:
    """The active operation was abandoned by cancel()."""


@dataclass(frozen=True, slots=True)
class OperationFailed:
    """The host reported a failure. No OperationComplete follows."""

    unit: str
    reason: str


CoordinatorEvent = (
    OperationStarted
    | LoadProgress
    | OperationComplete
    | UnloadStarted
    | UnloadComplete
    | OperationCancelled
    | OperationFailed
)
