"""Streaming handle and status models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from scenecoord.core.units import UnitId


class StreamStatus(Enum):
    """Lifecycle status of one host primitive."""

    PENDING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class HandleKind(Enum):
    LOAD = auto()
    UNLOAD = auto()


@dataclass(frozen=True, slots=True)
class OperationHandle:
    """Opaque token for one in-flight host primitive.

    Issued by the adapter, owned by the coordinator's active task, and
    discarded once the operation reaches a terminal phase.
    """

    id: int
    unit: UnitId
    kind: HandleKind
