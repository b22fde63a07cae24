"""Coordinator error taxonomy."""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scenecoord.coordinator.state import Phase
    from scenecoord.core.requests import OperationRequest
    from scenecoord.core.units import UnitId


class CoordinatorError(Exception):
    """Base class for coordinator errors."""

    pass


class RejectReason(Enum):
    BUSY = auto()
    UNKNOWN_UNIT = auto()
    DISABLED_UNIT = auto()
    INVALID_REQUEST = auto()


class RequestRejected(CoordinatorError):
    """Raised by the validation gate. Never leaves the request surface."""

    def __init__(self, reason: RejectReason, request: OperationRequest, detail: str = "") -> None:
        self.reason = reason
        self.request = request
        self.detail = detail
        message = f"{request!r} rejected: {reason.name.lower()}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class StreamingFailure(CoordinatorError):
    """Raised inside the active task when the host reports a failure."""

    def __init__(self, unit: UnitId, reason: str) -> None:
        self.unit = unit
        self.reason = reason
        super().__init__(f"Streaming {unit} failed: {reason}")


class InvalidTransition(CoordinatorError):
    """Raised on a phase change the state machine does not allow."""

    def __init__(self, current: Phase, target: Phase) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Illegal phase transition {current.name} -> {target.name}")
