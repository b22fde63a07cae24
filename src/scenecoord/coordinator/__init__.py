"""Operation coordination: validation, phases, sequencing and the request surface.

Architecture Note:
    coordinator/ is the stateful layer. Unlike core/ (pure values), it owns
    the busy flag and the single active task, and is the only code that
    talks to the streaming adapter.
"""

from scenecoord.coordinator.coordinator import SceneCoordinator
from scenecoord.coordinator.driver import OperationDriver
from scenecoord.coordinator.errors import (
    CoordinatorError,
    InvalidTransition,
    RejectReason,
    RequestRejected,
    StreamingFailure,
)
from scenecoord.coordinator.gate import ValidationGate
from scenecoord.coordinator.sequencer import Sequencer
from scenecoord.coordinator.state import CoordinatorState, Phase

__all__ = [
    "SceneCoordinator",
    "ValidationGate",
    "OperationDriver",
    "Sequencer",
    "CoordinatorState",
    "Phase",
    # Errors
    "CoordinatorError",
    "RequestRejected",
    "RejectReason",
    "StreamingFailure",
    "InvalidTransition",
]
