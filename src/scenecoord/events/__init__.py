"""Event surface consumed by loading screens and other observers."""

from scenecoord.events.bus import EventBus
from scenecoord.events.models import (
    CoordinatorEvent,
    LoadProgress,
    OperationCancelled,
    OperationComplete,
    OperationFailed,
    OperationStarted,
    UnloadComplete,
    UnloadStarted,
)

__all__ = [
    "EventBus",
    "CoordinatorEvent",
    "OperationStarted",
    "LoadProgress",
    "OperationComplete",
    "UnloadStarted",
    "UnloadComplete",
    "OperationCancelled",
    "OperationFailed",
]
