"""scenecoord: asynchronous scene transition coordinator.

Usage:
    from scenecoord import (
        LoadProgress,
        LocalStreamingAdapter,
        SceneCoordinator,
        UnitCatalog,
    )

    catalog = UnitCatalog(["Boot", "Menu", "Level_01"])
    coordinator = SceneCoordinator(LocalStreamingAdapter(), catalog)
    coordinator.events.subscribe(LoadProgress, lambda e: print(f"{e.fraction:.0%}"))

    async def main():
        coordinator.load_single("Level_01")
        await coordinator.wait()
"""

__version__ = "0.1.0"

# Application wiring
from scenecoord.app import SceneContext

# Configuration
from scenecoord.config import CoordinatorSettings

# Coordinator
from scenecoord.coordinator import (
    CoordinatorError,
    Phase,
    RejectReason,
    RequestRejected,
    SceneCoordinator,
    StreamingFailure,
)

# Core values
from scenecoord.core import (
    LoadAdditive,
    LoadMode,
    LoadSingle,
    ManifestEntry,
    OperationRequest,
    UnitCatalog,
    UnitId,
    UnitRef,
    Unload,
    UnloadThenLoad,
    UnknownUnitError,
    build_unit_enum,
    load_manifest,
)

# Events
from scenecoord.events import (
    EventBus,
    LoadProgress,
    OperationCancelled,
    OperationComplete,
    OperationFailed,
    OperationStarted,
    UnloadComplete,
    UnloadStarted,
)

# Streaming
from scenecoord.streaming import (
    LocalStreamingAdapter,
    OperationHandle,
    StreamingAdapter,
    StreamStatus,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "UnitId",
    "UnitRef",
    "UnitCatalog",
    "UnknownUnitError",
    "ManifestEntry",
    "load_manifest",
    "build_unit_enum",
    "LoadMode",
    "LoadSingle",
    "LoadAdditive",
    "Unload",
    "UnloadThenLoad",
    "OperationRequest",
    # Coordinator
    "SceneCoordinator",
    "Phase",
    "CoordinatorError",
    "RequestRejected",
    "RejectReason",
    "StreamingFailure",
    # Events
    "EventBus",
    "OperationStarted",
    "LoadProgress",
    "OperationComplete",
    "UnloadStarted",
    "UnloadComplete",
    "OperationCancelled",
    "OperationFailed",
    # Streaming
    "StreamingAdapter",
    "LocalStreamingAdapter",
    "OperationHandle",
    "StreamStatus",
    # Config and wiring
    "CoordinatorSettings",
    "SceneContext",
]
