"""Host streaming adapter protocol.

The adapter wraps the host engine's asynchronous load and unload primitives
behind one polling interface, enabling:
- The in-process LocalStreamingAdapter (default, tests, demos)
- Engine bindings (host-supplied)

Usage:
    adapter = LocalStreamingAdapter()
    coordinator = SceneCoordinator(adapter, catalog)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from scenecoord.core.requests import LoadMode
from scenecoord.core.units import UnitId
from scenecoord.streaming.models import OperationHandle, StreamStatus


@runtime_checkable
class StreamingAdapter(Protocol):
    """Uniform polling interface over the host's streaming primitives.

    Every method is called from the event loop thread, once per scheduler
    tick at most. Implementations must not block.
    """

    def begin_load(self, unit: UnitId, mode: LoadMode) -> OperationHandle:
        """Start streaming unit in the given mode."""
        ...

    def begin_unload(self, unit: UnitId) -> OperationHandle:
        """Start unloading an active unit."""
        ...

    def progress(self, handle: OperationHandle) -> float:
        """Raw streaming progress.

        Streaming reports values below the completion threshold and holds at
        the threshold until finalization is allowed.
        """
        ...

    def set_finalize(self, handle: OperationHandle, allow: bool) -> None:
        """Allow or hold activation of a streamed unit."""
        ...

    def is_done(self, handle: OperationHandle) -> bool:
        """Check if the primitive has finished, successfully or not."""
        ...

    def status(self, handle: OperationHandle) -> StreamStatus:
        """Current status; FAILED means the primitive will never succeed."""
        ...

    def abort(self, handle: OperationHandle) -> None:
        """Abandon an in-flight primitive. The host releases what it streamed."""
        ...

    def release(self, handle: OperationHandle) -> None:
        """Forget a primitive that reached a terminal status. The handle is invalid afterwards."""
        ...
