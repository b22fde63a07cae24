"""Operation driver: runs the load and unload phases against the host.

The driver runs inside the coordinator's active task. It owns the in-flight
host handle, suspends once per scheduler tick while polling, and reports
progress through the event bus.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from scenecoord.config import CoordinatorSettings
from scenecoord.coordinator.errors import StreamingFailure
from scenecoord.coordinator.state import CoordinatorState, Phase
from scenecoord.core.requests import LoadMode
from scenecoord.core.units import UnitId
from scenecoord.events import EventBus, LoadProgress, OperationStarted, UnloadStarted
from scenecoord.streaming import OperationHandle, StreamingAdapter, StreamStatus

logger = logging.getLogger(__name__)


class OperationDriver:
    """Drives one primitive at a time through its phases.

    Args:
        adapter: Host streaming adapter.
        events: Bus that observers subscribe to.
        state: Coordinator state shared with the request surface.
        settings: Tick interval, settle delay and completion threshold.
    """

    def __init__(
        self,
        adapter: StreamingAdapter,
        events: EventBus,
        state: CoordinatorState,
        settings: CoordinatorSettings,
    ) -> None:
        self._adapter = adapter
        self._events = events
        self._state = state
        self._settings = settings
        self._handle: OperationHandle | None = None

    @property
    def handle(self) -> OperationHandle | None:
        """The in-flight host handle, if any."""
        return self._handle

    async def tick(self) -> None:
        """Yield to the scheduler for one tick."""
        await asyncio.sleep(self._settings.tick_interval)

    def emit(self, event: Any) -> None:
        """Emit from inside the active task.

        A handler may call cancel() during the broadcast; the task then stops
        here instead of running on until its next suspension point.
        """
        self._events.emit(event)
        if self._state.active_task is not asyncio.current_task():
            raise asyncio.CancelledError()

    def start_load(self, unit: UnitId) -> OperationStarted:
        """Enter STARTING and return the event announcing it."""
        self._state.transition(Phase.STARTING)
        return OperationStarted(unit.name)

    def start_unload(self, unit: UnitId) -> UnloadStarted:
        """Enter UNLOADING and return the event announcing it."""
        self._state.transition(Phase.UNLOADING)
        return UnloadStarted(unit.name)

    async def load(self, unit: UnitId, mode: LoadMode) -> None:
        """Stream, settle and finalize unit. Expects the STARTING phase.

        Raises:
            StreamingFailure: If the host reports a failed load.
        """
        # Give observers one tick to show a loading screen before heavy work
        await self.tick()

        handle = self._adapter.begin_load(unit, mode)
        self._handle = handle
        self._adapter.set_finalize(handle, False)
        self._state.transition(Phase.RUNNING)

        threshold = self._settings.completion_threshold
        reported = 0.0
        while True:
            raw = self._adapter.progress(handle)
            self._check(handle)
            if raw >= threshold:
                break
            reported = max(reported, min(1.0, raw / threshold))
            self.emit(LoadProgress(reported))
            await self.tick()

        self._state.transition(Phase.COMPLETING)
        self.emit(LoadProgress(1.0))
        await asyncio.sleep(self._settings.settle_delay)

        self._adapter.set_finalize(handle, True)
        while not self._adapter.is_done(handle):
            await self.tick()
        self._check(handle)
        self._finish(handle)

    async def unload(self, unit: UnitId) -> None:
        """Unload unit and wait for the host. Expects the UNLOADING phase.

        Raises:
            StreamingFailure: If the host reports a failed unload.
        """
        handle = self._adapter.begin_unload(unit)
        self._handle = handle
        while not self._adapter.is_done(handle):
            await self.tick()
        self._check(handle)
        self._finish(handle)

    def abandon(self) -> None:
        """Tell the host the in-flight primitive is abandoned. No finalize is sent."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            self._adapter.abort(handle)
        except Exception:
            logger.exception("Host adapter failed to abort handle for %s", handle.unit)

    def _finish(self, handle: OperationHandle) -> None:
        self._handle = None
        self._adapter.release(handle)

    def _check(self, handle: OperationHandle) -> None:
        if self._adapter.status(handle) is StreamStatus.FAILED:
            self._finish(handle)
            raise StreamingFailure(handle.unit, "host reported failure")
