"""SceneCoordinator: the request surface for scene transitions.

Usage:
    coordinator = SceneCoordinator(LocalStreamingAdapter(), UnitCatalog(["Menu", "Level_01"]))
    coordinator.events.subscribe(LoadProgress, on_progress)

    coordinator.load_single("Level_01")  # returns False if rejected
    await coordinator.wait()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from scenecoord.config import CoordinatorSettings
from scenecoord.coordinator.driver import OperationDriver
from scenecoord.coordinator.errors import RequestRejected, StreamingFailure
from scenecoord.coordinator.gate import ValidationGate, log_rejection
from scenecoord.coordinator.sequencer import Sequencer
from scenecoord.coordinator.state import CANCELLABLE, CoordinatorState, Phase
from scenecoord.core.requests import (
    LoadAdditive,
    LoadSingle,
    OperationRequest,
    ResolvedLoad,
    ResolvedOperation,
    ResolvedUnload,
    ResolvedUnloadThenLoad,
    Unload,
    UnloadThenLoad,
)
from scenecoord.core.units import UnitCatalog, UnitId, UnitRef
from scenecoord.events import (
    EventBus,
    OperationCancelled,
    OperationComplete,
    OperationFailed,
    UnloadComplete,
)
from scenecoord.streaming import StreamingAdapter

logger = logging.getLogger(__name__)


class SceneCoordinator:
    """Accepts load/unload requests and runs at most one at a time.

    Each accepted request becomes one asyncio task on the running loop. A
    request made while an operation is active is rejected, never queued.
    Every exit path (completion, failure, cancellation) returns the
    coordinator to IDLE, and terminal events fire only after that, so a
    terminal handler may issue the next request.

    Args:
        adapter: Host streaming adapter.
        catalog: Known units, used by the validation gate.
        settings: Timing configuration. Defaults to CoordinatorSettings().
        events: Event bus to publish on. A new bus is created if omitted.
    """

    def __init__(
        self,
        adapter: StreamingAdapter,
        catalog: UnitCatalog,
        settings: CoordinatorSettings | None = None,
        events: EventBus | None = None,
    ) -> None:
        self._settings = settings or CoordinatorSettings()
        self._events = events or EventBus()
        self._state = CoordinatorState()
        self._gate = ValidationGate(catalog)
        self._driver = OperationDriver(adapter, self._events, self._state, self._settings)
        self._sequencer = Sequencer(self._driver)

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def settings(self) -> CoordinatorSettings:
        return self._settings

    @property
    def catalog(self) -> UnitCatalog:
        return self._gate.catalog

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def is_busy(self) -> bool:
        """Check if an operation is in progress. Always safe to call."""
        return self._state.busy

    # Request surface

    def load_single(self, unit: UnitRef) -> bool:
        """Load unit by name or build index, replacing every active unit."""
        return self.submit(LoadSingle(unit))

    def load_additive(self, unit: UnitRef) -> bool:
        """Load unit by name or build index on top of the active units."""
        return self.submit(LoadAdditive(unit))

    def unload(self, unit: str) -> bool:
        """Unload an active unit by name."""
        return self.submit(Unload(unit))

    def unload_then_load(self, unload: str, load: UnitRef) -> bool:
        """Unload one unit, then load another additively, in one busy window."""
        return self.submit(UnloadThenLoad(unload, load))

    def submit(self, request: OperationRequest) -> bool:
        """Validate request and start it.

        Returns:
            True if the operation started, False if it was rejected.

        Raises:
            RuntimeError: If called with no running event loop.
        """
        loop = asyncio.get_running_loop()
        try:
            operation = self._gate.check(request, busy=self._state.busy)
        except RequestRejected as e:
            log_rejection(e)
            return False

        opening: Any
        if isinstance(operation, ResolvedLoad):
            opening = self._driver.start_load(operation.unit)
        elif isinstance(operation, ResolvedUnload):
            opening = self._driver.start_unload(operation.unit)
        else:
            opening = self._driver.start_unload(operation.unload)

        task = loop.create_task(self._run(operation), name=f"scenecoord: {operation.describe()}")
        self._state.active_task = task
        task.add_done_callback(self._on_task_done)
        logger.info("Started %s", operation.describe())
        self._events.emit(opening)
        return True

    def cancel(self) -> bool:
        """Abandon the active operation.

        Returns:
            True if an operation was cancelled. False, with a warning, when
            idle or when activation is already under way.
        """
        if not self._state.busy:
            logger.warning("No operation is in progress to cancel")
            return False
        if self._state.phase not in CANCELLABLE:
            logger.warning("Cannot cancel during %s; activation is under way", self._state.phase.name)
            return False

        task = self._state.active_task
        self._state.transition(Phase.CANCELLING)
        self._state.active_task = None
        if task is not None:
            task.cancel()
        self._driver.abandon()
        self._state.reset()
        logger.info("Operation cancelled by caller")
        self._events.emit(OperationCancelled())
        return True

    async def wait(self) -> None:
        """Wait until the coordinator is idle. Never raises for cancellation."""
        while (task := self._state.active_task) is not None:
            await asyncio.wait({task})
            if self._state.active_task is task:
                break

    async def shutdown(self) -> None:
        """Stop the active operation and drop every subscriber."""
        if self._state.busy:
            if self._state.phase in CANCELLABLE:
                self.cancel()
            else:
                await self.wait()
        self._events.clear()

    # Task body

    async def _run(self, operation: ResolvedOperation) -> None:
        try:
            await self._execute(operation)
        except StreamingFailure as e:
            logger.error("%s during %s", e, operation.describe())
            self._fail(e.unit.name, e.reason)
            return
        except Exception as e:
            logger.exception("Host adapter raised during %s", operation.describe())
            self._fail(self._failing_unit(operation).name, f"{type(e).__name__}: {e}")
            return

        self._state.reset()
        logger.info("Completed %s", operation.describe())
        self._events.emit(_terminal_event(operation))

    async def _execute(self, operation: ResolvedOperation) -> None:
        if isinstance(operation, ResolvedLoad):
            await self._driver.load(operation.unit, operation.mode)
        elif isinstance(operation, ResolvedUnload):
            await self._driver.unload(operation.unit)
        else:
            await self._sequencer.unload_then_load(operation.unload, operation.load)

    def _failing_unit(self, operation: ResolvedOperation) -> UnitId:
        handle = self._driver.handle
        if handle is not None:
            return handle.unit
        if isinstance(operation, ResolvedUnloadThenLoad):
            # Nothing in flight: the step that raised is named by the phase
            return operation.unload if self._state.phase is Phase.UNLOADING else operation.load
        return operation.unit

    def _fail(self, unit: str, reason: str) -> None:
        if self._state.active_task is not asyncio.current_task():
            return
        self._driver.abandon()
        self._state.reset()
        self._events.emit(OperationFailed(unit, reason))

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        # Cancelled by someone other than cancel(), e.g. event loop shutdown
        if task.cancelled() and self._state.active_task is task:
            self._driver.abandon()
            if self._state.phase in CANCELLABLE:
                self._state.transition(Phase.CANCELLING)
            self._state.reset()
            logger.warning("Operation task was cancelled externally")
            self._events.emit(OperationCancelled())


def _terminal_event(operation: ResolvedOperation) -> Any:
    if isinstance(operation, ResolvedUnload):
        return UnloadComplete(operation.unit.name)
    if isinstance(operation, ResolvedLoad):
        return OperationComplete(operation.unit.name)
    return OperationComplete(operation.load.name)
