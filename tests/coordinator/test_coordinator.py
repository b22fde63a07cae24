"""Tests for the coordinator request surface and load lifecycle.

Critical Invariants:
- One operation at a time; a busy coordinator answers False
- Progress reaches 1.0 before OperationComplete is sent
- Completion, failure and cancellation all leave the coordinator idle
- A cancelled load never reports OperationComplete
- Host handles are released or aborted once an operation ends
"""

import asyncio

import pytest

from scenecoord import (
    CoordinatorSettings,
    LoadAdditive,
    LoadProgress,
    LocalStreamingAdapter,
    OperationCancelled,
    OperationComplete,
    OperationFailed,
    OperationStarted,
    Phase,
    SceneCoordinator,
    UnitCatalog,
)
from scenecoord.streaming import OperationHandle, StreamStatus

# Single load lifecycle


@pytest.mark.asyncio
async def test_load_single_event_sequence(coordinator, recorder, adapter):
    """Loading Level_01 announces the start, reports progress and then completes.

    Why: A loading screen opens on the first event and closes on the last.
    """
    assert coordinator.load_single("Level_01") is True
    await coordinator.wait()

    types = recorder.types()
    assert types[0] is OperationStarted
    assert types[-1] is OperationComplete
    assert types[-2] is LoadProgress
    assert all(t is LoadProgress for t in types[1:-1])
    assert recorder.events[0] == OperationStarted("Level_01")
    assert recorder.events[-1] == OperationComplete("Level_01")
    assert recorder.events[-2].fraction == 1.0

    assert not coordinator.is_busy()
    assert coordinator.phase is Phase.IDLE
    assert adapter.active_units == ("Level_01",)


@pytest.mark.asyncio
async def test_progress_is_normalized_and_non_decreasing(coordinator, recorder):
    """Progress is raw / threshold, clamped to [0, 1] and never goes backwards."""
    coordinator.load_single("Level_01")
    await coordinator.wait()

    fractions = [e.fraction for e in recorder.of(LoadProgress)]
    assert fractions == sorted(fractions)
    assert all(0.0 <= f <= 1.0 for f in fractions)
    # load_steps=4 against the 0.9 threshold: 0, 0.25, 0.5, 0.75, then 1.0
    assert fractions == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])


@pytest.mark.asyncio
async def test_busy_from_first_event_until_complete(coordinator, recorder):
    """is_busy() is True for every event before OperationComplete, False at it.

    Why: Observers chain requests from the completion handler.
    """
    coordinator.load_single("Level_01")
    await coordinator.wait()

    assert all(recorder.busy_at_event[:-1])
    assert recorder.busy_at_event[-1] is False
    assert not coordinator.is_busy()


@pytest.mark.asyncio
async def test_started_fires_synchronously(coordinator, recorder):
    """OperationStarted is delivered before the request call returns."""
    coordinator.load_single("Menu")

    assert recorder.types() == [OperationStarted]
    assert coordinator.is_busy()
    assert coordinator.phase is Phase.STARTING

    await coordinator.wait()


@pytest.mark.asyncio
async def test_load_by_build_index(coordinator, recorder, adapter):
    """Units may be referenced by build index."""
    assert coordinator.load_single(3) is True
    await coordinator.wait()

    assert recorder.events[0] == OperationStarted("Level_01")
    assert adapter.active_units == ("Level_01",)


@pytest.mark.asyncio
async def test_load_additive_layers_units(coordinator, adapter):
    coordinator.load_single("Hub")
    await coordinator.wait()
    coordinator.load_additive("Level_02")
    await coordinator.wait()

    assert adapter.active_units == ("Hub", "Level_02")


@pytest.mark.asyncio
async def test_submit_accepts_request_values(coordinator, adapter):
    assert coordinator.submit(LoadAdditive("Menu")) is True
    await coordinator.wait()

    assert adapter.active_units == ("Boot", "Menu")


@pytest.mark.asyncio
async def test_finalize_held_until_streaming_saturates(coordinator, adapter):
    """Activation is held first, then allowed exactly once after streaming."""
    coordinator.load_single("Level_01")
    await coordinator.wait()

    assert [allow for _, allow in adapter.finalize_calls] == [False, True]


@pytest.mark.asyncio
async def test_settle_delay_precedes_finalize(adapter, catalog):
    """Finalization waits for the configured settle delay."""
    settings = CoordinatorSettings(settle_delay=0.05, tick_interval=0.0)
    coordinator = SceneCoordinator(adapter, catalog, settings=settings)
    loop = asyncio.get_running_loop()
    saturated_at: list[float] = []

    def on_progress(event: LoadProgress) -> None:
        if event.fraction == 1.0:
            saturated_at.append(loop.time())

    coordinator.events.subscribe(LoadProgress, on_progress)
    coordinator.load_single("Level_01")
    await coordinator.wait()

    assert saturated_at
    assert loop.time() - saturated_at[0] >= 0.04


# Rejection


@pytest.mark.asyncio
async def test_unknown_unit_rejected_without_events(coordinator, recorder):
    """A misspelled unit name returns False and nothing is broadcast."""
    assert coordinator.load_single("Nonexistent") is False

    assert recorder.events == []
    assert not coordinator.is_busy()
    assert coordinator.phase is Phase.IDLE


@pytest.mark.asyncio
async def test_out_of_range_index_rejected(coordinator, recorder):
    assert coordinator.load_single(99) is False
    assert coordinator.load_single(-1) is False
    assert recorder.events == []


@pytest.mark.asyncio
async def test_disabled_unit_rejected(coordinator, recorder):
    """Units disabled in the build list are known but not loadable."""
    assert coordinator.load_single("Credits") is False
    assert recorder.events == []


@pytest.mark.asyncio
async def test_back_to_back_requests_second_rejected(coordinator, recorder, adapter):
    """A second load issued in the same tick is turned away.

    Why: Queued loads would surprise a caller that already saw False.
    """
    assert coordinator.load_single("Level_01") is True
    assert coordinator.load_single("Level_02") is False
    await coordinator.wait()

    started = recorder.of(OperationStarted)
    completed = recorder.of(OperationComplete)
    assert started == [OperationStarted("Level_01")]
    assert completed == [OperationComplete("Level_01")]
    assert adapter.active_units == ("Level_01",)


@pytest.mark.asyncio
async def test_rejection_while_busy_leaves_state_unchanged(coordinator, recorder):
    coordinator.load_single("Level_01")
    phase = coordinator.phase
    events_before = list(recorder.events)

    assert coordinator.load_single("Menu") is False
    assert coordinator.unload("Boot") is False
    assert coordinator.unload_then_load("Boot", "Menu") is False

    assert coordinator.phase is phase
    assert recorder.events == events_before
    assert coordinator.is_busy()
    await coordinator.wait()


@pytest.mark.asyncio
async def test_rejection_logged_by_severity(coordinator, caplog):
    """Busy rejections are warnings; unknown units are errors."""
    with caplog.at_level("WARNING"):
        coordinator.load_single("Nonexistent")
        coordinator.load_single("Menu")
        coordinator.load_single("Hub")

    levels = [r.levelname for r in caplog.records if "rejected" in r.getMessage()]
    assert levels == ["ERROR", "WARNING"]
    await coordinator.wait()


def test_request_without_running_loop_raises(coordinator):
    """Requests need a running event loop; no state changes without one."""
    with pytest.raises(RuntimeError):
        coordinator.load_single("Menu")

    assert not coordinator.is_busy()
    assert coordinator.phase is Phase.IDLE


# Cancellation


@pytest.mark.asyncio
async def test_cancel_before_first_tick(coordinator, recorder, adapter):
    """Cancelling before the first tick stops the load before the host is asked for anything.

    Why: The host must never see a primitive the caller already gave up on.
    """
    coordinator.load_single("Level_01")
    assert coordinator.cancel() is True
    await asyncio.sleep(0)
    await coordinator.wait()

    assert recorder.types() == [OperationStarted, OperationCancelled]
    assert not coordinator.is_busy()
    assert adapter.active_units == ("Boot",)
    assert adapter.in_flight() == 0
    assert adapter.aborted == []


@pytest.mark.asyncio
async def test_cancel_while_running_abandons_handle(coordinator, recorder, adapter):
    """Cancelling mid-stream sends no finalize and abandons the host handle."""

    def cancel_on_progress(event: LoadProgress) -> None:
        if event.fraction >= 0.25:
            coordinator.cancel()

    coordinator.events.subscribe(LoadProgress, cancel_on_progress)
    coordinator.load_single("Level_01")
    await coordinator.wait()
    for _ in range(5):
        await asyncio.sleep(0)

    assert recorder.types()[-1] is OperationCancelled
    assert OperationComplete not in recorder.types()
    assert [e.fraction for e in recorder.of(LoadProgress)] == pytest.approx([0.0, 0.25])
    assert not coordinator.is_busy()
    assert len(adapter.aborted) == 1
    assert [allow for _, allow in adapter.finalize_calls] == [False]
    assert adapter.active_units == ("Boot",)


@pytest.mark.asyncio
async def test_cancel_from_another_task(coordinator):
    """Cancellation issued between ticks by unrelated code."""
    settings_slow = coordinator.settings.model_copy(update={"tick_interval": 0.01})
    slow = SceneCoordinator(LocalStreamingAdapter(load_steps=50), coordinator.catalog, settings_slow)
    events: list = []
    slow.events.subscribe(OperationCancelled, events.append)
    slow.events.subscribe(OperationComplete, events.append)

    slow.load_single("Level_01")
    await asyncio.sleep(0.03)
    assert slow.cancel() is True
    await slow.wait()

    assert events == [OperationCancelled()]
    assert not slow.is_busy()


@pytest.mark.asyncio
async def test_cancel_when_idle_is_noop(coordinator, recorder, caplog):
    """Repeated cancel() calls with nothing running only warn."""
    with caplog.at_level("WARNING"):
        assert coordinator.cancel() is False
        assert coordinator.cancel() is False

    assert recorder.events == []
    assert not coordinator.is_busy()
    assert any("No operation" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_cancel_refused_during_completing(coordinator, recorder):
    """Once streaming saturates, activation is no longer cancellable."""
    results: list[bool] = []

    def cancel_at_saturation(event: LoadProgress) -> None:
        if event.fraction == 1.0:
            results.append(coordinator.cancel())

    coordinator.events.subscribe(LoadProgress, cancel_at_saturation)
    coordinator.load_single("Level_01")
    await coordinator.wait()

    assert results == [False]
    assert recorder.types()[-1] is OperationComplete


@pytest.mark.asyncio
async def test_new_request_accepted_after_cancel(coordinator, recorder, adapter):
    coordinator.load_single("Level_01")
    coordinator.cancel()
    assert coordinator.load_single("Level_02") is True
    await coordinator.wait()

    assert recorder.events[-1] == OperationComplete("Level_02")
    assert adapter.active_units == ("Level_02",)


@pytest.mark.asyncio
async def test_external_task_cancellation_returns_to_idle(coordinator, recorder):
    """A task cancelled outside cancel() (e.g. loop shutdown) still ends idle."""
    coordinator.load_single("Level_01")
    await asyncio.sleep(0)
    task = coordinator._state.active_task
    assert task is not None

    task.cancel()
    await coordinator.wait()
    await asyncio.sleep(0)

    assert recorder.types()[-1] is OperationCancelled
    assert not coordinator.is_busy()


# Failure


@pytest.mark.asyncio
async def test_streaming_failure_returns_to_idle(catalog, settings, make_recorder, caplog):
    """A host failure is logged, fires OperationFailed and never OperationComplete."""
    adapter = LocalStreamingAdapter(load_steps=4, failing=["Level_01"], fail_after_polls=1)
    coordinator = SceneCoordinator(adapter, catalog, settings=settings)
    recorder = make_recorder(coordinator)

    with caplog.at_level("ERROR"):
        assert coordinator.load_single("Level_01") is True
        await coordinator.wait()

    assert recorder.types() == [OperationStarted, LoadProgress, OperationFailed]
    assert recorder.events[-1].unit == "Level_01"
    assert recorder.busy_at_event[-1] is False
    assert not coordinator.is_busy()
    assert any("failed" in r.getMessage() for r in caplog.records)

    # The coordinator accepts new work after a failure
    assert coordinator.load_single("Level_02") is True
    await coordinator.wait()
    assert recorder.events[-1] == OperationComplete("Level_02")


class _ExplodingAdapter(LocalStreamingAdapter):
    def begin_load(self, unit, mode) -> OperationHandle:
        raise RuntimeError("engine went away")


@pytest.mark.asyncio
async def test_adapter_exception_is_contained(catalog, settings, make_recorder):
    """An adapter that raises ends the operation cleanly; nothing propagates."""
    coordinator = SceneCoordinator(_ExplodingAdapter(), catalog, settings=settings)
    recorder = make_recorder(coordinator)

    coordinator.load_single("Menu")
    await coordinator.wait()

    assert recorder.types() == [OperationStarted, OperationFailed]
    assert "engine went away" in recorder.events[-1].reason
    assert not coordinator.is_busy()


class _CrashMidStreamAdapter(LocalStreamingAdapter):
    def progress(self, handle: OperationHandle) -> float:
        if super().progress(handle) > 0.0:
            raise RuntimeError("stream lost")
        return 0.0


@pytest.mark.asyncio
async def test_adapter_exception_mid_stream_aborts_handle(catalog, settings, make_recorder):
    """A handle whose adapter call raised is aborted, not left pending in the host."""
    adapter = _CrashMidStreamAdapter()
    coordinator = SceneCoordinator(adapter, catalog, settings=settings)
    recorder = make_recorder(coordinator)

    coordinator.load_single("Menu")
    await coordinator.wait()

    assert recorder.types() == [OperationStarted, LoadProgress, OperationFailed]
    assert recorder.events[-1].unit == "Menu"
    assert adapter.in_flight() == 0


class _FailingActivationAdapter(LocalStreamingAdapter):
    def __init__(self) -> None:
        super().__init__()
        self.finalized: set[int] = set()

    def is_done(self, handle: OperationHandle) -> bool:
        return True

    def status(self, handle: OperationHandle) -> StreamStatus:
        if handle.id in self.finalized:
            return StreamStatus.FAILED
        return super().status(handle)

    def set_finalize(self, handle: OperationHandle, allow: bool) -> None:
        super().set_finalize(handle, allow)
        if allow:
            self.finalized.add(handle.id)


@pytest.mark.asyncio
async def test_failure_during_activation(catalog, settings, make_recorder):
    """Failure after LoadProgress(1.0) still ends without OperationComplete."""
    adapter = _FailingActivationAdapter()
    coordinator = SceneCoordinator(adapter, catalog, settings=settings)
    recorder = make_recorder(coordinator)

    coordinator.load_single("Menu")
    await coordinator.wait()

    assert recorder.types()[-2:] == [LoadProgress, OperationFailed]
    assert not coordinator.is_busy()


# Observers


@pytest.mark.asyncio
async def test_completion_handler_can_chain_next_load(coordinator, adapter):
    """Terminal events fire after the coordinator is idle."""
    accepted: list[bool] = []

    def chain(event: OperationComplete) -> None:
        if event.unit == "Menu":
            accepted.append(coordinator.load_additive("Hub"))

    coordinator.events.subscribe(OperationComplete, chain)
    coordinator.load_single("Menu")
    await coordinator.wait()

    assert accepted == [True]
    assert adapter.active_units == ("Menu", "Hub")


@pytest.mark.asyncio
async def test_throwing_observer_does_not_break_operation(coordinator, recorder):
    def broken(event) -> None:
        raise ValueError("observer bug")

    coordinator.events.subscribe(LoadProgress, broken)
    coordinator.load_single("Level_01")
    await coordinator.wait()

    assert recorder.types()[-1] is OperationComplete


@pytest.mark.asyncio
async def test_shutdown_cancels_and_clears_subscribers(coordinator, recorder):
    coordinator.load_single("Level_01")
    await coordinator.shutdown()
    await asyncio.sleep(0)

    assert recorder.types() == [OperationStarted, OperationCancelled]
    assert coordinator.events.subscriber_count() == 0
    assert not coordinator.is_busy()


@pytest.mark.asyncio
async def test_shutdown_when_idle(coordinator, recorder):
    await coordinator.shutdown()

    assert recorder.events == []
    assert coordinator.events.subscriber_count() == 0


def test_catalog_is_shared_with_gate():
    catalog = UnitCatalog(["A"])
    coordinator = SceneCoordinator(LocalStreamingAdapter(), catalog)
    assert coordinator.catalog is catalog


# Host handle lifetime


@pytest.mark.asyncio
async def test_handles_released_after_repeated_loads(coordinator, adapter):
    """Why: A long session must not grow the host's handle table."""
    for _ in range(50):
        assert coordinator.load_single("Menu") is True
        await coordinator.wait()

    assert adapter.in_flight() == 0
    assert len(adapter.released) == 50
    assert adapter.aborted == []


@pytest.mark.asyncio
async def test_handle_released_after_streaming_failure(coordinator, adapter):
    adapter.fail("Level_01")

    coordinator.load_single("Level_01")
    await coordinator.wait()

    assert [h.unit.name for h in adapter.released] == ["Level_01"]
    assert adapter.in_flight() == 0


@pytest.mark.asyncio
async def test_released_handle_is_invalid(coordinator, adapter):
    coordinator.load_single("Menu")
    await coordinator.wait()

    with pytest.raises(KeyError):
        adapter.status(adapter.released[0])
