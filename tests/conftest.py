"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from scenecoord import (
    CoordinatorSettings,
    LoadProgress,
    LocalStreamingAdapter,
    OperationCancelled,
    OperationComplete,
    OperationFailed,
    OperationStarted,
    SceneCoordinator,
    UnitCatalog,
    UnloadComplete,
    UnloadStarted,
)
from scenecoord.streaming import OperationHandle

ALL_EVENTS = (
    OperationStarted,
    LoadProgress,
    OperationComplete,
    UnloadStarted,
    UnloadComplete,
    OperationCancelled,
    OperationFailed,
)


class RecordingAdapter(LocalStreamingAdapter):
    """LocalStreamingAdapter that records finalize, abort and release calls."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.finalize_calls: list[tuple[OperationHandle, bool]] = []
        self.aborted: list[OperationHandle] = []
        self.released: list[OperationHandle] = []

    def set_finalize(self, handle: OperationHandle, allow: bool) -> None:
        super().set_finalize(handle, allow)
        self.finalize_calls.append((handle, allow))

    def abort(self, handle: OperationHandle) -> None:
        self.aborted.append(handle)
        super().abort(handle)

    def release(self, handle: OperationHandle) -> None:
        self.released.append(handle)
        super().release(handle)


UNIT_NAMES = ["Boot", "Menu", "Hub", "Level_01", "Level_02", "Credits"]


class EventRecorder:
    """Subscribes to every event type and records what it sees."""

    def __init__(self, coordinator: SceneCoordinator) -> None:
        self.coordinator = coordinator
        self.events: list = []
        self.busy_at_event: list[bool] = []
        for event_type in ALL_EVENTS:
            coordinator.events.subscribe(event_type, self)

    def __call__(self, event) -> None:
        self.events.append(event)
        self.busy_at_event.append(self.coordinator.is_busy())

    def types(self) -> list[type]:
        return [type(e) for e in self.events]

    def of(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def settings() -> CoordinatorSettings:
    """Fast settings: no settle delay, one loop pass per tick."""
    return CoordinatorSettings(settle_delay=0.0, tick_interval=0.0)


@pytest.fixture
def catalog() -> UnitCatalog:
    return UnitCatalog(UNIT_NAMES, disabled=["Credits"])


@pytest.fixture
def make_adapter():
    """Factory for recording adapters with custom streaming behaviour."""
    return RecordingAdapter


@pytest.fixture
def adapter(make_adapter) -> RecordingAdapter:
    return make_adapter(load_steps=4, initial_units=["Boot"])


@pytest.fixture
def coordinator(adapter, catalog, settings) -> SceneCoordinator:
    return SceneCoordinator(adapter, catalog, settings=settings)


@pytest.fixture
def recorder(coordinator) -> EventRecorder:
    return EventRecorder(coordinator)


@pytest.fixture
def make_recorder():
    """Factory for recorders on coordinators built inside a test."""
    return EventRecorder
