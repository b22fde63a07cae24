"""Local in-process streaming adapter.

Deterministic simulation of a host streaming subsystem, suitable for
single-process use, demos and testing. Nothing is actually streamed: each
progress poll advances a load by a fixed step.

Usage:
    adapter = LocalStreamingAdapter(load_steps=10, initial_units=["Boot"])
    coordinator = SceneCoordinator(adapter, catalog)
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from scenecoord.core.requests import LoadMode
from scenecoord.core.units import UnitId
from scenecoord.streaming.models import HandleKind, OperationHandle, StreamStatus

logger = logging.getLogger(__name__)


@dataclass
class _Stream:
    handle: OperationHandle
    mode: LoadMode | None = None
    raw: float = 0.0
    polls: int = 0
    finalize: bool = False
    status: StreamStatus = StreamStatus.PENDING


class LocalStreamingAdapter:
    """Simulated host that tracks which units are active.

    Loads advance by threshold / load_steps per progress poll and hold at the
    threshold until finalization is allowed; the next is_done poll then
    activates the unit. Unloads finish after unload_steps is_done polls.

    Args:
        load_steps: Progress polls needed to reach the threshold.
        unload_steps: is_done polls needed to finish an unload.
        threshold: Raw progress at which streaming holds for finalization.
        initial_units: Units active before any operation, by name.
        failing: Unit names whose loads fail after fail_after_polls polls.
        fail_after_polls: Progress polls a failing load survives.
    """

    def __init__(
        self,
        load_steps: int = 4,
        unload_steps: int = 1,
        threshold: float = 0.9,
        initial_units: Iterable[str] = (),
        failing: Iterable[str] = (),
        fail_after_polls: int = 1,
    ) -> None:
        if load_steps < 1 or unload_steps < 1:
            raise ValueError("load_steps and unload_steps must be at least 1")
        self._load_steps = load_steps
        self._unload_steps = unload_steps
        self._threshold = threshold
        self._active: list[str] = list(initial_units)
        self._failing = set(failing)
        self._fail_after_polls = fail_after_polls
        self._ids = itertools.count(1)
        self._streams: dict[int, _Stream] = {}

    @property
    def active_units(self) -> tuple[str, ...]:
        """Active unit names in activation order."""
        return tuple(self._active)

    def fail(self, unit_name: str) -> None:
        """Make future loads of unit_name fail."""
        self._failing.add(unit_name)

    def in_flight(self) -> int:
        """Number of handles not yet released or aborted."""
        return len(self._streams)

    def _stream(self, handle: OperationHandle) -> _Stream:
        stream = self._streams.get(handle.id)
        if stream is None:
            raise KeyError(f"Unknown, released or abandoned handle {handle.id}")
        return stream

    def begin_load(self, unit: UnitId, mode: LoadMode) -> OperationHandle:
        handle = OperationHandle(next(self._ids), unit, HandleKind.LOAD)
        self._streams[handle.id] = _Stream(handle, mode=mode)
        logger.debug("Streaming %s (%s) as handle %d", unit, mode.name.lower(), handle.id)
        return handle

    def begin_unload(self, unit: UnitId) -> OperationHandle:
        handle = OperationHandle(next(self._ids), unit, HandleKind.UNLOAD)
        stream = _Stream(handle)
        if unit.name not in self._active:
            logger.warning("Cannot unload %s: unit is not active", unit)
            stream.status = StreamStatus.FAILED
        self._streams[handle.id] = stream
        return handle

    def progress(self, handle: OperationHandle) -> float:
        stream = self._stream(handle)
        if handle.kind is HandleKind.UNLOAD:
            return min(1.0, stream.polls / self._unload_steps)
        if stream.status is not StreamStatus.PENDING:
            return stream.raw
        current = stream.raw
        stream.polls += 1
        if handle.unit.name in self._failing and stream.polls > self._fail_after_polls:
            stream.status = StreamStatus.FAILED
            return current
        step = self._threshold / self._load_steps
        stream.raw = min(self._threshold, current + step)
        return current

    def set_finalize(self, handle: OperationHandle, allow: bool) -> None:
        self._stream(handle).finalize = allow

    def is_done(self, handle: OperationHandle) -> bool:
        stream = self._stream(handle)
        if stream.status is not StreamStatus.PENDING:
            return True
        if handle.kind is HandleKind.UNLOAD:
            stream.polls += 1
            if stream.polls >= self._unload_steps:
                if handle.unit.name in self._active:
                    self._active.remove(handle.unit.name)
                stream.status = StreamStatus.SUCCEEDED
            return stream.status is not StreamStatus.PENDING
        if stream.finalize and stream.raw >= self._threshold:
            self._activate(handle.unit.name, stream.mode)
            stream.status = StreamStatus.SUCCEEDED
            return True
        return False

    def _activate(self, name: str, mode: LoadMode | None) -> None:
        if mode is LoadMode.SINGLE:
            self._active = [name]
        elif name not in self._active:
            self._active.append(name)

    def status(self, handle: OperationHandle) -> StreamStatus:
        return self._stream(handle).status

    def abort(self, handle: OperationHandle) -> None:
        if self._streams.pop(handle.id, None) is not None:
            logger.debug("Abandoned handle %d for %s", handle.id, handle.unit)

    def release(self, handle: OperationHandle) -> None:
        self._streams.pop(handle.id, None)
