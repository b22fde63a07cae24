"""Validation gate: the only place unit references are resolved."""

from __future__ import annotations

import logging

from scenecoord.coordinator.errors import RejectReason, RequestRejected
from scenecoord.core.requests import (
    LoadAdditive,
    LoadMode,
    LoadSingle,
    OperationRequest,
    ResolvedLoad,
    ResolvedOperation,
    ResolvedUnload,
    ResolvedUnloadThenLoad,
    Unload,
    UnloadThenLoad,
)
from scenecoord.core.units import UnitCatalog, UnitId, UnitRef, UnknownUnitError

logger = logging.getLogger(__name__)


class ValidationGate:
    """Checks a request can start before any state changes.

    Pure with respect to coordinator state: the busy flag is passed in and
    nothing is mutated, so a rejected request leaves everything as it was.

    Args:
        catalog: The static table of known units.
    """

    def __init__(self, catalog: UnitCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> UnitCatalog:
        return self._catalog

    def check(self, request: OperationRequest, busy: bool) -> ResolvedOperation:
        """Validate and resolve request.

        Raises:
            RequestRejected: If busy, or a referenced unit is unknown or disabled.
        """
        if busy:
            raise RequestRejected(RejectReason.BUSY, request, "an operation is already in progress")

        if isinstance(request, LoadSingle):
            unit = self._loadable(request, request.unit)
            return ResolvedLoad(unit, LoadMode.SINGLE)
        if isinstance(request, LoadAdditive):
            unit = self._loadable(request, request.unit)
            return ResolvedLoad(unit, LoadMode.ADDITIVE)
        if isinstance(request, Unload):
            return ResolvedUnload(self._unloadable(request, request.unit))
        if isinstance(request, UnloadThenLoad):
            unload = self._unloadable(request, request.unload)
            load = self._loadable(request, request.load)
            return ResolvedUnloadThenLoad(unload, load)
        raise RequestRejected(
            RejectReason.INVALID_REQUEST, request, f"unsupported request type {type(request).__name__}"
        )

    def can_start(self, request: OperationRequest, busy: bool) -> bool:
        """Check if request would be accepted. Logs the reason when not."""
        try:
            self.check(request, busy)
        except RequestRejected as e:
            log_rejection(e)
            return False
        return True

    def _resolve(self, request: OperationRequest, ref: UnitRef) -> UnitId:
        try:
            return self._catalog.resolve(ref)
        except UnknownUnitError:
            raise RequestRejected(
                RejectReason.UNKNOWN_UNIT,
                request,
                f"unit {ref!r} is not in the build list",
            ) from None

    def _loadable(self, request: OperationRequest, ref: UnitRef) -> UnitId:
        unit = self._resolve(request, ref)
        if not self._catalog.is_enabled(unit.index):
            raise RequestRejected(
                RejectReason.DISABLED_UNIT, request, f"unit {unit.name!r} is disabled"
            )
        return unit

    def _unloadable(self, request: OperationRequest, name: str) -> UnitId:
        if not isinstance(name, str):
            raise RequestRejected(
                RejectReason.INVALID_REQUEST, request, "units are unloaded by name"
            )
        return self._resolve(request, name)


def log_rejection(error: RequestRejected) -> None:
    """Busy rejections are routine no-ops; bad unit references are errors."""
    if error.reason is RejectReason.BUSY:
        logger.warning("%s", error)
    else:
        logger.error("%s", error)
