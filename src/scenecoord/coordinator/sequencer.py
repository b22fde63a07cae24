"""Sequencer: one unload followed by an additive load, as one operation."""

from __future__ import annotations

import logging

from scenecoord.coordinator.driver import OperationDriver
from scenecoord.core.requests import LoadMode
from scenecoord.core.units import UnitId
from scenecoord.events import UnloadComplete

logger = logging.getLogger(__name__)


class Sequencer:
    """Composes driver primitives inside a single busy window.

    The caller has already entered UNLOADING and announced UnloadStarted.
    Cancelling during the unload step ends the sequence before the load
    step begins.
    """

    def __init__(self, driver: OperationDriver) -> None:
        self._driver = driver

    async def unload_then_load(self, unload: UnitId, load: UnitId) -> None:
        await self._driver.unload(unload)
        self._driver.emit(UnloadComplete(unload.name))
        logger.debug("Unloaded %s, loading %s additively", unload, load)

        self._driver.emit(self._driver.start_load(load))
        await self._driver.load(load, LoadMode.ADDITIVE)
