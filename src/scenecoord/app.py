"""Composition root.

The application builds one SceneContext at startup and hands its
coordinator to whatever needs it. There is no module-level instance.

Usage:
    context = SceneContext.create(LocalStreamingAdapter(), load_manifest("units.json"))
    context.coordinator.load_single("Menu")
    ...
    await context.shutdown()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scenecoord.config import CoordinatorSettings
from scenecoord.coordinator import SceneCoordinator
from scenecoord.core.units import UnitCatalog
from scenecoord.events import EventBus
from scenecoord.streaming import StreamingAdapter

logger = logging.getLogger(__name__)


@dataclass
class SceneContext:
    """Application-wide wiring of bus, adapter and coordinator."""

    events: EventBus
    adapter: StreamingAdapter
    coordinator: SceneCoordinator

    @classmethod
    def create(
        cls,
        adapter: StreamingAdapter,
        catalog: UnitCatalog,
        settings: CoordinatorSettings | None = None,
    ) -> SceneContext:
        """Wire a coordinator and its event bus around adapter."""
        events = EventBus()
        coordinator = SceneCoordinator(adapter, catalog, settings=settings, events=events)
        logger.debug("Scene context created with %d known units", len(catalog))
        return cls(events=events, adapter=adapter, coordinator=coordinator)

    async def shutdown(self) -> None:
        """Cancel any active operation and clear every subscriber."""
        await self.coordinator.shutdown()
