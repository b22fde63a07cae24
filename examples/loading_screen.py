import asyncio
import logging

from scenecoord import (
    CoordinatorSettings,
    LoadProgress,
    LocalStreamingAdapter,
    OperationCancelled,
    OperationComplete,
    OperationStarted,
    SceneContext,
    UnitCatalog,
    UnloadComplete,
    build_unit_enum,
)


class LoadingScreen:
    """Console stand-in for a loading panel with a progress bar."""

    def __init__(self, context: SceneContext) -> None:
        self._events = context.events
        self._events.subscribe(OperationStarted, self.show)
        self._events.subscribe(LoadProgress, self.update)
        self._events.subscribe(OperationComplete, self.hide)
        self._events.subscribe(OperationCancelled, self.hide)

    def close(self) -> None:
        self._events.unsubscribe(OperationStarted, self.show)
        self._events.unsubscribe(LoadProgress, self.update)
        self._events.unsubscribe(OperationComplete, self.hide)
        self._events.unsubscribe(OperationCancelled, self.hide)

    def show(self, event: OperationStarted) -> None:
        print(f"[loading] {event.unit}")

    def update(self, event: LoadProgress) -> None:
        filled = int(event.fraction * 20)
        print(f"  [{'#' * filled}{'.' * (20 - filled)}] {event.fraction:.0%}")

    def hide(self, event: object) -> None:
        print(f"[done] {type(event).__name__}")


async def main() -> None:
    catalog = UnitCatalog(["Boot", "Menu", "Hub", "Level_01", "Level_02"])
    Units = build_unit_enum(catalog)
    adapter = LocalStreamingAdapter(load_steps=5, initial_units=["Boot"])
    context = SceneContext.create(
        adapter, catalog, CoordinatorSettings(settle_delay=0.2, tick_interval=0.05)
    )
    screen = LoadingScreen(context)
    context.events.subscribe(UnloadComplete, lambda e: print(f"[unloaded] {e.unit}"))
    coordinator = context.coordinator

    coordinator.load_single(Units.Menu)
    print(f"Second request accepted: {coordinator.load_single('Hub')}")
    await coordinator.wait()
    print(f"Active: {adapter.active_units}")

    coordinator.load_additive("Hub")
    await coordinator.wait()
    print(f"Active: {adapter.active_units}")

    coordinator.unload_then_load("Hub", "Level_01")
    await coordinator.wait()
    print(f"Active: {adapter.active_units}")

    coordinator.load_single("Level_02")
    await asyncio.sleep(0.12)
    coordinator.cancel()
    print(f"Active after cancel: {adapter.active_units}")

    screen.close()
    await context.shutdown()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
