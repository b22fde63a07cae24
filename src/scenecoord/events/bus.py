"""Typed in-process event bus.

Usage:
    bus = EventBus()
    bus.subscribe(LoadProgress, lambda e: bar.set(e.fraction))
    bus.emit(LoadProgress(0.5))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")

Handler = Callable[[Any], None]


class EventBus:
    """Broadcast events to handlers registered per event type.

    Dispatch iterates a snapshot of the handler list, so handlers may
    subscribe or unsubscribe during a broadcast. A failing handler does not
    stop the others; failures are logged once the broadcast has finished.
    Single-threaded: call from the event loop thread only.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Register handler for event_type. The same handler may register twice."""
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type[E], handler: Callable[[E], None]) -> bool:
        """Remove one registration of handler. Returns True if it was registered."""
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            logger.warning(
                "Attempted to unsubscribe a handler not registered for %s", event_type.__name__
            )
            return False
        # Rebind rather than mutate so in-flight snapshots stay intact
        remaining = list(handlers)
        remaining.remove(handler)
        if remaining:
            self._handlers[event_type] = remaining
        else:
            del self._handlers[event_type]
        return True

    def emit(self, event: Any) -> list[Exception]:
        """Deliver event to every handler registered for its type.

        Returns:
            Exceptions raised by handlers, in dispatch order. Empty on success.
        """
        handlers = tuple(self._handlers.get(type(event), ()))
        errors: list[Exception] = []
        for handler in handlers:
            try:
                handler(event)
            except Exception as exc:
                errors.append(exc)
        for exc in errors:
            logger.error(
                "Handler for %s raised %s",
                type(event).__name__,
                type(exc).__name__,
                exc_info=exc,
            )
        return errors

    def subscriber_count(self, event_type: type | None = None) -> int:
        """Number of registrations for event_type, or across all types."""
        if event_type is not None:
            return len(self._handlers.get(event_type, ()))
        return sum(len(handlers) for handlers in self._handlers.values())

    def clear(self) -> None:
        """Drop every registration."""
        self._handlers.clear()
