"""Coordinator phases and the mutable coordinator state."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, auto

from scenecoord.coordinator.errors import InvalidTransition

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Phase of the single active operation."""

    IDLE = auto()  # No operation
    STARTING = auto()  # Accepted, waiting one tick before streaming begins
    UNLOADING = auto()  # Host unload in flight
    RUNNING = auto()  # Streaming, progress reported every tick
    COMPLETING = auto()  # Settle delay and finalization
    CANCELLING = auto()  # cancel() is tearing the operation down


TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.IDLE: frozenset({Phase.STARTING, Phase.UNLOADING}),
    Phase.STARTING: frozenset({Phase.RUNNING, Phase.CANCELLING, Phase.IDLE}),
    Phase.UNLOADING: frozenset({Phase.STARTING, Phase.CANCELLING, Phase.IDLE}),
    Phase.RUNNING: frozenset({Phase.COMPLETING, Phase.CANCELLING, Phase.IDLE}),
    Phase.COMPLETING: frozenset({Phase.IDLE}),
    Phase.CANCELLING: frozenset({Phase.IDLE}),
}
"""Allowed phase changes. Every busy phase may fall back to IDLE on failure."""

CANCELLABLE = frozenset({Phase.STARTING, Phase.UNLOADING, Phase.RUNNING})


@dataclass
class CoordinatorState:
    """Busy flag, active task and phase of one coordinator.

    Mutated only from the event loop thread.
    """

    busy: bool = False
    active_task: asyncio.Task[None] | None = None
    phase: Phase = Phase.IDLE

    def transition(self, target: Phase) -> None:
        """Move to target phase, enforcing the transition table."""
        if target not in TRANSITIONS[self.phase]:
            raise InvalidTransition(self.phase, target)
        logger.debug("Phase %s -> %s", self.phase.name, target.name)
        self.phase = target
        if target is not Phase.IDLE:
            self.busy = True

    def reset(self) -> None:
        """Return to IDLE with no active task."""
        if self.phase is not Phase.IDLE:
            self.transition(Phase.IDLE)
        self.busy = False
        self.active_task = None
