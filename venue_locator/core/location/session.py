"""Per-caller location resolution session."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from venue_locator.core.geocoding.exceptions import InvalidStateTransition
from venue_locator.models.geographic import Position, ResolvedLocation


class ResolutionState(str, Enum):
    """Where a session is in its resolution cycle."""

    IDLE = "idle"
    ACQUIRING = "acquiring"
    RECONCILING = "reconciling"
    RESOLVED = "resolved"
    DEGRADED = "degraded"
    OVERRIDDEN = "overridden"


ALLOWED_TRANSITIONS: dict[ResolutionState, frozenset[ResolutionState]] = {
    ResolutionState.IDLE: frozenset(
        {ResolutionState.ACQUIRING, ResolutionState.OVERRIDDEN}
    ),
    # DEGRADED covers the configured default location, IDLE a surfaced failure
    ResolutionState.ACQUIRING: frozenset(
        {
            ResolutionState.RECONCILING,
            ResolutionState.OVERRIDDEN,
            ResolutionState.DEGRADED,
            ResolutionState.IDLE,
        }
    ),
    ResolutionState.RECONCILING: frozenset(
        {
            ResolutionState.RESOLVED,
            ResolutionState.DEGRADED,
            ResolutionState.OVERRIDDEN,
        }
    ),
    ResolutionState.RESOLVED: frozenset(
        {ResolutionState.ACQUIRING, ResolutionState.OVERRIDDEN}
    ),
    ResolutionState.DEGRADED: frozenset(
        {ResolutionState.ACQUIRING, ResolutionState.OVERRIDDEN}
    ),
    ResolutionState.OVERRIDDEN: frozenset(
        {ResolutionState.ACQUIRING, ResolutionState.OVERRIDDEN}
    ),
}


@dataclass
class LocationSession:
    """Mutable holder of one caller's current location.

    ``current`` is only ever replaced as a whole. ``generation`` increases
    with every resolution cycle and every override, so a cycle can tell on
    completion whether its result is still wanted.
    """

    session_id: str = field(default_factory=lambda: str(uuid4()))
    current: ResolvedLocation | None = None
    state: ResolutionState = ResolutionState.IDLE
    generation: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def transition(self, target: ResolutionState, redetect: bool = False) -> None:
        """Move to ``target``.

        Leaving OVERRIDDEN for a new acquisition requires ``redetect``.

        Raises:
            InvalidStateTransition: If the move is not allowed from the current state
        """
        allowed = ALLOWED_TRANSITIONS[self.state]
        if target not in allowed:
            raise InvalidStateTransition(self.state.value, target.value)
        if (
            self.state is ResolutionState.OVERRIDDEN
            and target is ResolutionState.ACQUIRING
            and not redetect
        ):
            raise InvalidStateTransition(self.state.value, target.value)
        self.state = target

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return self.generation == generation

    def replace(self, location: ResolvedLocation, state: ResolutionState) -> None:
        """Install a new location together with its state."""
        self.transition(state)
        self.current = location

    def apply_override(self, location: ResolvedLocation) -> None:
        """Install a manual location, invalidating any in-flight cycle."""
        self.transition(ResolutionState.OVERRIDDEN)
        self.next_generation()
        self.current = location

    def abort(self) -> None:
        """Leave an interrupted cycle, back to where the current value says we were."""
        if self.current is None:
            self.state = ResolutionState.IDLE
        elif self.current.is_manually_set:
            self.state = ResolutionState.OVERRIDDEN
        elif self.current.is_degraded:
            self.state = ResolutionState.DEGRADED
        else:
            self.state = ResolutionState.RESOLVED

    @property
    def last_position(self) -> Position | None:
        return self.current.position if self.current else None

    @property
    def is_overridden(self) -> bool:
        return self.state is ResolutionState.OVERRIDDEN
