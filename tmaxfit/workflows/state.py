"""Session state machine.

States and transitions of a sampling session:

    IDLE      -> PREPARING | SAMPLING | RENDERING
    PREPARING -> IDLE | ERROR
    SAMPLING  -> RENDERING | IDLE (cancelled) | ERROR
    RENDERING -> IDLE | ERROR
    ERROR     -> IDLE | PREPARING | SAMPLING | RENDERING

Controls (run/load buttons) are enabled exactly in IDLE and ERROR, so a
host always gets them back after a request finishes, fails or is cancelled.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tmaxfit.exceptions import StateTransitionError
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)

# Transitions kept per session; older entries are dropped.
HISTORY_LIMIT = 200


class PipelineState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    SAMPLING = "sampling"
    RENDERING = "rendering"
    ERROR = "error"


TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset(
        {PipelineState.PREPARING, PipelineState.SAMPLING, PipelineState.RENDERING}
    ),
    PipelineState.PREPARING: frozenset({PipelineState.IDLE, PipelineState.ERROR}),
    PipelineState.SAMPLING: frozenset(
        {PipelineState.RENDERING, PipelineState.IDLE, PipelineState.ERROR}
    ),
    PipelineState.RENDERING: frozenset({PipelineState.IDLE, PipelineState.ERROR}),
    PipelineState.ERROR: frozenset(
        {
            PipelineState.IDLE,
            PipelineState.PREPARING,
            PipelineState.SAMPLING,
            PipelineState.RENDERING,
        }
    ),
}


@dataclass(frozen=True)
class Transition:
    source: PipelineState
    target: PipelineState
    reason: str = ""


class PipelineStateMachine:
    """Tracks the current state and rejects undefined transitions."""

    def __init__(self, history_limit: int = HISTORY_LIMIT):
        self.state = PipelineState.IDLE
        self.last_error: Optional[str] = None
        self.history: deque[Transition] = deque(maxlen=history_limit)

    @property
    def controls_enabled(self) -> bool:
        return self.state in (PipelineState.IDLE, PipelineState.ERROR)

    @property
    def busy(self) -> bool:
        return not self.controls_enabled

    def can_transition(self, target: PipelineState) -> bool:
        return target in TRANSITIONS[self.state]

    def transition(self, target: PipelineState, reason: str = "") -> None:
        """Move to ``target``.

        Raises:
            StateTransitionError: If the transition is not defined.
        """
        if not self.can_transition(target):
            raise StateTransitionError(
                f"Cannot go from {self.state.value} to {target.value}",
                {"state": self.state.value, "target": target.value},
            )
        self.history.append(Transition(self.state, target, reason))
        logger.debug(f"State {self.state.value} -> {target.value} {reason}".rstrip())
        self.state = target
        if target is not PipelineState.ERROR:
            self.last_error = None

    def fail(self, message: str) -> None:
        """Enter ERROR, remembering the message shown to the user."""
        self.transition(PipelineState.ERROR, message)
        self.last_error = message

    def reset(self) -> None:
        if self.state is not PipelineState.IDLE:
            self.transition(PipelineState.IDLE, "reset")


__all__ = [
    "PipelineState",
    "PipelineStateMachine",
    "Transition",
    "TRANSITIONS",
    "HISTORY_LIMIT",
]
