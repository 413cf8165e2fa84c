"""Rebuild lifecycle states and transition validation."""

from __future__ import annotations

from typing import Literal

from core.errors import StockroomStateError

RebuildState = Literal[
    "idle",
    "scanning_existing",
    "parsing",
    "diffing",
    "writing",
    "done",
    "failed",
]
ALLOWED_STATE_TRANSITIONS: dict[RebuildState, tuple[RebuildState, ...]] = {
    "idle": ("scanning_existing", "failed"),
    "scanning_existing": ("parsing", "failed"),
    "parsing": ("diffing", "failed"),
    "diffing": ("writing", "failed"),
    "writing": ("done", "failed"),
    "done": (),
    "failed": (),
}


def validate_transition(current: RebuildState, next_state: RebuildState) -> None:
    """Validate one rebuild transition against allowed state machine edges."""
    allowed_states = ALLOWED_STATE_TRANSITIONS[current]
    if next_state not in allowed_states:
        raise StockroomStateError(
            f"Invalid rebuild state transition {current!r} -> {next_state!r}. "
            f"Allowed: {', '.join(allowed_states) or 'none'}."
        )
