"""Shared result type for the (state, move) -> state reducers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .errors import IllegalMove

S = TypeVar("S")
Event = Dict[str, Any]


@dataclass(frozen=True)
class MoveResult(Generic[S]):
    """Outcome of an accepted move.

    ``events`` lists per-move facts (claimed boxes, feedback pegs, the winner)
    so callers can render them without recomputing anything from the state.
    """

    state: S
    events: List[Event] = field(default_factory=list)


@dataclass(frozen=True)
class Attempt(Generic[S]):
    """Result-style wrapper: the new state, or the unchanged one plus an error."""

    state: S
    events: List[Event] = field(default_factory=list)
    error: Optional[IllegalMove] = None

    @property
    def accepted(self) -> bool:
        return self.error is None


def attempt(apply: Callable[..., MoveResult[S]], state: S, *args: Any, **kwargs: Any) -> Attempt[S]:
    """Call ``apply`` and fold an ``IllegalMove`` into the returned value."""

    try:
        result = apply(state, *args, **kwargs)
    except IllegalMove as exc:
        return Attempt(state=state, error=exc)
    return Attempt(state=result.state, events=list(result.events))
