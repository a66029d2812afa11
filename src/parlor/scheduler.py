"""Cancelable deferred callbacks for the computer's "thinking" delay."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

PENDING, FIRED, CANCELLED = "pending", "fired", "cancelled"


class DeferredMove:
    """Run ``callback(*args)`` once after ``delay`` seconds unless cancelled first.

    The callback still has to re-check the game it acts on: cancellation only
    wins if it happens before the timer thread has claimed the call.
    """

    def __init__(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        self.delay = max(0.0, delay)
        self._callback = callback
        self._args = args
        self._lock = threading.Lock()
        self._status = PENDING
        self._timer = threading.Timer(self.delay, self._fire)
        self._timer.daemon = True
        self.scheduled_at = time.monotonic()

    def start(self) -> "DeferredMove":
        self._timer.start()
        return self

    @property
    def status(self) -> str:
        return self._status

    @property
    def pending(self) -> bool:
        return self._status == PENDING

    def cancel(self) -> bool:
        """Returns True if this call stopped the callback from running."""

        with self._lock:
            if self._status != PENDING:
                return False
            self._status = CANCELLED
        self._timer.cancel()
        return True

    def remaining(self) -> float:
        if not self.pending:
            return 0.0
        return max(0.0, self.delay - (time.monotonic() - self.scheduled_at))

    def _fire(self) -> None:
        with self._lock:
            if self._status != PENDING:
                return
            self._status = FIRED
        self._callback(*self._args)
