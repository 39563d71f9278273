"""Time budget for approximation searches.

The engine never reads the wall clock directly. A ``Deadline`` wraps an
injectable clock so that callers (and tests) decide how time passes.
"""

from __future__ import annotations

import time
from typing import Callable

from .config import TIME_BUDGET_MS


class Deadline:
    """A time budget measured against a monotonic clock.

    Args:
        budget_ms: Budget in milliseconds
        clock: Callable returning the current time in seconds
    """

    def __init__(
        self,
        budget_ms: float = TIME_BUDGET_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.budget_ms = float(budget_ms)
        self._clock = clock
        self._start = clock()

    @classmethod
    def frozen(cls, budget_ms: float = TIME_BUDGET_MS) -> Deadline:
        """A deadline whose clock never advances, for deterministic runs."""
        return cls(budget_ms, clock=lambda: 0.0)

    def elapsed_ms(self) -> float:
        return (self._clock() - self._start) * 1000.0

    def remaining_ms(self) -> float:
        return max(0.0, self.budget_ms - self.elapsed_ms())

    def expired(self) -> bool:
        return self.elapsed_ms() > self.budget_ms

    def __repr__(self) -> str:
        return f"Deadline(budget_ms={self.budget_ms:g}, elapsed_ms={self.elapsed_ms():.1f})"
