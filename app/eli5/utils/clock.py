"""Wall-clock helpers shared by the session store and the conversation controller."""

from __future__ import annotations
import time
from typing import Callable, Container

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


class TimeIds:
    """
    Issues string ids derived from the clock, never repeating one already
    issued by this instance or present in `taken`.
    """

    def __init__(self, clock: Clock = now_ms) -> None:
        self.clock = clock
        self._last = 0

    def next(self, taken: Container[str] = ()) -> str:
        candidate = max(self.clock(), self._last + 1)
        while str(candidate) in taken:
            candidate += 1
        self._last = candidate
        return str(candidate)
