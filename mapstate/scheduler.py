"""
Deferred callbacks for the map controller.

The controller needs a single primitive: ``call_later(delay, callback,
*args)`` returning a handle with ``cancel()``. ``asyncio`` event loops
provide exactly that, so a running loop can be passed in directly.

``ManualScheduler`` is a virtual clock with the same interface. Time only
moves when ``advance()`` is called, which makes timer-driven transitions
deterministic in tests and in the headless CLI.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any],
                   *args: Any) -> TimerHandle:
        ...


class ManualTimer:
    """Handle returned by ManualScheduler.call_later()."""

    __slots__ = ("when", "callback", "args", "cancelled", "fired")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class ManualScheduler:
    """Virtual-time scheduler. Callbacks run inside ``advance()``."""

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any],
                   *args: Any) -> ManualTimer:
        if delay < 0:
            delay = 0.0
        timer = ManualTimer(self._now + delay, callback, args)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that have neither fired nor been cancelled."""
        return sum(1 for _, _, t in self._queue if t.active)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every timer that comes due.

        Timers scheduled by a callback run in the same call if they fall
        inside the window. Returns the number of callbacks run.
        """
        deadline = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            when, _, timer = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            if timer.cancelled:
                continue
            timer.fired = True
            timer.callback(*timer.args)
            ran += 1
        self._now = deadline
        return ran

    def run_all(self, limit: int = 1000) -> int:
        """Advance until no timers remain (bounded by *limit* callbacks)."""
        ran = 0
        while self._queue and ran < limit:
            when = self._queue[0][0]
            ran += self.advance(max(0.0, when - self._now))
        return ran
