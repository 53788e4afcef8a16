from __future__ import annotations

import heapq
import itertools
import time
from collections.abc import Callable
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class TimerHandle:
    """Handle returned by TimerScheduler.call_later()."""

    __slots__ = ("due_s", "_callback", "_cancelled", "_fired")

    def __init__(self, due_s: float, callback: Callable[[], None]) -> None:
        self.due_s = float(due_s)
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        self._cancelled = True

    def _fire(self) -> None:
        self._fired = True
        self._callback()


class TimerScheduler:
    """Single-threaded timer queue driven by an injected Clock.

    Nothing fires on its own: the host loop (or a test) calls run_due() and
    every timer whose due time has been reached runs, earliest first. Timers
    due at the same instant run in the order they were scheduled.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    @property
    def clock(self) -> Clock:
        return self._clock

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        if delay_s < 0.0:
            raise ValueError("delay_s must be >= 0")
        handle = TimerHandle(self._clock.now() + float(delay_s), callback)
        heapq.heappush(self._queue, (handle.due_s, next(self._seq), handle))
        return handle

    def pending_count(self) -> int:
        return sum(1 for _, _, h in self._queue if h.pending)

    def run_due(self) -> int:
        """Fire all due timers. Returns the number of callbacks run."""

        now = self._clock.now()
        fired = 0
        # Callbacks may schedule new timers; those are picked up in the same
        # pass only if they are already due.
        while self._queue and self._queue[0][0] <= now:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle._fire()
            fired += 1
        return fired
