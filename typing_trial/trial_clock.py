from __future__ import annotations

from collections.abc import Callable

from .clock import TimerHandle, TimerScheduler


class TrialClock:
    """Trial start time plus the whole-trial and feedback-delay timers."""

    def __init__(self, scheduler: TimerScheduler) -> None:
        self._scheduler = scheduler
        self._t0: float | None = None
        self._last_elapsed_ms = 0.0
        self._timeout: TimerHandle | None = None
        self._feedback: TimerHandle | None = None

    @property
    def started(self) -> bool:
        return self._t0 is not None

    @property
    def t0(self) -> float | None:
        return self._t0

    def start(self) -> float:
        self._t0 = self._scheduler.clock.now()
        self._last_elapsed_ms = 0.0
        return self._t0

    def elapsed_ms(self) -> float:
        """Milliseconds since start(); never decreases between calls."""

        assert self._t0 is not None
        elapsed = (self._scheduler.clock.now() - self._t0) * 1000.0
        self._last_elapsed_ms = max(self._last_elapsed_ms, elapsed)
        return self._last_elapsed_ms

    def remaining_s(self, duration_ms: int | None) -> float | None:
        if duration_ms is None or self._t0 is None:
            return None
        elapsed_s = self._scheduler.clock.now() - self._t0
        return max(0.0, duration_ms / 1000.0 - elapsed_s)

    def schedule_timeout(self, duration_ms: int | None, on_timeout: Callable[[], None]) -> TimerHandle | None:
        if duration_ms is None:
            return None
        self.cancel_timeout()
        self._timeout = self._scheduler.call_later(duration_ms / 1000.0, on_timeout)
        return self._timeout

    def cancel_timeout(self) -> None:
        if self._timeout is not None:
            self._timeout.cancel()
            self._timeout = None

    def schedule_feedback_delay(self, duration_ms: int, on_finalize: Callable[[], None]) -> TimerHandle:
        if self._feedback is not None:
            self._feedback.cancel()
        self._feedback = self._scheduler.call_later(duration_ms / 1000.0, on_finalize)
        return self._feedback
