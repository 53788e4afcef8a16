from __future__ import annotations

import logging
from typing import Protocol

from .clock import TimerScheduler
from .typing_core import RandomSource, SoundCondition, SoundMode

logger = logging.getLogger(__name__)

DELAYED_FEEDBACK_S = 0.200

# Cumulative thresholds on a uniform draw for the mostly-aligned mode.
_MOSTLY_ALIGNED_IMMEDIATE = 0.70
_MOSTLY_ALIGNED_DELAYED = 0.85


class FeedbackSink(Protocol):
    """Plays the keystroke feedback sound."""

    def activate(self) -> None:
        """Prepare the output device; called on the first user interaction."""

    def play_immediate(self) -> None:
        ...

    def play_delayed(self) -> None:
        """Called by the scheduler once the delay has elapsed."""


class NullFeedbackSink:
    def activate(self) -> None:
        return None

    def play_immediate(self) -> None:
        return None

    def play_delayed(self) -> None:
        return None


def sound_mode_description(mode: SoundMode | int | None) -> str:
    if mode is None:
        return "Unknown"
    try:
        mode = SoundMode(int(mode))
    except ValueError:
        return "Unknown"
    if mode is SoundMode.ALIGNED:
        return "Aligned (100% immediate sound)"
    if mode is SoundMode.VARIABLE:
        return "Variable (33% immediate • 33% delayed • 33% none)"
    return "Mostly-Aligned (70% immediate • 15% delayed • 15% none)"


class SoundConditionPolicy:
    """Draws a feedback condition per keystroke and schedules its playback.

    Delayed playback is fire-and-forget: the timer is never cancelled, so a
    click may still sound after the trial has ended.
    """

    def __init__(
        self,
        *,
        rng: RandomSource,
        scheduler: TimerScheduler,
        sink: FeedbackSink,
        delay_s: float = DELAYED_FEEDBACK_S,
    ) -> None:
        if delay_s < 0.0:
            raise ValueError("delay_s must be >= 0")
        self._rng = rng
        self._scheduler = scheduler
        self._sink = sink
        self._delay_s = float(delay_s)

    @property
    def delay_s(self) -> float:
        return self._delay_s

    def draw(self, sound_mode: SoundMode) -> SoundCondition:
        """Pick a condition without any playback side effect."""

        if sound_mode is SoundMode.ALIGNED:
            return SoundCondition.IMMEDIATE
        if sound_mode is SoundMode.VARIABLE:
            return SoundCondition(self._rng.randint(0, 2))
        r = self._rng.random()
        if r < _MOSTLY_ALIGNED_IMMEDIATE:
            return SoundCondition.IMMEDIATE
        if r < _MOSTLY_ALIGNED_DELAYED:
            return SoundCondition.DELAYED
        return SoundCondition.NONE

    def decide(self, sound_mode: SoundMode) -> SoundCondition:
        condition = self.draw(SoundMode(sound_mode))
        if condition is SoundCondition.IMMEDIATE:
            self._sink.play_immediate()
        elif condition is SoundCondition.DELAYED:
            self._scheduler.call_later(self._delay_s, self._sink.play_delayed)
        logger.debug(f"sound condition {condition.name} (mode {int(sound_mode)})")
        return condition
