from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Protocol, TypeVar

T = TypeVar("T")


class TypingTrialError(Exception):
    """Base class for typing trial failures."""


class MissingParameterError(TypingTrialError):
    """A required trial parameter (the fixed target text) was not supplied."""


class InvalidCharacterError(TypingTrialError):
    """A keystroke fell outside the accepted character set."""

    def __init__(self, character: str) -> None:
        super().__init__(f"character {character!r} is not accepted")
        self.character = character


class RandomSource(Protocol):
    """Injectable random stream used for every draw a trial makes."""

    def random(self) -> float:
        ...

    def randint(self, a: int, b: int) -> int:
        ...

    def choice(self, seq: Sequence[T]) -> T:
        ...


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)


class TrialState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETING = "completing"
    TIMED_OUT = "timed_out"
    FINISHED = "finished"


class SoundMode(IntEnum):
    ALIGNED = 0
    VARIABLE = 1
    MOSTLY_ALIGNED = 2


class SoundCondition(IntEnum):
    # Values are the codes written to the trial data record.
    IMMEDIATE = 0
    DELAYED = 1
    NONE = 2


class MatchingPolicy(str, Enum):
    PREFIX_ABORT = "prefix_abort"
    POSITION_LOCKED = "position_locked"


@dataclass(frozen=True, slots=True)
class KeystrokeEvent:
    index: int
    character: str
    offset_ms: float
    matched: bool
    sound_condition: SoundCondition


@dataclass(frozen=True, slots=True)
class TrialResult:
    target_text: str
    user_input: str
    accuracy: bool
    reaction_time_ms: float | None
    keystrokes: tuple[KeystrokeEvent, ...]
    sound_conditions: tuple[SoundCondition, ...]
    sound_mode: SoundMode
    matching_policy: MatchingPolicy
    had_errors: bool
    is_real_sentence: bool | None = None
    aborted: bool = False

    @classmethod
    def empty(cls, *, sound_mode: SoundMode, matching_policy: MatchingPolicy) -> "TrialResult":
        """Degenerate record emitted when the trial could not start."""

        return cls(
            target_text="",
            user_input="",
            accuracy=False,
            reaction_time_ms=None,
            keystrokes=(),
            sound_conditions=(),
            sound_mode=sound_mode,
            matching_policy=matching_policy,
            had_errors=False,
            aborted=True,
        )


@dataclass(frozen=True, slots=True)
class TrialSnapshot:
    """View model for the UI (pure data)."""

    state: TrialState
    target_text: str
    user_input: str
    char_marks: tuple[bool, ...]
    progress: float
    is_correct: bool
    sound_mode: SoundMode | None
    sound_mode_label: str
    time_remaining_s: float | None


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)
