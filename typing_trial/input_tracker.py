from __future__ import annotations

import re
from dataclasses import dataclass

from .typing_core import InvalidCharacterError, MatchingPolicy

# ASCII letters, ASCII whitespace and . , ! ?
_ACCEPTED = re.compile(r"[a-zA-Z\s.,!?]", re.ASCII)


def is_accepted_character(ch: str) -> bool:
    return _ACCEPTED.fullmatch(ch) is not None


@dataclass(frozen=True, slots=True)
class InputStep:
    next_input: str
    matched: bool
    completed: bool


class InputTracker:
    """Validates typed characters against the target text.

    PREFIX_ABORT appends every character and completes only on an exact match;
    a mistake is flagged but never blocks typing. POSITION_LOCKED compares each
    character with the target at its position, keeps a sticky error flag and
    completes once the input is as long as the target.
    """

    def __init__(self, target_text: str, *, policy: MatchingPolicy) -> None:
        if target_text == "":
            raise ValueError("target_text must be non-empty")
        self._target = target_text
        self._policy = MatchingPolicy(policy)
        self._input = ""
        self._is_correct = True
        self._had_errors = False
        self._completed = False

    @property
    def target_text(self) -> str:
        return self._target

    @property
    def policy(self) -> MatchingPolicy:
        return self._policy

    @property
    def current_input(self) -> str:
        return self._input

    @property
    def is_correct(self) -> bool:
        return self._is_correct

    @property
    def had_errors(self) -> bool:
        return self._had_errors

    @property
    def completed(self) -> bool:
        return self._completed

    def on_character(self, ch: str) -> InputStep | None:
        """Consume one keystroke.

        Returns None once the tracker has completed. Raises
        InvalidCharacterError for characters outside the accepted set.
        """

        if self._completed:
            return None
        if not is_accepted_character(ch):
            raise InvalidCharacterError(ch)

        if self._policy is MatchingPolicy.PREFIX_ABORT:
            step = self._prefix_abort_step(ch)
        else:
            step = self._position_locked_step(ch)

        self._input = step.next_input
        self._completed = step.completed
        return step

    def char_marks(self) -> tuple[bool, ...]:
        """Per typed position: True where it equals the target character."""

        return tuple(
            i < len(self._target) and ch == self._target[i] for i, ch in enumerate(self._input)
        )

    def _prefix_abort_step(self, ch: str) -> InputStep:
        next_input = self._input + ch
        matched = self._target.startswith(next_input)
        self._is_correct = matched
        if not matched:
            self._had_errors = True
        return InputStep(next_input=next_input, matched=matched, completed=next_input == self._target)

    def _position_locked_step(self, ch: str) -> InputStep:
        position = len(self._input)
        matched = position < len(self._target) and ch == self._target[position]
        if not matched:
            self._is_correct = False
            self._had_errors = True
        next_input = self._input + ch
        return InputStep(
            next_input=next_input,
            matched=matched,
            completed=len(next_input) == len(self._target),
        )
