from __future__ import annotations

import pytest

from typing_trial.input_tracker import InputTracker, is_accepted_character
from typing_trial.typing_core import InvalidCharacterError, MatchingPolicy


def _feed(tracker: InputTracker, keys: str) -> list[tuple[bool, bool]]:
    out = []
    for ch in keys:
        step = tracker.on_character(ch)
        assert step is not None
        out.append((step.matched, step.completed))
    return out


def test_accepted_character_set() -> None:
    for ch in ("a", "Z", " ", "\t", ".", ",", "!", "?"):
        assert is_accepted_character(ch)
    for ch in ("1", "-", "'", ";", "é", "", "ab", "Shift", "\u3000", "\x85", "\x1c"):
        assert not is_accepted_character(ch)


def test_prefix_abort_mismatch_does_not_block_and_never_completes() -> None:
    tracker = InputTracker("cat", policy=MatchingPolicy.PREFIX_ABORT)

    steps = _feed(tracker, "cxt")

    assert [m for m, _ in steps] == [True, False, False]
    assert [c for _, c in steps] == [False, False, False]
    assert tracker.current_input == "cxt"
    assert tracker.completed is False
    assert tracker.is_correct is False
    assert tracker.had_errors is True

    # Typing past the target length is still accepted.
    step = tracker.on_character("s")
    assert step is not None
    assert step.next_input == "cxts"
    assert step.completed is False


def test_prefix_abort_completes_on_exact_match() -> None:
    tracker = InputTracker("Hi there.", policy=MatchingPolicy.PREFIX_ABORT)

    steps = _feed(tracker, "Hi there.")

    assert all(m for m, _ in steps)
    assert steps[-1][1] is True
    assert tracker.completed is True
    assert tracker.had_errors is False
    assert tracker.on_character("x") is None
    assert tracker.current_input == "Hi there."


def test_position_locked_flags_errors_and_completes_on_length() -> None:
    tracker = InputTracker("cat", policy=MatchingPolicy.POSITION_LOCKED)

    steps = _feed(tracker, "cxt")

    assert [m for m, _ in steps] == [True, False, True]
    assert [c for _, c in steps] == [False, False, True]
    assert tracker.had_errors is True
    assert tracker.current_input == "cxt"
    assert tracker.char_marks() == (True, False, True)
    assert tracker.on_character("s") is None


def test_position_locked_error_flag_is_sticky() -> None:
    tracker = InputTracker("abcd", policy=MatchingPolicy.POSITION_LOCKED)

    _feed(tracker, "x")
    assert tracker.had_errors is True
    _feed(tracker, "bcd")
    assert tracker.had_errors is True
    assert tracker.completed is True


def test_invalid_character_raises_and_is_not_recorded() -> None:
    tracker = InputTracker("cat", policy=MatchingPolicy.PREFIX_ABORT)

    with pytest.raises(InvalidCharacterError):
        tracker.on_character("1")

    assert tracker.current_input == ""
    assert tracker.had_errors is False


def test_empty_target_rejected() -> None:
    with pytest.raises(ValueError):
        InputTracker("", policy=MatchingPolicy.PREFIX_ABORT)
