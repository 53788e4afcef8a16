from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .typing_core import SoundCondition, TrialResult


@dataclass(frozen=True, slots=True)
class TypingSummary:
    """Speed and accuracy figures for a single finished trial."""

    keystrokes: int
    matched_keystrokes: int
    keystroke_accuracy: float
    chars_per_min: float | None
    mean_iki_ms: float | None
    median_iki_ms: float | None
    immediate: int
    delayed: int
    silent: int


def trial_data_from_result(result: TrialResult) -> dict[str, Any]:
    """Map a TrialResult to the flat record handed to the experiment runner.

    An aborted trial yields an empty record.
    """

    if result.aborted:
        return {}

    reaction_time = None if result.reaction_time_ms is None else int(round(result.reaction_time_ms))
    return {
        "target_sentence": result.target_text,
        "user_input": result.user_input,
        "accuracy": bool(result.accuracy),
        "reaction_time": reaction_time,
        "key_press_times": [
            {"key": k.character, "time": round(float(k.offset_ms), 3)} for k in result.keystrokes
        ],
        "sound_conditions": [int(c) for c in result.sound_conditions],
        "sound_mode": int(result.sound_mode),
        "matching_policy": result.matching_policy.value,
        "had_errors": bool(result.had_errors),
        "is_real_sentence": result.is_real_sentence,
    }


def trial_data_json(result: TrialResult) -> str:
    return json.dumps(trial_data_from_result(result), indent=2)


def summarize_trial(result: TrialResult) -> TypingSummary:
    offsets = [float(k.offset_ms) for k in result.keystrokes]
    n = len(offsets)
    matched = sum(1 for k in result.keystrokes if k.matched)

    ikis = sorted(b - a for a, b in zip(offsets, offsets[1:]))
    mean_iki: float | None
    median_iki: float | None
    if not ikis:
        mean_iki = None
        median_iki = None
    else:
        mean_iki = sum(ikis) / float(len(ikis))
        mid = len(ikis) // 2
        if len(ikis) % 2 == 1:
            median_iki = ikis[mid]
        else:
            median_iki = (ikis[mid - 1] + ikis[mid]) / 2.0

    # Typing speed over the span actually spent typing.
    span_ms = offsets[-1] if offsets else 0.0
    cpm = None if span_ms <= 0.0 else (n / span_ms) * 60000.0

    conditions = result.sound_conditions
    return TypingSummary(
        keystrokes=n,
        matched_keystrokes=matched,
        keystroke_accuracy=0.0 if n == 0 else matched / n,
        chars_per_min=cpm,
        mean_iki_ms=mean_iki,
        median_iki_ms=median_iki,
        immediate=sum(1 for c in conditions if c == SoundCondition.IMMEDIATE),
        delayed=sum(1 for c in conditions if c == SoundCondition.DELAYED),
        silent=sum(1 for c in conditions if c == SoundCondition.NONE),
    )
