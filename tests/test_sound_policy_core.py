from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

import pytest

from typing_trial.clock import TimerScheduler
from typing_trial.sound_policy import SoundConditionPolicy, sound_mode_description
from typing_trial.typing_core import SeededRng, SoundCondition, SoundMode


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


@dataclass
class RecordingSink:
    clock: FakeClock
    activated: int = 0
    immediate: list[float] = field(default_factory=list)
    delayed: list[float] = field(default_factory=list)

    def activate(self) -> None:
        self.activated += 1

    def play_immediate(self) -> None:
        self.immediate.append(self.clock.now())

    def play_delayed(self) -> None:
        self.delayed.append(self.clock.now())


@dataclass
class FixedDrawRng:
    value: float = 0.0
    int_value: int = 0

    def random(self) -> float:
        return self.value

    def randint(self, a: int, b: int) -> int:
        return self.int_value

    def choice(self, seq):  # type: ignore[no-untyped-def]
        return seq[0]


def _policy(rng: object, clock: FakeClock | None = None) -> tuple[SoundConditionPolicy, RecordingSink, TimerScheduler]:
    clock = clock or FakeClock()
    sched = TimerScheduler(clock)
    sink = RecordingSink(clock)
    return SoundConditionPolicy(rng=rng, scheduler=sched, sink=sink), sink, sched  # type: ignore[arg-type]


def test_aligned_mode_is_always_immediate() -> None:
    policy, sink, _ = _policy(SeededRng(1))

    conditions = [policy.decide(SoundMode.ALIGNED) for _ in range(500)]

    assert set(conditions) == {SoundCondition.IMMEDIATE}
    assert len(sink.immediate) == 500
    assert sink.delayed == []


def test_variable_mode_frequencies_are_one_third_each() -> None:
    policy, _, _ = _policy(SeededRng(20240611))
    n = 30000

    counts = Counter(policy.draw(SoundMode.VARIABLE) for _ in range(n))

    for cond in SoundCondition:
        assert counts[cond] / n == pytest.approx(1.0 / 3.0, abs=0.02)


def test_mostly_aligned_mode_frequencies() -> None:
    policy, _, _ = _policy(SeededRng(77))
    n = 30000

    counts = Counter(policy.draw(SoundMode.MOSTLY_ALIGNED) for _ in range(n))

    assert counts[SoundCondition.IMMEDIATE] / n == pytest.approx(0.70, abs=0.02)
    assert counts[SoundCondition.DELAYED] / n == pytest.approx(0.15, abs=0.02)
    assert counts[SoundCondition.NONE] / n == pytest.approx(0.15, abs=0.02)


@pytest.mark.parametrize(
    ("r", "expected"),
    [
        (0.0, SoundCondition.IMMEDIATE),
        (0.6999, SoundCondition.IMMEDIATE),
        (0.70, SoundCondition.DELAYED),
        (0.8499, SoundCondition.DELAYED),
        (0.85, SoundCondition.NONE),
        (0.9999, SoundCondition.NONE),
    ],
)
def test_mostly_aligned_thresholds(r: float, expected: SoundCondition) -> None:
    policy, _, _ = _policy(FixedDrawRng(value=r))
    assert policy.draw(SoundMode.MOSTLY_ALIGNED) is expected


def test_delayed_feedback_fires_after_200ms_without_blocking() -> None:
    clock = FakeClock()
    policy, sink, sched = _policy(FixedDrawRng(int_value=1), clock)

    assert policy.decide(SoundMode.VARIABLE) is SoundCondition.DELAYED
    assert sink.delayed == []
    assert sched.pending_count() == 1

    clock.t = 0.199
    sched.run_due()
    assert sink.delayed == []

    clock.t = 0.2
    sched.run_due()
    assert sink.delayed == [pytest.approx(0.2)]
    assert sink.immediate == []


def test_none_condition_plays_nothing() -> None:
    policy, sink, sched = _policy(FixedDrawRng(int_value=2))

    assert policy.decide(SoundMode.VARIABLE) is SoundCondition.NONE
    assert sink.immediate == []
    assert sched.pending_count() == 0


def test_sound_mode_descriptions() -> None:
    assert sound_mode_description(0).startswith("Aligned")
    assert sound_mode_description(SoundMode.VARIABLE).startswith("Variable")
    assert sound_mode_description(2).startswith("Mostly-Aligned")
    assert sound_mode_description(None) == "Unknown"
    assert sound_mode_description(7) == "Unknown"
