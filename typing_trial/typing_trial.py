from __future__ import annotations

import logging
from collections.abc import Callable

from .clock import Clock, TimerScheduler
from .config import TrialConfig
from .events import DirectInputSource, InputSource
from .input_tracker import InputTracker
from .sound_policy import FeedbackSink, NullFeedbackSink, SoundConditionPolicy, sound_mode_description
from .text_provider import TextProvider
from .trial_clock import TrialClock
from .typing_core import (
    InvalidCharacterError,
    KeystrokeEvent,
    MissingParameterError,
    RandomSource,
    SeededRng,
    SoundCondition,
    SoundMode,
    TrialResult,
    TrialSnapshot,
    TrialState,
)

logger = logging.getLogger(__name__)

ResultHandler = Callable[[TrialResult], None]


class TypingTrial:
    """Single typing trial: IDLE -> RUNNING -> (COMPLETING | TIMED_OUT) -> FINISHED.

    - Randomness comes only from the injected RandomSource.
    - Time comes only from the injected Clock; timers fire when update() runs.
    - Exactly one TrialResult is handed to `on_finish`, whichever of natural
      completion or the whole-trial timeout gets there first.
    """

    def __init__(
        self,
        *,
        config: TrialConfig,
        clock: Clock,
        rng: RandomSource,
        input_source: InputSource,
        on_finish: ResultHandler,
        sink: FeedbackSink | None = None,
        scheduler: TimerScheduler | None = None,
    ) -> None:
        self._config = config
        self._rng = rng
        self._input_source = input_source
        self._on_finish = on_finish
        self._sink: FeedbackSink = sink or NullFeedbackSink()
        self._scheduler = scheduler or TimerScheduler(clock)

        self._trial_clock = TrialClock(self._scheduler)
        self._sound_policy = SoundConditionPolicy(rng=rng, scheduler=self._scheduler, sink=self._sink)

        self._state = TrialState.IDLE
        self._sound_mode: SoundMode | None = None
        self._tracker: InputTracker | None = None
        self._is_real_sentence: bool | None = None
        self._end_time_s: float | None = None
        self._keystrokes: list[KeystrokeEvent] = []
        self._sound_conditions: list[SoundCondition] = []

        self._finished = False
        self._result: TrialResult | None = None

    @property
    def state(self) -> TrialState:
        return self._state

    @property
    def config(self) -> TrialConfig:
        return self._config

    @property
    def sound_mode(self) -> SoundMode | None:
        return self._sound_mode

    @property
    def scheduler(self) -> TimerScheduler:
        return self._scheduler

    @property
    def input_source(self) -> InputSource:
        return self._input_source

    @property
    def target_text(self) -> str:
        return "" if self._tracker is None else self._tracker.target_text

    @property
    def user_input(self) -> str:
        return "" if self._tracker is None else self._tracker.current_input

    @property
    def result(self) -> TrialResult | None:
        return self._result

    def keystrokes(self) -> list[KeystrokeEvent]:
        return list(self._keystrokes)

    def start(self) -> None:
        if self._state is not TrialState.IDLE:
            return

        self._config = self._config.resolved(self._rng)
        assert self._config.sound_mode is not None
        self._sound_mode = self._config.sound_mode

        try:
            provider = TextProvider(self._config.text_source, rng=self._rng)
            target = provider.get_target_text()
        except MissingParameterError as exc:
            logger.error(f"Cannot start typing trial: {exc}")
            self._finalize(
                TrialResult.empty(sound_mode=self._sound_mode, matching_policy=self._config.matching_policy)
            )
            return

        self._tracker = InputTracker(target.text, policy=self._config.matching_policy)
        self._is_real_sentence = target.is_real_sentence

        self._trial_clock.start()
        self._trial_clock.schedule_timeout(self._config.trial_duration_ms, self._handle_timeout)
        self._input_source.subscribe(self.handle_key, self.handle_interaction)
        self._state = TrialState.RUNNING
        logger.debug(
            f"Trial started: target={target.text!r} sound_mode={int(self._sound_mode)} "
            f"policy={self._config.matching_policy.value} timeout_ms={self._config.trial_duration_ms}"
        )

    def handle_interaction(self) -> None:
        self._sink.activate()

    def handle_key(self, key: str) -> bool:
        """Process one key press. Returns True if the keystroke was recorded."""

        # Any key press counts as the user interaction that unlocks audio.
        self._sink.activate()

        if self._state is not TrialState.RUNNING:
            return False
        assert self._tracker is not None
        assert self._sound_mode is not None

        try:
            step = self._tracker.on_character(key)
        except InvalidCharacterError as exc:
            logger.debug(f"Ignoring key: {exc}")
            return False
        if step is None:
            return False

        offset_ms = self._trial_clock.elapsed_ms()
        condition = self._sound_policy.decide(self._sound_mode)
        self._keystrokes.append(
            KeystrokeEvent(
                index=len(self._keystrokes),
                character=key,
                offset_ms=offset_ms,
                matched=step.matched,
                sound_condition=condition,
            )
        )
        self._sound_conditions.append(condition)

        if step.completed:
            self._begin_completing()
        return True

    def update(self) -> None:
        """Run every timer that is due (timeout, feedback delay, delayed sounds)."""

        self._scheduler.run_due()

    def time_remaining_s(self) -> float | None:
        if self._state is not TrialState.RUNNING:
            return None
        return self._trial_clock.remaining_s(self._config.trial_duration_ms)

    def snapshot(self) -> TrialSnapshot:
        tracker = self._tracker
        target = "" if tracker is None else tracker.target_text
        typed = "" if tracker is None else tracker.current_input
        progress = 0.0 if not target else min(1.0, len(typed) / len(target))
        return TrialSnapshot(
            state=self._state,
            target_text=target,
            user_input=typed,
            char_marks=() if tracker is None else tracker.char_marks(),
            progress=progress,
            is_correct=True if tracker is None else tracker.is_correct,
            sound_mode=self._sound_mode,
            sound_mode_label=sound_mode_description(self._sound_mode),
            time_remaining_s=self.time_remaining_s(),
        )

    def _begin_completing(self) -> None:
        self._state = TrialState.COMPLETING
        self._trial_clock.cancel_timeout()
        self._end_time_s = self._scheduler.clock.now()
        self._trial_clock.schedule_feedback_delay(self._config.feedback_duration_ms, self._finish)
        logger.debug(f"Trial input complete; finalizing in {self._config.feedback_duration_ms} ms")

    def _handle_timeout(self) -> None:
        if self._state is not TrialState.RUNNING:
            return
        self._state = TrialState.TIMED_OUT
        self._end_time_s = self._scheduler.clock.now()
        logger.debug("Trial timed out")
        self._finish()

    def _finish(self) -> None:
        if self._finished:
            return
        self._finalize(self._build_result())

    def _build_result(self) -> TrialResult:
        assert self._tracker is not None
        assert self._sound_mode is not None

        t0 = self._trial_clock.t0
        reaction_ms: float | None = None
        if self._end_time_s is not None and t0 is not None:
            reaction_ms = max(0.0, (self._end_time_s - t0) * 1000.0)

        user_input = self._tracker.current_input
        target = self._tracker.target_text
        return TrialResult(
            target_text=target,
            user_input=user_input,
            accuracy=user_input == target,
            reaction_time_ms=reaction_ms,
            keystrokes=tuple(self._keystrokes),
            sound_conditions=tuple(self._sound_conditions),
            sound_mode=self._sound_mode,
            matching_policy=self._config.matching_policy,
            had_errors=self._tracker.had_errors,
            is_real_sentence=self._is_real_sentence,
        )

    def _finalize(self, result: TrialResult) -> None:
        if self._finished:
            return
        self._finished = True
        self._input_source.unsubscribe()
        self._trial_clock.cancel_timeout()
        self._state = TrialState.FINISHED
        self._result = result
        logger.info(
            f"Trial finished: accuracy={result.accuracy} keystrokes={len(result.keystrokes)} "
            f"reaction_time_ms={result.reaction_time_ms} aborted={result.aborted}"
        )
        self._on_finish(result)


def build_typing_trial(
    *,
    clock: Clock,
    seed: int,
    config: TrialConfig | None = None,
    on_finish: ResultHandler | None = None,
    input_source: InputSource | None = None,
    sink: FeedbackSink | None = None,
) -> TypingTrial:
    return TypingTrial(
        config=config or TrialConfig(),
        clock=clock,
        rng=SeededRng(seed),
        input_source=input_source or DirectInputSource(),
        on_finish=on_finish or (lambda _result: None),
        sink=sink,
    )
