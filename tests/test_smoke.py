"""Smoke tests for the pygame shell.

These verify that the trial screen can initialise, accept injected key
events and run a handful of frames without crashing when the SDL dummy
drivers are used. Rendering correctness is not checked.
"""

from __future__ import annotations

import os

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("TYPING_TRIAL_DISABLE_AUDIO", "1")


def test_app_runs_headless() -> None:
    from typing_trial.app import run
    from typing_trial.config import FixedText, TrialConfig

    exit_code = run(max_frames=3, config=TrialConfig(text_source=FixedText("cat")), seed=1)
    assert exit_code == 0


def test_app_runs_generated_text_headless() -> None:
    from typing_trial.app import run
    from typing_trial.config import TrialConfig

    assert run(max_frames=3, config=TrialConfig(trial_duration_ms=5000), seed=3) == 0


def test_app_accepts_typed_keys_and_finishes() -> None:
    import pygame

    from typing_trial.app import run
    from typing_trial.config import FixedText, TrialConfig

    def inject(frame: int) -> None:
        keys = {1: ("c", pygame.K_c), 2: ("a", pygame.K_a), 3: ("t", pygame.K_t)}
        if frame in keys:
            ch, key = keys[frame]
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": ch, "mod": 0}))
        elif frame == 4:
            pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"button": 1, "pos": (10, 10)}))

    config = TrialConfig(text_source=FixedText("cat"), sound_mode=0, feedback_duration_ms=0)
    assert run(max_frames=12, event_injector=inject, config=config, seed=1) == 0


def test_app_with_missing_text_shows_results_screen() -> None:
    from typing_trial.app import run
    from typing_trial.config import FixedText, TrialConfig

    assert run(max_frames=3, config=TrialConfig(text_source=FixedText(None)), seed=1) == 0


def test_enter_and_tab_are_not_recorded_as_keystrokes() -> None:
    import pygame

    from typing_trial.app import App, TypingTrialScreen
    from typing_trial.clock import RealClock
    from typing_trial.config import FixedText, TrialConfig
    from typing_trial.typing_core import MatchingPolicy
    from typing_trial.typing_trial import build_typing_trial

    config = TrialConfig(
        text_source=FixedText("ab"),
        sound_mode=0,
        matching_policy=MatchingPolicy.POSITION_LOCKED,
    )
    pygame.init()
    try:
        screen = TypingTrialScreen(
            App(),
            trial_factory=lambda source, on_finish: build_typing_trial(
                clock=RealClock(),
                seed=1,
                config=config,
                on_finish=on_finish,
                input_source=source,
            ),
        )
        for ch, key in (("a", pygame.K_a), ("\r", pygame.K_RETURN), ("\t", pygame.K_TAB)):
            screen.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": ch, "mod": 0}))

        assert [k.character for k in screen.trial.keystrokes()] == ["a"]
        assert screen.trial.user_input == "a"
        assert screen.result is None
    finally:
        pygame.quit()
