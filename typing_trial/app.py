"""Pygame shell for a single typing trial.

Shows the target text with per-character feedback, the typed text and a
progress bar, forwards key presses to the trial, and prints the trial data
record when the trial finishes. Deterministic timing/policy/state lives in
typing_trial/* (core modules); this file only draws and dispatches events.
"""

from __future__ import annotations

import logging
import os
import random
from collections.abc import Callable

import pygame

from .audio import PygameFeedbackSink
from .clock import RealClock
from .config import TrialConfig, config_from_env
from .events import DirectInputSource
from .results import summarize_trial, trial_data_json
from .typing_core import TrialResult, TrialSnapshot, TrialState
from .typing_trial import TypingTrial, build_typing_trial

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

_BG = (10, 10, 14)
_TEXT_MAIN = (235, 235, 245)
_TEXT_MUTED = (150, 150, 160)
_OK = (40, 170, 70)
_BAD = (210, 50, 50)
_TRACK = (221, 221, 221)


class App:
    def __init__(self) -> None:
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def quit(self) -> None:
        self._running = False


class TypingTrialScreen:
    def __init__(
        self,
        app: App,
        *,
        trial_factory: Callable[[DirectInputSource, Callable[[TrialResult], None]], TypingTrial],
    ) -> None:
        self._app = app
        self._input = DirectInputSource()
        self._result: TrialResult | None = None
        self._trial = trial_factory(self._input, self._on_finish)

        self._text_font = pygame.font.Font(None, 40)
        self._small_font = pygame.font.Font(None, 24)
        self._tiny_font = pygame.font.Font(None, 20)

        self._trial.start()

    @property
    def trial(self) -> TypingTrial:
        return self._trial

    @property
    def result(self) -> TrialResult | None:
        return self._result

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN:
            self._input.click()
            return
        if event.type != pygame.KEYDOWN:
            return

        if self._trial.state is TrialState.FINISHED:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_ESCAPE):
                self._app.quit()
            return

        # Emergency exit.
        if event.key == pygame.K_F12:
            self._app.quit()
            return

        text = getattr(event, "unicode", "")
        # Enter and Tab arrive as control characters; only printable text is typed.
        if len(text) == 1 and text.isprintable():
            self._input.press(text)

    def update(self) -> None:
        self._trial.update()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(_BG)
        snap = self._trial.snapshot()
        if snap.state is TrialState.FINISHED:
            self._render_results(surface)
            return
        self._render_trial(surface, snap)

    def _on_finish(self, result: TrialResult) -> None:
        self._result = result
        logger.info(f"Trial data:\n{trial_data_json(result)}")

    def _render_trial(self, surface: pygame.Surface, snap: TrialSnapshot) -> None:
        w, h = surface.get_size()
        cell_w = self._text_font.size("M")[0] + 4

        def draw_chars(text: str, y: int, marks: tuple[bool, ...]) -> None:
            x = (w - cell_w * len(text)) // 2
            for i, ch in enumerate(text):
                color = _TEXT_MAIN
                if i < len(marks):
                    color = _OK if marks[i] else _BAD
                glyph = self._text_font.render(ch, True, color)
                surface.blit(glyph, (x + i * cell_w, y))

        top = h // 3
        draw_chars(snap.target_text, top, snap.char_marks)
        draw_chars(snap.user_input, top + 50, snap.char_marks)

        bar_w = min(600, w - 80)
        bar = pygame.Rect((w - bar_w) // 2, top + 110, bar_w, 6)
        pygame.draw.rect(surface, _TRACK, bar, border_radius=3)
        fill = bar.copy()
        fill.w = int(bar.w * snap.progress)
        if fill.w > 0:
            pygame.draw.rect(surface, _OK if snap.is_correct else _BAD, fill, border_radius=3)

        hint = self._small_font.render("Type the text above. Listen carefully to the keystrokes!", True, _TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midtop=(w // 2, bar.bottom + 24)))
        mode = self._tiny_font.render(f"Sound mode: {snap.sound_mode_label}", True, _TEXT_MUTED)
        surface.blit(mode, mode.get_rect(midtop=(w // 2, bar.bottom + 56)))

        if snap.time_remaining_s is not None:
            timer = self._tiny_font.render(f"{snap.time_remaining_s:0.1f}s", True, _TEXT_MUTED)
            surface.blit(timer, (w - timer.get_width() - 16, 16))

    def _render_results(self, surface: pygame.Surface) -> None:
        result = self._result
        lines = ["Trial complete", ""]
        if result is None or result.aborted:
            lines.append("No target text was supplied.")
        else:
            s = summarize_trial(result)
            rt = "n/a" if result.reaction_time_ms is None else f"{result.reaction_time_ms:.0f} ms"
            cpm = "n/a" if s.chars_per_min is None else f"{s.chars_per_min:.0f}"
            lines += [
                f"Target:    {result.target_text}",
                f"Typed:     {result.user_input}",
                f"Accuracy:  {'correct' if result.accuracy else 'incorrect'}",
                f"Time:      {rt}",
                f"Chars/min: {cpm}",
            ]
        lines += ["", "Press Enter to quit."]

        y = 40
        for line in lines:
            surface.blit(self._small_font.render(line, True, _TEXT_MAIN), (40, y))
            y += 30


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TrialConfig | None = None,
    seed: int | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("Typing Trial")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    app = App()

    cfg = config if config is not None else config_from_env()
    trial_seed = _new_seed() if seed is None else int(seed)
    real_clock = RealClock()
    # TYPING_TRIAL_DISABLE_AUDIO=1 runs without opening the mixer.
    sink = None if os.environ.get("TYPING_TRIAL_DISABLE_AUDIO", "0") == "1" else PygameFeedbackSink()

    screen = TypingTrialScreen(
        app,
        trial_factory=lambda source, on_finish: build_typing_trial(
            clock=real_clock,
            seed=trial_seed,
            config=cfg,
            on_finish=on_finish,
            input_source=source,
            sink=sink,
        ),
    )

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    app.quit()
                    break
                screen.handle_event(event)

            screen.update()
            screen.render(surface)

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
