from __future__ import annotations

import logging
from array import array

import pygame

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
_AMP = 32767

CLICK_DURATION_S = 0.10
CLICK_START_HZ = 800.0
CLICK_END_HZ = 400.0
CLICK_START_GAIN = 0.30
CLICK_END_GAIN = 0.01


def _exp_ramp(start: float, end: float, t: float) -> float:
    # Exponential interpolation; t in [0, 1].
    return start * ((end / start) ** t)


def render_click_pcm(
    *,
    sample_rate: int = SAMPLE_RATE,
    duration_s: float = CLICK_DURATION_S,
    start_hz: float = CLICK_START_HZ,
    end_hz: float = CLICK_END_HZ,
    start_gain: float = CLICK_START_GAIN,
    end_gain: float = CLICK_END_GAIN,
) -> array[int]:
    """Keystroke click: triangle wave sweeping down in pitch and level."""

    sample_count = max(1, int(sample_rate * duration_s))
    out = array("h")
    phase = 0.0
    for idx in range(sample_count):
        t = idx / float(sample_count)
        freq = _exp_ramp(start_hz, end_hz, t)
        gain = _exp_ramp(start_gain, end_gain, t)
        phase = (phase + freq / float(sample_rate)) % 1.0
        # Triangle in [-1, 1].
        tri = 4.0 * abs(phase - 0.5) - 1.0
        sample = tri * gain
        out.append(int(max(-1.0, min(1.0, sample)) * _AMP))
    return out


class PygameFeedbackSink:
    """pygame.mixer FeedbackSink.

    The mixer is opened lazily by activate(); until then every play call is a
    no-op, mirroring browsers that refuse audio before a user gesture.
    """

    def __init__(self) -> None:
        self._available = False
        self._activated = False
        self._click: pygame.mixer.Sound | None = None
        self.immediate_played = 0
        self.delayed_played = 0

    @property
    def available(self) -> bool:
        return self._available

    def activate(self) -> None:
        if self._activated:
            return
        self._activated = True
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
            self._click = pygame.mixer.Sound(buffer=render_click_pcm().tobytes())
            self._available = True
        except pygame.error as exc:
            logger.warning(f"Audio feedback unavailable: {exc}")
            self._available = False

    def play_immediate(self) -> None:
        if self._play():
            self.immediate_played += 1

    def play_delayed(self) -> None:
        if self._play():
            self.delayed_played += 1

    def _play(self) -> bool:
        if not self._available:
            return False
        assert self._click is not None
        self._click.play()
        return True
