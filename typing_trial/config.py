from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from .typing_core import MatchingPolicy, RandomSource, SoundMode, clamp01

DEFAULT_SUBJECTS: tuple[str, ...] = (
    "I", "You", "He", "She", "They", "We", "Dogs", "Cats",
    "Birds", "People", "Children", "Students", "Teachers", "Parents",
    "Artists", "Scientists", "Writers", "Doctors", "Players", "Friends",
)
DEFAULT_VERBS: tuple[str, ...] = (
    "eat", "run", "jump", "play", "sing", "dance", "write", "read",
    "watch", "hear", "see", "feel", "build", "create", "make", "find",
    "love", "help", "teach", "learn",
)
DEFAULT_OBJECTS: tuple[str, ...] = (
    "food", "games", "books", "music", "movies", "cards", "toys",
    "sports", "websites", "papers", "stories", "songs", "pictures",
    "ideas", "words", "lessons", "puzzles", "plans", "projects", "art",
)

ENV_TEXT = "TYPING_TRIAL_TEXT"
ENV_SOUND_MODE = "TYPING_TRIAL_SOUND_MODE"
ENV_DURATION_MS = "TYPING_TRIAL_DURATION_MS"
ENV_FEEDBACK_MS = "TYPING_TRIAL_FEEDBACK_MS"
ENV_POLICY = "TYPING_TRIAL_POLICY"
ENV_RANDOM_STRING_P = "TYPING_TRIAL_RANDOM_STRING_P"


@dataclass(frozen=True, slots=True)
class FixedText:
    # None models a host that forgot to pass the parameter.
    text: str | None


@dataclass(frozen=True, slots=True)
class GeneratedText:
    subjects: tuple[str, ...] = DEFAULT_SUBJECTS
    verbs: tuple[str, ...] = DEFAULT_VERBS
    objects: tuple[str, ...] = DEFAULT_OBJECTS
    random_string_probability: float = 0.5
    pool_size: int = 65

    def __post_init__(self) -> None:
        if not self.subjects or not self.verbs or not self.objects:
            raise ValueError("subjects, verbs and objects must be non-empty")
        if not (0.0 <= self.random_string_probability <= 1.0):
            raise ValueError("random_string_probability must be in [0.0, 1.0]")
        if self.pool_size <= 0:
            raise ValueError("pool_size must be > 0")


TextSource = FixedText | GeneratedText


@dataclass(frozen=True, slots=True)
class TrialConfig:
    text_source: TextSource = field(default_factory=GeneratedText)
    sound_mode: SoundMode | None = None
    trial_duration_ms: int | None = None
    feedback_duration_ms: int = 1000
    matching_policy: MatchingPolicy = MatchingPolicy.PREFIX_ABORT

    def __post_init__(self) -> None:
        if self.sound_mode is not None:
            try:
                mode = SoundMode(int(self.sound_mode))
            except ValueError:
                raise ValueError("sound_mode must be 0, 1, 2 or None") from None
            object.__setattr__(self, "sound_mode", mode)
        if self.trial_duration_ms is not None and self.trial_duration_ms <= 0:
            raise ValueError("trial_duration_ms must be > 0 or None")
        if self.feedback_duration_ms < 0:
            raise ValueError("feedback_duration_ms must be >= 0")
        object.__setattr__(self, "matching_policy", MatchingPolicy(self.matching_policy))

    def resolved(self, rng: RandomSource) -> "TrialConfig":
        """Return a copy whose sound mode is concrete, drawing one if unset."""

        if self.sound_mode is not None:
            return self
        return replace(self, sound_mode=SoundMode(rng.randint(0, 2)))


def _env_int(environ: Mapping[str, str], key: str) -> int | None:
    raw = environ.get(key, "").strip()
    if raw == "" or raw.lower() in ("none", "null"):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def config_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    base: TrialConfig | None = None,
) -> TrialConfig:
    """Overlay TYPING_TRIAL_* environment variables on `base`."""

    env = os.environ if environ is None else environ
    cfg = base or TrialConfig()

    text = env.get(ENV_TEXT)
    if text is not None and text.strip() != "":
        cfg = replace(cfg, text_source=FixedText(text=text))
    elif isinstance(cfg.text_source, GeneratedText):
        raw_p = env.get(ENV_RANDOM_STRING_P, "").strip()
        if raw_p != "":
            try:
                p = float(raw_p)
            except ValueError:
                raise ValueError(f"{ENV_RANDOM_STRING_P} must be a number, got {raw_p!r}") from None
            if p != clamp01(p):
                raise ValueError(f"{ENV_RANDOM_STRING_P} must be in [0.0, 1.0]")
            cfg = replace(cfg, text_source=replace(cfg.text_source, random_string_probability=p))

    if ENV_SOUND_MODE in env:
        cfg = replace(cfg, sound_mode=_env_int(env, ENV_SOUND_MODE))

    if ENV_DURATION_MS in env:
        cfg = replace(cfg, trial_duration_ms=_env_int(env, ENV_DURATION_MS))

    feedback = _env_int(env, ENV_FEEDBACK_MS)
    if feedback is not None:
        cfg = replace(cfg, feedback_duration_ms=feedback)

    policy = env.get(ENV_POLICY, "").strip().lower()
    if policy != "":
        try:
            cfg = replace(cfg, matching_policy=MatchingPolicy(policy))
        except ValueError:
            raise ValueError(f"{ENV_POLICY} must be one of prefix_abort, position_locked") from None

    return cfg
