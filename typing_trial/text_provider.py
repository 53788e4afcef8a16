from __future__ import annotations

import string
from dataclasses import dataclass

from .config import FixedText, GeneratedText, TextSource
from .typing_core import MissingParameterError, RandomSource

# (min, max) letters for each of the three pseudo-words.
RANDOM_WORD_LENGTHS: tuple[tuple[int, int], ...] = ((3, 6), (3, 7), (2, 5))


@dataclass(frozen=True, slots=True)
class TargetText:
    text: str
    is_real_sentence: bool | None


def random_letter_string(rng: RandomSource, min_length: int, max_length: int) -> str:
    n = rng.randint(min_length, max_length)
    return "".join(rng.choice(string.ascii_lowercase) for _ in range(n))


def random_letter_sentence(rng: RandomSource) -> str:
    return " ".join(random_letter_string(rng, lo, hi) for lo, hi in RANDOM_WORD_LENGTHS)


class TextProvider:
    """Supplies the target text for one trial.

    A fixed source hands back the caller's text. A generated source picks a
    subject-verb-object sentence, or with `random_string_probability` a
    random-letter triplet from a pool built once when the provider is created.
    """

    def __init__(self, source: TextSource, *, rng: RandomSource) -> None:
        self._source = source
        self._rng = rng
        self._pool: tuple[str, ...] = ()
        self._last_is_real_sentence: bool | None = None

        if isinstance(source, GeneratedText):
            self._pool = tuple(random_letter_sentence(rng) for _ in range(source.pool_size))

    @property
    def pool(self) -> tuple[str, ...]:
        return self._pool

    @property
    def is_real_sentence(self) -> bool | None:
        return self._last_is_real_sentence

    def get_target_text(self) -> TargetText:
        source = self._source
        if isinstance(source, FixedText):
            if source.text is None or source.text == "":
                raise MissingParameterError("required parameter 'text' is missing")
            return TargetText(text=source.text, is_real_sentence=None)

        is_real = self._rng.random() > source.random_string_probability
        self._last_is_real_sentence = is_real
        if is_real:
            text = self._normal_sentence(source)
        else:
            text = self._rng.choice(self._pool)
        return TargetText(text=text, is_real_sentence=is_real)

    def _normal_sentence(self, source: GeneratedText) -> str:
        subject = self._rng.choice(source.subjects)
        verb = self._rng.choice(source.verbs)
        obj = self._rng.choice(source.objects)
        return f"{subject} {verb} {obj}"
