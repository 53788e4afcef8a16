from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

KeyHandler = Callable[[str], None]
InteractionHandler = Callable[[], None]


class InputSource(Protocol):
    """Delivers discrete character events to one subscriber at a time."""

    def subscribe(self, on_key: KeyHandler, on_interaction: InteractionHandler) -> None:
        ...

    def unsubscribe(self) -> None:
        ...


class DirectInputSource:
    """InputSource fed programmatically (UI shell, headless runs, tests)."""

    def __init__(self) -> None:
        self._on_key: KeyHandler | None = None
        self._on_interaction: InteractionHandler | None = None

    @property
    def subscribed(self) -> bool:
        return self._on_key is not None

    def subscribe(self, on_key: KeyHandler, on_interaction: InteractionHandler) -> None:
        self._on_key = on_key
        self._on_interaction = on_interaction

    def unsubscribe(self) -> None:
        self._on_key = None
        self._on_interaction = None

    def press(self, key: str) -> bool:
        """Dispatch a key press. Returns False when nobody is listening."""

        if self._on_key is None:
            return False
        self._on_key(key)
        return True

    def type_text(self, text: str) -> None:
        for ch in text:
            self.press(ch)

    def click(self) -> bool:
        if self._on_interaction is None:
            return False
        self._on_interaction()
        return True
