"""Keyboard input helpers."""

import time
from collections.abc import Callable

ENTER = "enter"
ESCAPE = "escape"
BACKSPACE = "backspace"


def normalize_key(key: str, character: str | None = None) -> str:
    """
    Map a Textual key event to the names the widgets understand.

    Printable keys become their character, so 'f' stays 'f' and space
    becomes ' '. A raw newline counts as Enter.
    """
    if character == "\n" or character == "\r" or key in ("enter", "ctrl+m", "ctrl+j"):
        return ENTER
    if key in ("escape", "ctrl+left_square_bracket"):
        return ESCAPE
    if key in ("backspace", "ctrl+h"):
        return BACKSPACE
    if character and character.isprintable():
        return character
    return key


class KeyThrottle:
    """Delivers at most one key event per window; the rest are dropped."""

    def __init__(self, window: float = 0.15, clock: Callable[[], float] = time.monotonic) -> None:
        self._window = window
        self._clock = clock
        self._last: float | None = None

    @property
    def window(self) -> float:
        return self._window

    def allow(self) -> bool:
        """Return True if an event arriving now should be delivered."""
        now = self._clock()
        if self._last is not None and now - self._last < self._window:
            return False
        self._last = now
        return True
