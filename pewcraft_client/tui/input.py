from __future__ import annotations

import curses
import logging
from enum import StrEnum
from typing import Any, Callable

import pyperclip

from pewcraft_client.core.events import (
    BACKSPACE,
    CANCEL,
    CONFIRM,
    DOWN,
    EXIT,
    LEFT,
    OTHER,
    RIGHT,
    TIMEOUT,
    UP,
    Event,
    ExpectedEvent,
)

logger = logging.getLogger(__name__)

KeyInput = str | int


class ClipboardAction(StrEnum):
    copy = "copy"
    paste = "paste"


_SPECIAL_KEYS: dict[int, Event] = {
    curses.KEY_LEFT: LEFT,
    curses.KEY_RIGHT: RIGHT,
    curses.KEY_UP: UP,
    curses.KEY_DOWN: DOWN,
    curses.KEY_ENTER: CONFIRM,
    curses.KEY_BACKSPACE: BACKSPACE,
}

_CONTROL_CHARS: dict[str, Event | ClipboardAction] = {
    "\n": CONFIRM,
    "\r": CONFIRM,
    "\x7f": BACKSPACE,
    "\b": BACKSPACE,
    "\x1b": CANCEL,
    "\x03": EXIT,  # ctrl-c
    "\x11": EXIT,  # ctrl-q
    "\x16": ClipboardAction.paste,  # ctrl-v
}

# Single letters double as navigation when no text is being typed.
_SHORTCUTS: dict[str, Event | ClipboardAction] = {
    "q": EXIT,
    "h": LEFT,
    "l": RIGHT,
    "j": DOWN,
    "k": UP,
    "y": ClipboardAction.copy,
}


def key_to_event(key: KeyInput, expected: ExpectedEvent) -> Event | ClipboardAction:
    """Map a raw curses key to an event, according to what the current state expects."""

    if isinstance(key, int):
        return _SPECIAL_KEYS.get(key, OTHER)
    if key in _CONTROL_CHARS:
        return _CONTROL_CHARS[key]
    if not key.isprintable():
        return OTHER
    if expected is ExpectedEvent.free_text:
        return Event.printable(key)
    return _SHORTCUTS.get(key, Event.printable(key))


class CursesEventSource:
    """Produces one event per call: the next key, or `Timeout` if none arrives in time.

    The curses input timeout is what races operator input against the poll timer;
    a key pressed after the timer fired is read on the following call.
    """

    def __init__(
        self,
        window: Any,
        *,
        poll_interval_ms: int = 500,
        copy: Callable[[str], None] = pyperclip.copy,
        paste: Callable[[], str] = pyperclip.paste,
    ) -> None:
        self._window = window
        self._copy = copy
        self._paste = paste
        window.keypad(True)
        window.timeout(poll_interval_ms)

    def next_event(self, expected: ExpectedEvent, *, copy_payload: str | None = None) -> Event:
        try:
            key = self._window.get_wch()
        except curses.error:
            # No key before the timeout.
            return TIMEOUT

        action = key_to_event(key, expected)
        if isinstance(action, Event):
            return action
        return self._clipboard(action, expected, copy_payload)

    def _clipboard(self, action: ClipboardAction, expected: ExpectedEvent, copy_payload: str | None) -> Event:
        try:
            if action is ClipboardAction.copy:
                if copy_payload:
                    self._copy(copy_payload)
                    logger.info("Copied %s to the clipboard", copy_payload)
                return OTHER

            if expected is not ExpectedEvent.free_text:
                return OTHER
            text = "".join(c for c in self._paste() if c.isprintable())
            return Event.printable(text) if text else OTHER
        except pyperclip.PyperclipException as e:
            logger.warning("Clipboard unavailable: %s", e)
            return OTHER
