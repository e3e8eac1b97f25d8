from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EventKind(StrEnum):
    timeout = "timeout"
    printable_text = "printable_text"
    exit = "exit"
    left = "left"
    right = "right"
    up = "up"
    down = "down"
    backspace = "backspace"
    cancel = "cancel"
    confirm = "confirm"
    other = "other"


class ExpectedEvent(StrEnum):
    """What kind of input the current state can interpret.

    The event source uses it to decide what a raw key means; e.g. `h` is text while
    typing a name and "left" while picking a map.
    """

    free_text = "free_text"
    vertical_choice = "vertical_choice"
    horizontal_choice = "horizontal_choice"
    generic_choice = "generic_choice"
    none = "none"


@dataclass(frozen=True, slots=True)
class Event:
    kind: EventKind
    # Only meaningful for `printable_text`.
    text: str = ""

    @staticmethod
    def printable(text: str) -> "Event":
        return Event(kind=EventKind.printable_text, text=text)


TIMEOUT = Event(EventKind.timeout)
EXIT = Event(EventKind.exit)
LEFT = Event(EventKind.left)
RIGHT = Event(EventKind.right)
UP = Event(EventKind.up)
DOWN = Event(EventKind.down)
BACKSPACE = Event(EventKind.backspace)
CANCEL = Event(EventKind.cancel)
CONFIRM = Event(EventKind.confirm)
OTHER = Event(EventKind.other)
