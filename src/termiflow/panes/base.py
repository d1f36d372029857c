"""Pane contract and small helpers shared by the concrete panes.

A Pane is an immutable value. Every transition returns a new Pane plus an
optional Command; the Composer swaps the old value out. view() must be a
pure function of the pane's fields.

// [LAW:one-source-of-truth] Size lives on the pane and only resize() sets it.
"""

from __future__ import annotations

from typing import Protocol

from rich.text import Text

from termiflow.commands import AnyCommand
from termiflow.messages import KeyEvent, Message


class Pane(Protocol):
    title: str
    width: int
    height: int

    def init(self) -> tuple[Pane, AnyCommand]:
        """Startup (or explicit re-init) transition and the Command it needs."""
        ...

    def update(self, message: Message) -> tuple[Pane, AnyCommand]:
        ...

    def view(self) -> Text:
        ...

    def resize(self, width: int, height: int) -> Pane:
        ...


def edit_line(text: str, event: KeyEvent) -> str | None:
    """Apply a line-editing key to `text`. Returns None when the key is not an edit."""
    if event.key == "backspace":
        return text[:-1]
    if event.is_printable:
        return text + event.character
    return None


def tail(lines: list[Text], height: int) -> list[Text]:
    """Keep the newest lines that fit in `height` rows (auto-scroll to bottom)."""
    if height <= 0:
        return []
    return lines[-height:]


def join_lines(lines: list[Text]) -> Text:
    return Text("\n").join(lines)
