"""Pane composition runtime.

The Composer owns the pane list and the active index. It is a value: every
dispatch returns a new Composer plus the Command the host must hand to the
Executor. It never runs work itself.

// [LAW:single-enforcer] dispatch() is the only router. Tab, quit, re-init
//   and resize are decided here; everything else goes to exactly one pane.
// [LAW:one-source-of-truth] Command results carry their pane index in a
//   PaneMessage envelope, so they reach the pane that asked for them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from rich.text import Text

import termiflow.tui.styles as styles
from termiflow.commands import QUIT, AnyCommand, batch
from termiflow.messages import KeyEvent, Message, PaneMessage, ResizeEvent
from termiflow.panes.base import Pane

logger = logging.getLogger(__name__)

# Tab strip row plus the blank separator row.
CHROME_HEIGHT = 2

NEXT_PANE_KEY = "tab"
QUIT_KEY = "ctrl+c"
REINIT_KEY = "ctrl+r"


def _tag(index: int, command: AnyCommand) -> AnyCommand:
    if command is None or command is QUIT:
        return command
    return command.map(lambda message: PaneMessage(pane_index=index, message=message))


@dataclass(frozen=True)
class Composer:
    panes: tuple[Pane, ...]
    active: int = 0
    width: int = 0
    height: int = 0

    @classmethod
    def create(cls, panes) -> Composer:
        panes = tuple(panes)
        if not panes:
            raise ValueError("Composer needs at least one pane")
        return cls(panes=panes)

    @property
    def active_pane(self) -> Pane:
        return self.panes[self.active]

    def _with_pane(self, index: int, pane: Pane) -> Composer:
        panes = self.panes[:index] + (pane,) + self.panes[index + 1:]
        return replace(self, panes=panes)

    def _deliver(self, index: int, message: Message) -> tuple[Composer, AnyCommand]:
        pane, command = self.panes[index].update(message)
        return self._with_pane(index, pane), _tag(index, command)

    def init(self) -> tuple[Composer, AnyCommand]:
        """Run every pane's init() and batch the resulting Commands."""
        composer = self
        commands = []
        for index, pane in enumerate(self.panes):
            pane, command = pane.init()
            composer = composer._with_pane(index, pane)
            commands.append(_tag(index, command))
        return composer, batch(*commands)

    def dispatch(self, event: Message) -> tuple[Composer, AnyCommand]:
        if isinstance(event, PaneMessage):
            if not 0 <= event.pane_index < len(self.panes):
                logger.warning("Dropping message for unknown pane %d", event.pane_index)
                return self, None
            return self._deliver(event.pane_index, event.message)

        if isinstance(event, KeyEvent):
            if event.key == NEXT_PANE_KEY:
                return replace(self, active=(self.active + 1) % len(self.panes)), None
            if event.key == QUIT_KEY:
                return self, QUIT
            if event.key == REINIT_KEY:
                pane, command = self.active_pane.init()
                return self._with_pane(self.active, pane), _tag(self.active, command)

        if isinstance(event, ResizeEvent):
            content_height = max(event.height - CHROME_HEIGHT, 0)
            panes = tuple(p.resize(event.width, content_height) for p in self.panes)
            resized = replace(self, panes=panes, width=event.width, height=event.height)
            return resized._deliver(self.active, event)

        return self._deliver(self.active, event)

    def tab_strip(self) -> Text:
        strip = Text()
        for index, pane in enumerate(self.panes):
            if index:
                strip.append("│", style=styles.TAB_SEPARATOR)
            style = styles.ACTIVE_TAB if index == self.active else styles.INACTIVE_TAB
            strip.append(f" {pane.title} ", style=style)
        return strip

    def view(self) -> Text:
        return Text("\n\n").join([self.tab_strip(), self.active_pane.view()])
