"""IssueList pane: a fetch-once, filterable list bound to one tracker source.

// [LAW:single-enforcer] `loading` is the in-flight guard: init() refuses to
//   issue a second fetch until the first one's Message has been applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from rich.text import Text

import termiflow.tui.styles as styles
from termiflow.commands import AnyCommand, Command
from termiflow.errors import ConfigMissing, ErrorKind, TermiflowError
from termiflow.messages import (
    CommandCrashed,
    FetchFailed,
    IssueItem,
    IssuesFetched,
    KeyEvent,
    Message,
)
from termiflow.panes.base import edit_line, join_lines
from termiflow.trackers.sources import TrackerSource

logger = logging.getLogger(__name__)

# Title row + filter row + blank.
_HEADER_ROWS = 3
# Each item renders as title + description + spacer.
_ROWS_PER_ITEM = 3


def fetch_items(source: TrackerSource) -> Message:
    """Command work: one read-only query against the source."""
    try:
        items = source.fetch()
    except ConfigMissing as e:
        logger.info("%s not configured: %s", source.title, e)
        return IssuesFetched(items=(IssueItem("Setup Required", source.setup_hint or str(e)),))
    except TermiflowError as e:
        return FetchFailed(error=str(e), kind=e.kind)
    return IssuesFetched(items=tuple(items))


@dataclass(frozen=True)
class IssueListPane:
    source: TrackerSource
    items: tuple[IssueItem, ...] = ()
    loaded: bool = False
    loading: bool = False
    last_error: str | None = None
    cursor: int = 0
    filter: str = ""
    width: int = 80
    height: int = 20

    @property
    def title(self) -> str:
        return self.source.title

    @classmethod
    def create(cls, source: TrackerSource) -> IssueListPane:
        return cls(source=source)

    def init(self) -> tuple[IssueListPane, AnyCommand]:
        """Issue the fetch and mark the pane loading, or do nothing if one is in flight."""
        if self.loading:
            return self, None
        source = self.source
        command = Command(work=lambda: fetch_items(source), name=f"fetch:{source.title}")
        return replace(self, loading=True), command

    def resize(self, width: int, height: int) -> IssueListPane:
        return replace(self, width=width, height=height)

    # ─── Update ────────────────────────────────────────────────────────

    def visible_items(self) -> tuple[IssueItem, ...]:
        if not self.filter:
            return self.items
        needle = self.filter.lower()
        return tuple(i for i in self.items if needle in i.title.lower())

    def update(self, message: Message) -> tuple[IssueListPane, AnyCommand]:
        if isinstance(message, IssuesFetched):
            items = message.items or (IssueItem("No issues found", self.source.empty_hint),)
            return replace(self, items=items, loaded=True, loading=False, last_error=None, cursor=0), None
        if isinstance(message, (FetchFailed, CommandCrashed)):
            return self._failed(message.error), None
        if isinstance(message, KeyEvent):
            return self._key(message), None
        return self, None

    def _failed(self, error: str) -> IssueListPane:
        return replace(
            self,
            items=(IssueItem("Error", error),),
            loaded=True,
            loading=False,
            last_error=error,
            cursor=0,
        )

    def _key(self, event: KeyEvent) -> IssueListPane:
        count = len(self.visible_items())
        if event.key == "down":
            return replace(self, cursor=min(self.cursor + 1, max(count - 1, 0)))
        if event.key == "up":
            return replace(self, cursor=max(self.cursor - 1, 0))
        if event.key == "escape":
            return replace(self, filter="", cursor=0)
        edited = edit_line(self.filter, event)
        if edited is None:
            return self
        return replace(self, filter=edited, cursor=0)

    # ─── View ──────────────────────────────────────────────────────────

    def view(self) -> Text:
        lines = [Text(f" {self.title} ", style=styles.LIST_TITLE)]
        if self.filter:
            lines.append(Text(f"Filter: {self.filter}", style=styles.DIM))
        elif self.loading:
            lines.append(Text("Loading…", style=styles.DIM))
        else:
            lines.append(Text(""))

        visible = self.visible_items()
        if not visible and self.items:
            lines.append(Text("No items match the filter.", style=styles.DIM))
            return join_lines(lines)

        capacity = max(1, (self.height - _HEADER_ROWS) // _ROWS_PER_ITEM)
        cursor = min(self.cursor, max(len(visible) - 1, 0))
        start = max(0, cursor - capacity + 1)
        for index, item in enumerate(visible[start:start + capacity], start):
            selected = index == cursor
            marker = "│ " if selected else "  "
            lines.append(Text(""))
            lines.append(Text(marker + item.title, style=styles.ITEM_SELECTED if selected else styles.ITEM_TITLE))
            lines.append(Text(marker + item.description, style=styles.ITEM_DESCRIPTION))
        return join_lines(lines)
