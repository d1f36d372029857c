"""Message types for the termiflow runtime.

A Message is an immutable tagged value: either an external event from the
terminal (keys, resize) or the outcome of a completed Command.

// [LAW:one-source-of-truth] The class IS the tag. No kind string field.

This module is STABLE. Safe for `from` imports everywhere.
"""

from dataclasses import dataclass, field

from termiflow.errors import ErrorKind


# ─── Value types ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IssueItem:
    """One row of an issue list."""

    title: str
    description: str


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Arguments are carried but unused. `signature` is the opaque thought
    signature the model attached to the call; it must go back verbatim when
    the call is replayed.
    """

    name: str
    args: dict = field(default_factory=dict, compare=False)
    signature: bytes | None = field(default=None, compare=False, repr=False)


# ─── Base ─────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Message:
    """Base class for everything the runtime loop consumes."""


# ─── Terminal events ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeyEvent(Message):
    """A keystroke. `key` uses Textual key names ("enter", "tab", "ctrl+c", "a")."""

    key: str
    character: str | None = None

    @property
    def is_printable(self) -> bool:
        return self.character is not None and len(self.character) == 1 and self.character.isprintable()


@dataclass(frozen=True)
class ResizeEvent(Message):
    """Terminal (or pane content area) size."""

    width: int
    height: int


# ─── Command results ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class IssuesFetched(Message):
    """A tracker fetch completed (items may be a placeholder row)."""

    items: tuple[IssueItem, ...]


@dataclass(frozen=True)
class FetchFailed(Message):
    """A tracker fetch failed."""

    error: str
    kind: ErrorKind = ErrorKind.TRANSPORT


@dataclass(frozen=True)
class ShellOutput(Message):
    """A shell program finished (or failed to start). `error` is None on success."""

    command: str
    output: str
    error: str | None = None


@dataclass(frozen=True)
class ModelReplied(Message):
    """The model service answered. Either field may be empty."""

    text: str
    tool_calls: tuple[ToolCall, ...] = ()


@dataclass(frozen=True)
class ToolResult(Message):
    """A catalog tool finished. Exactly one of payload/error is meaningful."""

    name: str
    payload: object = None
    error: str | None = None
    call: ToolCall | None = field(default=None, compare=False)


@dataclass(frozen=True)
class ChatFailed(Message):
    """The model service call failed."""

    error: str
    kind: ErrorKind = ErrorKind.TRANSPORT


@dataclass(frozen=True)
class CommandCrashed(Message):
    """A Command raised instead of returning a Message. Produced by the Executor."""

    command: str
    error: str
    kind: ErrorKind = ErrorKind.TRANSPORT


# ─── Routing ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PaneMessage(Message):
    """Envelope addressing a Command result to the pane that issued it."""

    pane_index: int
    message: Message
