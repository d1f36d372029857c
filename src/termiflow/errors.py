"""Error taxonomy for termiflow.

Every failure that can reach a pane is one of these kinds. Collaborators
raise the exception classes; Commands catch them and turn them into failure
Messages that carry an ErrorKind, so the pane can render them inline.

// [LAW:one-source-of-truth] ErrorKind is the only discriminator panes branch on.

This module is STABLE: no dependencies on other project modules.
"""

from enum import Enum


class ErrorKind(Enum):
    """Discriminator carried on failure Messages."""

    CONFIG_MISSING = "config_missing"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    UNKNOWN_TOOL = "unknown_tool"
    USER_INPUT = "user_input"


class TermiflowError(Exception):
    """Base class for recoverable termiflow errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT


class ConfigMissing(TermiflowError):
    """A required credential or setting is absent."""

    kind = ErrorKind.CONFIG_MISSING


class TransportError(TermiflowError):
    """Network or process failure."""

    kind = ErrorKind.TRANSPORT


class ProtocolError(TermiflowError):
    """Non-success status or a payload that does not have the expected shape."""

    kind = ErrorKind.PROTOCOL

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class UnknownTool(TermiflowError):
    """The model asked for a tool that is not in the catalog."""

    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class UserInputError(TermiflowError):
    """The user asked for something that cannot be done (e.g. cd to a missing dir)."""

    kind = ErrorKind.USER_INPUT


def kind_of(exc: BaseException) -> ErrorKind:
    """Classify any exception; foreign exceptions count as transport failures."""
    if isinstance(exc, TermiflowError):
        return exc.kind
    return ErrorKind.TRANSPORT
