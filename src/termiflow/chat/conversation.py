"""Conversation transcript types.

A Conversation is a tuple of Turns. It is only ever extended: append() returns
a new tuple, the old one is never touched, so a snapshot handed to a Command
can not change under it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from termiflow.messages import ToolCall


class Role(Enum):
    USER = "user"
    AGENT = "agent"
    TOOL = "tool"
    SYSTEM = "system"


@dataclass(frozen=True)
class Turn:
    """One role-tagged transcript entry.

    TOOL turns also carry `name` (the tool), the `call` the model made and the
    `tool_round` it belongs to. Calls from one model reply share a round.
    """

    role: Role
    content: str
    name: str = ""
    call: ToolCall | None = field(default=None, compare=False)
    tool_round: int = field(default=0, compare=False)


Conversation = tuple[Turn, ...]


def append(conversation: Conversation, *turns: Turn) -> Conversation:
    return conversation + turns


def user(text: str) -> Turn:
    return Turn(Role.USER, text)


def agent(text: str) -> Turn:
    return Turn(Role.AGENT, text)


def system(text: str) -> Turn:
    return Turn(Role.SYSTEM, text)


def tool(name: str, content: str, call: ToolCall | None = None, tool_round: int = 0) -> Turn:
    return Turn(Role.TOOL, content, name=name, call=call, tool_round=tool_round)
