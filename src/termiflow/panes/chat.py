"""Chat pane: conversation state machine with a tool-invocation loop.

Phases:

    IDLE --submit--> AWAITING_REPLY --text--> IDLE
                          |
                          +--tool calls--> TOOL_DISPATCH --all tools done--> AWAITING_REPLY (resume)

Any failure appends a system turn and returns to IDLE. Only one model or
tool exchange is outstanding at a time: a submit outside IDLE issues nothing.

After the last outstanding tool completes, the updated conversation (with
the tool turns) is sent back to the model so the final answer is a model
turn, not raw tool output.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from rich.text import Text

import termiflow.chat.conversation as conv
import termiflow.tui.styles as styles
from termiflow.chat.conversation import Conversation, Role
from termiflow.chat.model_service import ModelService, ToolDeclaration, fold_parts
from termiflow.chat.tools import Tool, ToolCatalog
from termiflow.commands import AnyCommand, Command, batch
from termiflow.errors import TermiflowError, UnknownTool
from termiflow.messages import (
    ChatFailed,
    CommandCrashed,
    KeyEvent,
    Message,
    ModelReplied,
    ToolCall,
    ToolResult,
)
from termiflow.panes.base import edit_line, join_lines, tail

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 5
_TOOL_COMMAND_PREFIX = "tool:"

WELCOME = (
    "Welcome to The Bridge Chat! 🤖\n"
    "Type a message and press Enter to chat with Gemini."
)


class ChatPhase(Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    TOOL_DISPATCH = "tool_dispatch"


# ─── Command work ────────────────────────────────────────────────────────────


def send_to_model(
    service: ModelService,
    history: Conversation,
    user_text: str | None,
    tools: tuple[ToolDeclaration, ...],
) -> Message:
    try:
        reply = service.send_turn(history, user_text, tools)
    except TermiflowError as e:
        return ChatFailed(error=str(e), kind=e.kind)
    text, calls = fold_parts(reply.parts)
    return ModelReplied(text=text, tool_calls=calls)


def invoke_tool(tool: Tool, call: ToolCall | None = None) -> Message:
    payload, error = tool.invoke()
    return ToolResult(name=tool.name, payload=payload, error=error, call=call)


def serialize_payload(payload: object) -> str:
    return json.dumps(payload, indent=2, default=str, ensure_ascii=False)


# ─── Pane ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ChatPane:
    service: ModelService = field(repr=False, compare=False)
    catalog: ToolCatalog = field(repr=False, compare=False)
    conversation: Conversation = ()
    phase: ChatPhase = ChatPhase.IDLE
    pending_tools: int = 0
    round_calls: tuple[ToolCall, ...] = ()
    tool_rounds: int = 0
    input: str = ""
    width: int = 80
    height: int = 20
    title: str = "Chat"

    def init(self) -> tuple[ChatPane, AnyCommand]:
        return self, None

    def resize(self, width: int, height: int) -> ChatPane:
        return replace(self, width=width, height=height)

    @property
    def busy(self) -> bool:
        return self.phase is not ChatPhase.IDLE

    def _send(self, history: Conversation, user_text: str | None) -> Command:
        service = self.service
        tools = self.catalog.declarations()
        return Command(
            work=lambda: send_to_model(service, history, user_text, tools),
            name="chat:send",
        )

    def _fail(self, error: str) -> ChatPane:
        return replace(
            self,
            conversation=conv.append(self.conversation, conv.system(f"Error: {error}")),
            phase=ChatPhase.IDLE,
            pending_tools=0,
            round_calls=(),
            tool_rounds=0,
        )

    # ─── Update ────────────────────────────────────────────────────────

    def update(self, message: Message) -> tuple[ChatPane, AnyCommand]:
        if isinstance(message, KeyEvent):
            if message.key == "enter":
                return self._submit()
            edited = edit_line(self.input, message)
            if edited is None:
                return self, None
            return replace(self, input=edited), None
        if isinstance(message, ModelReplied):
            return self._on_reply(message)
        if isinstance(message, ToolResult):
            return self._on_tool_result(message)
        if isinstance(message, CommandCrashed):
            if message.command.startswith(_TOOL_COMMAND_PREFIX) and self.phase is ChatPhase.TOOL_DISPATCH:
                name = message.command[len(_TOOL_COMMAND_PREFIX):]
                call = next((c for c in self.round_calls if c.name == name), None)
                return self._on_tool_result(ToolResult(name=name, error=message.error, call=call))
            return self._fail(message.error), None
        if isinstance(message, ChatFailed):
            return self._fail(message.error), None
        return self, None

    def _submit(self) -> tuple[ChatPane, AnyCommand]:
        text = self.input.strip()
        if not text or self.busy:
            return self, None
        if not self.service.configured:
            # Nothing is sent; the user turn is not recorded.
            return replace(
                self,
                input="",
                conversation=conv.append(
                    self.conversation,
                    conv.system("Error: GEMINI_API_KEY environment variable not set"),
                ),
            ), None
        history = self.conversation
        return replace(
            self,
            input="",
            conversation=conv.append(history, conv.user(text)),
            phase=ChatPhase.AWAITING_REPLY,
            tool_rounds=0,
        ), self._send(history, text)

    def _on_reply(self, reply: ModelReplied) -> tuple[ChatPane, AnyCommand]:
        if self.phase is not ChatPhase.AWAITING_REPLY:
            logger.debug("Dropping model reply received in phase %s", self.phase.value)
            return self, None

        turns = []
        if reply.text:
            turns.append(conv.agent(reply.text))
        if not reply.tool_calls:
            return replace(
                self,
                conversation=conv.append(self.conversation, *turns),
                phase=ChatPhase.IDLE,
                tool_rounds=0,
            ), None

        if self.tool_rounds >= MAX_TOOL_ROUNDS:
            turns.append(conv.system(f"[Stopped after {MAX_TOOL_ROUNDS} tool rounds]"))
            return replace(
                self,
                conversation=conv.append(self.conversation, *turns),
                phase=ChatPhase.IDLE,
                tool_rounds=0,
            ), None

        commands = []
        dispatched = []
        for call in reply.tool_calls:
            found = self.catalog.get(call.name)
            if found is None:
                logger.info("Model requested unknown tool %r", call.name)
                turns.append(conv.system(f"[{UnknownTool(call.name)}]"))
                continue
            dispatched.append(call)
            commands.append(
                Command(
                    work=lambda t=found, c=call: invoke_tool(t, c),
                    name=f"{_TOOL_COMMAND_PREFIX}{found.name}",
                )
            )

        conversation = conv.append(self.conversation, *turns)
        if not commands:
            return replace(self, conversation=conversation, phase=ChatPhase.IDLE, tool_rounds=0), None
        return replace(
            self,
            conversation=conversation,
            phase=ChatPhase.TOOL_DISPATCH,
            pending_tools=len(commands),
            round_calls=tuple(dispatched),
            tool_rounds=self.tool_rounds + 1,
        ), batch(*commands)

    def _on_tool_result(self, result: ToolResult) -> tuple[ChatPane, AnyCommand]:
        if self.phase is not ChatPhase.TOOL_DISPATCH:
            logger.debug("Dropping tool result %s received in phase %s", result.name, self.phase.value)
            return self, None

        if result.error is not None:
            content = f"[Error executing {result.name}: {result.error}]"
        else:
            content = serialize_payload(result.payload)
        turn = conv.tool(result.name, content, call=result.call, tool_round=self.tool_rounds)
        conversation = conv.append(self.conversation, turn)
        pending = self.pending_tools - 1
        if pending > 0:
            return replace(self, conversation=conversation, pending_tools=pending), None

        # Resume: the model synthesizes the answer from the tool turns.
        resumed = replace(
            self,
            conversation=conversation,
            pending_tools=0,
            round_calls=(),
            phase=ChatPhase.AWAITING_REPLY,
        )
        return resumed, resumed._send(conversation, None)

    # ─── View ──────────────────────────────────────────────────────────

    def _turn_lines(self, turn: conv.Turn) -> list[Text]:
        if turn.role is Role.USER:
            first = Text.assemble(("You: ", styles.USER_LABEL), turn.content)
            return [Text(""), first]
        if turn.role is Role.AGENT:
            return [Text.assemble(("Model: ", styles.MODEL_LABEL), turn.content)]
        style = styles.TOOL_TEXT if turn.role is Role.TOOL else styles.SYSTEM_TEXT
        return [Text(turn.content, style=style)]

    def _status(self) -> Text:
        if self.phase is ChatPhase.AWAITING_REPLY:
            return Text("Model is thinking…", style=styles.DIM)
        if self.phase is ChatPhase.TOOL_DISPATCH:
            return Text(f"Running {self.pending_tools} tool call(s)…", style=styles.DIM)
        return Text("")

    def view(self) -> Text:
        if self.conversation:
            lines: list[Text] = []
            for turn in self.conversation:
                lines.extend(self._turn_lines(turn))
            # Multi-line turn contents count as several rows.
            body = join_lines(lines).split("\n", allow_blank=True)
        else:
            body = Text(WELCOME).split("\n")

        footer = [
            self._status(),
            Text.assemble(("┃ ", styles.MODEL_LABEL), self.input, ("█", styles.DIM)),
        ]
        return join_lines(tail(list(body) + footer, self.height))
