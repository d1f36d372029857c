"""Conversational model collaborator.

The chat pane talks to a ModelService: send the history (plus optional new
user text) and the tool declarations, get back a ModelReply made of parts.

A reply part is a closed union of two variants: TextPart and ToolCallPart.
fold_parts() is the one place that interprets them and it rejects anything
else, so a new variant can not be dropped silently.

GeminiService is the production implementation (google-genai SDK).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from termiflow.chat.conversation import Conversation, Role, Turn
from termiflow.config import ChatConfig
from termiflow.errors import ConfigMissing, ProtocolError
from termiflow.messages import ToolCall

logger = logging.getLogger(__name__)


# ─── Reply parts (closed union) ───────────────────────────────────────────────


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ToolCallPart:
    name: str
    args: dict = field(default_factory=dict, compare=False)
    signature: bytes | None = field(default=None, compare=False, repr=False)


ReplyPart = TextPart | ToolCallPart


@dataclass(frozen=True)
class ModelReply:
    parts: tuple[ReplyPart, ...]


def fold_parts(parts: tuple[ReplyPart, ...]) -> tuple[str, tuple[ToolCall, ...]]:
    """Split reply parts into (concatenated text, tool calls), in order."""
    texts: list[str] = []
    calls: list[ToolCall] = []
    for part in parts:
        if isinstance(part, TextPart):
            texts.append(part.text)
        elif isinstance(part, ToolCallPart):
            calls.append(ToolCall(name=part.name, args=dict(part.args), signature=part.signature))
        else:
            raise TypeError(f"Unhandled reply part: {type(part).__name__}")
    return "".join(texts), tuple(calls)


# ─── Service contract ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ToolDeclaration:
    name: str
    description: str


class ModelService(Protocol):
    """Opaque request/response model endpoint."""

    @property
    def configured(self) -> bool:
        ...

    def send_turn(
        self,
        history: Conversation,
        user_text: str | None,
        tools: tuple[ToolDeclaration, ...],
    ) -> ModelReply:
        """Send one request. `user_text` None means "continue after tool results"."""
        ...


# ─── Gemini ───────────────────────────────────────────────────────────────────


def _call_part(turn: Turn) -> types.Part:
    call = turn.call or ToolCall(name=turn.name)
    return types.Part(
        function_call=types.FunctionCall(name=call.name, args=dict(call.args)),
        thought_signature=call.signature,
    )


def _response_part(turn: Turn) -> types.Part:
    return types.Part(
        function_response=types.FunctionResponse(name=turn.name, response={"output": turn.content})
    )


def to_contents(history: Conversation, user_text: str | None) -> list[types.Content]:
    """Convert a Conversation to Gemini contents.

    SYSTEM turns are local notes and are not sent. The TOOL turns of one round
    are replayed as a single model content holding every function call (after
    any text the model sent with them) followed by a single user content
    holding the matching responses. Calls keep their thought signatures.
    """
    contents: list[types.Content] = []
    calls: types.Content | None = None
    responses: types.Content | None = None
    open_round: int | None = None
    for turn in history:
        if turn.role is Role.USER:
            open_round = None
            contents.append(types.Content(role="user", parts=[types.Part(text=turn.content)]))
        elif turn.role is Role.AGENT:
            open_round = None
            contents.append(types.Content(role="model", parts=[types.Part(text=turn.content)]))
        elif turn.role is Role.TOOL:
            if open_round is None or turn.tool_round != open_round:
                previous = contents[-1] if contents else None
                if previous is not None and previous.role == "model" and open_round is None:
                    # Text from the same reply as the calls.
                    calls = previous
                else:
                    calls = types.Content(role="model", parts=[])
                    contents.append(calls)
                responses = types.Content(role="user", parts=[])
                contents.append(responses)
                open_round = turn.tool_round
            calls.parts.append(_call_part(turn))
            responses.parts.append(_response_part(turn))
    if user_text:
        contents.append(types.Content(role="user", parts=[types.Part(text=user_text)]))
    return contents


def to_tool_config(tools: tuple[ToolDeclaration, ...]) -> list[types.Tool] | None:
    if not tools:
        return None
    return [
        types.Tool(
            function_declarations=[
                types.FunctionDeclaration(name=t.name, description=t.description) for t in tools
            ]
        )
    ]


def parse_response(response) -> ModelReply:
    """Map a GenerateContentResponse onto reply parts."""
    candidates = getattr(response, "candidates", None) or []
    content = candidates[0].content if candidates else None
    raw_parts = (content.parts if content is not None else None) or []
    parts: list[ReplyPart] = []
    for raw in raw_parts:
        if getattr(raw, "function_call", None) is not None:
            call = raw.function_call
            parts.append(
                ToolCallPart(
                    name=call.name or "",
                    args=dict(call.args or {}),
                    signature=getattr(raw, "thought_signature", None),
                )
            )
        elif getattr(raw, "text", None):
            parts.append(TextPart(raw.text))
        else:
            logger.debug("Ignoring non-text, non-call part from model")
    if not parts:
        raise ProtocolError("empty response")
    return ModelReply(parts=tuple(parts))


class GeminiService:
    """ModelService backed by google-genai. The client is created on first use."""

    def __init__(self, config: ChatConfig):
        self._config = config
        self._client: genai.Client | None = None
        self._client_lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return self._config.configured

    def _get_client(self) -> genai.Client:
        if not self._config.configured:
            raise ConfigMissing("GEMINI_API_KEY environment variable not set")
        with self._client_lock:
            if self._client is None:
                timeout_ms = int(self._config.timeout * 1000)
                self._client = genai.Client(
                    api_key=self._config.api_key,
                    http_options=types.HttpOptions(timeout=timeout_ms),
                )
            return self._client

    def send_turn(
        self,
        history: Conversation,
        user_text: str | None,
        tools: tuple[ToolDeclaration, ...],
    ) -> ModelReply:
        client = self._get_client()
        config = types.GenerateContentConfig(tools=to_tool_config(tools))
        contents = to_contents(history, user_text)
        logger.debug("Sending %d contents to %s", len(contents), self._config.model)
        try:
            response = client.models.generate_content(
                model=self._config.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            raise ProtocolError(f"Model API error ({e.code}): {e.message}", status=e.code) from e
        return parse_response(response)
