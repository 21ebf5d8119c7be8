"""Canonical types shared by every provider adapter and codec."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from llmwire.errors import InvalidParameterError


ROLES = ("system", "user", "assistant", "tool")


class Operation(str, Enum):
    CHAT = "chat"
    EMBEDDING = "embedding"
    OBJECT = "object"


def coerce_operation(value: Operation | str) -> Operation:
    try:
        return Operation(value)
    except ValueError:
        raise InvalidParameterError(
            "operation",
            value,
            message=f"operation: {value!r} is not a known operation",
        ) from None


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    UNKNOWN = "unknown"


class PartType(str, Enum):
    TEXT = "text"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    BINARY = "binary"


class ChunkType(str, Enum):
    CONTENT = "content"
    TOOL_CALL = "tool_call"
    FINISH = "finish"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Model:
    """
    Identifies a model on a specific provider.

    Build one from a ``"provider:name"`` specifier with :meth:`parse`, or
    directly from fields.  Instances are immutable.
    """

    provider: str
    name: str
    capabilities: frozenset[str] = frozenset()

    @classmethod
    def parse(cls, spec: Model | str | tuple[str, str]) -> Model:
        if isinstance(spec, Model):
            return spec
        if isinstance(spec, tuple) and len(spec) == 2:
            provider, name = spec
        elif isinstance(spec, str) and ":" in spec:
            provider, name = spec.split(":", 1)
        else:
            raise InvalidParameterError(
                "model",
                spec,
                message=f"model must be 'provider:name', got: {spec!r}",
            )
        provider = str(provider).strip()
        name = str(name).strip()
        if not provider or not name:
            raise InvalidParameterError(
                "model",
                spec,
                message=f"model must be 'provider:name', got: {spec!r}",
            )
        return cls(provider=provider, name=name)

    @property
    def spec(self) -> str:
        return f"{self.provider}:{self.name}"


# ---------------------------------------------------------------------------
# Messages and content
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContentPart:
    """
    One piece of message content.

    *type* selects which of the remaining fields are meaningful:

    - ``text``: *text*
    - ``tool_call``: *tool_name*, *input*, *tool_call_id*
    - ``tool_result``: *tool_call_id*, *output*
    - ``binary``: *media_type*, *data*
    """

    type: PartType
    text: str = ""
    tool_name: str | None = None
    input: dict | None = None
    tool_call_id: str | None = None
    output: Any = None
    media_type: str | None = None
    data: bytes | None = None

    @classmethod
    def text_part(cls, text: str) -> ContentPart:
        return cls(type=PartType.TEXT, text=text)

    @classmethod
    def tool_call(
        cls, tool_name: str, input: dict | None = None, tool_call_id: str | None = None
    ) -> ContentPart:
        return cls(
            type=PartType.TOOL_CALL,
            tool_name=tool_name,
            input=dict(input or {}),
            tool_call_id=tool_call_id,
        )

    @classmethod
    def tool_result(cls, tool_call_id: str, output: Any) -> ContentPart:
        return cls(type=PartType.TOOL_RESULT, tool_call_id=tool_call_id, output=output)

    @classmethod
    def binary(cls, media_type: str, data: bytes) -> ContentPart:
        return cls(type=PartType.BINARY, media_type=media_type, data=data)


@dataclass(frozen=True)
class ToolCall:
    """A message-level tool call with parsed arguments."""

    id: str
    name: str
    arguments: dict = field(default_factory=dict)


@dataclass
class Message:
    """A single message in a conversation."""

    role: str  # "system", "user", "assistant", "tool"
    content: list[ContentPart] = field(default_factory=list)
    tool_calls: list[ToolCall | dict] | None = None

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise InvalidParameterError(
                "role", self.role, message=f"role must be one of {list(ROLES)}, got: {self.role!r}"
            )
        if isinstance(self.content, str):
            self.content = [ContentPart.text_part(self.content)]
        else:
            self.content = list(self.content)

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role="system", content=text)

    @classmethod
    def user(cls, content: str | list[ContentPart]) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str | list[ContentPart] = "") -> Message:
        return cls(role="assistant", content=content if content else [])

    @classmethod
    def tool(cls, tool_call_id: str, output: Any) -> Message:
        return cls(role="tool", content=[ContentPart.tool_result(tool_call_id, output)])

    def text(self) -> str:
        return "".join(p.text for p in self.content if p.type == PartType.TEXT)


@dataclass(frozen=True)
class Context:
    """
    An ordered conversation.

    Contexts are never mutated; :meth:`append` returns a new instance.
    """

    messages: tuple[Message, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", tuple(self.messages))

    @classmethod
    def from_input(cls, value: Context | str | Message | list) -> Context:
        """Normalize a prompt string, a message, or a message list."""
        if isinstance(value, Context):
            return value
        if isinstance(value, str):
            return cls((Message.user(value),))
        if isinstance(value, Message):
            return cls((value,))
        if isinstance(value, (list, tuple)) and all(isinstance(m, Message) for m in value):
            return cls(tuple(value))
        raise InvalidParameterError(
            "input",
            value,
            message=f"input must be a string, Message, list of Message or Context, got: {value!r}",
        )

    def append(self, message: Message) -> Context:
        return Context(self.messages + (message,))

    def with_system_prompt(self, prompt: str | None) -> Context:
        """Prepend a system message unless one is already present."""
        if not prompt or any(m.role == "system" for m in self.messages):
            return self
        return Context((Message.system(prompt),) + self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

def normalize_schema(schema: dict | None) -> dict:
    s = dict(schema or {})
    s.setdefault("type", "object")
    s.setdefault("properties", {})
    return s


@dataclass(frozen=True)
class Tool:
    """A function the model may call."""

    name: str
    description: str = ""
    parameters: dict = field(default_factory=dict)
    strict: bool = False

    def to_openai_schema(self) -> dict:
        function: dict = {
            "name": self.name,
            "description": self.description,
            "parameters": normalize_schema(self.parameters),
        }
        if self.strict:
            function["strict"] = True
        return {"type": "function", "function": function}


# ---------------------------------------------------------------------------
# Responses and streaming
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class Response:
    """
    The normalized result of a non-streaming call.

    *context* is the request context with the assistant *message* appended.
    *finish_reason* is ``None`` when the backend did not report one.
    """

    id: str
    model: str
    message: Message
    context: Context
    finish_reason: FinishReason | None = None
    usage: Usage = field(default_factory=Usage)
    stream: bool = False
    provider_meta: dict = field(default_factory=dict)

    def text(self) -> str:
        return self.message.text()

    def tool_calls(self) -> list[ContentPart]:
        return [p for p in self.message.content if p.type == PartType.TOOL_CALL]

    @property
    def object(self) -> dict | None:
        """Arguments of the ``structured_output`` tool call, if any."""
        for part in self.tool_calls():
            if part.tool_name == "structured_output":
                return part.input
        return None


@dataclass
class StreamChunk:
    """
    A single normalized unit of streamed output.

    ``content`` chunks carry *text*; ``tool_call`` chunks carry *name*,
    *arguments* and *metadata* (``id``, ``index``, ``arguments_fragment``);
    ``finish`` chunks carry *finish_reason* and optionally ``usage`` in
    *metadata*; ``error`` chunks carry the error message in *text*.
    """

    type: ChunkType
    text: str = ""
    name: str | None = None
    arguments: dict | None = None
    finish_reason: FinishReason | None = None
    metadata: dict = field(default_factory=dict)

    @classmethod
    def content(cls, text: str) -> StreamChunk:
        return cls(type=ChunkType.CONTENT, text=text)

    @classmethod
    def tool_call(cls, name: str | None, arguments: dict, metadata: dict | None = None) -> StreamChunk:
        return cls(type=ChunkType.TOOL_CALL, name=name, arguments=arguments, metadata=metadata or {})

    @classmethod
    def finish(cls, reason: FinishReason | None, metadata: dict | None = None) -> StreamChunk:
        return cls(type=ChunkType.FINISH, finish_reason=reason, metadata=metadata or {})

    @classmethod
    def error(cls, text: str, metadata: dict | None = None) -> StreamChunk:
        return cls(type=ChunkType.ERROR, text=text, metadata=metadata or {})


@dataclass
class EmbeddingResponse:
    model: str
    embeddings: list[list[float]]
    usage: Usage = field(default_factory=Usage)


# ---------------------------------------------------------------------------
# Wire request
# ---------------------------------------------------------------------------

@dataclass
class WireRequest:
    """
    A provider-ready HTTP request.

    *body* is ``None`` until ``encode_body`` has run.  *options* holds the
    processed option set the body is encoded from, and *warnings* the
    translation warnings that survived the warning policy.
    """

    url: str
    operation: Operation
    model: Model
    options: dict = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: dict | None = None
    method: str = "POST"
    context: Context | None = None
    input: Any = None
    warnings: list[str] = field(default_factory=list)

    @property
    def stream(self) -> bool:
        return bool(self.options.get("stream"))

    def with_body(self, body: dict) -> WireRequest:
        return replace(self, body=body)

    def with_headers(self, headers: dict[str, str]) -> WireRequest:
        return replace(self, headers={**self.headers, **headers})

    def content(self) -> bytes:
        return json.dumps(self.body or {}).encode("utf-8")
