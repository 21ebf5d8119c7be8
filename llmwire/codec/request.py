"""
Request codec: canonical context + options -> OpenAI-compatible JSON body.

Every adapter starts from these encoders and splices its own fields on top.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from llmwire.types import (
    Context,
    ContentPart,
    Message,
    Model,
    Operation,
    PartType,
    Tool,
    ToolCall,
    WireRequest,
)

logger = logging.getLogger(__name__)

# Sampling and control fields copied into the chat body when present.
CHAT_BODY_FIELDS = (
    "temperature",
    "max_tokens",
    "max_completion_tokens",
    "top_p",
    "stream",
    "frequency_penalty",
    "presence_penalty",
    "stop",
    "user",
    "seed",
)

EMBEDDING_BODY_FIELDS = ("dimensions", "encoding_format", "user")


def maybe_put(body: dict, key: str, value: Any) -> dict:
    """Set *key* only when *value* is not ``None``."""
    if value is not None:
        body[key] = value
    return body


# ------------------------------------------------------------------
# Messages
# ------------------------------------------------------------------

def encode_part(part: ContentPart) -> dict:
    if part.type == PartType.TEXT:
        return {"type": "text", "text": part.text}
    if part.type == PartType.BINARY:
        data_url = _data_url(part.media_type or "application/octet-stream", part.data or b"")
        if (part.media_type or "").startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_url}}
        return {"type": "file", "file": {"file_data": data_url}}
    if part.type == PartType.TOOL_RESULT:
        return {"type": "text", "text": _stringify(part.output)}
    raise ValueError(f"Cannot encode content part of type {part.type!r}")


def encode_tool_call(call: ToolCall | ContentPart | dict) -> dict:
    """Project any accepted tool-call input shape onto the wire shape."""
    if isinstance(call, dict):
        func = call.get("function", {}) or {}
        arguments = func.get("arguments", "{}")
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return {
            "id": call.get("id"),
            "type": call.get("type", "function"),
            "function": {"name": func.get("name"), "arguments": arguments},
        }
    if isinstance(call, ContentPart):
        return {
            "id": call.tool_call_id,
            "type": "function",
            "function": {"name": call.tool_name, "arguments": json.dumps(call.input or {})},
        }
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
    }


def encode_message(msg: Message) -> dict:
    """
    Encode one message.

    A single text part becomes a bare string; zero or several parts become an
    array of typed part objects.  Tool calls, whether declared on the message
    or as content parts, always go to the message-level ``tool_calls`` field.
    """
    tool_call_parts = [p for p in msg.content if p.type == PartType.TOOL_CALL]
    tool_results = [p for p in msg.content if p.type == PartType.TOOL_RESULT]
    parts = [p for p in msg.content if p.type not in (PartType.TOOL_CALL, PartType.TOOL_RESULT)]

    m: dict = {"role": msg.role}

    if msg.role == "tool" and tool_results:
        result = tool_results[0]
        m["tool_call_id"] = result.tool_call_id
        m["content"] = _stringify(result.output) if not parts else [encode_part(p) for p in parts]
        return m

    parts = parts + tool_results
    if len(parts) == 1 and parts[0].type == PartType.TEXT:
        m["content"] = parts[0].text
    else:
        m["content"] = [encode_part(p) for p in parts]

    wire_calls = [encode_tool_call(tc) for tc in (msg.tool_calls or [])]
    wire_calls += [encode_tool_call(p) for p in tool_call_parts]
    if wire_calls:
        m["tool_calls"] = wire_calls
    return m


def encode_context(context: Context) -> dict:
    return {"messages": [encode_message(m) for m in context.messages]}


# ------------------------------------------------------------------
# Bodies
# ------------------------------------------------------------------

def encode_tools(tools: list) -> list[dict]:
    return [t.to_openai_schema() if isinstance(t, Tool) else dict(t) for t in tools]


def encode_chat_body(model_name: str, context: Context, options: dict) -> dict:
    body: dict = {"model": model_name}
    body.update(encode_context(context))

    for key in CHAT_BODY_FIELDS:
        maybe_put(body, key, options.get(key))

    tools = options.get("tools")
    if tools:
        body["tools"] = encode_tools(tools)
        maybe_put(body, "tool_choice", options.get("tool_choice"))

    response_format = options.get("response_format")
    if isinstance(response_format, dict):
        body["response_format"] = response_format

    return body


def encode_embedding_body(model_name: str, text: str | list[str], options: dict) -> dict:
    body: dict = {"model": model_name, "input": text}
    for key in EMBEDDING_BODY_FIELDS:
        maybe_put(body, key, options.get(key))
    return body


def build_headers(
    api_key: str | None = None,
    *,
    stream: bool = False,
    extra: dict[str, str] | None = None,
) -> dict[str, str]:
    headers: dict[str, str] = {"Content-Type": "application/json"}
    if stream:
        headers["Accept"] = "text/event-stream"
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    if extra:
        headers.update(extra)
    return headers


def default_encode_body(request: WireRequest) -> WireRequest:
    """Encode the body every OpenAI-compatible adapter starts from."""
    options = request.options
    if request.operation == Operation.EMBEDDING:
        text = request.input if request.input is not None else options.get("text")
        body = encode_embedding_body(request.model.name, text, options)
    else:
        context = request.context or options.get("context") or Context()
        body = encode_chat_body(request.model.name, context, options)

    logger.info(
        "REQUEST: provider=%s model=%s operation=%s messages=%d tools=%d",
        request.model.provider,
        request.model.name,
        request.operation.value,
        len(body.get("messages", [])),
        len(body.get("tools", [])),
    )
    return request.with_body(body).with_headers({"Content-Type": "application/json"})


def encode(
    context: Context,
    model: Model,
    options: dict,
    *,
    api_key: str | None = None,
    url: str = "",
) -> WireRequest:
    """Encode a chat request without going through an adapter."""
    stream = bool(options.get("stream"))
    request = WireRequest(
        url=url,
        operation=Operation.CHAT,
        model=model,
        options=dict(options),
        headers=build_headers(api_key, stream=stream),
        context=context,
    )
    return default_encode_body(request)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _data_url(media_type: str, data: bytes) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)
