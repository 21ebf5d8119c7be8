"""
Response codec: OpenAI-compatible JSON replies -> canonical ``Response``.

Decoding is lenient on purpose.  Backends differ in which fields they omit,
so a missing ``id`` becomes ``"unknown"``, missing usage counts become ``0``,
a missing ``finish_reason`` stays ``None`` and unparseable tool-call
arguments become ``{}``.  Only a non-2xx status or a body that is not a
recognizable completion raises.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from llmwire.errors import ApiResponseError
from llmwire.types import (
    ContentPart,
    Context,
    EmbeddingResponse,
    FinishReason,
    Message,
    Model,
    Response,
    Usage,
)

logger = logging.getLogger(__name__)

_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": FinishReason.STOP,
    "eos": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "max_tokens": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "content_filter": FinishReason.CONTENT_FILTER,
}


def parse_finish_reason(value: Any) -> FinishReason | None:
    if value is None:
        return None
    return _FINISH_REASONS.get(str(value), FinishReason.UNKNOWN)


def parse_arguments(raw: Any) -> dict:
    """Parse tool-call arguments, degrading to ``{}`` on anything malformed."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        logger.debug("Unparseable tool-call arguments: %s", raw[:200])
        return {}
    return parsed if isinstance(parsed, dict) else {}


def parse_usage(raw: Any) -> Usage:
    if not isinstance(raw, dict):
        return Usage()
    return Usage(
        input_tokens=_as_int(raw.get("prompt_tokens", raw.get("input_tokens"))),
        output_tokens=_as_int(raw.get("completion_tokens", raw.get("output_tokens"))),
        total_tokens=_as_int(raw.get("total_tokens")),
    )


def ensure_parsed_body(body: Any) -> Any:
    """JSON-decode string/bytes bodies; pass anything else through."""
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            return json.loads(body)
        except (json.JSONDecodeError, ValueError):
            return body
    return body


def decode_message(raw: Any) -> Message:
    """
    Build the assistant message from a ``choices[].message`` object.

    A message that is not a mapping decodes to an empty assistant turn, and
    malformed content items or tool calls are skipped.
    """
    parts: list[ContentPart] = []
    if not isinstance(raw, Mapping):
        return Message(role="assistant", content=parts)

    content = raw.get("content")
    if isinstance(content, str):
        if content:
            parts.append(ContentPart.text_part(content))
    elif isinstance(content, list):
        for item in content:
            if isinstance(item, Mapping) and item.get("type") == "text":
                text = item.get("text")
                parts.append(ContentPart.text_part(text if isinstance(text, str) else ""))

    tool_calls = raw.get("tool_calls")
    for tc in tool_calls if isinstance(tool_calls, list) else []:
        if not isinstance(tc, Mapping):
            continue
        func = tc.get("function")
        if not isinstance(func, Mapping):
            continue
        name = func.get("name")
        parts.append(
            ContentPart.tool_call(
                name if isinstance(name, str) else "",
                parse_arguments(func.get("arguments")),
                tc.get("id") if isinstance(tc.get("id"), str) else None,
            )
        )

    return Message(role="assistant", content=parts)


def decode_response(
    status: int,
    body: Any,
    model: Model,
    context: Context | None = None,
    *,
    reason: str = "API error",
) -> Response:
    """
    Decode a chat completion reply.

    Raises ``ApiResponseError`` for a non-2xx *status* (the body is kept
    as-is) or a body that is not a completion object.
    """
    if not 200 <= status < 300:
        raise ApiResponseError(reason, status=status, response_body=body)

    data = ensure_parsed_body(body)
    if not isinstance(data, dict) or not isinstance(data.get("choices"), list):
        raise ApiResponseError(
            "Unrecognized response body", status=status, response_body=body
        )

    choices = data["choices"]
    choice = choices[0] if choices and isinstance(choices[0], dict) else {}
    message = decode_message(choice.get("message"))
    context = context if context is not None else Context()

    meta: dict = {}
    for key in ("system_fingerprint", "created", "object"):
        if key in data:
            meta[key] = data[key]

    return Response(
        id=str(data.get("id") or "unknown"),
        model=str(data.get("model") or model.name),
        message=message,
        context=context.append(message),
        finish_reason=parse_finish_reason(choice.get("finish_reason")),
        usage=parse_usage(data.get("usage")),
        stream=False,
        provider_meta=meta,
    )


def decode_embedding_response(status: int, body: Any, model: Model) -> EmbeddingResponse:
    if not 200 <= status < 300:
        raise ApiResponseError("API error", status=status, response_body=body)

    data = ensure_parsed_body(body)
    if not isinstance(data, dict) or not isinstance(data.get("data"), list):
        raise ApiResponseError(
            "Unrecognized embedding body", status=status, response_body=body
        )

    items = sorted(
        (d for d in data["data"] if isinstance(d, Mapping)),
        key=lambda d: _as_int(d.get("index")),
    )
    return EmbeddingResponse(
        model=str(data.get("model") or model.name),
        embeddings=[_as_vector(d.get("embedding")) for d in items],
        usage=parse_usage(data.get("usage")),
    )


def extract_usage(body: Any, model: Model) -> dict:
    """Return the raw ``usage`` object of a reply body."""
    if not isinstance(body, dict):
        raise ApiResponseError("invalid body", response_body=body)
    usage = body.get("usage")
    if not isinstance(usage, dict):
        raise ApiResponseError("no usage found", response_body=body)
    return usage


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _as_vector(value: Any) -> list:
    return list(value) if isinstance(value, list) else []
