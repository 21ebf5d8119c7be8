"""
Streaming decoder for OpenAI-compatible ``text/event-stream`` replies.

``SSEParser`` handles framing: it turns raw text into the ``data`` payload of
each event.  ``decode_event`` turns one payload into zero or more
``StreamChunk`` objects and keeps no state between calls, so it is safe to
use from any number of concurrent streams.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from llmwire.codec.response import parse_arguments, parse_finish_reason, parse_usage
from llmwire.types import Model, StreamChunk

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class SSEParser:
    """
    Incremental Server-Sent Events framing.

    Each SSE event has the form::

        data: {json}\\n\\n

    Multiple ``data:`` lines in one event are joined with newlines.  The
    sentinel ``data: [DONE]`` marks the end of the stream.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._data: list[str] = []
        self.done = False

    def feed(self, text: str) -> list[str]:
        """Feed a piece of the stream; return the payloads it completed."""
        if self.done:
            return []
        self._buffer += text
        payloads: list[str] = []
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            payload = self._line(line.rstrip("\r"))
            if payload is not None:
                if payload == DONE_SENTINEL:
                    self.done = True
                    return payloads
                payloads.append(payload)
        return payloads

    def flush(self) -> list[str]:
        """Dispatch whatever is buffered when the stream ends."""
        if self.done:
            return []
        payloads: list[str] = []
        if self._buffer:
            payload = self._line(self._buffer.rstrip("\r"))
            self._buffer = ""
            if payload is not None:
                payloads.append(payload)
        payload = self._dispatch()
        if payload is not None:
            payloads.append(payload)
        return [p for p in payloads if p != DONE_SENTINEL]

    def _line(self, line: str) -> str | None:
        if not line:
            # Empty line -- SSE event boundary.
            return self._dispatch()
        if line.startswith(":"):
            return None
        if line.startswith("data:"):
            self._data.append(line[len("data:"):].lstrip(" "))
        return None

    def _dispatch(self) -> str | None:
        if not self._data:
            return None
        payload = "\n".join(self._data).strip()
        self._data = []
        return payload


def decode_event(event: Any, model: Model | None = None) -> list[StreamChunk]:
    """
    Decode one server-sent event into stream chunks.

    *event* may be an ``{"data": ...}`` wrapper, a parsed payload mapping or
    a raw JSON string.  Absent, malformed or non-object payloads yield an
    empty list rather than raising.
    """
    data = _payload(event)
    if not isinstance(data, Mapping):
        return []

    chunks: list[StreamChunk] = []

    error = data.get("error")
    if error:
        message = error.get("message") if isinstance(error, Mapping) else str(error)
        meta = dict(error) if isinstance(error, Mapping) else {}
        return [StreamChunk.error(str(message or "stream error"), meta)]

    choices = data.get("choices")
    choice = choices[0] if isinstance(choices, list) and choices else None
    if isinstance(choice, Mapping):
        delta = choice.get("delta")
        if isinstance(delta, Mapping):
            text = delta.get("content")
            if isinstance(text, str) and text:
                chunks.append(StreamChunk.content(text))

            tool_calls = delta.get("tool_calls")
            for raw_tc in tool_calls if isinstance(tool_calls, list) else []:
                chunk = _tool_call_chunk(raw_tc)
                if chunk is not None:
                    chunks.append(chunk)

        reason = choice.get("finish_reason")
        if reason is not None:
            meta: dict = {}
            if isinstance(data.get("usage"), Mapping):
                meta["usage"] = parse_usage(data["usage"])
            chunks.append(StreamChunk.finish(parse_finish_reason(reason), meta))
            return chunks

    # Usage-only trailer (``stream_options.include_usage``).
    if isinstance(data.get("usage"), Mapping) and not chunks:
        chunks.append(StreamChunk.finish(None, {"usage": parse_usage(data["usage"])}))

    return chunks


def _payload(event: Any) -> Any:
    if isinstance(event, Mapping) and "data" in event and "choices" not in event:
        event = event["data"]
    if isinstance(event, (bytes, bytearray)):
        event = event.decode("utf-8", errors="replace")
    if isinstance(event, str):
        if event.strip() == DONE_SENTINEL:
            return None
        try:
            return json.loads(event)
        except (json.JSONDecodeError, ValueError):
            logger.debug("Failed to parse SSE data: %s", event[:200])
            return None
    return event


def _tool_call_chunk(raw_tc: Any) -> StreamChunk | None:
    if not isinstance(raw_tc, Mapping):
        return None
    func = raw_tc.get("function") or {}
    if not isinstance(func, Mapping):
        func = {}

    metadata: dict = {}
    if raw_tc.get("id") is not None:
        metadata["id"] = raw_tc["id"]
    if raw_tc.get("index") is not None:
        metadata["index"] = raw_tc["index"]

    raw_args = func.get("arguments")
    if isinstance(raw_args, str) and raw_args:
        metadata["arguments_fragment"] = raw_args

    name = func.get("name")
    return StreamChunk.tool_call(
        name if isinstance(name, str) else None, parse_arguments(raw_args), metadata
    )
