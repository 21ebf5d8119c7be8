"""
Assembles a stream of ``StreamChunk`` objects into a complete ``Response``.

Design goals:
  - Concatenate content chunks in arrival order.
  - Accumulate tool-call fragments keyed by their ``index`` (falling back to
    the call id, then to arrival order).
  - At :meth:`StreamAssembler.to_response`, JSON-parse each call's joined
    argument fragments.  A call whose arguments do not parse keeps ``{}`` and
    an error is recorded in ``errors`` -- callers can inspect it and surface
    the failure.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from llmwire.types import (
    ChunkType,
    ContentPart,
    Context,
    FinishReason,
    Message,
    Model,
    Response,
    StreamChunk,
    Usage,
)


class StreamAssembler:
    """Buffers stream chunks and builds the final assistant turn."""

    def __init__(self) -> None:
        self._text: list[str] = []
        self._calls: dict[object, dict] = {}
        self.finish_reason: FinishReason | None = None
        self.usage = Usage()
        self.errors: list[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def feed(self, chunk: StreamChunk) -> None:
        if chunk.type == ChunkType.CONTENT:
            self._text.append(chunk.text)
        elif chunk.type == ChunkType.TOOL_CALL:
            self._feed_tool_call(chunk)
        elif chunk.type == ChunkType.FINISH:
            if chunk.finish_reason is not None:
                self.finish_reason = chunk.finish_reason
            usage = chunk.metadata.get("usage")
            if isinstance(usage, Usage):
                self.usage = usage
        elif chunk.type == ChunkType.ERROR:
            self.errors.append(chunk.text)

    def feed_all(self, chunks: Iterable[StreamChunk]) -> StreamAssembler:
        for chunk in chunks:
            self.feed(chunk)
        return self

    @property
    def text(self) -> str:
        return "".join(self._text)

    def message(self) -> Message:
        parts: list[ContentPart] = []
        if self._text:
            parts.append(ContentPart.text_part(self.text))
        for key in self._calls:
            parts.append(self._finalize(key))
        return Message(role="assistant", content=parts)

    def to_response(self, model: Model, context: Context | None = None, response_id: str = "unknown") -> Response:
        message = self.message()
        context = context if context is not None else Context()
        return Response(
            id=response_id,
            model=model.name,
            message=message,
            context=context.append(message),
            finish_reason=self.finish_reason,
            usage=self.usage,
            stream=True,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _feed_tool_call(self, chunk: StreamChunk) -> None:
        meta = chunk.metadata
        if "index" in meta:
            key: object = ("index", meta["index"])
        elif "id" in meta:
            key = ("id", meta["id"])
        else:
            key = ("pos", len(self._calls))

        buf = self._calls.setdefault(key, {"id": None, "name": "", "fragments": [], "args": {}})
        if meta.get("id") and not buf["id"]:
            buf["id"] = meta["id"]
        if chunk.name:
            buf["name"] += chunk.name
        if "arguments_fragment" in meta:
            buf["fragments"].append(meta["arguments_fragment"])
        elif chunk.arguments:
            buf["args"].update(chunk.arguments)

    def _finalize(self, key: object) -> ContentPart:
        buf = self._calls[key]
        args = dict(buf["args"])
        if buf["fragments"]:
            raw_args = "".join(buf["fragments"])
            try:
                parsed = json.loads(raw_args)
            except (json.JSONDecodeError, ValueError) as exc:
                self.errors.append(f"tool_call_json_parse_failed key={key} err={exc}")
                parsed = {}
            if isinstance(parsed, dict):
                args.update(parsed)
        return ContentPart.tool_call(buf["name"].strip(), args, buf["id"])
