"""Tests for llmwire.codec.stream: SSE framing and event decoding."""

from __future__ import annotations

import json

import pytest

from llmwire.codec.stream import SSEParser, decode_event
from llmwire.types import ChunkType, FinishReason, Usage
from tests.mock_providers import delta, sse_body


class TestDecodeEvent:

    def test_content_delta(self):
        chunks = decode_event({"choices": [{"delta": {"content": "Hi"}}]})
        assert len(chunks) == 1
        assert chunks[0].type == ChunkType.CONTENT
        assert chunks[0].text == "Hi"

    @pytest.mark.parametrize("event", [{}, "[DONE]", "not json", 42, None, [1, 2], "[]"])
    def test_empty_or_non_object_yields_nothing(self, event):
        assert decode_event(event) == []

    @pytest.mark.parametrize("tool_calls", [5, "c1", {"index": 0}, None])
    def test_non_list_tool_calls_are_ignored(self, tool_calls):
        event = {"choices": [{"delta": {"tool_calls": tool_calls}}]}
        assert decode_event(event) == []

    def test_non_list_tool_calls_keep_content(self):
        event = {"choices": [{"delta": {"content": "ok", "tool_calls": 5}}]}
        chunks = decode_event(event)
        assert [c.text for c in chunks] == ["ok"]

    def test_non_string_tool_name_dropped(self):
        event = delta(tool_calls=[{"index": 0, "function": {"name": 7, "arguments": "{}"}}])
        chunks = decode_event(event)
        assert len(chunks) == 1
        assert chunks[0].name is None

    def test_data_wrapper_and_json_string(self):
        payload = json.dumps({"choices": [{"delta": {"content": "x"}}]})
        assert decode_event({"data": payload})[0].text == "x"
        assert decode_event(payload.encode())[0].text == "x"

    def test_tool_call_with_invalid_json_is_not_an_error(self):
        event = delta(tool_calls=[{
            "index": 0, "id": "c1", "function": {"name": "f", "arguments": "{bad"},
        }])
        chunks = decode_event(event)
        assert len(chunks) == 1
        chunk = chunks[0]
        assert chunk.type == ChunkType.TOOL_CALL
        assert chunk.arguments == {}
        assert chunk.metadata == {"id": "c1", "index": 0, "arguments_fragment": "{bad"}

    def test_one_chunk_per_tool_call_entry(self):
        event = delta(tool_calls=[
            {"index": 0, "function": {"name": "a", "arguments": "{}"}},
            {"index": 1, "function": {"name": "b", "arguments": '{"k": 1}'}},
        ])
        chunks = decode_event(event)
        assert [c.name for c in chunks] == ["a", "b"]
        assert chunks[1].arguments == {"k": 1}

    def test_finish_with_usage(self):
        event = delta(finish_reason="length", usage={"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3})
        chunks = decode_event(event)
        assert len(chunks) == 1
        assert chunks[0].type == ChunkType.FINISH
        assert chunks[0].finish_reason == FinishReason.LENGTH
        assert chunks[0].metadata["usage"] == Usage(1, 2, 3)

    def test_content_and_finish_in_one_event(self):
        chunks = decode_event(delta("bye", finish_reason="stop"))
        assert [c.type for c in chunks] == [ChunkType.CONTENT, ChunkType.FINISH]

    def test_usage_only_trailer(self):
        chunks = decode_event({"choices": [], "usage": {"total_tokens": 9}})
        assert len(chunks) == 1
        assert chunks[0].finish_reason is None
        assert chunks[0].metadata["usage"].total_tokens == 9

    def test_error_payload(self):
        chunks = decode_event({"error": {"message": "overloaded", "code": 529}})
        assert len(chunks) == 1
        assert chunks[0].type == ChunkType.ERROR
        assert chunks[0].text == "overloaded"
        assert chunks[0].metadata["code"] == 529


class TestSSEParser:

    def test_events_and_done(self):
        parser = SSEParser()
        payloads = parser.feed(sse_body([{"a": 1}, {"b": 2}]))
        assert [json.loads(p) for p in payloads] == [{"a": 1}, {"b": 2}]
        assert parser.done

    def test_split_across_feeds(self):
        body = sse_body([{"a": 1}])
        parser = SSEParser()
        out = []
        for i in range(0, len(body), 3):
            out += parser.feed(body[i:i + 3])
        assert out == ['{"a": 1}']

    def test_multiline_data_joined(self):
        parser = SSEParser()
        assert parser.feed("data: line1\ndata: line2\n\n") == ["line1\nline2"]

    def test_comments_and_crlf(self):
        parser = SSEParser()
        assert parser.feed(": keep-alive\r\n\r\ndata: x\r\n\r\n") == ["x"]

    def test_nothing_after_done(self):
        parser = SSEParser()
        parser.feed("data: [DONE]\n\n")
        assert parser.feed("data: late\n\n") == []
        assert parser.flush() == []

    def test_flush_without_trailing_blank_line(self):
        parser = SSEParser()
        assert parser.feed("data: tail") == []
        assert parser.flush() == ["tail"]
