"""Tests for llmwire.codec.request."""

from __future__ import annotations

import json

from llmwire.codec.request import (
    build_headers,
    encode,
    encode_chat_body,
    encode_embedding_body,
    encode_message,
)
from llmwire.types import ContentPart, Context, Message, Model, Tool, ToolCall


class TestEncodeMessage:

    def test_single_text_part_is_bare_string(self):
        assert encode_message(Message.user("hi")) == {"role": "user", "content": "hi"}

    def test_zero_parts_is_empty_array(self):
        m = encode_message(Message(role="assistant", content=[]))
        assert m["content"] == []

    def test_multiple_parts_is_array_of_same_length(self):
        msg = Message.user([
            ContentPart.text_part("look at this"),
            ContentPart.binary("image/png", b"\x89PNG"),
            ContentPart.text_part("and this"),
        ])
        m = encode_message(msg)
        assert isinstance(m["content"], list)
        assert len(m["content"]) == 3
        assert m["content"][0] == {"type": "text", "text": "look at this"}
        assert m["content"][1]["type"] == "image_url"
        assert m["content"][1]["image_url"]["url"].startswith("data:image/png;base64,")

    def test_non_image_binary_is_file(self):
        msg = Message.user([ContentPart.text_part("a"), ContentPart.binary("application/pdf", b"%PDF")])
        part = encode_message(msg)["content"][1]
        assert part["type"] == "file"
        assert part["file"]["file_data"].startswith("data:application/pdf;base64,")

    def test_tool_call_parts_become_message_level(self):
        msg = Message.assistant([
            ContentPart.text_part("calling"),
            ContentPart.tool_call("get_weather", {"city": "Oslo"}, "call_1"),
        ])
        m = encode_message(msg)
        assert m["content"] == "calling"
        assert m["tool_calls"] == [{
            "id": "call_1",
            "type": "function",
            "function": {"name": "get_weather", "arguments": json.dumps({"city": "Oslo"})},
        }]

    def test_message_level_tool_calls_in_both_shapes(self):
        msg = Message(
            role="assistant",
            content=[],
            tool_calls=[
                ToolCall(id="a", name="one", arguments={"x": 1}),
                {"id": "b", "type": "function", "function": {"name": "two", "arguments": {"y": 2}}},
            ],
        )
        calls = encode_message(msg)["tool_calls"]
        assert [c["id"] for c in calls] == ["a", "b"]
        assert json.loads(calls[0]["function"]["arguments"]) == {"x": 1}
        assert json.loads(calls[1]["function"]["arguments"]) == {"y": 2}

    def test_tool_result_message(self):
        m = encode_message(Message.tool("call_1", {"temp": 21}))
        assert m == {"role": "tool", "tool_call_id": "call_1", "content": '{"temp": 21}'}


class TestBodies:

    def test_chat_body_only_present_fields(self):
        ctx = Context.from_input("hi")
        body = encode_chat_body("m", ctx, {"temperature": 0.2, "top_p": None, "n": 3})
        assert body["model"] == "m"
        assert body["temperature"] == 0.2
        assert "top_p" not in body
        assert "n" not in body
        assert body["messages"] == [{"role": "user", "content": "hi"}]

    def test_tools_and_tool_choice(self):
        tool = Tool(name="lookup", description="Look up", parameters={"properties": {"q": {"type": "string"}}})
        body = encode_chat_body("m", Context(), {"tools": [tool], "tool_choice": "auto"})
        assert body["tools"][0]["function"]["name"] == "lookup"
        assert body["tools"][0]["function"]["parameters"]["type"] == "object"
        assert body["tool_choice"] == "auto"

    def test_tool_choice_dropped_without_tools(self):
        body = encode_chat_body("m", Context(), {"tools": [], "tool_choice": "auto"})
        assert "tools" not in body
        assert "tool_choice" not in body

    def test_response_format_only_when_mapping(self):
        body = encode_chat_body("m", Context(), {"response_format": {"type": "json_object"}})
        assert body["response_format"] == {"type": "json_object"}

    def test_embedding_body(self):
        body = encode_embedding_body("e", ["a", "b"], {"dimensions": 64})
        assert body == {"model": "e", "input": ["a", "b"], "dimensions": 64}


class TestHeaders:

    def test_no_key_no_auth(self):
        headers = build_headers(None)
        assert "Authorization" not in headers
        assert headers["Content-Type"] == "application/json"

    def test_bearer_and_stream(self):
        headers = build_headers("sk-1", stream=True)
        assert headers["Authorization"] == "Bearer sk-1"
        assert headers["Accept"] == "text/event-stream"

    def test_empty_key_no_auth(self):
        assert "Authorization" not in build_headers("")


def test_encode_builds_wire_request():
    model = Model.parse("compatible_with_openai:qwen")
    req = encode(Context.from_input("hi"), model, {"stream": True}, api_key="k", url="http://x/chat")
    assert req.body["model"] == "qwen"
    assert req.body["stream"] is True
    assert req.headers["Authorization"] == "Bearer k"
    assert json.loads(req.content()) == req.body
