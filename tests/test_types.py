"""Tests for llmwire.types."""

from __future__ import annotations

import pytest

from llmwire.errors import InvalidParameterError
from llmwire.types import (
    ContentPart,
    Context,
    Message,
    Model,
    PartType,
    Response,
    Tool,
    coerce_operation,
)


class TestModel:

    def test_parse_spec(self):
        m = Model.parse("openrouter:openai/gpt-4o")
        assert m.provider == "openrouter"
        assert m.name == "openai/gpt-4o"
        assert m.spec == "openrouter:openai/gpt-4o"

    def test_parse_tuple_and_passthrough(self):
        m = Model.parse(("vllm", "llama"))
        assert Model.parse(m) is m

    @pytest.mark.parametrize("bad", ["no-colon", ":name", "provider:", 42])
    def test_parse_rejects(self, bad):
        with pytest.raises(InvalidParameterError):
            Model.parse(bad)

    def test_immutable(self):
        m = Model("vllm", "x")
        with pytest.raises(AttributeError):
            m.name = "y"


class TestMessages:

    def test_string_content_becomes_text_part(self):
        msg = Message.user("hello")
        assert len(msg.content) == 1
        assert msg.content[0].type == PartType.TEXT
        assert msg.text() == "hello"

    def test_unknown_role(self):
        with pytest.raises(InvalidParameterError):
            Message(role="narrator", content="x")

    def test_context_append_copies(self):
        ctx = Context.from_input("hi")
        ctx2 = ctx.append(Message.assistant("hello"))
        assert len(ctx) == 1
        assert len(ctx2) == 2

    def test_context_from_messages(self):
        ctx = Context.from_input([Message.system("s"), Message.user("u")])
        assert [m.role for m in ctx] == ["system", "user"]

    def test_context_rejects_garbage(self):
        with pytest.raises(InvalidParameterError):
            Context.from_input(42)

    def test_system_prompt_prepended_once(self):
        ctx = Context.from_input("hi").with_system_prompt("be brief")
        assert ctx.messages[0].role == "system"
        assert ctx.with_system_prompt("other") is ctx


def test_tool_schema_projection():
    tool = Tool(name="f", description="d", parameters={}, strict=True)
    assert tool.to_openai_schema() == {
        "type": "function",
        "function": {
            "name": "f",
            "description": "d",
            "parameters": {"type": "object", "properties": {}},
            "strict": True,
        },
    }


def test_response_object_reads_structured_output():
    msg = Message.assistant([ContentPart.tool_call("structured_output", {"name": "Ada"}, "c1")])
    resp = Response(id="1", model="m", message=msg, context=Context((msg,)))
    assert resp.object == {"name": "Ada"}


def test_coerce_operation():
    assert coerce_operation("embedding").value == "embedding"
    with pytest.raises(InvalidParameterError):
        coerce_operation("transcribe")
