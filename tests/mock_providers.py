"""
Mock provider adapters for testing.

Provides small adapters with known extension schemas so tests can exercise
schema composition, translation and encoding without a real backend, plus
helpers that build canned OpenAI-style HTTP replies and SSE streams.
"""

from __future__ import annotations

import json

import httpx

from llmwire.options.schema import OptionSpec, Schema
from llmwire.providers.base import ProviderAdapter
from llmwire.types import Model, Operation


class MockAdapter(ProviderAdapter):
    """
    An adapter with two extension options and an o1-style translation hook.

    For models whose name starts with ``o1``, ``max_tokens`` is renamed to
    ``max_completion_tokens`` and ``temperature`` is dropped, each with a
    warning.
    """

    supported_operations = (Operation.CHAT, Operation.EMBEDDING, Operation.OBJECT)
    default_env_key = "MOCK_API_KEY"
    base_url_env_key = "MOCK_BASE_URL"

    @property
    def provider_id(self) -> str:
        return "mock"

    @property
    def default_base_url(self) -> str:
        return "http://mock.local/v1"

    def provider_schema(self) -> Schema:
        return Schema.from_dict({
            "custom_option": OptionSpec("string", doc="A custom string option"),
            "another_option": OptionSpec("integer", doc="Another custom option"),
        })

    def translate_options(self, operation, model: Model, options: dict):
        if not model.name.startswith("o1"):
            return dict(options), []

        opts = dict(options)
        warnings: list[str] = []
        if "max_tokens" in opts:
            opts["max_completion_tokens"] = opts.pop("max_tokens")
            warnings.append("Renamed max_tokens to max_completion_tokens for o1 model")
        if "temperature" in opts:
            opts.pop("temperature")
            warnings.append("Removed unsupported temperature for o1 model")
        return opts, warnings


class SimpleAdapter(ProviderAdapter):
    """An adapter with no extension schema and no hooks."""

    @property
    def provider_id(self) -> str:
        return "simple"

    @property
    def default_base_url(self) -> str:
        return "http://simple.local/v1"


class ConflictingAdapter(ProviderAdapter):
    """An adapter whose extension schema shadows core options."""

    @property
    def provider_id(self) -> str:
        return "conflicting"

    @property
    def default_base_url(self) -> str:
        return "http://conflicting.local/v1"

    def provider_schema(self) -> Schema:
        return Schema.from_dict({
            "temperature": OptionSpec("float"),
            "max_tokens": OptionSpec("integer"),
            "safe_option": OptionSpec("string"),
        })


# ---------------------------------------------------------------------------
# Canned replies
# ---------------------------------------------------------------------------

def chat_completion(
    content: str | None = "Hello!",
    *,
    tool_calls: list[dict] | None = None,
    finish_reason: str | None = "stop",
    usage: dict | None = None,
    id: str = "chatcmpl-1",
    model: str = "test-model",
) -> dict:
    message: dict = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {
        "id": id,
        "object": "chat.completion",
        "model": model,
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
        "usage": usage or {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
    }


def sse_body(events: list[dict | str], *, done: bool = True) -> str:
    """Frame *events* as a ``text/event-stream`` body."""
    lines = []
    for event in events:
        data = event if isinstance(event, str) else json.dumps(event)
        lines.append(f"data: {data}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines)


def delta(content: str | None = None, *, tool_calls: list[dict] | None = None,
          finish_reason: str | None = None, usage: dict | None = None) -> dict:
    d: dict = {}
    if content is not None:
        d["content"] = content
    if tool_calls is not None:
        d["tool_calls"] = tool_calls
    payload: dict = {"choices": [{"index": 0, "delta": d, "finish_reason": finish_reason}]}
    if usage is not None:
        payload["usage"] = usage
    return payload


class RecordingTransport(httpx.MockTransport):
    """
    ``httpx.MockTransport`` that replays *responses* in order and records
    every request it receives.
    """

    def __init__(self, responses: list[httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        canned = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        return httpx.Response(canned.status_code, headers=canned.headers, content=canned.content)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)
