"""
The core generation option schema.

Only options that most OpenAI-compatible backends understand live here.
Backend-specific parameters are declared by each adapter's
``provider_schema`` and nested under ``provider_options``.
"""

from __future__ import annotations

from llmwire.options.schema import OptionSpec, Schema
from llmwire.types import Operation

GENERATION_SCHEMA = Schema.from_dict({
    # Sampling
    "temperature": OptionSpec("float", doc="Controls randomness in output (0.0 to 2.0)"),
    "max_tokens": OptionSpec("pos_integer", doc="Maximum number of tokens to generate"),
    "top_p": OptionSpec("float", doc="Nucleus sampling parameter (0.0 to 1.0)"),
    "top_k": OptionSpec("pos_integer", doc="Top-k sampling parameter"),
    # Repetition control
    "frequency_penalty": OptionSpec("float", doc="Penalize tokens based on frequency (-2.0 to 2.0)"),
    "presence_penalty": OptionSpec("float", doc="Penalize tokens based on presence (-2.0 to 2.0)"),
    # Control
    "seed": OptionSpec("pos_integer", doc="Random seed for deterministic generation"),
    "stop": OptionSpec(("string", "list"), items="string", doc="Stop sequences to end generation"),
    "user": OptionSpec("string", doc="User identifier for tracking and abuse detection"),
    "system_prompt": OptionSpec("string", doc="System prompt to set context and instructions"),
    "reasoning": OptionSpec(
        "enum",
        choices=(None, False, True, "low", "auto", "high"),
        doc="Request reasoning/thinking tokens from the model",
    ),
    # Tool calling
    "tools": OptionSpec("list", doc="List of available tools/functions"),
    "tool_choice": OptionSpec(
        ("string", "map"), doc="Tool selection strategy (auto, none, required, or specific)"
    ),
    "response_format": OptionSpec("map", doc="Response format constraint, e.g. a JSON schema"),
    # Output control
    "n": OptionSpec("pos_integer", default=1, doc="Number of completions to generate"),
    "stream": OptionSpec("boolean", default=False, doc="Enable streaming responses"),
    # Provider-specific container
    "provider_options": OptionSpec("map", doc="Provider-specific options (nested under this key)"),
    # Framework options
    "on_unsupported": OptionSpec(
        "enum",
        choices=("warn", "error", "ignore"),
        default="warn",
        doc="How to handle unsupported parameter translations",
    ),
    "receive_timeout": OptionSpec(
        "pos_integer", default=30_000, doc="Timeout for receiving HTTP responses in milliseconds"
    ),
})

# Options accepted by the ``embedding`` operation.
EMBEDDING_SCHEMA = Schema.from_dict({
    "dimensions": OptionSpec("pos_integer", doc="Number of dimensions for the embedding vector"),
    "encoding_format": OptionSpec(
        "enum",
        choices=("float", "base64"),
        default="float",
        doc="Format for encoding the embedding vector",
    ),
    "user": OptionSpec("string", doc="User identifier for tracking and abuse detection"),
    "provider_options": OptionSpec("map", doc="Provider-specific options (nested under this key)"),
    "on_unsupported": GENERATION_SCHEMA.get("on_unsupported"),
    "receive_timeout": GENERATION_SCHEMA.get("receive_timeout"),
})

# Keys that bypass schema validation and are carried through untouched.
INTERNAL_KEYS = (
    "api_key",
    "base_url",
    "http_options",
    "operation",
    "text",
    "context",
    "schema",
)

STREAM_ALIASES = ("streaming",)


def schema_for(operation: Operation) -> Schema:
    """The core schema an operation validates against."""
    if operation == Operation.EMBEDDING:
        return EMBEDDING_SCHEMA
    return GENERATION_SCHEMA


def normalize_stream_alias(options: dict) -> dict:
    out = dict(options)
    for alias in STREAM_ALIASES:
        if alias in out:
            value = out.pop(alias)
            if value is not None:
                out["stream"] = value
    return out
