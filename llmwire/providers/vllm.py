"""
vLLM adapter.

vLLM serves the OpenAI chat-completions protocol and accepts extra sampling
and guided-decoding fields in the same body.  Configure the server with::

    VLLM_BASE_URL=http://localhost:8000/v1
    VLLM_API_KEY=token-abc123   # only if the server requires auth

or per call through ``provider_options={"base_url": ..., "api_key": ...}``.
"""

from __future__ import annotations

from llmwire.codec.request import default_encode_body, maybe_put
from llmwire.options.schema import OptionSpec, Schema
from llmwire.providers.base import ProviderAdapter, structured_output_options
from llmwire.types import Model, Operation, WireRequest

_SCHEMA = Schema.from_dict({
    # Connection
    "base_url": OptionSpec("string", doc="Custom vLLM server base URL (overrides VLLM_BASE_URL)"),
    "api_key": OptionSpec("string", doc="Custom API key (overrides VLLM_API_KEY)"),
    # Extra sampling
    "best_of": OptionSpec("pos_integer", doc="Number of completions to generate and return the best one"),
    "use_beam_search": OptionSpec("boolean", doc="Enable beam search decoding"),
    "min_p": OptionSpec("float", doc="Minimum probability threshold for token sampling (0.0-1.0)"),
    "repetition_penalty": OptionSpec("float", doc="Penalty for repeating tokens (typically 1.0-2.0)"),
    # Guided decoding
    "guided_json": OptionSpec("map", doc="JSON schema to enforce output format"),
    "guided_regex": OptionSpec("string", doc="Regex pattern to constrain output"),
    "guided_choice": OptionSpec("list", items="string", doc="List of choices to limit output to"),
    "guided_grammar": OptionSpec("string", doc="Context-free grammar rules to follow"),
})

# Fields copied verbatim from the processed options into the body.
BODY_FIELDS = (
    "top_k",
    "best_of",
    "use_beam_search",
    "min_p",
    "repetition_penalty",
    "guided_json",
    "guided_regex",
    "guided_choice",
    "guided_grammar",
)


class VLLM(ProviderAdapter):
    default_env_key = "VLLM_API_KEY"
    base_url_env_key = "VLLM_BASE_URL"
    supported_operations = (Operation.CHAT, Operation.EMBEDDING, Operation.OBJECT)

    @property
    def provider_id(self) -> str:
        return "vllm"

    @property
    def default_base_url(self) -> str:
        return "http://localhost:8000/v1"

    def provider_schema(self) -> Schema:
        return _SCHEMA

    def prepare_options(self, operation: Operation, model: Model, options: dict) -> dict:
        if operation == Operation.OBJECT:
            return structured_output_options(options, default_max_tokens=4096)
        return options

    def encode_body(self, request: WireRequest) -> WireRequest:
        request = default_encode_body(request)
        if request.operation == Operation.EMBEDDING:
            return request
        body = dict(request.body or {})
        for key in BODY_FIELDS:
            maybe_put(body, key, request.options.get(key))
        return request.with_body(body)
