"""
Adapter for any endpoint that speaks the OpenAI ``/v1/chat/completions`` wire
protocol: LM Studio, Ollama, MLX servers, LocalAI and so on.

Any model name is accepted.  The API key is optional since local servers
usually run unauthenticated.
"""

from __future__ import annotations

from llmwire.options.schema import OptionSpec, Schema
from llmwire.providers.base import ProviderAdapter
from llmwire.types import Operation

_SCHEMA = Schema.from_dict({
    "base_url": OptionSpec("string", doc="Custom base URL for OpenAI-compatible endpoint"),
    "api_key": OptionSpec("string", doc="API key for authentication (optional for local servers)"),
    "token": OptionSpec("string", doc="Alternative to api_key (optional for local servers)"),
})


class CompatibleWithOpenAI(ProviderAdapter):
    """Generic OpenAI-compatible adapter; defaults to a local server on port 1234."""

    default_env_key = "COMPATIBLE_WITH_OPENAI_API_KEY"
    base_url_env_key = "COMPATIBLE_WITH_OPENAI_BASE_URL"
    supported_operations = (Operation.CHAT, Operation.EMBEDDING)

    @property
    def provider_id(self) -> str:
        return "compatible_with_openai"

    @property
    def default_base_url(self) -> str:
        return "http://localhost:1234/v1"

    def provider_schema(self) -> Schema:
        return _SCHEMA
