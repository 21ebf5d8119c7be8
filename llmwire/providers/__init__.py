"""Provider adapters and the registry that maps provider ids to them."""

from llmwire.providers.base import ProviderAdapter
from llmwire.providers.openai_compat import CompatibleWithOpenAI
from llmwire.providers.openrouter import OpenRouter
from llmwire.providers.registry import ProviderRegistry, default_registry
from llmwire.providers.vllm import VLLM

__all__ = [
    "CompatibleWithOpenAI",
    "OpenRouter",
    "ProviderAdapter",
    "ProviderRegistry",
    "VLLM",
    "default_registry",
]
