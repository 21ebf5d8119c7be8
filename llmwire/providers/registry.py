from __future__ import annotations

from importlib.metadata import entry_points

from llmwire.errors import InvalidProviderError
from llmwire.providers.base import ProviderAdapter
from llmwire.types import Model, Operation


class ProviderRegistry:
    def __init__(self):
        self._adapters: dict[str, ProviderAdapter] = {}

    def register(self, adapter: ProviderAdapter, *, overwrite: bool = False) -> None:
        """Register *adapter*.  Its schema is composed now, so collisions fail here."""
        if adapter.provider_id in self._adapters and not overwrite:
            raise ValueError(f"Provider already registered: {adapter.provider_id}")
        adapter.composed_schema
        if Operation.EMBEDDING in adapter.supported_operations:
            adapter.composed_embedding_schema
        self._adapters[adapter.provider_id] = adapter

    def get(self, provider_id: str) -> ProviderAdapter | None:
        return self._adapters.get(provider_id)

    def require(self, provider_id: str) -> ProviderAdapter:
        adapter = self.get(provider_id)
        if not adapter:
            raise InvalidProviderError(provider_id)
        return adapter

    def for_model(self, model: Model | str) -> ProviderAdapter:
        return self.require(Model.parse(model).provider)

    def list(self) -> list[ProviderAdapter]:
        return sorted(self._adapters.values(), key=lambda a: a.provider_id)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._adapters

    def load_plugins(
        self,
        *,
        enabled: bool,
        group: str = "llmwire.providers",
        allow_distributions: set[str] | None = None,
        allow_providers: set[str] | None = None,
    ) -> int:
        """Load adapter classes from entry points and register one of each."""
        if not enabled:
            return 0
        loaded = 0
        for ep in entry_points(group=group):
            dist = getattr(ep, "dist", None)
            dist_name = getattr(dist, "name", None)
            if allow_distributions and dist_name and dist_name not in allow_distributions:
                continue
            if allow_providers and ep.name not in allow_providers:
                continue
            adapter_cls = ep.load()
            self.register(adapter_cls())
            loaded += 1
        return loaded


def default_registry() -> ProviderRegistry:
    """A registry holding the built-in adapters."""
    from llmwire.providers.openai_compat import CompatibleWithOpenAI
    from llmwire.providers.openrouter import OpenRouter
    from llmwire.providers.vllm import VLLM

    registry = ProviderRegistry()
    for adapter in (CompatibleWithOpenAI(), VLLM(), OpenRouter()):
        registry.register(adapter)
    return registry
