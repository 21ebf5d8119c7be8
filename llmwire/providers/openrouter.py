"""
OpenRouter adapter.

OpenRouter speaks OpenAI chat completions and adds routing and sampling
extensions.  Extension options carry an ``openrouter_`` prefix; the older
unprefixed names are still accepted and renamed with a deprecation warning.

App attribution headers are sent when ``app_referer`` (``HTTP-Referer``) and
``app_title`` (``X-Title``) are given.
"""

from __future__ import annotations

from llmwire.codec.request import default_encode_body, maybe_put
from llmwire.options.schema import OptionSpec, Schema
from llmwire.providers.base import ProviderAdapter, structured_output_options
from llmwire.types import Model, Operation, WireRequest

_SCHEMA = Schema.from_dict({
    "openrouter_models": OptionSpec("list", items="string", doc="Model IDs for routing/fallback preferences"),
    "openrouter_route": OptionSpec("string", doc="Routing strategy (e.g. 'fallback')"),
    "openrouter_provider": OptionSpec("map", doc="Provider preferences object for routing decisions"),
    "openrouter_transforms": OptionSpec("list", items="string", doc="Prompt transforms to apply"),
    "openrouter_top_k": OptionSpec("integer", doc="Top-k sampling (not available for OpenAI models)"),
    "openrouter_repetition_penalty": OptionSpec("float", doc="Repetition penalty for reducing repetitive text"),
    "openrouter_min_p": OptionSpec("float", doc="Minimum probability threshold for sampling"),
    "openrouter_top_a": OptionSpec("float", doc="Top-a sampling parameter"),
    "openrouter_top_logprobs": OptionSpec("integer", doc="Number of top log probabilities to return"),
    "logit_bias": OptionSpec("map", doc="Token ID to bias value mapping"),
    "app_referer": OptionSpec("string", doc="HTTP-Referer header for app identification"),
    "app_title": OptionSpec("string", doc="X-Title header for app title in rankings"),
})

LEGACY_RENAMES = (
    ("models", "openrouter_models"),
    ("route", "openrouter_route"),
    ("provider", "openrouter_provider"),
    ("transforms", "openrouter_transforms"),
    ("top_k", "openrouter_top_k"),
    ("repetition_penalty", "openrouter_repetition_penalty"),
    ("min_p", "openrouter_min_p"),
    ("top_a", "openrouter_top_a"),
    ("top_logprobs", "openrouter_top_logprobs"),
)

# Prefixed option -> wire field.
BODY_FIELDS = {new: old for old, new in LEGACY_RENAMES}


class OpenRouter(ProviderAdapter):
    default_env_key = "OPENROUTER_API_KEY"
    base_url_env_key = "OPENROUTER_BASE_URL"
    supported_operations = (Operation.CHAT, Operation.OBJECT)

    @property
    def provider_id(self) -> str:
        return "openrouter"

    @property
    def default_base_url(self) -> str:
        return "https://openrouter.ai/api/v1"

    def provider_schema(self) -> Schema:
        return _SCHEMA

    def prepare_options(self, operation: Operation, model: Model, options: dict) -> dict:
        if operation == Operation.OBJECT:
            return structured_output_options(options, default_max_tokens=4096, min_max_tokens=200)
        return options

    def translate_options(
        self,
        operation: Operation,
        model: Model,
        options: dict,
    ) -> tuple[dict, list[str]]:
        opts = dict(options)
        warnings: list[str] = []

        for legacy, prefixed in LEGACY_RENAMES:
            value = opts.pop(legacy, None)
            if value is not None:
                opts[prefixed] = value
                warnings.append(f"{legacy} is deprecated, use {prefixed} instead")

        top_k = opts.pop("openrouter_top_k", None)
        if top_k is not None:
            if model.name.startswith("openai/"):
                warnings.append(
                    "openrouter_top_k is not available for OpenAI models on OpenRouter "
                    "and will be ignored"
                )
            else:
                opts["openrouter_top_k"] = top_k

        return opts, warnings

    def encode_body(self, request: WireRequest) -> WireRequest:
        request = default_encode_body(request)
        options = request.options
        body = dict(request.body or {})
        for option, wire in BODY_FIELDS.items():
            maybe_put(body, wire, options.get(option))
        maybe_put(body, "logit_bias", options.get("logit_bias"))
        maybe_put(body, "n", options.get("n"))

        headers: dict[str, str] = {}
        if isinstance(options.get("app_referer"), str):
            headers["HTTP-Referer"] = options["app_referer"]
        if isinstance(options.get("app_title"), str):
            headers["X-Title"] = options["app_title"]
        return request.with_body(body).with_headers(headers)
