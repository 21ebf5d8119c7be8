"""Abstract base class for provider adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import cached_property
from typing import Any

from llmwire.codec.request import build_headers, default_encode_body
from llmwire.codec.response import (
    decode_embedding_response,
    decode_response as decode_chat_response,
    extract_usage as extract_body_usage,
)
from llmwire.codec.stream import decode_event
from llmwire.config import resolve_api_key, resolve_base_url
from llmwire.errors import InvalidParameterError, InvalidProviderError
from llmwire.options.core import EMBEDDING_SCHEMA, GENERATION_SCHEMA, schema_for
from llmwire.options.pipeline import process_or_raise
from llmwire.options.schema import PROVIDER_OPTIONS_KEY, Schema, compose, core_keys
from llmwire.types import (
    Context,
    EmbeddingResponse,
    Model,
    Operation,
    Response,
    StreamChunk,
    Tool,
    WireRequest,
    coerce_operation,
)

logger = logging.getLogger(__name__)

STRUCTURED_OUTPUT_TOOL = "structured_output"

_PATHS = {
    Operation.CHAT: "/chat/completions",
    Operation.OBJECT: "/chat/completions",
    Operation.EMBEDDING: "/embeddings",
}


class ProviderAdapter(ABC):
    """
    An adapter turns canonical calls into requests for one backend.

    Subclasses must provide ``provider_id`` and ``default_base_url``.  Every
    other hook has a working OpenAI-compatible default:

      - ``provider_schema`` returns ``None`` (no extension options).
      - ``translate_options`` passes options through with no warnings.
      - ``encode_body`` uses the shared request codec.
      - ``decode_*`` use the shared response and stream codecs.
    """

    #: Environment variable holding the API key.
    default_env_key: str | None = None
    #: Environment variable overriding the base URL.
    base_url_env_key: str | None = None
    supported_operations: tuple[Operation, ...] = (Operation.CHAT, Operation.EMBEDDING)

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Provider identifier used in model specifiers (e.g. ``"vllm"``)."""
        ...

    @property
    @abstractmethod
    def default_base_url(self) -> str:
        ...

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def provider_schema(self) -> Schema | None:
        """Extension options accepted under ``provider_options``."""
        return None

    @cached_property
    def composed_schema(self) -> Schema:
        """
        The core schema with this adapter's extensions nested under
        ``provider_options``.  Raises ``CollisionError`` if the extension
        shadows a core key.
        """
        return compose(GENERATION_SCHEMA, self.provider_schema(), self.provider_id)

    @cached_property
    def composed_embedding_schema(self) -> Schema:
        """The embedding counterpart of :attr:`composed_schema`."""
        return compose(EMBEDDING_SCHEMA, self.provider_schema(), self.provider_id)

    def schema_for(self, operation: Operation | str) -> Schema:
        """The composed schema that *operation* options validate against."""
        if coerce_operation(operation) == Operation.EMBEDDING:
            return self.composed_embedding_schema
        return self.composed_schema

    def supported_provider_options(self, operation: Operation | str = Operation.CHAT) -> list[str]:
        keys = core_keys(schema_for(coerce_operation(operation)))
        schema = self.provider_schema()
        if schema is not None:
            keys += schema.keys()
        return keys

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def translate_options(
        self,
        operation: Operation,
        model: Model,
        options: dict,
    ) -> tuple[dict, list[str]]:
        """Rewrite options for this backend.  Returns ``(options, warnings)``."""
        return dict(options), []

    def prepare_options(self, operation: Operation, model: Model, options: dict) -> dict:
        """Adjust raw caller options before processing (e.g. for ``object``)."""
        return options

    def encode_body(self, request: WireRequest) -> WireRequest:
        return default_encode_body(request)

    def decode_response(self, request: WireRequest, status: int, body: Any) -> Response:
        return decode_chat_response(status, body, request.model, request.context)

    def decode_stream_event(self, event: Any, model: Model | None = None) -> list[StreamChunk]:
        return decode_event(event, model)

    def decode_embedding(self, request: WireRequest, status: int, body: Any) -> EmbeddingResponse:
        return decode_embedding_response(status, body, request.model)

    def extract_usage(self, body: Any, model: Model) -> dict:
        return extract_body_usage(body, model)

    # ------------------------------------------------------------------
    # Request preparation
    # ------------------------------------------------------------------

    def prepare_request(
        self,
        operation: Operation | str,
        model: Model | str,
        input: Any,
        options: dict | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> WireRequest:
        """
        Build a provider-ready request.

        *input* is the prompt (string, message, message list or ``Context``)
        for ``chat`` and ``object``, and the text or list of texts for
        ``embedding``.  Raises ``InvalidParameterError`` for an operation this
        adapter does not support, ``InvalidProviderError`` for a model of a
        different provider, and the pipeline's errors for bad options.
        """
        operation = coerce_operation(operation)
        model = Model.parse(model)
        self._check_operation(operation)
        if model.provider != self.provider_id:
            raise InvalidProviderError(model.provider, self.provider_id)

        raw = self.prepare_options(operation, model, dict(options or {}))
        processed = process_or_raise(self, operation, model, raw)
        opts = dict(processed.options)
        nested = opts.get(PROVIDER_OPTIONS_KEY) or {}

        url = resolve_base_url(
            nested.get("base_url"),
            base_url,
            raw.get("base_url"),
            env_key=self.base_url_env_key,
            default=self.default_base_url,
        )
        key = resolve_api_key(
            nested.get("api_key"),
            nested.get("token"),
            api_key,
            raw.get("api_key"),
            env_key=self.default_env_key,
        )

        context = None
        embed_input = None
        if operation == Operation.EMBEDDING:
            embed_input = input if input is not None else opts.get("text")
            if not isinstance(embed_input, (str, list)):
                raise InvalidParameterError(
                    "text",
                    embed_input,
                    message=f"embedding input must be a string or list of strings, got: {embed_input!r}",
                )
        else:
            source = input if input is not None else opts.get("context")
            context = Context.from_input(source).with_system_prompt(opts.get("system_prompt"))

        request = WireRequest(
            url=url + _PATHS[operation],
            operation=operation,
            model=model,
            options=opts,
            context=context,
            input=embed_input,
            warnings=processed.warnings,
        )
        request = request.with_headers(build_headers(key, stream=request.stream))
        return self.encode_body(request)

    def _check_operation(self, operation: Operation) -> None:
        if operation not in self.supported_operations:
            supported = [op.value for op in self.supported_operations]
            raise InvalidParameterError(
                "operation",
                operation.value,
                message=(
                    f"operation: {operation.value} not supported by {self.provider_id}. "
                    f"Supported operations: {supported}"
                ),
            )


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------

def structured_output_options(
    options: dict,
    *,
    default_max_tokens: int = 4096,
    min_max_tokens: int | None = None,
) -> dict:
    """
    Rewrite *options* for an ``object`` call.

    The JSON schema in ``options["schema"]`` becomes a ``structured_output``
    tool that the model is forced to call.  ``max_tokens`` gets
    *default_max_tokens* when absent and is raised to *min_max_tokens* when
    below it.
    """
    schema = options.get("schema")
    if not isinstance(schema, dict):
        raise InvalidParameterError(
            "schema",
            schema,
            message=f"object generation requires a JSON schema mapping, got: {schema!r}",
        )

    tool = Tool(
        name=STRUCTURED_OUTPUT_TOOL,
        description="Generate structured output matching the provided schema",
        parameters=schema,
    )
    out = dict(options)
    out["tools"] = [tool] + list(out.get("tools") or [])
    out["tool_choice"] = {"type": "function", "function": {"name": STRUCTURED_OUTPUT_TOOL}}

    max_tokens = out.get("max_tokens")
    if max_tokens is None:
        out["max_tokens"] = default_max_tokens
    elif min_max_tokens is not None and isinstance(max_tokens, int) and max_tokens < min_max_tokens:
        out["max_tokens"] = min_max_tokens
    return out
