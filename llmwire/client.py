"""
Async HTTP client that executes provider requests.

The client is the only place that touches the network.  It asks the adapter
for a ``WireRequest``, sends it with ``httpx``, retries transient failures
(transport errors, 429 and 5xx) and hands the reply to the adapter's
decoders.

Dependencies: ``httpx`` (async HTTP client).
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

import httpx

from llmwire.assembler import StreamAssembler
from llmwire.codec.response import ensure_parsed_body
from llmwire.codec.stream import SSEParser
from llmwire.config import LLMWireConfig, ProviderConfig, resolve_api_key
from llmwire.errors import ApiRequestError, ApiResponseError
from llmwire.providers.base import ProviderAdapter
from llmwire.providers.registry import ProviderRegistry, default_registry
from llmwire.types import (
    EmbeddingResponse,
    Model,
    Operation,
    Response,
    StreamChunk,
    WireRequest,
)

logger = logging.getLogger(__name__)


def _retryable(status: int) -> bool:
    return status == 429 or status >= 500


class LLMClient:
    """
    Provider-agnostic entry point for text, object, stream and embedding calls.

    Parameters
    ----------
    registry:
        Adapters to route models to.  Defaults to the built-in adapters.
    timeout:
        Default HTTP timeout in seconds; a call's ``receive_timeout`` (ms) wins.
    max_retries:
        Number of automatic retries on transient HTTP errors (5xx, 429).
    on_unsupported:
        Default warning policy for calls that do not set one.
    providers:
        Per-provider configuration (base URL, API key env var).
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 2,
        on_unsupported: str = "warn",
        providers: dict[str, ProviderConfig] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._registry = registry or default_registry()
        self._timeout = timeout
        self._max_retries = max_retries
        self._on_unsupported = on_unsupported
        self._providers = providers or {}
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        cfg: LLMWireConfig,
        registry: ProviderRegistry | None = None,
        **kwargs: Any,
    ) -> LLMClient:
        return cls(
            registry,
            timeout=cfg.client.timeout_seconds,
            max_retries=cfg.client.max_retries,
            on_unsupported=cfg.client.on_unsupported,
            providers=cfg.providers,
            **kwargs,
        )

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Request preparation
    # ------------------------------------------------------------------

    def prepare(
        self,
        operation: Operation | str,
        model: Model | str,
        input: Any,
        options: dict | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> tuple[ProviderAdapter, WireRequest]:
        """Route *model* to its adapter and build the wire request."""
        model = Model.parse(model)
        adapter = self._registry.for_model(model)
        options = dict(options or {})
        options.setdefault("on_unsupported", self._on_unsupported)
        options.setdefault("receive_timeout", max(1, int(self._timeout * 1000)))

        pc = self._providers.get(model.provider)
        if pc is not None:
            base_url = base_url or pc.base_url or None
            api_key = api_key or resolve_api_key(env_key=pc.api_key_env or None)

        request = adapter.prepare_request(
            operation, model, input, options, api_key=api_key, base_url=base_url
        )
        return adapter, request

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def generate_text(
        self,
        model: Model | str,
        input: Any,
        options: dict | None = None,
        **kwargs: Any,
    ) -> Response:
        options = {**(options or {}), "stream": False}
        adapter, request = self.prepare(Operation.CHAT, model, input, options, **kwargs)
        status, body = await self._send(request)
        response = adapter.decode_response(request, status, body)
        return self._with_warnings(response, request)

    async def generate_object(
        self,
        model: Model | str,
        input: Any,
        schema: dict,
        options: dict | None = None,
        **kwargs: Any,
    ) -> Response:
        """Ask the model for JSON matching *schema*; read it from ``response.object``."""
        options = {**(options or {}), "schema": schema, "stream": False}
        adapter, request = self.prepare(Operation.OBJECT, model, input, options, **kwargs)
        status, body = await self._send(request)
        response = adapter.decode_response(request, status, body)
        return self._with_warnings(response, request)

    async def embed(
        self,
        model: Model | str,
        text: str | list[str],
        options: dict | None = None,
        **kwargs: Any,
    ) -> EmbeddingResponse:
        adapter, request = self.prepare(Operation.EMBEDDING, model, text, options, **kwargs)
        status, body = await self._send(request)
        return adapter.decode_embedding(request, status, body)

    async def stream_text(
        self,
        model: Model | str,
        input: Any,
        options: dict | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        """Yield ``StreamChunk`` objects as server-sent events arrive."""
        options = {**(options or {}), "stream": True}
        adapter, request = self.prepare(Operation.CHAT, model, input, options, **kwargs)
        async for chunk in self._stream(adapter, request):
            yield chunk

    async def stream_to_response(
        self,
        model: Model | str,
        input: Any,
        options: dict | None = None,
        **kwargs: Any,
    ) -> Response:
        """Consume a full stream and return the assembled ``Response``."""
        options = {**(options or {}), "stream": True}
        adapter, request = self.prepare(Operation.CHAT, model, input, options, **kwargs)
        assembler = StreamAssembler()
        async for chunk in self._stream(adapter, request):
            assembler.feed(chunk)
        response = assembler.to_response(request.model, request.context)
        if assembler.errors:
            response.provider_meta["assembler_errors"] = list(assembler.errors)
        return self._with_warnings(response, request)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _timeout_for(self, request: WireRequest) -> float:
        ms = request.options.get("receive_timeout")
        return ms / 1000.0 if ms else self._timeout

    def _http_client(self, request: WireRequest) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout_for(request), transport=self._transport)

    async def _send(self, request: WireRequest) -> tuple[int, Any]:
        last_error: Exception | None = None
        for attempt in range(1 + self._max_retries):
            try:
                async with self._http_client(request) as client:
                    resp = await client.request(
                        request.method,
                        request.url,
                        content=request.content(),
                        headers=request.headers,
                    )
            except httpx.TransportError as exc:
                last_error = ApiRequestError(str(exc) or type(exc).__name__, cause=exc)
                if attempt < self._max_retries:
                    logger.warning(
                        "Transport error for %s (attempt %d/%d): %s",
                        request.url, attempt + 1, 1 + self._max_retries, exc,
                    )
                    continue
                raise last_error from exc

            body = ensure_parsed_body(resp.content)
            if _retryable(resp.status_code):
                last_error = ApiResponseError(
                    f"HTTP {resp.status_code}", status=resp.status_code, response_body=body
                )
                logger.warning(
                    "Retryable HTTP %d from %s (attempt %d/%d)",
                    resp.status_code, request.url, attempt + 1, 1 + self._max_retries,
                )
                continue
            return resp.status_code, body

        if last_error is not None:
            raise last_error
        # Should never reach here.
        raise RuntimeError("unreachable")  # pragma: no cover

    async def _stream(
        self,
        adapter: ProviderAdapter,
        request: WireRequest,
    ) -> AsyncIterator[StreamChunk]:
        last_error: Exception | None = None
        for attempt in range(1 + self._max_retries):
            try:
                async with self._http_client(request) as client:
                    async with client.stream(
                        request.method,
                        request.url,
                        content=request.content(),
                        headers=request.headers,
                    ) as response:
                        if not 200 <= response.status_code < 300:
                            # Read the body so the connection is released.
                            raw = await response.aread()
                            last_error = ApiResponseError(
                                f"HTTP {response.status_code}",
                                status=response.status_code,
                                response_body=ensure_parsed_body(raw),
                            )
                            if _retryable(response.status_code):
                                continue
                            raise last_error

                        parser = SSEParser()
                        async for text in response.aiter_text():
                            for payload in parser.feed(text):
                                for chunk in adapter.decode_stream_event(payload, request.model):
                                    yield chunk
                            if parser.done:
                                return
                        for payload in parser.flush():
                            for chunk in adapter.decode_stream_event(payload, request.model):
                                yield chunk
                        return  # success
            except httpx.TransportError as exc:
                last_error = ApiRequestError(str(exc) or type(exc).__name__, cause=exc)
                if attempt < self._max_retries:
                    continue
                raise last_error from exc

        if last_error is not None:
            raise last_error

    @staticmethod
    def _with_warnings(response: Response, request: WireRequest) -> Response:
        if request.warnings:
            response.provider_meta["warnings"] = list(request.warnings)
        return response
