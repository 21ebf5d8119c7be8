"""
Option processing pipeline.

``process_or_raise`` is the whole journey of a caller's options before any
request is encoded:

  1. Split off internal keys, which bypass validation.
  2. Normalize the ``streaming`` alias to ``stream``.
  3. Compose the adapter's schema with the core schema (collision check).
  4. Validate and fill defaults.
  5. Flatten ``provider_options`` and run the adapter's translation hook.
  6. Apply the ``on_unsupported`` warning policy.
  7. Re-attach internal keys and check the context.

``process`` runs the same steps but returns errors instead of raising, with
validation messages enhanced by suggestions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from llmwire.errors import InvalidParameterError, LLMWireError, UnknownError, ValidationError
from llmwire.options.core import INTERNAL_KEYS, normalize_stream_alias, schema_for
from llmwire.options.schema import PROVIDER_OPTIONS_KEY, validate
from llmwire.options.translation import apply_warning_policy, translate
from llmwire.similarity import suggest
from llmwire.types import Context, Model, Operation, coerce_operation

if TYPE_CHECKING:
    from llmwire.providers.base import ProviderAdapter


@dataclass
class ProcessedOptions:
    """Validated, translated options plus the warnings that survived policy."""

    options: dict
    warnings: list[str] = field(default_factory=list)

    def __getitem__(self, key: str) -> Any:
        return self.options[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.options


def process_or_raise(
    adapter: ProviderAdapter,
    operation: Operation | str,
    model: Model,
    options: dict | None = None,
) -> ProcessedOptions:
    """Process *options* for *adapter*, raising typed errors."""
    options = dict(options or {})
    operation = coerce_operation(operation)

    internal = {k: v for k, v in options.items() if k in INTERNAL_KEYS}
    user = normalize_stream_alias({k: v for k, v in options.items() if k not in INTERNAL_KEYS})

    schema = adapter.schema_for(operation)
    validated = validate(user, schema)

    provider_options = validated.pop(PROVIDER_OPTIONS_KEY, None) or {}
    flattened = {**validated, **provider_options}
    translated, warnings = translate(adapter, operation, model, flattened)

    if provider_options:
        translated[PROVIDER_OPTIONS_KEY] = dict(provider_options)

    warnings = apply_warning_policy(warnings, validated.get("on_unsupported", "warn"))

    final = {**translated, **internal}
    _check_context(final)
    return ProcessedOptions(options=final, warnings=warnings)


def process(
    adapter: ProviderAdapter,
    operation: Operation | str,
    model: Model,
    options: dict | None = None,
) -> tuple[ProcessedOptions | None, LLMWireError | None]:
    """
    Same as :func:`process_or_raise` but never raises.

    Returns ``(processed, None)`` on success and ``(None, error)`` otherwise.
    Validation errors come back with suggestions appended to their message;
    unexpected exceptions are wrapped in ``UnknownError``.
    """
    try:
        return process_or_raise(adapter, operation, model, options), None
    except ValidationError as exc:
        return None, enhance_validation_error(exc, adapter, options or {}, operation)
    except LLMWireError as exc:
        return None, exc
    except Exception as exc:
        return None, UnknownError(exc)


def _check_context(options: dict) -> None:
    if "context" not in options or options["context"] is None:
        options.pop("context", None)
        return
    ctx = options["context"]
    if not isinstance(ctx, Context):
        raise InvalidParameterError(
            "context",
            ctx,
            message=f"context must be a Context, got: {ctx!r}",
        )


# ---------------------------------------------------------------------------
# Error enhancement
# ---------------------------------------------------------------------------

INVALID_VALUE_TIP = (
    "Tip: Check the documentation for valid parameter ranges and types. "
    "For provider-specific options, nest them under the provider_options key."
)


def enhance_validation_error(
    error: ValidationError,
    adapter: ProviderAdapter,
    options: dict,
    operation: Operation | str = Operation.CHAT,
) -> ValidationError:
    if error.kind == "unknown_option":
        hint = provider_option_suggestions(adapter, unknown_keys(options, operation))
        if hint:
            return error.with_message(f"{error.message}\n\n{hint}")
    elif error.kind == "invalid_value":
        return error.with_message(f"{error.message}\n\n{INVALID_VALUE_TIP}")
    return error


def unknown_keys(options: dict, operation: Operation | str = Operation.CHAT) -> list[str]:
    known = set(schema_for(coerce_operation(operation)).keys()) | set(INTERNAL_KEYS)
    options = normalize_stream_alias(options)
    return [k for k in options if k not in known]


def provider_option_suggestions(adapter: ProviderAdapter, unknown: list[str]) -> str:
    """
    Build a hint for unknown top-level keys.

    Keys that exactly match a provider option are told to move under
    ``provider_options``; otherwise near-misses get a "did you mean" hint.
    """
    schema = adapter.provider_schema()
    if schema is None or not unknown:
        return ""

    provider_keys = schema.keys()
    matching = [k for k in unknown if k in provider_keys]
    if matching:
        keys_str = ", ".join(repr(k) for k in matching)
        example = ", ".join(f"{k!r}: value" for k in matching)
        return (
            "Suggestion: The following options appear to be provider-specific and "
            f"should be nested under provider_options: {keys_str}\n"
            f"Example: {{'temperature': 0.7, 'provider_options': {{{example}}}}}"
        )

    pairs = suggest(unknown, provider_keys)
    if not pairs:
        return ""
    suggestions = ", ".join(f"{u} -> {p}" for u, p in pairs)
    return (
        f"Suggestion: Did you mean one of these provider-specific options? {suggestions}\n"
        "Provider-specific options should be nested under provider_options: "
        "{'provider_options': {'your_option': value}}"
    )

