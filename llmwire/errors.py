"""Errors raised by the option pipeline, codecs and client."""

from __future__ import annotations

from typing import Any


class LLMWireError(Exception):
    """Base error.  ``to_dict`` exposes the structured fields."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message}


class ValidationError(LLMWireError):
    """
    An option set violated its schema.

    *kind* is one of ``unknown_option``, ``missing_required``,
    ``invalid_value``, ``collision`` or ``unsupported_translation``.
    *errors* lists every individual problem (for translation failures, every
    warning that was escalated).
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str = "invalid_value",
        key: str | None = None,
        value: Any = None,
        keys: list[str] | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.key = key
        self.value = value
        self.keys = list(keys or ([key] if key else []))
        self.errors = list(errors or [message])

    def with_message(self, message: str) -> ValidationError:
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.message = message
        clone.args = (message,)
        return clone

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(kind=self.kind, keys=self.keys, errors=self.errors)
        if self.key is not None:
            d["value"] = repr(self.value)
        return d


class CollisionError(ValidationError):
    """A provider schema declares keys that shadow core options."""

    def __init__(self, provider: str, keys: list[str]) -> None:
        keys = sorted(keys)
        super().__init__(
            f"Provider {provider} defines options that shadow core generation "
            f"options: {', '.join(keys)}. Provider-specific options must not "
            "conflict with core generation options. Please rename these "
            "provider options or move them to a different namespace.",
            kind="collision",
            keys=keys,
        )
        self.provider = provider


class InvalidParameterError(LLMWireError):
    """A call argument is malformed or contradictory."""

    def __init__(self, parameter: str, value: Any = None, *, message: str | None = None) -> None:
        super().__init__(message or f"invalid {parameter}: {value!r}")
        self.parameter = parameter
        self.value = value

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(parameter=self.parameter, value=repr(self.value))
        return d


class InvalidProviderError(InvalidParameterError):
    """A model was routed to an adapter for a different provider."""

    def __init__(self, provider: str, expected: str | None = None) -> None:
        msg = f"unsupported provider: {provider!r}"
        if expected:
            msg += f" (adapter handles {expected!r})"
        super().__init__("provider", provider, message=msg)
        self.provider = provider


class ApiRequestError(LLMWireError):
    """The HTTP exchange failed before a response was received."""

    def __init__(self, reason: str, *, cause: Exception | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.cause = cause


class ApiResponseError(LLMWireError):
    """The backend answered with a non-2xx status or an unusable body."""

    def __init__(self, reason: str, *, status: int | None = None, response_body: Any = None) -> None:
        msg = f"{reason} (status={status})" if status is not None else reason
        super().__init__(msg)
        self.reason = reason
        self.status = status
        self.response_body = response_body

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(reason=self.reason, status=self.status, response_body=self.response_body)
        return d


class UnknownError(LLMWireError):
    """Wraps an unexpected lower-level failure."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(f"{type(error).__name__}: {error}")
        self.error = error
