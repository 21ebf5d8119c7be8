"""Provider option translation and the unsupported-option warning policy."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from llmwire.errors import ValidationError
from llmwire.types import Model, Operation

if TYPE_CHECKING:
    from llmwire.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class OnUnsupported(str, Enum):
    WARN = "warn"
    ERROR = "error"
    IGNORE = "ignore"


def translate(
    adapter: ProviderAdapter,
    operation: Operation,
    model: Model,
    options: dict,
) -> tuple[dict, list[str]]:
    """
    Run the adapter's ``translate_options`` hook.

    Returns the rewritten options and the warnings the hook produced.  The
    input dict is never modified.
    """
    translated, warnings = adapter.translate_options(operation, model, dict(options))
    return dict(translated), [str(w) for w in warnings]


def apply_warning_policy(
    warnings: list[str],
    policy: OnUnsupported | str = OnUnsupported.WARN,
) -> list[str]:
    """
    Apply the ``on_unsupported`` policy once for the whole warning list.

    ``warn`` logs and returns the warnings, ``error`` raises a
    ``ValidationError`` listing all of them, ``ignore`` discards them.
    """
    if not warnings:
        return []

    policy = OnUnsupported(policy)
    if policy is OnUnsupported.ERROR:
        raise ValidationError(
            "; ".join(warnings),
            kind="unsupported_translation",
            errors=warnings,
        )
    if policy is OnUnsupported.IGNORE:
        return []

    for warning in warnings:
        logger.warning(warning)
    return list(warnings)
