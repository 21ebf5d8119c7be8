"""Option schemas, composition, validation and provider translation."""

from llmwire.options.core import EMBEDDING_SCHEMA, GENERATION_SCHEMA, INTERNAL_KEYS, schema_for
from llmwire.options.pipeline import ProcessedOptions, process, process_or_raise
from llmwire.options.schema import OptionSpec, Schema, compose, validate
from llmwire.options.translation import OnUnsupported, apply_warning_policy, translate

__all__ = [
    "EMBEDDING_SCHEMA",
    "GENERATION_SCHEMA",
    "INTERNAL_KEYS",
    "OnUnsupported",
    "OptionSpec",
    "ProcessedOptions",
    "Schema",
    "apply_warning_policy",
    "compose",
    "process",
    "process_or_raise",
    "schema_for",
    "translate",
    "validate",
]
