"""
Declarative option schemas, composition and validation.

A :class:`Schema` maps option keys to :class:`OptionSpec` descriptions.  Each
spec compiles to a JSON Schema fragment that ``jsonschema`` evaluates, so the
type rules live in one place.  Provider schemas are composed into the core
schema by nesting them under the ``provider_options`` key.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterator

import jsonschema

from llmwire.errors import CollisionError, ValidationError

PROVIDER_OPTIONS_KEY = "provider_options"

_UNSET: Any = object()

# JSON Schema fragments for the scalar and container kinds.
_KIND_FRAGMENTS: dict[str, dict] = {
    "string": {"type": "string"},
    "integer": {"type": "integer"},
    "pos_integer": {"type": "integer", "minimum": 1},
    "float": {"type": "number"},
    "boolean": {"type": "boolean"},
    "map": {"type": "object"},
    "any": {},
}

_KIND_LABELS: dict[str, str] = {
    "string": "a string",
    "integer": "an integer",
    "pos_integer": "a positive integer",
    "float": "a float",
    "boolean": "a boolean",
    "map": "a map",
    "list": "a list",
    "any": "any value",
    "keys": "a map of provider options",
}


@dataclass(frozen=True)
class OptionSpec:
    """
    Describes a single option.

    *type* is one of ``string``, ``integer``, ``pos_integer``, ``float``,
    ``boolean``, ``enum``, ``list``, ``map``, ``any`` or ``keys`` (a nested
    schema given in *keys*), or a tuple of those meaning "any of".
    *choices* holds the allowed values for ``enum`` and *items* the element
    kind for ``list``.
    """

    type: str | tuple[str, ...] = "any"
    required: bool = False
    default: Any = _UNSET
    doc: str = ""
    choices: tuple = ()
    items: str | None = None
    keys: Schema | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET

    def to_json_schema(self) -> dict:
        kinds = self.type if isinstance(self.type, tuple) else (self.type,)
        fragments = [self._fragment(kind) for kind in kinds]
        if len(fragments) == 1:
            return fragments[0]
        return {"anyOf": fragments}

    def describe(self) -> str:
        kinds = self.type if isinstance(self.type, tuple) else (self.type,)
        labels = []
        for kind in kinds:
            if kind == "enum":
                labels.append(f"one of {list(self.choices)!r}")
            elif kind == "list" and self.items:
                labels.append(f"a list of {_KIND_LABELS.get(self.items, self.items)}")
            else:
                labels.append(_KIND_LABELS.get(kind, kind))
        return " or ".join(labels)

    def _fragment(self, kind: str) -> dict:
        if kind == "enum":
            return {"enum": list(self.choices)}
        if kind == "list":
            item = _KIND_FRAGMENTS.get(self.items or "any", {})
            return {"type": "array", "items": item}
        if kind == "keys":
            # Nested keys are walked by ``validate`` itself.
            return {"type": "object"}
        try:
            return _KIND_FRAGMENTS[kind]
        except KeyError:
            raise ValueError(f"Unknown option type: {kind!r}") from None


@dataclass(frozen=True)
class Schema:
    """An ordered, immutable mapping of option key to :class:`OptionSpec`."""

    specs: tuple[tuple[str, OptionSpec], ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, specs: Mapping[str, OptionSpec]) -> Schema:
        return cls(tuple(specs.items()))

    def keys(self) -> list[str]:
        return [k for k, _ in self.specs]

    def get(self, key: str) -> OptionSpec | None:
        for k, spec in self.specs:
            if k == key:
                return spec
        return None

    def replace(self, key: str, spec: OptionSpec) -> Schema:
        return Schema(tuple((k, spec if k == key else s) for k, s in self.specs))

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.specs)

    def __iter__(self) -> Iterator[tuple[str, OptionSpec]]:
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def core_keys(schema: Schema) -> list[str]:
    return [k for k in schema.keys() if k != PROVIDER_OPTIONS_KEY]


def find_collisions(core: Schema, provider: Schema | None) -> list[str]:
    if provider is None:
        return []
    return sorted(set(provider.keys()) & set(core_keys(core)))


def check_collisions(core: Schema, provider: Schema | None, provider_id: str = "provider") -> None:
    """Raise :class:`CollisionError` if *provider* shadows any core key."""
    collisions = find_collisions(core, provider)
    if collisions:
        raise CollisionError(provider_id, collisions)


def compose(core: Schema, provider: Schema | None, provider_id: str = "provider") -> Schema:
    """
    Nest *provider* under the ``provider_options`` key of *core*.

    A provider without an extension schema composes to *core* unchanged.
    """
    if provider is None:
        return core
    check_collisions(core, provider, provider_id)
    base = core.get(PROVIDER_OPTIONS_KEY) or OptionSpec()
    nested = OptionSpec(type="keys", keys=provider, default={}, doc=base.doc)
    if PROVIDER_OPTIONS_KEY in core:
        return core.replace(PROVIDER_OPTIONS_KEY, nested)
    return Schema(core.specs + ((PROVIDER_OPTIONS_KEY, nested),))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate(options: Mapping[str, Any], schema: Schema, *, path: str = "") -> dict:
    """
    Validate *options* against *schema* and return a new dict with defaults
    applied.  Raises :class:`ValidationError` on the first violation.
    """
    if not isinstance(options, Mapping):
        raise ValidationError(
            f"expected {path or 'options'} to be a mapping, got: {options!r}",
            kind="invalid_value",
            key=path or None,
            value=options,
        )

    known = schema.keys()
    unknown = [k for k in options if k not in known]
    if unknown:
        where = f" under {path}" if path else ""
        raise ValidationError(
            f"unknown options {unknown!r}{where}, valid options are: {known!r}",
            kind="unknown_option",
            keys=[str(k) for k in unknown],
        )

    validated: dict = {}
    for key, spec in schema:
        qualified = f"{path}.{key}" if path else key
        if key not in options:
            if spec.required:
                raise ValidationError(
                    f"required option {qualified!r} not found",
                    kind="missing_required",
                    key=qualified,
                )
            if spec.has_default:
                validated[key] = _copy_default(spec.default)
            continue

        value = options[key]
        if spec.type == "keys" and spec.keys is not None:
            validated[key] = validate(value, spec.keys, path=qualified)
            continue

        _check_value(qualified, value, spec)
        validated[key] = value

    return validated


def _check_value(key: str, value: Any, spec: OptionSpec) -> None:
    validator = jsonschema.Draft7Validator(spec.to_json_schema())
    error = next(iter(validator.iter_errors(value)), None)
    if error is not None:
        raise ValidationError(
            f"invalid value for {key!r} option: expected {spec.describe()}, got: {value!r}",
            kind="invalid_value",
            key=key,
            value=value,
        )


def _copy_default(value: Any) -> Any:
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, list):
        return list(value)
    return value
