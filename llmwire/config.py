"""
Layered configuration for the client and CLI.

Sources, lowest precedence first:

    defaults  <  YAML file  <  profile from that file  <  LLMWIRE_* env vars  <  --set overrides

Env vars and CLI overrides address settings by dot path: ``client.<field>``
or ``providers.<provider_id>.<field>``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    default_model: str = "compatible_with_openai:gpt-4o-mini"
    timeout_seconds: float = 30.0
    max_retries: int = 2
    on_unsupported: str = "warn"


@dataclass
class ProviderConfig:
    base_url: str = ""
    api_key_env: str = ""


@dataclass
class LLMWireConfig:
    client: ClientConfig = field(default_factory=ClientConfig)
    providers: dict[str, ProviderConfig] = field(default_factory=dict)

    def provider(self, provider_id: str) -> ProviderConfig:
        return self.providers.get(provider_id) or ProviderConfig()

    def to_dict(self) -> dict:
        return asdict(self)


_ENV_VARS: dict[str, str] = {
    "LLMWIRE_DEFAULT_MODEL": "client.default_model",
    "LLMWIRE_TIMEOUT": "client.timeout_seconds",
    "LLMWIRE_MAX_RETRIES": "client.max_retries",
    "LLMWIRE_ON_UNSUPPORTED": "client.on_unsupported",
}


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> LLMWireConfig:
    """
    Build an LLMWireConfig from every source in precedence order.

    Parameters
    ----------
    config_path : YAML file; a missing file means defaults
    profile : name of an entry under ``profiles:`` in the file, merged over it
    cli_overrides : dot path -> value, applied last
    """
    raw = _read_yaml(config_path)
    profiles = raw.pop("profiles", None) or {}
    if profile:
        if profile in profiles:
            raw = _merge(raw, profiles[profile])
        else:
            logger.warning("Config profile %r not found", profile)

    cfg = LLMWireConfig(
        client=_section(ClientConfig, raw.get("client")),
        providers={
            provider_id: _section(ProviderConfig, section)
            for provider_id, section in (raw.get("providers") or {}).items()
        },
    )

    for env_var, dotpath in _ENV_VARS.items():
        if env_var in os.environ:
            set_value(cfg, dotpath, os.environ[env_var])
    for dotpath, value in (cli_overrides or {}).items():
        set_value(cfg, dotpath, value)
    return cfg


def set_value(cfg: LLMWireConfig, dotpath: str, value: Any) -> None:
    """
    Set one setting by dot path, converting *value* to the field's type.

    Raises ``ValueError`` for an unknown path or a value that does not
    convert.
    """
    section, _, rest = dotpath.partition(".")
    if section == "client":
        cls, name = ClientConfig, rest
    elif section == "providers" and rest.count(".") == 1:
        cls, name = ProviderConfig, rest.split(".")[1]
    else:
        raise ValueError(f"Unknown config key: {dotpath}")
    if name not in {f.name for f in fields(cls)}:
        raise ValueError(f"Unknown config key: {dotpath}")

    if cls is ClientConfig:
        target = cfg.client
    else:
        target = cfg.providers.setdefault(rest.split(".")[0], ProviderConfig())

    kind = type(getattr(target, name))
    try:
        converted = value if isinstance(value, kind) else kind(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for {dotpath}: {value!r}") from exc
    setattr(target, name, converted)


def _read_yaml(path: str | Path | None) -> dict:
    if path is None:
        return {}
    p = Path(path).expanduser()
    if not p.is_file():
        return {}
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _merge(base: dict, overlay: dict) -> dict:
    out = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _section(cls: type, raw: dict | None) -> Any:
    # Unknown keys in the file are ignored.
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in (raw or {}).items() if k in names})


# ---------------------------------------------------------------------------
# Credential and endpoint resolution
# ---------------------------------------------------------------------------

def resolve_api_key(
    *candidates: str | None,
    env_key: str | None = None,
) -> str | None:
    """
    Return the first non-empty explicit candidate, then the value of
    *env_key*, then ``None``.  A missing key never blocks a request.
    """
    for candidate in candidates:
        if candidate:
            return candidate
    if env_key:
        value = os.environ.get(env_key)
        if value:
            return value
    return None


def resolve_base_url(
    *candidates: str | None,
    env_key: str | None = None,
    default: str,
) -> str:
    """Same precedence as :func:`resolve_api_key`, falling back to *default*."""
    for candidate in candidates:
        if candidate:
            return candidate.rstrip("/")
    if env_key:
        value = os.environ.get(env_key)
        if value:
            return value.rstrip("/")
    return default.rstrip("/")
