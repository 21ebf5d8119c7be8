"""Tests for llmwire.config."""

from __future__ import annotations

import logging
import textwrap

import pytest

from llmwire.config import LLMWireConfig, load_config, resolve_api_key, resolve_base_url, set_value


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "llmwire.yaml"
    path.write_text(textwrap.dedent("""
        client:
          default_model: vllm:llama
          max_retries: 5
          unknown_key: ignored
        providers:
          vllm:
            base_url: http://gpu:8000/v1
            api_key_env: GPU_KEY
        profiles:
          strict:
            client:
              on_unsupported: error
    """))
    return path


class TestLoadConfig:

    def test_defaults(self):
        cfg = load_config()
        assert cfg.client.max_retries == 2
        assert cfg.client.on_unsupported == "warn"
        assert cfg.providers == {}

    def test_file(self, config_file):
        cfg = load_config(config_file)
        assert cfg.client.default_model == "vllm:llama"
        assert cfg.client.max_retries == 5
        assert cfg.provider("vllm").base_url == "http://gpu:8000/v1"
        assert cfg.provider("openrouter").base_url == ""

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "nope.yaml")
        assert cfg.client.max_retries == 2

    def test_profile_overlay(self, config_file):
        cfg = load_config(config_file, profile="strict")
        assert cfg.client.on_unsupported == "error"
        assert cfg.client.max_retries == 5

    def test_env_beats_file(self, config_file, monkeypatch):
        monkeypatch.setenv("LLMWIRE_MAX_RETRIES", "0")
        monkeypatch.setenv("LLMWIRE_TIMEOUT", "2.5")
        cfg = load_config(config_file)
        assert cfg.client.max_retries == 0
        assert cfg.client.timeout_seconds == 2.5

    def test_cli_beats_env(self, monkeypatch):
        monkeypatch.setenv("LLMWIRE_ON_UNSUPPORTED", "ignore")
        cfg = load_config(cli_overrides={"client.on_unsupported": "error"})
        assert cfg.client.on_unsupported == "error"

    def test_unknown_profile_keeps_file_values(self, config_file, caplog):
        with caplog.at_level(logging.WARNING, logger="llmwire.config"):
            cfg = load_config(config_file, profile="missing")
        assert cfg.client.on_unsupported == "warn"
        assert "missing" in caplog.text

    def test_profiles_not_in_effective_config(self, config_file):
        assert "profiles" not in load_config(config_file).to_dict()

    def test_provider_override_creates_entry(self):
        cfg = load_config(cli_overrides={"providers.openrouter.base_url": "http://proxy/v1"})
        assert cfg.provider("openrouter").base_url == "http://proxy/v1"


class TestSetValue:

    def test_strings_converted_to_field_type(self):
        cfg = LLMWireConfig()
        set_value(cfg, "client.max_retries", "7")
        set_value(cfg, "client.timeout_seconds", 5)
        assert cfg.client.max_retries == 7
        assert cfg.client.timeout_seconds == 5.0
        assert isinstance(cfg.client.timeout_seconds, float)

    @pytest.mark.parametrize("dotpath", ["client.nope", "llm.model", "providers.vllm", "providers.vllm.token"])
    def test_unknown_key(self, dotpath):
        with pytest.raises(ValueError, match="Unknown config key"):
            set_value(LLMWireConfig(), dotpath, "x")

    def test_unknown_provider_field_does_not_add_entry(self):
        cfg = LLMWireConfig()
        with pytest.raises(ValueError):
            set_value(cfg, "providers.vllm.token", "x")
        assert cfg.providers == {}

    def test_bad_value(self):
        with pytest.raises(ValueError, match="Invalid value for client.max_retries"):
            set_value(LLMWireConfig(), "client.max_retries", "many")


class TestResolution:

    def test_api_key_first_candidate_wins(self, monkeypatch):
        monkeypatch.setenv("K", "env")
        assert resolve_api_key(None, "", "explicit", env_key="K") == "explicit"

    def test_api_key_env_fallback(self, monkeypatch):
        monkeypatch.setenv("K", "env")
        assert resolve_api_key(None, env_key="K") == "env"

    def test_api_key_none(self):
        assert resolve_api_key(None, env_key="DEFINITELY_UNSET_LLMWIRE_KEY") is None

    def test_base_url_default_and_trailing_slash(self):
        assert resolve_base_url(None, default="http://x/v1/") == "http://x/v1"
