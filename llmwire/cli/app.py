"""
Main CLI application for llmwire.

Usage:
    llmwire providers list|schema
    llmwire encode MODEL PROMPT [-o key=value ...] [--provider-option key=value ...]
    llmwire chat MODEL PROMPT [--stream]
    llmwire config show [--set section.key=value ...]
    llmwire version
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console

from llmwire import __version__
from llmwire.cli.output import OutputFormatter
from llmwire.config import load_config
from llmwire.errors import LLMWireError

app = typer.Typer(name="llmwire", help="llmwire - inspect and call OpenAI-compatible backends")
providers_app = typer.Typer(help="Provider adapters")
config_app = typer.Typer(help="Configuration management")

app.add_typer(providers_app, name="providers")
app.add_typer(config_app, name="config")

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_config_path() -> Path | None:
    """Find config file in standard locations."""
    candidates = [
        Path.cwd() / "llmwire.yaml",
        Path.cwd() / "llmwire.yml",
        Path.home() / ".config" / "llmwire" / "config.yaml",
    ]
    for p in candidates:
        if p.is_file():
            return p
    return None


def _parse_pairs(pairs: list[str] | None) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as JSON when they parse."""
    out: dict[str, Any] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise typer.BadParameter(f"expected key=value, got: {pair!r}")
        key, raw = pair.split("=", 1)
        try:
            out[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            out[key.strip()] = raw
    return out


def _build_options(option: list[str] | None, provider_option: list[str] | None) -> dict:
    options = _parse_pairs(option)
    nested = _parse_pairs(provider_option)
    if nested:
        options["provider_options"] = nested
    return options


def _load(profile: str | None, settings: list[str] | None):
    return load_config(_get_config_path(), profile=profile, cli_overrides=_parse_pairs(settings))


def _client(profile: str | None, settings: list[str] | None):
    from llmwire.client import LLMClient

    return LLMClient.from_config(_load(profile, settings))


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@providers_app.command("list")
def providers_list():
    """List registered provider adapters."""
    from llmwire.providers.registry import default_registry

    formatter = OutputFormatter(console)
    formatter.format_provider_list(default_registry().list())


@providers_app.command("schema")
def providers_schema(provider_id: str = typer.Argument(..., help="Provider ID")):
    """Show the provider_options a provider accepts."""
    from llmwire.providers.registry import default_registry

    adapter = default_registry().get(provider_id)
    if not adapter:
        console.print(f"[red]Provider not found:[/red] {provider_id}")
        raise typer.Exit(1)

    formatter = OutputFormatter(console)
    formatter.format_schema(provider_id, adapter.provider_schema())


@app.command()
def encode(
    model: str = typer.Argument(..., help="Model spec, e.g. vllm:llama-3"),
    prompt: str = typer.Argument(..., help="User prompt"),
    option: Optional[List[str]] = typer.Option(None, "--option", "-o", help="Core option key=value"),
    provider_option: Optional[List[str]] = typer.Option(
        None, "--provider-option", "-p", help="Provider option key=value"
    ),
    operation: str = typer.Option("chat", help="chat, object or embedding"),
    profile: Optional[str] = typer.Option(None, help="Config profile name"),
    settings: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="Config override, e.g. client.timeout_seconds=5"
    ),
):
    """Show the wire request for a call without sending it."""
    formatter = OutputFormatter(console)
    try:
        options = _build_options(option, provider_option)
        _, request = _client(profile, settings).prepare(operation, model, prompt, options)
    except (LLMWireError, ValueError) as e:
        formatter.format_error(e)
        raise typer.Exit(1)
    formatter.format_request(request)


@app.command()
def chat(
    model: str = typer.Argument(..., help="Model spec, e.g. openrouter:openai/gpt-4o"),
    prompt: str = typer.Argument(..., help="User prompt"),
    stream: bool = typer.Option(False, "--stream", help="Stream the reply"),
    option: Optional[List[str]] = typer.Option(None, "--option", "-o", help="Core option key=value"),
    provider_option: Optional[List[str]] = typer.Option(
        None, "--provider-option", "-p", help="Provider option key=value"
    ),
    profile: Optional[str] = typer.Option(None, help="Config profile name"),
    settings: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="Config override, e.g. client.timeout_seconds=5"
    ),
):
    """Send one prompt and print the reply."""
    formatter = OutputFormatter(console)
    options = _build_options(option, provider_option)

    async def _run():
        client = _client(profile, settings)
        if stream:
            async for chunk in client.stream_text(model, prompt, options):
                formatter.format_chunk(chunk)
        else:
            response = await client.generate_text(model, prompt, options)
            formatter.format_response(response)

    try:
        asyncio.run(_run())
    except (LLMWireError, ValueError) as e:
        formatter.format_error(e)
        raise typer.Exit(1)


@config_app.command("show")
def config_show(
    profile: Optional[str] = typer.Option(None, help="Config profile name"),
    settings: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="Config override, e.g. client.timeout_seconds=5"
    ),
):
    """Show effective config."""
    formatter = OutputFormatter(console)
    try:
        cfg = _load(profile, settings)
    except ValueError as e:
        formatter.format_error(e)
        raise typer.Exit(1)
    formatter.format_config(cfg.to_dict())


@app.command()
def version():
    """Show version."""
    console.print(f"llmwire v{__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
