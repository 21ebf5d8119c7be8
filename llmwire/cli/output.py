"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from llmwire.errors import LLMWireError
from llmwire.options.schema import Schema
from llmwire.providers.base import ProviderAdapter
from llmwire.types import ChunkType, Response, StreamChunk, WireRequest


def mask_secret(value: str) -> str:
    if len(value) <= 12:
        return "***"
    return value[:12] + "..."


class OutputFormatter:
    """Rich-based output formatting for the llmwire CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def format_provider_list(self, adapters: list[ProviderAdapter]) -> None:
        table = Table(title="Providers", show_lines=True)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Base URL")
        table.add_column("API key env")
        table.add_column("Operations")

        for a in adapters:
            ops = ", ".join(op.value for op in a.supported_operations)
            table.add_row(a.provider_id, a.default_base_url, a.default_env_key or "-", ops)

        self.console.print(table)

    def format_schema(self, provider_id: str, schema: Schema | None) -> None:
        if schema is None or not len(schema):
            self.console.print(f"[dim]{provider_id} declares no provider options.[/dim]")
            return

        table = Table(title=f"provider_options for {provider_id}")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Type", no_wrap=True)
        table.add_column("Description")
        for key, spec in schema:
            table.add_row(key, spec.describe(), spec.doc)
        self.console.print(table)

    def format_request(self, request: WireRequest) -> None:
        headers = dict(request.headers)
        auth = headers.get("Authorization")
        if auth:
            headers["Authorization"] = "Bearer " + mask_secret(auth[len("Bearer "):])

        self.console.print(Panel(
            f"[bold]{request.method}[/bold] {request.url}\n"
            f"[dim]Operation:[/dim] {request.operation.value}\n"
            f"[dim]Model:[/dim] {request.model.spec}",
            title="Wire request",
        ))
        self.console.print(Syntax(json.dumps(headers, indent=2), "json", theme="monokai"))
        self.console.print(Syntax(json.dumps(request.body, indent=2, default=str), "json", theme="monokai"))
        for warning in request.warnings:
            self.console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    def format_response(self, response: Response) -> None:
        self.console.print(response.text(), markup=False)
        for call in response.tool_calls():
            args = json.dumps(call.input or {}, default=str)
            self.console.print(f"  [yellow]{call.tool_name}[/yellow]({args})")
        reason = response.finish_reason.value if response.finish_reason else "-"
        u = response.usage
        self.console.print(
            f"[dim]finish={reason} tokens in={u.input_tokens} "
            f"out={u.output_tokens} total={u.total_tokens}[/dim]"
        )
        for warning in response.provider_meta.get("warnings", []):
            self.console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    def format_chunk(self, chunk: StreamChunk) -> None:
        if chunk.type == ChunkType.CONTENT:
            self.console.print(chunk.text, end="", markup=False)
        elif chunk.type == ChunkType.TOOL_CALL and chunk.name:
            self.console.print(Text(f"\n[tool call: {chunk.name}]", style="yellow"))
        elif chunk.type == ChunkType.FINISH:
            self.console.print()
        elif chunk.type == ChunkType.ERROR:
            self.console.print(f"\n[red]Stream error:[/red] {escape(chunk.text)}")

    def format_error(self, error: Exception) -> None:
        name = type(error).__name__
        message = error.message if isinstance(error, LLMWireError) else str(error)
        self.console.print(f"[red]{name}:[/red] {escape(message)}")

    def format_config(self, config: dict[str, Any]) -> None:
        json_str = json.dumps(config, indent=2, default=str)
        self.console.print(Syntax(json_str, "json", theme="monokai"))
