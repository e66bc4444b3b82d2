"""Shared CLI output formatters and logging setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

if TYPE_CHECKING:
    from deepseek_agent.mcp.models import MCPPromptDef, MCPResourceDef, MCPToolDef, ToolCallResult

console = Console()
# Logs always go to stderr: ``serve`` owns stdout for protocol traffic
err_console = Console(stderr=True)


def configure_logging(*, verbose: bool = False) -> None:
    """Route the root logger through a rich handler on stderr."""
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def print_tools_table(tools: list[MCPToolDef]) -> None:
    """Pretty-print tool definitions as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required")

    for tool in tools:
        table.add_row(tool.name, _truncate(tool.description), ", ".join(tool.required_arguments) or "-")

    console.print(table)


def print_resources_table(resources: list[MCPResourceDef]) -> None:
    """Pretty-print resource definitions as a table."""
    table = Table(title="Resources")
    table.add_column("URI", style="cyan")
    table.add_column("Name")
    table.add_column("MIME type")

    for resource in resources:
        table.add_row(resource.uri, resource.name, resource.mime_type)

    console.print(table)


def print_prompts_table(prompts: list[MCPPromptDef]) -> None:
    """Pretty-print prompt definitions as a table."""
    table = Table(title="Prompts")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for prompt in prompts:
        arguments = ", ".join(
            f"{arg.name}{'*' if arg.required else ''}" for arg in prompt.arguments
        )
        table.add_row(prompt.name, _truncate(prompt.description), arguments or "-")

    console.print(table)


def print_tool_result(result: ToolCallResult) -> None:
    if result.is_error:
        console.print(f"Tool error: {result.text}", style="red", markup=False)
    else:
        console.print(result.text, markup=False)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
