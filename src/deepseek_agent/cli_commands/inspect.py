"""``deepseek-agent inspect`` — browse the MCP server's catalog."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click

from deepseek_agent.cli_commands._output import (
    console,
    print_prompts_table,
    print_resources_table,
    print_tool_result,
    print_tools_table,
)

T = TypeVar("T")


def _run_session(
    server_command: str | None,
    action: Callable[[Any], Awaitable[T]],
) -> T:
    """Open a client session, run *action* on it, and close the server."""
    from deepseek_agent.config import ClientSettings, load_environment
    from deepseek_agent.mcp.client import MCPClient

    load_environment()
    settings = ClientSettings.from_env()
    if server_command:
        settings = settings.model_copy(update={"server_command": server_command})

    async def _session() -> T:
        async with MCPClient(settings) as client:
            return await action(client)

    try:
        return asyncio.run(_session())
    except Exception as exc:
        console.print(f"[red]MCP error:[/red] {exc}")
        sys.exit(1)


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    arguments: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--arg")
        arguments[key] = value
    return arguments


@click.group("inspect")
@click.option("--server-command", default=None, help="Command that starts the MCP server.")
@click.pass_context
def inspect_cmd(ctx: click.Context, server_command: str | None) -> None:
    """Query a running MCP server's tools, resources and prompts."""
    ctx.obj = server_command


@inspect_cmd.command("tools")
@click.pass_obj
def list_tools(server_command: str | None) -> None:
    """List the tools the server exposes."""
    tools = _run_session(server_command, lambda client: client.list_tools())
    if not tools:
        console.print("[yellow]No tools exposed.[/yellow]")
        return
    print_tools_table(tools)


@inspect_cmd.command("resources")
@click.pass_obj
def list_resources(server_command: str | None) -> None:
    """List the resources the server exposes."""
    print_resources_table(_run_session(server_command, lambda client: client.list_resources()))


@inspect_cmd.command("prompts")
@click.pass_obj
def list_prompts(server_command: str | None) -> None:
    """List the prompt templates the server exposes."""
    print_prompts_table(_run_session(server_command, lambda client: client.list_prompts()))


@inspect_cmd.command("read")
@click.argument("uri")
@click.pass_obj
def read_resource(server_command: str | None, uri: str) -> None:
    """Print the content of the resource at URI."""
    contents = _run_session(server_command, lambda client: client.read_resource(uri))
    for content in contents:
        console.print(content.text, markup=False)


@inspect_cmd.command("call")
@click.argument("name")
@click.option("--arg", "-a", "pairs", multiple=True, help="Tool argument as KEY=VALUE.")
@click.pass_obj
def call_tool(server_command: str | None, name: str, pairs: tuple[str, ...]) -> None:
    """Call the tool NAME and print its result."""
    arguments = _parse_pairs(pairs)
    print_tool_result(_run_session(server_command, lambda client: client.call_tool(name, arguments)))


@inspect_cmd.command("prompt")
@click.argument("name")
@click.option("--arg", "-a", "pairs", multiple=True, help="Prompt argument as KEY=VALUE.")
@click.pass_obj
def get_prompt(server_command: str | None, name: str, pairs: tuple[str, ...]) -> None:
    """Render the prompt template NAME."""
    arguments = _parse_pairs(pairs)
    prompt = _run_session(server_command, lambda client: client.get_prompt(name, arguments))
    for message in prompt.messages:
        console.print(f"[bold]{message.role}[/bold]")
        console.print(message.content.text, markup=False)
