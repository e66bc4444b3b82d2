"""``deepseek-agent chat`` — answer one query using the MCP tools."""

from __future__ import annotations

import asyncio
import sys

import click

from deepseek_agent.cli_commands._output import console


@click.command()
@click.argument("query")
@click.option("--model", "-m", default=None, help="LiteLLM model name (overrides MODEL_NAME).")
@click.option("--server-command", default=None, help="Command that starts the MCP server.")
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help="Path to a .env file.")
@click.option("--show-tools", is_flag=True, help="Also print the raw tool outputs.")
def chat(
    query: str,
    model: str | None,
    server_command: str | None,
    env_file: str | None,
    show_tools: bool,
) -> None:
    """Ask QUERY, letting the model call the weather and search tools."""
    from deepseek_agent.agent.chat import ChatAgent, ChatResult
    from deepseek_agent.config import ClientSettings, ModelConfig, load_environment
    from deepseek_agent.errors import AgentError
    from deepseek_agent.mcp.client import MCPClient

    load_environment(env_file)

    try:
        config = ModelConfig.from_env()
    except AgentError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)
    if model:
        config = config.model_copy(update={"model": model})

    settings = ClientSettings.from_env()
    if server_command:
        settings = settings.model_copy(update={"server_command": server_command})

    async def _chat() -> ChatResult:
        async with MCPClient(settings) as client:
            return await ChatAgent(config, client).chat(query)

    try:
        result = asyncio.run(_chat())
    except Exception as exc:
        console.print(f"[red]Chat error:[/red] {exc}")
        sys.exit(1)

    if show_tools:
        for output in result.tool_outputs:
            style = "red" if output.is_error else "cyan"
            console.print(f"[{style}]{output.name}[/{style}] {output.arguments}")
            console.print(output.text, markup=False)
    console.print(result.answer, markup=False)
