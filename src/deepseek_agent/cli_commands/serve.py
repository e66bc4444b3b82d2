"""``deepseek-agent serve`` — run the MCP server on stdin/stdout."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from deepseek_agent.cli_commands._output import err_console

logger = logging.getLogger(__name__)


@click.command()
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help="Path to a .env file.")
def serve(env_file: str | None) -> None:
    """Serve the weather and search tools over line-delimited JSON-RPC.

    Requires AMAP_API_KEY and SERPER_API_KEY in the environment.
    """
    from deepseek_agent.config import ServerSettings, load_environment
    from deepseek_agent.errors import ConfigurationError
    from deepseek_agent.mcp.server import MCPServer

    load_environment(env_file)
    logger.info("Environment loaded")

    try:
        settings = ServerSettings.from_env()
    except ConfigurationError as exc:
        err_console.print(f"[red]Cannot start server:[/red] {exc}")
        sys.exit(1)

    server = MCPServer(settings)
    try:
        asyncio.run(server.run_stdio())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
