"""Runs an MCPServer on stdio with canned providers, for end-to-end tests.

Usage: ``python stub_server.py [ok|failing|empty]``
"""

from __future__ import annotations

import asyncio
import sys

from deepseek_agent.cli_commands._output import configure_logging
from deepseek_agent.config import ServerSettings
from deepseek_agent.errors import SearchError, WeatherError
from deepseek_agent.mcp.server import MCPServer
from deepseek_agent.tools.search import SearchResult
from deepseek_agent.tools.weather import WeatherForecast


def _build(mode: str) -> MCPServer:
    async def weather(location: str, api_key: str) -> WeatherForecast:
        if mode == "failing":
            raise WeatherError(f"district lookup failed for {location!r}")
        return WeatherForecast(status="1", count="1", info="OK")

    async def search(query: str, api_key: str) -> list[SearchResult]:
        if mode == "failing":
            raise SearchError("403 Forbidden")
        if mode == "empty":
            return []
        return [SearchResult(title=f"About {query}", link="https://example.com", snippet="stub")]

    settings = ServerSettings(amap_api_key="stub-amap", serper_api_key="stub-serper")
    return MCPServer(settings, weather=weather, search=search)


if __name__ == "__main__":
    configure_logging()
    asyncio.run(_build(sys.argv[1] if len(sys.argv) > 1 else "ok").run_stdio())
