"""Shared fixtures: settings and fake providers for an offline MCP server."""

from __future__ import annotations

import pytest

from deepseek_agent.config import ServerSettings
from deepseek_agent.errors import SearchError, WeatherError
from deepseek_agent.mcp.server import MCPServer
from deepseek_agent.tools.search import SearchResult
from deepseek_agent.tools.weather import Cast, Forecast, WeatherForecast


def make_forecast(city: str = "上海市") -> WeatherForecast:
    return WeatherForecast(
        status="1",
        count="1",
        info="OK",
        infocode="10000",
        forecasts=[
            Forecast(
                city=city,
                adcode="310000",
                province="上海",
                reporttime="2025-05-01 11:00:00",
                casts=[
                    Cast(
                        date="2025-05-01",
                        week="4",
                        dayweather="晴",
                        nightweather="多云",
                        daytemp="26",
                        nighttemp="17",
                        daywind="东南",
                        nightwind="东南",
                        daypower="1-3",
                        nightpower="1-3",
                        daytemp_float="26.0",
                        nighttemp_float="17.0",
                    )
                ],
            )
        ],
    )


class FakeWeather:
    """Records calls and returns a canned forecast (or raises)."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, location: str, api_key: str) -> WeatherForecast:
        self.calls.append((location, api_key))
        if self.fail:
            raise WeatherError("district lookup failed")
        return make_forecast()


class FakeSearch:
    """Records calls and returns canned results (or raises)."""

    def __init__(self, results: list[SearchResult] | None = None, fail: bool = False) -> None:
        self.results = results or []
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, query: str, api_key: str) -> list[SearchResult]:
        self.calls.append((query, api_key))
        if self.fail:
            raise SearchError("403 Forbidden")
        return list(self.results)


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(amap_api_key="amap-key", serper_api_key="serper-key")


@pytest.fixture
def weather() -> FakeWeather:
    return FakeWeather()


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch(
        results=[
            SearchResult(title="Model Context Protocol", link="https://modelcontextprotocol.io", snippet="An open protocol."),
        ]
    )


@pytest.fixture
def server(settings: ServerSettings, weather: FakeWeather, search: FakeSearch) -> MCPServer:
    return MCPServer(settings, weather=weather, search=search)


@pytest.fixture
def failing_server(settings: ServerSettings) -> MCPServer:
    return MCPServer(settings, weather=FakeWeather(fail=True), search=FakeSearch(fail=True))


@pytest.fixture
def empty_search_server(settings: ServerSettings, weather: FakeWeather) -> MCPServer:
    return MCPServer(settings, weather=weather, search=FakeSearch())
