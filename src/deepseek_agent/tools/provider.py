"""Provider protocols: the seams the MCP server calls into for real work.

The default implementations are :func:`deepseek_agent.tools.weather.get_weather`
and :func:`deepseek_agent.tools.search.search`; tests pass fakes with the
same signatures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from deepseek_agent.tools.search import SearchResult
    from deepseek_agent.tools.weather import WeatherForecast


class WeatherProvider(Protocol):
    """Looks up the forecast for a place name."""

    async def __call__(self, location: str, api_key: str) -> WeatherForecast:
        """Return the forecast or raise :class:`~deepseek_agent.errors.WeatherError`."""
        ...


class SearchProvider(Protocol):
    """Runs a web search."""

    async def __call__(self, query: str, api_key: str) -> list[SearchResult]:
        """Return results in rank order or raise :class:`~deepseek_agent.errors.SearchError`."""
        ...
