"""Weather and search backends behind the MCP tools."""

from deepseek_agent.tools.provider import SearchProvider, WeatherProvider
from deepseek_agent.tools.search import NO_RESULTS, SearchResult, format_results
from deepseek_agent.tools.weather import WeatherForecast, get_weather

__all__ = [
    "NO_RESULTS",
    "SearchProvider",
    "SearchResult",
    "WeatherForecast",
    "WeatherProvider",
    "format_results",
    "get_weather",
]
