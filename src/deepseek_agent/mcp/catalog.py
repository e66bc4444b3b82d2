"""The fixed catalog served by :class:`~deepseek_agent.mcp.server.MCPServer`.

Everything here is immutable for the lifetime of the process: two tools,
two static resources, and two prompt templates.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from types import MappingProxyType

from deepseek_agent.mcp.models import (
    MCPPromptArgument,
    MCPPromptDef,
    MCPResourceDef,
    MCPToolDef,
    PromptMessage,
    PromptResult,
    TextContent,
)

WEATHER_TOOL = "get_weather"
SEARCH_TOOL = "search"

WEATHER_ADVISOR_PROMPT = "weather_advisor"
SEARCH_ANALYZER_PROMPT = "search_analyzer"

# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

TOOLS: tuple[MCPToolDef, ...] = (
    MCPToolDef(
        name=WEATHER_TOOL,
        description="Get the weather forecast for a city.",
        input_schema={
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "City name, e.g. 上海 (Shanghai)",
                },
            },
            "required": ["location"],
        },
    ),
    MCPToolDef(
        name=SEARCH_TOOL,
        description="Search the web with Google for up-to-date information.",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
            },
            "required": ["query"],
        },
    ),
)

# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

RESOURCES: tuple[MCPResourceDef, ...] = (
    MCPResourceDef(
        uri="weather://recent-queries",
        name="Recent Weather Queries",
        description="Recently queried weather locations",
        mime_type="application/json",
    ),
    MCPResourceDef(
        uri="search://recent-queries",
        name="Recent Search Queries",
        description="Recently performed search queries",
        mime_type="application/json",
    ),
)

RESOURCE_CONTENTS = MappingProxyType({
    "weather://recent-queries": json.dumps(
        {"recent_queries": ["上海", "北京", "深圳"]}, ensure_ascii=False
    ),
    "search://recent-queries": json.dumps(
        {"recent_queries": ["2025 programming language rankings", "MCP protocol", "Python asyncio"]}
    ),
})

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

WEATHER_ADVISOR_SYSTEM = (
    "You are a professional weather advisor. Based on the weather data, give "
    "detailed clothing advice. Pay attention to:\n"
    "1. The temperature range and the day/night difference\n"
    "2. Weather conditions (sunny, cloudy, rain, ...)\n"
    "3. Wind strength\n"
    "4. Concrete layering suggestions\n"
    "5. Whether rain gear or sun protection is needed"
)

SEARCH_ANALYZER_SYSTEM = (
    "You are a professional information analyst. Answer accurately and "
    "concisely based on the search results."
)


@dataclass(frozen=True)
class PromptTemplate:
    """A two-message (system + user) template keyed on a single argument."""

    definition: MCPPromptDef
    title: str
    system_text: str
    user_template: str

    @property
    def name(self) -> str:
        return self.definition.name

    def render(self, arguments: dict[str, str]) -> PromptResult:
        return PromptResult(
            description=self.title,
            messages=[
                PromptMessage(role="system", content=TextContent(text=self.system_text)),
                PromptMessage(
                    role="user",
                    content=TextContent(text=self.user_template.format(**arguments)),
                ),
            ],
        )


PROMPTS: tuple[PromptTemplate, ...] = (
    PromptTemplate(
        definition=MCPPromptDef(
            name=WEATHER_ADVISOR_PROMPT,
            description="Professional weather advisor prompt template",
            arguments=(
                MCPPromptArgument(
                    name="weather_data", description="Weather data as JSON", required=True
                ),
            ),
        ),
        title="Professional weather analysis",
        system_text=WEATHER_ADVISOR_SYSTEM,
        user_template="Analyse the following weather data and give advice:\n{weather_data}",
    ),
    PromptTemplate(
        definition=MCPPromptDef(
            name=SEARCH_ANALYZER_PROMPT,
            description="Search result analyst prompt template",
            arguments=(
                MCPPromptArgument(
                    name="search_results", description="Search result data", required=True
                ),
            ),
        ),
        title="Professional search result analysis",
        system_text=SEARCH_ANALYZER_SYSTEM,
        user_template="Analyse the following search results:\n{search_results}",
    ),
)

# Which prompt template frames the follow-up answer for each tool
TOOL_PROMPTS = MappingProxyType({
    WEATHER_TOOL: (WEATHER_ADVISOR_PROMPT, "weather_data"),
    SEARCH_TOOL: (SEARCH_ANALYZER_PROMPT, "search_results"),
})
