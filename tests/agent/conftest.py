"""Fixtures for ChatAgent tests: a fake MCP client serving the real catalog."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from deepseek_agent.mcp.catalog import PROMPTS, TOOLS
from deepseek_agent.mcp.models import ToolCallResult


def _render_prompt(name: str, arguments: dict[str, str]) -> Any:
    template = next(t for t in PROMPTS if t.name == name)
    return template.render(arguments)


@pytest.fixture
def mcp_client() -> AsyncMock:
    client = AsyncMock()
    client.list_tools.return_value = list(TOOLS)
    client.call_tool.return_value = ToolCallResult.from_text("1. Result\n   Link: https://example.com\n   Snippet: s\n")
    client.get_prompt.side_effect = _render_prompt
    return client
