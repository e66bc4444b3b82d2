"""deepseek-agent — an LLM chat agent calling weather and search tools over MCP."""

from __future__ import annotations

__version__ = "0.4.0"
