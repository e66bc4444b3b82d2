"""Chat orchestration on top of the MCP client."""

from deepseek_agent.agent.chat import ChatAgent, ChatResult, ToolOutput

__all__ = ["ChatAgent", "ChatResult", "ToolOutput"]
