"""Tests for ChatAgent with LiteLLM and the MCP client mocked out."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from deepseek_agent.agent.chat import FALLBACK_PROMPT, SYSTEM_PROMPT, ChatAgent, _parse_arguments
from deepseek_agent.config import ModelConfig
from deepseek_agent.errors import MCPServerError
from deepseek_agent.mcp.models import ToolCallResult


def make_tool_call(call_id: str, name: str, arguments: str) -> MagicMock:
    """Create a mock matching LiteLLM's ``tool_calls`` entries."""
    call = MagicMock()
    call.id = call_id
    call.function.name = name
    call.function.arguments = arguments
    return call


def make_mock_litellm_response(content: str = "", tool_calls: list[Any] | None = None) -> MagicMock:
    """Create a ``MagicMock`` mirroring LiteLLM's ``choices[0].message``."""
    message = MagicMock()
    message.content = content or None
    message.tool_calls = tool_calls

    choice = MagicMock()
    choice.message = message

    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def config() -> ModelConfig:
    return ModelConfig(model="deepseek/deepseek-chat", api_key="sk-test", api_base="https://api.deepseek.com")


class TestDirectAnswer:
    async def test_no_tool_calls_returns_first_reply(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(return_value=make_mock_litellm_response("Hello!"))
            result = await ChatAgent(config, mcp_client).chat("hi")

        assert result.answer == "Hello!"
        assert result.tool_outputs == []
        mock_litellm.acompletion.assert_awaited_once()
        mcp_client.call_tool.assert_not_awaited()

    async def test_first_call_offers_tools(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(return_value=make_mock_litellm_response("ok"))
            await ChatAgent(config, mcp_client).chat("What is MCP?")

        kwargs = mock_litellm.acompletion.call_args.kwargs
        assert kwargs["model"] == "deepseek/deepseek-chat"
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["api_base"] == "https://api.deepseek.com"
        assert kwargs["tool_choice"] == "auto"
        assert [t["function"]["name"] for t in kwargs["tools"]] == ["get_weather", "search"]
        assert kwargs["messages"] == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "What is MCP?"},
        ]

    async def test_optional_credentials_are_omitted(self, mcp_client: AsyncMock) -> None:
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(return_value=make_mock_litellm_response("ok"))
            await ChatAgent(ModelConfig(model="openai/gpt-4o"), mcp_client).chat("hi")

        kwargs = mock_litellm.acompletion.call_args.kwargs
        assert "api_key" not in kwargs
        assert "api_base" not in kwargs


class TestToolFlow:
    async def test_search_tool_round_trip(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        call = make_tool_call("call_1", "search", '{"query": "MCP"}')
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(
                side_effect=[
                    make_mock_litellm_response(tool_calls=[call]),
                    make_mock_litellm_response("MCP is an open protocol."),
                ]
            )
            result = await ChatAgent(config, mcp_client).chat("What is MCP?")

        assert result.answer == "MCP is an open protocol."
        (output,) = result.tool_outputs
        assert output.name == "search"
        assert output.arguments == {"query": "MCP"}
        assert output.is_error is False
        mcp_client.call_tool.assert_awaited_once_with("search", {"query": "MCP"})
        mcp_client.get_prompt.assert_awaited_once_with("search_analyzer", {"search_results": output.text})

        messages = mock_litellm.acompletion.call_args_list[1].kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool"]
        assert "information analyst" in messages[0]["content"]
        assert messages[2]["tool_calls"] == [
            {"id": "call_1", "type": "function", "function": {"name": "search", "arguments": '{"query": "MCP"}'}}
        ]
        assert messages[3] == {"role": "tool", "content": output.text, "tool_call_id": "call_1"}
        assert "tools" not in mock_litellm.acompletion.call_args_list[1].kwargs

    async def test_weather_uses_advisor_prompt(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        mcp_client.call_tool.return_value = ToolCallResult.from_text('Weather forecast retrieved:\n{"status": "1"}')
        call = make_tool_call("call_w", "get_weather", '{"location": "上海"}')
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(
                side_effect=[
                    make_mock_litellm_response(tool_calls=[call]),
                    make_mock_litellm_response("Bring an umbrella."),
                ]
            )
            result = await ChatAgent(config, mcp_client).chat("上海天气")

        assert result.answer == "Bring an umbrella."
        messages = mock_litellm.acompletion.call_args_list[1].kwargs["messages"]
        assert "weather advisor" in messages[0]["content"]

    async def test_tool_error_result_uses_fallback_prompt(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        mcp_client.call_tool.return_value = ToolCallResult.from_text("Search API error: 403", is_error=True)
        call = make_tool_call("call_1", "search", '{"query": "x"}')
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(
                side_effect=[
                    make_mock_litellm_response(tool_calls=[call]),
                    make_mock_litellm_response("Search is unavailable."),
                ]
            )
            result = await ChatAgent(config, mcp_client).chat("x")

        assert result.tool_outputs[0].is_error is True
        mcp_client.get_prompt.assert_not_awaited()
        messages = mock_litellm.acompletion.call_args_list[1].kwargs["messages"]
        assert messages[0]["content"] == FALLBACK_PROMPT
        assert messages[3]["content"] == "Search API error: 403"

    async def test_rejected_tool_is_relayed(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        mcp_client.call_tool.side_effect = MCPServerError(-32602, "Unknown tool: get_stock_price")
        call = make_tool_call("call_1", "get_stock_price", "{}")
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(
                side_effect=[
                    make_mock_litellm_response(tool_calls=[call]),
                    make_mock_litellm_response("I cannot look up stocks."),
                ]
            )
            result = await ChatAgent(config, mcp_client).chat("AAPL price?")

        (output,) = result.tool_outputs
        assert output.is_error is True
        assert output.text == "Tool error: Unknown tool: get_stock_price"
        assert result.answer == "I cannot look up stocks."

    async def test_one_follow_up_per_tool_call(self, config: ModelConfig, mcp_client: AsyncMock) -> None:
        calls = [
            make_tool_call("call_1", "search", '{"query": "a"}'),
            make_tool_call("call_2", "search", '{"query": "b"}'),
        ]
        with patch("deepseek_agent.agent.chat.litellm") as mock_litellm:
            mock_litellm.acompletion = AsyncMock(
                side_effect=[
                    make_mock_litellm_response(tool_calls=calls),
                    make_mock_litellm_response("Answer A"),
                    make_mock_litellm_response("Answer B"),
                ]
            )
            result = await ChatAgent(config, mcp_client).chat("a and b")

        assert mock_litellm.acompletion.await_count == 3
        assert result.answer == "Answer A\n\nAnswer B"
        assert len(result.tool_outputs) == 2


class TestParseArguments:
    def test_object(self) -> None:
        assert _parse_arguments('{"query": "x"}') == {"query": "x"}

    def test_invalid_json(self) -> None:
        assert _parse_arguments("not json") == {"raw": "not json"}

    def test_non_object(self) -> None:
        assert _parse_arguments("[1]") == {"raw": "[1]"}
