"""ChatAgent — answers a user query with help from the MCP tools.

The flow is two LLM calls wrapped around tool execution:

1. ask the model, offering the server's tools as function schemas;
2. run every requested tool through the MCP client;
3. ask again per tool call, framed by the matching MCP prompt, and return
   the final answers.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import litellm
from pydantic import BaseModel

from deepseek_agent.errors import MCPServerError
from deepseek_agent.mcp.catalog import TOOL_PROMPTS
from deepseek_agent.mcp.client import to_function_schema
from deepseek_agent.utils.telemetry import ATTR_MODEL, ATTR_TOOL_CALLS, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from deepseek_agent.config import ModelConfig
    from deepseek_agent.mcp.client import MCPClient

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that can:\n"
    "1. Provide weather information and clothing advice\n"
    "2. Search the internet for up-to-date information\n"
    "Choose the right tool for the user's question.\n\n"
    "Your tools are served over the Model Context Protocol (MCP)."
)

FALLBACK_PROMPT = "Give an accurate, helpful answer based on the tool output."


class ToolOutput(BaseModel):
    """What one tool call produced, as relayed to the model."""

    name: str
    arguments: dict[str, Any] = {}
    text: str
    is_error: bool = False


class ChatResult(BaseModel):
    """The final answer plus the tool outputs it was built from."""

    answer: str
    tool_outputs: list[ToolOutput] = []


class ChatAgent:
    """Drives one chat turn against an LLM via LiteLLM.

    Usage::

        async with MCPClient() as client:
            agent = ChatAgent(ModelConfig.from_env(), client)
            result = await agent.chat("What should I wear in Shanghai tomorrow?")
    """

    def __init__(self, config: ModelConfig, client: MCPClient) -> None:
        self.config = config
        self._client = client

    async def chat(self, query: str) -> ChatResult:
        with _tracer.start_as_current_span("agent.chat") as span:
            span.set_attribute(ATTR_MODEL, self.config.model)

            tools = [to_function_schema(tool) for tool in await self._client.list_tools()]
            logger.info("Offering %d MCP tools to %s", len(tools), self.config.model)

            response = await self._complete(
                [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": query},
                ],
                tools=tools,
                tool_choice="auto",
            )
            message = response.choices[0].message
            tool_calls = list(message.tool_calls or [])
            span.set_attribute(ATTR_TOOL_CALLS, len(tool_calls))

            if not tool_calls:
                return ChatResult(answer=message.content or "")

            outputs: list[ToolOutput] = []
            answers: list[str] = []
            for call in tool_calls:
                output = await self._run_tool(call.function.name, call.function.arguments)
                outputs.append(output)

                final = await self._complete([
                    {"role": "system", "content": await self._system_prompt_for(output)},
                    {"role": "user", "content": query},
                    {"role": "assistant", "content": None, "tool_calls": [_tool_call_message(call)]},
                    {"role": "tool", "content": output.text, "tool_call_id": call.id},
                ])
                answers.append(final.choices[0].message.content or "")

            return ChatResult(answer="\n\n".join(answers), tool_outputs=outputs)

    async def _run_tool(self, name: str, raw_arguments: str) -> ToolOutput:
        arguments = _parse_arguments(raw_arguments)
        with _tracer.start_as_current_span("agent.tool") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            logger.info("Calling MCP tool %s with %s", name, arguments)
            try:
                result = await self._client.call_tool(name, arguments)
            except MCPServerError as exc:
                # Relay the rejection to the model instead of aborting the turn
                logger.warning("Tool %s rejected: %s", name, exc.message)
                return ToolOutput(name=name, arguments=arguments, text=f"Tool error: {exc.message}", is_error=True)
        return ToolOutput(name=name, arguments=arguments, text=result.text, is_error=result.is_error)

    async def _system_prompt_for(self, output: ToolOutput) -> str:
        """Frame the follow-up with the tool's MCP prompt when the tool succeeded."""
        if output.is_error or output.name not in TOOL_PROMPTS:
            return FALLBACK_PROMPT
        prompt_name, argument = TOOL_PROMPTS[output.name]
        prompt = await self._client.get_prompt(prompt_name, {argument: output.text})
        return prompt.text_for("system") or FALLBACK_PROMPT

    async def _complete(self, messages: list[dict[str, Any]], **kwargs: Any) -> Any:
        call_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            **kwargs,
        }
        if self.config.api_key:
            call_kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            call_kwargs["api_base"] = self.config.api_base

        # LiteLLM type stubs are incomplete
        return await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]


def _tool_call_message(call: Any) -> dict[str, Any]:
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.function.name, "arguments": call.function.arguments},
    }


def _parse_arguments(raw: str) -> dict[str, Any]:
    """Parse JSON string arguments from a tool call."""
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {"raw": raw}
    return result if isinstance(result, dict) else {"raw": raw}
