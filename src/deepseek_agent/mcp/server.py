"""MCPServer — a line-delimited JSON-RPC server over stdio.

Reads one JSON object per line, dispatches on ``method`` through a fixed
handler table, and writes one JSON object per line.  Requests are handled
strictly one at a time; a slow provider call blocks the loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TextIO

from pydantic import ValidationError

from deepseek_agent import __version__
from deepseek_agent.errors import MCPServerError, ProviderError
from deepseek_agent.mcp.catalog import (
    PROMPTS,
    RESOURCE_CONTENTS,
    RESOURCES,
    SEARCH_TOOL,
    TOOLS,
    WEATHER_TOOL,
)
from deepseek_agent.mcp.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    JsonRpcRequest,
    JsonRpcResponse,
    ResourceContent,
    ToolCallResult,
)
from deepseek_agent.tools.search import format_results
from deepseek_agent.tools.search import search as serper_search
from deepseek_agent.tools.weather import get_weather as amap_weather
from deepseek_agent.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_METHOD,
    ATTR_RPC_REQUEST_ID,
    ATTR_TOOL_IS_ERROR,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from deepseek_agent.config import ServerSettings
    from deepseek_agent.tools.provider import SearchProvider, WeatherProvider

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SERVER_NAME = "deepseek-agent"
MAX_SEARCH_RESULTS = 3

Handler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def _require_str(params: dict[str, Any], key: str, label: str) -> str:
    value = params.get(key)
    if not isinstance(value, str):
        raise MCPServerError(INVALID_PARAMS, f"Missing {label}")
    return value


def _arguments(params: dict[str, Any]) -> dict[str, Any]:
    arguments = params.get("arguments") or {}
    if not isinstance(arguments, dict):
        raise MCPServerError(INVALID_PARAMS, "'arguments' must be an object")
    return arguments


class MCPServer:
    """Serves the fixed tool/resource/prompt catalog.

    Provider credentials come from *settings* and never change after
    construction.  The weather and search providers default to the AMap and
    Serper adapters; pass fakes to run without network access.

    Usage::

        server = MCPServer(ServerSettings.from_env())
        await server.run_stdio()
    """

    def __init__(
        self,
        settings: ServerSettings,
        *,
        weather: WeatherProvider | None = None,
        search: SearchProvider | None = None,
    ) -> None:
        self._settings = settings
        self._weather: WeatherProvider = weather or amap_weather
        self._search: SearchProvider = search or serper_search

        self._tools = {tool.name: tool for tool in TOOLS}
        self._resources = {resource.uri: resource for resource in RESOURCES}
        self._prompts = {prompt.name: prompt for prompt in PROMPTS}

        self._tool_runners: dict[str, Callable[[dict[str, Any]], Awaitable[ToolCallResult]]] = {
            WEATHER_TOOL: self._run_weather,
            SEARCH_TOOL: self._run_search,
        }
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
        }

    @property
    def methods(self) -> list[str]:
        """The JSON-RPC methods this server answers."""
        return list(self._handlers)

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def handle_message(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """Dispatch one decoded message and return the wire response.

        Returns ``None`` only for notifications (``notifications/*`` without
        an id), which never receive a reply.
        """
        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            logger.error("Invalid request: %s", exc.errors(include_url=False))
            request_id = message.get("id")
            if not isinstance(request_id, int | str):
                request_id = None
            return JsonRpcResponse.failure(request_id, INVALID_REQUEST, "Invalid request").to_wire()

        if request.id is None and request.method.startswith("notifications/"):
            logger.debug("Ignoring notification %s", request.method)
            return None

        with _tracer.start_as_current_span("mcp.server.handle") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            if request.id is not None:
                span.set_attribute(ATTR_RPC_REQUEST_ID, str(request.id))

            logger.info("Handling method: %s", request.method)
            response = await self._dispatch(request)

            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response.to_wire()

    async def _dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        handler = self._handlers.get(request.method)
        if handler is None:
            return JsonRpcResponse.failure(request.id, METHOD_NOT_FOUND, "Method not found")
        try:
            result = await handler(request.params or {})
        except MCPServerError as exc:
            logger.warning("%s failed: %s", request.method, exc.message)
            return JsonRpcResponse.failure(request.id, exc.code, exc.message)
        except Exception:
            logger.exception("Unhandled error in %s", request.method)
            return JsonRpcResponse.failure(request.id, INTERNAL_ERROR, "Internal error")
        return JsonRpcResponse.success(request.id, result)

    async def handle_line(self, line: str) -> dict[str, Any] | None:
        """Decode and handle one input line.

        Blank lines and lines that are not a JSON object are dropped without
        a reply so one bad line never desynchronises request/response pairs.
        """
        line = line.strip()
        if not line:
            return None
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON received: %s", exc)
            return None
        if not isinstance(message, dict):
            logger.error("Invalid message received: expected a JSON object, got %s", type(message).__name__)
            return None
        return await self.handle_message(message)

    async def run_stdio(self, reader: TextIO | None = None, writer: TextIO | None = None) -> None:
        """Serve until end-of-input on *reader* (default: ``sys.stdin``)."""
        source = reader if reader is not None else sys.stdin
        sink = writer if writer is not None else sys.stdout
        logger.info("Starting stdio server")

        while True:
            line = await asyncio.to_thread(source.readline)
            if not line:
                logger.info("EOF received, shutting down")
                return
            response = await self.handle_line(line)
            if response is None:
                continue
            sink.write(json.dumps(response) + "\n")
            sink.flush()

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    async def _list_tools(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [tool.model_dump(by_alias=True) for tool in self._tools.values()]}

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = _require_str(params, "name", "tool name")
        tool = self._tools.get(name)
        if tool is None:
            raise MCPServerError(INVALID_PARAMS, f"Unknown tool: {name}")

        arguments = _arguments(params)
        for key in tool.required_arguments:
            _require_str(arguments, key, f"parameter: {key}")

        with _tracer.start_as_current_span("mcp.server.tool") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            result = await self._tool_runners[name](arguments)
            span.set_attribute(ATTR_TOOL_IS_ERROR, result.is_error)
        return result.model_dump(by_alias=True)

    async def _run_weather(self, arguments: dict[str, Any]) -> ToolCallResult:
        location: str = arguments["location"]
        try:
            forecast = await self._weather(location, self._settings.amap_api_key)
        except ProviderError as exc:
            logger.warning("Weather lookup for %r failed: %s", location, exc)
            return ToolCallResult.from_text(f"Weather API error: {exc.detail or exc}", is_error=True)
        content = forecast.model_dump_json(indent=2)
        return ToolCallResult.from_text(f"Weather forecast retrieved:\n{content}")

    async def _run_search(self, arguments: dict[str, Any]) -> ToolCallResult:
        query: str = arguments["query"]
        try:
            results = await self._search(query, self._settings.serper_api_key)
        except ProviderError as exc:
            logger.warning("Search for %r failed: %s", query, exc)
            return ToolCallResult.from_text(f"Search API error: {exc.detail or exc}", is_error=True)
        return ToolCallResult.from_text(format_results(results, MAX_SEARCH_RESULTS))

    async def _list_resources(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "resources": [
                resource.model_dump(by_alias=True) for resource in self._resources.values()
            ]
        }

    async def _read_resource(self, params: dict[str, Any]) -> dict[str, Any]:
        uri = _require_str(params, "uri", "resource URI")
        resource = self._resources.get(uri)
        if resource is None:
            raise MCPServerError(INVALID_PARAMS, f"Unknown resource URI: {uri}")
        content = ResourceContent(uri=uri, mime_type=resource.mime_type, text=RESOURCE_CONTENTS[uri])
        return {"contents": [content.model_dump(by_alias=True)]}

    async def _list_prompts(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"prompts": [prompt.definition.model_dump(mode="json") for prompt in self._prompts.values()]}

    async def _get_prompt(self, params: dict[str, Any]) -> dict[str, Any]:
        name = _require_str(params, "name", "prompt name")
        prompt = self._prompts.get(name)
        if prompt is None:
            raise MCPServerError(INVALID_PARAMS, f"Unknown prompt: {name}")

        arguments = _arguments(params)
        values: dict[str, str] = {}
        for argument in prompt.definition.arguments:
            if argument.required:
                values[argument.name] = _require_str(arguments, argument.name, f"parameter: {argument.name}")
            else:
                values[argument.name] = str(arguments.get(argument.name, ""))
        return prompt.render(values).model_dump(mode="json")
