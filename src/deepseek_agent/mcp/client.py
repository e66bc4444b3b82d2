"""MCPClient — drives an MCP server running in a child process.

Strictly request/reply: one request is written, exactly one reply line is
read, and only then may the next request be sent.  A client instance must
not be shared between concurrent tasks; open one session per task instead.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from deepseek_agent import __version__
from deepseek_agent.config import ClientSettings
from deepseek_agent.errors import MCPServerError, ProtocolViolationError
from deepseek_agent.mcp.models import (
    PROTOCOL_VERSION,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPPromptDef,
    MCPResourceDef,
    MCPToolDef,
    PromptResult,
    ResourceContent,
    ToolCallResult,
)
from deepseek_agent.mcp.transport import MCPTransport, StdioTransport
from deepseek_agent.utils.telemetry import ATTR_RPC_METHOD, ATTR_RPC_REQUEST_ID, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

CLIENT_NAME = "deepseek-agent-client"


class MCPClient:
    """Async context manager owning one server process.

    Entering the context launches the server and performs the ``initialize``
    handshake; leaving it kills the server on every exit path.

    Usage::

        async with MCPClient() as client:
            tools = await client.list_tools()
            result = await client.call_tool("search", {"query": "MCP protocol"})
    """

    def __init__(self, settings: ClientSettings | None = None) -> None:
        self._settings = settings or ClientSettings()
        self._transport: MCPTransport | None = None
        self._next_id = 1
        self.server_info: dict[str, Any] = {}

    async def __aenter__(self) -> MCPClient:
        await self.connect()
        try:
            await self.initialize()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    @property
    def connected(self) -> bool:
        return self._transport is not None

    async def connect(self) -> None:
        """Create the transport and launch the server."""
        transport = self._create_transport()
        await transport.connect()
        self._transport = transport

    async def close(self) -> None:
        """Terminate the server process."""
        if self._transport is not None:
            transport, self._transport = self._transport, None
            await transport.close()

    def _create_transport(self) -> MCPTransport:
        return StdioTransport(command=self._settings.server_command, env=self._settings.env)

    async def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one request and return its ``result``.

        Raises:
            MCPServerError: the server answered with a JSON-RPC error.
            SessionClosedError: the server process went away.
            ProtocolViolationError: the reply is malformed or answers another id.
        """
        if self._transport is None:
            msg = "Client not connected"
            raise RuntimeError(msg)

        request_id = self._next_id
        self._next_id += 1
        request = JsonRpcRequest(method=method, id=request_id, params=params or {})

        with _tracer.start_as_current_span("mcp.client.request") as span:
            span.set_attribute(ATTR_RPC_METHOD, method)
            span.set_attribute(ATTR_RPC_REQUEST_ID, str(request_id))
            logger.info("Sending request %d: %s", request_id, method)

            await self._transport.send(request.model_dump())
            raw = await self._transport.receive()

        try:
            response = JsonRpcResponse.model_validate(raw)
        except ValidationError as exc:
            msg = f"malformed reply to request {request_id}: {exc}"
            raise ProtocolViolationError(msg) from exc
        if response.id != request_id:
            msg = f"reply id {response.id!r} does not match request id {request_id}"
            raise ProtocolViolationError(msg)
        if response.error is not None:
            raise MCPServerError(response.error.code, response.error.message)
        return response.result or {}

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    async def initialize(self) -> dict[str, Any]:
        result = await self.send(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": CLIENT_NAME, "version": __version__},
            },
        )
        self.server_info = dict(result.get("serverInfo", {}))
        return result

    async def list_tools(self) -> list[MCPToolDef]:
        result = await self.send("tools/list")
        return [MCPToolDef.model_validate(raw) for raw in result.get("tools", [])]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolCallResult:
        result = await self.send("tools/call", {"name": name, "arguments": arguments})
        return ToolCallResult.model_validate(result)

    async def list_resources(self) -> list[MCPResourceDef]:
        result = await self.send("resources/list")
        return [MCPResourceDef.model_validate(raw) for raw in result.get("resources", [])]

    async def read_resource(self, uri: str) -> list[ResourceContent]:
        result = await self.send("resources/read", {"uri": uri})
        return [ResourceContent.model_validate(raw) for raw in result.get("contents", [])]

    async def list_prompts(self) -> list[MCPPromptDef]:
        result = await self.send("prompts/list")
        return [MCPPromptDef.model_validate(raw) for raw in result.get("prompts", [])]

    async def get_prompt(self, name: str, arguments: dict[str, str]) -> PromptResult:
        result = await self.send("prompts/get", {"name": name, "arguments": arguments})
        return PromptResult.model_validate(result)


def to_function_schema(tool_def: MCPToolDef) -> dict[str, Any]:
    """Convert an MCPToolDef to an OpenAI-compatible function schema."""
    return {
        "type": "function",
        "function": {
            "name": tool_def.name,
            "description": tool_def.description,
            "parameters": tool_def.input_schema or {"type": "object", "properties": {}},
        },
    }
