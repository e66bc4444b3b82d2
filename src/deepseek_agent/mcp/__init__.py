"""Line-delimited JSON-RPC server and client for the agent's tools."""

from deepseek_agent.mcp.client import MCPClient, to_function_schema
from deepseek_agent.mcp.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPPromptArgument,
    MCPPromptDef,
    MCPResourceDef,
    MCPToolDef,
    PromptResult,
    ResourceContent,
    ToolCallResult,
)
from deepseek_agent.mcp.server import MCPServer
from deepseek_agent.mcp.transport import MCPTransport, StdioTransport

__all__ = [
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPClient",
    "MCPPromptArgument",
    "MCPPromptDef",
    "MCPResourceDef",
    "MCPServer",
    "MCPToolDef",
    "MCPTransport",
    "PromptResult",
    "ResourceContent",
    "StdioTransport",
    "ToolCallResult",
    "to_function_schema",
]
