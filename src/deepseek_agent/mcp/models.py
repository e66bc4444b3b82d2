"""MCP models — JSON-RPC 2.0 messages and the tool/resource/prompt payloads.

Python attribute names are snake_case; every payload serializes to the MCP
wire names (``inputSchema``, ``mimeType``, ``isError``) when dumped with
``by_alias=True``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

PROTOCOL_VERSION = "2024-11-05"

# JSON-RPC 2.0 reserved error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message."""

    jsonrpc: str = "2.0"
    method: str
    id: int | str | None = None
    params: dict[str, Any] | None = None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, request_id: int | str | None, result: dict[str, Any]) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: int | str | None, code: int, message: str) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message))

    def to_wire(self) -> dict[str, Any]:
        """Dump with exactly one of ``result``/``error`` present."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result if self.result is not None else {}
        return data


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class MCPToolDef(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = {"populate_by_name": True, "frozen": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @property
    def required_arguments(self) -> list[str]:
        return list(self.input_schema.get("required", []))


class MCPResourceDef(BaseModel):
    """A resource definition as returned by ``resources/list``."""

    model_config = {"populate_by_name": True, "frozen": True}

    uri: str
    name: str
    description: str = ""
    mime_type: str = Field(default="application/json", alias="mimeType")


class MCPPromptArgument(BaseModel):
    """One named argument of a prompt template."""

    model_config = {"frozen": True}

    name: str
    description: str = ""
    required: bool = False


class MCPPromptDef(BaseModel):
    """A prompt definition as returned by ``prompts/list``."""

    model_config = {"frozen": True}

    name: str
    description: str = ""
    arguments: tuple[MCPPromptArgument, ...] = ()


class TextContent(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """Payload of a ``tools/call`` response.

    Provider failures are reported here with ``is_error=True`` rather than as
    JSON-RPC errors, so the caller always gets content it can relay.
    """

    model_config = {"populate_by_name": True}

    content: list[TextContent] = []
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def from_text(cls, text: str, *, is_error: bool = False) -> ToolCallResult:
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @property
    def text(self) -> str:
        """Concatenated text of all content parts."""
        return "\n".join(part.text for part in self.content)


class ResourceContent(BaseModel):
    """One item of a ``resources/read`` response."""

    model_config = {"populate_by_name": True}

    uri: str
    mime_type: str = Field(default="application/json", alias="mimeType")
    type: Literal["text"] = "text"
    text: str


class PromptMessage(BaseModel):
    """A single rendered message of a prompt template."""

    role: Literal["system", "user", "assistant"]
    content: TextContent


class PromptResult(BaseModel):
    """Payload of a ``prompts/get`` response."""

    description: str = ""
    messages: list[PromptMessage] = []

    def text_for(self, role: str) -> str:
        """Return the text of the first message with *role*, or ``""``."""
        for message in self.messages:
            if message.role == role:
                return message.content.text
        return ""
