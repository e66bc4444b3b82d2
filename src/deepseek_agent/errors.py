"""Shared error types for the agent, the MCP layer, and the provider adapters."""


class AgentError(Exception):
    """Base error for all deepseek-agent failures."""


class ConfigurationError(AgentError):
    """A required setting is missing or invalid."""

    def __init__(self, setting: str, detail: str = "") -> None:
        self.setting = setting
        self.detail = detail
        super().__init__(f"Missing or invalid setting: {setting}" + (f" ({detail})" if detail else ""))


# ---------------------------------------------------------------------------
# Provider adapters
# ---------------------------------------------------------------------------


class ProviderError(AgentError):
    """An external provider (weather, search) failed to answer."""

    provider = "provider"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{self.provider} request failed" + (f": {detail}" if detail else ""))


class WeatherError(ProviderError):
    """The weather provider rejected the lookup or returned no data."""

    provider = "Weather"


class SearchError(ProviderError):
    """The search provider rejected the query or returned garbage."""

    provider = "Search"


# ---------------------------------------------------------------------------
# MCP session
# ---------------------------------------------------------------------------


class MCPError(AgentError):
    """Base error for MCP client/session failures."""


class MCPServerError(MCPError):
    """The server answered a request with a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"MCP server error {code}: {message}")


class ServerStartError(MCPError):
    """The MCP server process could not be launched."""


class SessionClosedError(MCPError):
    """The server process exited or its pipes were closed mid-session."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("MCP session closed" + (f": {detail}" if detail else ""))


class ProtocolViolationError(MCPError):
    """The server sent a reply that does not match the outstanding request."""
