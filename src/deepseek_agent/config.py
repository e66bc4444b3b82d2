"""Provider credentials, server launch command, and model selection.

All settings are plain pydantic models built from the process environment.
Call :func:`load_environment` once at startup to merge a ``.env`` file into
``os.environ`` first.
"""

from __future__ import annotations

import os
import shlex
import sys
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from deepseek_agent.errors import ConfigurationError

DEFAULT_MODEL = "deepseek/deepseek-chat"


def load_environment(path: str | None = None) -> bool:
    """Load a ``.env`` file without overriding variables already set."""
    return load_dotenv(dotenv_path=path, override=False)


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ConfigurationError(name, "environment variable is not set")
    return value


class ServerSettings(BaseModel):
    """Provider credentials captured once when the MCP server starts."""

    model_config = {"frozen": True}

    amap_api_key: str
    serper_api_key: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerSettings:
        """Read ``AMAP_API_KEY`` and ``SERPER_API_KEY``.

        Raises:
            ConfigurationError: either key is missing or blank.
        """
        env = os.environ if environ is None else environ
        return cls(
            amap_api_key=_require(env, "AMAP_API_KEY"),
            serper_api_key=_require(env, "SERPER_API_KEY"),
        )


def default_server_command() -> str:
    """Command line that runs the MCP server with the current interpreter."""
    return shlex.join([sys.executable, "-m", "deepseek_agent", "serve"])


class ClientSettings(BaseModel):
    """How the MCP client launches its server process.

    ``env=None`` lets the child inherit the parent's environment.
    """

    server_command: str = Field(default_factory=default_server_command)
    env: dict[str, str] | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientSettings:
        env = os.environ if environ is None else environ
        command = env.get("MCP_SERVER_COMMAND", "").strip() or default_server_command()
        return cls(server_command=command)


class ModelConfig(BaseModel):
    """Configuration for the chat model.

    The ``model`` field uses LiteLLM's naming convention:
    ``provider/model_name`` (e.g. ``deepseek/deepseek-chat``).
    """

    model: str = DEFAULT_MODEL
    api_key: str | None = None
    api_base: str | None = None

    @property
    def provider(self) -> str:
        """Extract the provider prefix from the model string."""
        if "/" in self.model:
            return self.model.split("/", 1)[0]
        return "openai"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ModelConfig:
        """Read ``MODEL_NAME``, ``DEEPSEEK_API_KEY`` and ``DEEPSEEK_API_URL``.

        Raises:
            ConfigurationError: ``DEEPSEEK_API_KEY`` is missing.
        """
        env = os.environ if environ is None else environ
        return cls(
            model=env.get("MODEL_NAME", "").strip() or DEFAULT_MODEL,
            api_key=_require(env, "DEEPSEEK_API_KEY"),
            api_base=env.get("DEEPSEEK_API_URL", "").strip() or None,
        )
