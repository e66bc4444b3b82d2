"""MCP transport — newline-delimited JSON over a child process's stdio.

:class:`StdioTransport` satisfies the :class:`MCPTransport` protocol, providing
``connect``, ``send``, ``receive``, and ``close`` methods.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shlex
from typing import Any, Protocol, runtime_checkable

from deepseek_agent.errors import ProtocolViolationError, ServerStartError, SessionClosedError

logger = logging.getLogger(__name__)

# Longest reply line accepted from the server
MAX_LINE_BYTES = 16 * 1024 * 1024


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract transport for MCP JSON-RPC communication."""

    async def connect(self) -> None: ...
    async def send(self, data: dict[str, Any]) -> None: ...
    async def receive(self) -> dict[str, Any]: ...
    async def close(self) -> None: ...


class StdioTransport:
    """Communicates with an MCP server via subprocess stdin/stdout.

    The child's stderr is inherited so its logs reach the parent's terminal.
    """

    def __init__(self, command: str, env: dict[str, str] | None = None) -> None:
        self._command = command
        self._env = env
        self._process: asyncio.subprocess.Process | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    async def connect(self) -> None:
        """Launch the subprocess."""
        parts = shlex.split(self._command)
        if not parts:
            msg = "Empty server command"
            raise ServerStartError(msg)
        logger.info("Starting server process: %s", self._command)
        try:
            self._process = await asyncio.create_subprocess_exec(
                *parts,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
                env=self._env,
                limit=MAX_LINE_BYTES,
            )
        except OSError as exc:
            raise ServerStartError(f"{parts[0]}: {exc}") from exc

    async def send(self, data: dict[str, Any]) -> None:
        """Write a JSON line to stdin."""
        if self._process is None or self._process.stdin is None:
            msg = "Transport not connected"
            raise RuntimeError(msg)
        line = json.dumps(data) + "\n"
        try:
            self._process.stdin.write(line.encode())
            await self._process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise SessionClosedError(str(exc)) from exc

    async def receive(self) -> dict[str, Any]:
        """Read a JSON line from stdout."""
        if self._process is None or self._process.stdout is None:
            msg = "Transport not connected"
            raise RuntimeError(msg)
        try:
            line = await self._process.stdout.readline()
        except ValueError as exc:
            # StreamReader raises ValueError once a line exceeds its limit
            raise ProtocolViolationError(f"reply line too long: {exc}") from exc
        if not line:
            raise SessionClosedError("server closed its output")
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ProtocolViolationError(f"unreadable reply: {exc}") from exc
        if not isinstance(message, dict):
            raise ProtocolViolationError("reply is not a JSON object")
        return message

    async def close(self) -> None:
        """Kill the subprocess and reap it.

        There is no shutdown handshake: the server holds no state worth
        flushing.
        """
        process, self._process = self._process, None
        if process is None:
            return
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
        logger.debug("Server process %s exited with %s", process.pid, process.returncode)
