"""
ChildConnection - stdio MCP client session to one child server.

Uses the official `mcp` Python client to spawn a child server and talk to
it over stdin/stdout. Requests to one child are serialized.
"""

import asyncio
from contextlib import AsyncExitStack
from typing import Any, Optional

from mcp import ClientSession, StdioServerParameters, stdio_client
from mcp.types import Implementation

from shared.logging import get_logger
from shared.models import ConnectionSpec, ConnectionState

logger = get_logger(__name__)

CLIENT_VERSION = "1.0.0"


class ChildConnection:
    """
    Client session to one child MCP server over stdio.

    The session and the child process live in an exit stack entered by
    ``start`` and unwound by ``close``; both must run in the same task.
    """

    def __init__(self, name: str, spec: ConnectionSpec) -> None:
        self.name = name
        self.spec = spec
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None
        self._state = ConnectionState.ABSENT
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, name: str, spec: ConnectionSpec) -> "ChildConnection":
        """Spawn the child described by ``spec`` and complete the handshake."""
        conn = cls(name, spec)
        await conn.start()
        return conn

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    async def start(self) -> None:
        """
        Spawn the child process and run the MCP initialize handshake.

        On failure everything entered so far is unwound and the connection
        ends up CLOSED before the error propagates.
        """
        if self._state is ConnectionState.CONNECTED:
            return

        logger.info(
            "Starting child server",
            server=self.name,
            command=self.spec.command,
            args=self.spec.args,
        )
        self._state = ConnectionState.CONNECTING

        stack = AsyncExitStack()
        # Assigned early so a cancelled start can still be cleaned up via close()
        self._stack = stack
        try:
            params = StdioServerParameters(
                command=self.spec.command,
                args=list(self.spec.args),
                env=self.spec.merged_env(),
                cwd=self.spec.cwd,
            )
            read_stream, write_stream = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(
                ClientSession(
                    read_stream,
                    write_stream,
                    client_info=Implementation(
                        name=f"mcp-client-{self.name}",
                        version=CLIENT_VERSION,
                    ),
                )
            )
            await session.initialize()
        except BaseException:
            try:
                await stack.aclose()
            finally:
                self._stack = None
                self._session = None
                self._state = ConnectionState.CLOSED
            raise

        self._session = session
        self._state = ConnectionState.CONNECTED

    async def close(self) -> None:
        """Close the session and terminate the child process."""
        # Close even if start never completed
        if self._stack is None:
            self._session = None
            self._state = ConnectionState.CLOSED
            return
        try:
            await self._stack.aclose()
        finally:
            self._stack = None
            self._session = None
            self._state = ConnectionState.CLOSED

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"MCP session for '{self.name}' is not available")
        return self._session

    async def list_tools(self) -> dict[str, Any]:
        """
        Fetch the child's tool catalog.

        Returns:
            The ``tools/list`` result as JSON-compatible data (camelCase keys)
        """
        async with self._lock:
            result = await self._require_session().list_tools()
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Invoke a tool on the child, forwarding arguments as given.

        Returns:
            The ``tools/call`` result as JSON-compatible data
        """
        async with self._lock:
            result = await self._require_session().call_tool(name=name, arguments=arguments or {})
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)
