"""Connection Registry for MCP Hub.

Owns the live child-server connections, keyed by a unique name, together
with each connection's own filter rule set. All mutations go through one
lock; lookups read the current mapping and see either the state before
or after a mutation.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import anyio

from hub_client.connection import ChildConnection
from shared.errors import (
    AlreadyConnected,
    HubError,
    NotConnected,
    TransportFailure,
    TransportTimeout,
)
from shared.logging import get_logger
from shared.models import ConnectionSpec, ConnectionState, FilterRuleSet

logger = get_logger(__name__)


# Opens a session to a child server and returns its connection handle
Connector = Callable[[str, ConnectionSpec], Awaitable[ChildConnection]]


class ConnectionRegistry:
    """
    Registry of named child-server connections.

    Responsibilities:
    - Enforce one connection per name
    - Open sessions through the connector, keeping no partial entry on failure
    - Close and remove connections, alone or all at once
    - Resolve names to live connections
    """

    def __init__(
        self,
        connector: Optional[Connector] = None,
        connect_timeout: float = 30.0,
        close_timeout: float = 5.0
    ) -> None:
        self._connector: Connector = connector or ChildConnection.open
        self.connect_timeout = connect_timeout
        self.close_timeout = close_timeout

        self._connections: dict[str, ChildConnection] = {}
        self._filters: dict[str, FilterRuleSet] = {}
        self._connecting: set[str] = set()
        self._lock = asyncio.Lock()

    def __contains__(self, name: object) -> bool:
        return name in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    async def connect(
        self,
        name: str,
        spec: ConnectionSpec,
        rule_set: Optional[FilterRuleSet] = None
    ) -> None:
        """
        Open a connection and register it under ``name``.

        Args:
            name: Unique connection name
            spec: Launch parameters of the child server
            rule_set: Optional per-connection filter rules

        Raises:
            AlreadyConnected: If the name is connected or being connected
            TransportFailure: If the child could not be started
        """
        async with self._lock:
            if name in self._connections or name in self._connecting:
                raise AlreadyConnected(name)
            self._connecting.add(name)

        try:
            connection = await self._open(name, spec)
        except BaseException:
            self._connecting.discard(name)
            raise

        try:
            async with self._lock:
                self._connecting.discard(name)
                self._connections[name] = connection
                if rule_set is not None:
                    self._filters[name] = rule_set
                else:
                    self._filters.pop(name, None)
        except BaseException:
            self._connecting.discard(name)
            if self._connections.get(name) is not connection:
                await self._close_abandoned(name, connection)
            raise

        logger.info("Connected to server", server=name)

    async def _open(self, name: str, spec: ConnectionSpec) -> ChildConnection:
        try:
            async with asyncio.timeout(self.connect_timeout):
                return await self._connector(name, spec)
        except TimeoutError as e:
            logger.error("Connection timed out", server=name, timeout=self.connect_timeout)
            raise TransportTimeout(name, "connect to", self.connect_timeout) from e
        except HubError:
            raise
        except Exception as e:
            logger.error("Connection failed", server=name, error=str(e))
            raise TransportFailure(name, "connect to", str(e)) from e

    async def _close_abandoned(self, name: str, connection: ChildConnection) -> None:
        """Close a session that was opened but never registered."""
        with anyio.move_on_after(self.close_timeout, shield=True) as scope:
            try:
                await connection.close()
            except Exception as e:
                logger.warning("Failed to close abandoned connection", server=name, error=str(e))
        if scope.cancelled_caught:
            logger.warning("Closing abandoned connection timed out", server=name)

    async def disconnect(self, name: str) -> None:
        """
        Remove a connection and close its session.

        The entry is removed before the session is closed, so a failing
        close still leaves the name free.

        Raises:
            NotConnected: If no connection exists under ``name``
            TransportFailure: If closing the session failed or timed out
        """
        async with self._lock:
            connection = self._connections.pop(name, None)
            if connection is None:
                raise NotConnected(name)
            self._filters.pop(name, None)

        try:
            async with asyncio.timeout(self.close_timeout):
                await connection.close()
        except TimeoutError as e:
            logger.error("Disconnect timed out", server=name, timeout=self.close_timeout)
            raise TransportTimeout(name, "disconnect from", self.close_timeout) from e
        except Exception as e:
            logger.error("Disconnect failed", server=name, error=str(e))
            raise TransportFailure(name, "disconnect from", str(e)) from e

        logger.info("Disconnected from server", server=name)

    async def disconnect_all(self) -> dict[str, HubError]:
        """
        Disconnect every registered connection.

        Every connection is attempted even when earlier ones fail.

        Returns:
            Failures keyed by connection name; empty when all closed cleanly
        """
        failures: dict[str, HubError] = {}
        for name in self.list_names():
            try:
                await self.disconnect(name)
            except HubError as e:
                failures[name] = e

        if failures:
            logger.warning(
                "Some connections did not close cleanly",
                servers=sorted(failures),
            )
        return failures

    def list_names(self) -> list[str]:
        """Snapshot of connected names."""
        return list(self._connections)

    def resolve(self, name: str) -> ChildConnection:
        """
        Get the live connection registered under ``name``.

        Raises:
            NotConnected: If the name is absent or still connecting
        """
        connection = self._connections.get(name)
        if connection is None:
            raise NotConnected(name)
        return connection

    def get_filters(self, name: str) -> Optional[FilterRuleSet]:
        """Per-connection filter rules, if any were given."""
        return self._filters.get(name)

    def state(self, name: str) -> ConnectionState:
        if name in self._connections:
            return ConnectionState.CONNECTED
        if name in self._connecting:
            return ConnectionState.CONNECTING
        return ConnectionState.ABSENT
