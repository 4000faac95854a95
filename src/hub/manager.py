"""Hub Manager - connection orchestration and tool routing.

Loads child servers from a configuration document, aggregates their tool
catalogs through the filter engine, and forwards tool calls to the right
child. Filtering controls what is listed, never what can be called.
"""

import asyncio
from pathlib import Path
from typing import Any, Optional

from hub.filters import apply_filters
from hub.registry import ConnectionRegistry
from shared.config import (
    HubSettings,
    find_config_path,
    load_config_document,
    parse_connection_spec,
)
from shared.errors import (
    ConfigurationLoadFailure,
    HubError,
    TransportFailure,
    TransportTimeout,
)
from shared.logging import get_logger
from shared.models import ConnectionSpec, FilterRuleSet, ToolListError

logger = get_logger(__name__)


class HubManager:
    """
    Manages the connections of one hub and routes requests to them.

    The registry is owned by the manager: created with it and drained by
    ``disconnect_all`` (or on leaving ``async with``).
    """

    def __init__(
        self,
        settings: Optional[HubSettings] = None,
        registry: Optional[ConnectionRegistry] = None,
        global_filters: Optional[FilterRuleSet] = None
    ) -> None:
        self.settings = settings or HubSettings()
        if registry is None:
            registry = ConnectionRegistry(
                connect_timeout=self.settings.connect_timeout,
                close_timeout=self.settings.close_timeout,
            )
        self.registry = registry

        flag_filters = self.settings.global_filters()
        if global_filters is not None:
            global_filters = global_filters.merge(flag_filters)
        else:
            global_filters = flag_filters
        self._global_filters: Optional[FilterRuleSet] = global_filters

    async def __aenter__(self) -> "HubManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect_all()

    @property
    def global_filters(self) -> Optional[FilterRuleSet]:
        return self._global_filters

    @global_filters.setter
    def global_filters(self, rule_set: Optional[FilterRuleSet]) -> None:
        self._global_filters = rule_set

    def connected_servers(self) -> list[str]:
        """Return all connected server names."""
        return self.registry.list_names()

    async def connect(self, name: str, spec: ConnectionSpec) -> None:
        """Connect to one child server, storing its filters with it."""
        await self.registry.connect(name, spec, spec.filters)

    async def disconnect(self, name: str) -> None:
        await self.registry.disconnect(name)

    async def disconnect_all(self) -> dict[str, HubError]:
        """Best-effort disconnect of every server."""
        return await self.registry.disconnect_all()

    async def load_from_configuration(
        self,
        source: str | Path | None = None
    ) -> dict[str, HubError]:
        """
        Connect to every server listed in a configuration document.

        Names that are already connected are skipped. One server failing to
        connect, or having a malformed entry, does not stop the others.

        Args:
            source: Document path; discovered when omitted

        Returns:
            Connection failures keyed by server name

        Raises:
            ConfigurationLoadFailure: If no document is found or it is invalid
        """
        path = find_config_path(source or self.settings.config_path)
        if path is None:
            raise ConfigurationLoadFailure("Configuration file path not specified.")

        document = load_config_document(path)

        if document.global_filters is not None:
            self._global_filters = document.global_filters

        if not document.servers:
            logger.warning("No server information in configuration file", path=str(path))
            return {}

        failures: dict[str, HubError] = {}
        for name, entry in document.servers.items():
            if name in self.registry:
                continue
            try:
                await self.connect(name, parse_connection_spec(name, entry))
            except HubError as e:
                logger.error(
                    "Failed to connect to server from configuration file",
                    server=name,
                    error=e.message,
                )
                failures[name] = e

        logger.info(
            "Configuration loaded",
            path=str(path),
            connected=self.connected_servers(),
            failed=sorted(failures),
        )
        return failures

    async def list_tools(self, name: str) -> dict[str, Any]:
        """
        Return a server's tool catalog after filtering.

        Raises:
            NotConnected: If the server is unknown
            TransportFailure: If the child failed or timed out
        """
        connection = self.registry.resolve(name)
        timeout = self.settings.list_tools_timeout
        try:
            async with asyncio.timeout(timeout):
                tools = await connection.list_tools()
        except TimeoutError as e:
            raise TransportTimeout(name, "list tools of", timeout) from e
        except Exception as e:
            raise TransportFailure(name, "list tools of", str(e)) from e

        return apply_filters(tools, self.registry.get_filters(name), self._global_filters)

    async def list_all_tools(self) -> dict[str, Any]:
        """
        Return the filtered catalogs of all connected servers.

        Servers are queried concurrently. A failing server gets a
        ``ToolListError`` instead of a catalog; the others are unaffected.
        """
        names = self.connected_servers()
        results = await asyncio.gather(
            *[self.list_tools(name) for name in names],
            return_exceptions=True,
        )

        all_tools: dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, HubError):
                logger.warning("Failed to get tools list", server=name, error=result.message)
                all_tools[name] = ToolListError(
                    error=f"Failed to get tools list: {result.message}",
                    error_code=result.kind.value,
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                all_tools[name] = result
        return all_tools

    async def call_tool(
        self,
        name: str,
        tool_name: str,
        args: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Forward a tool call to a server, without consulting any filter.

        Raises:
            NotConnected: If the server is unknown
            TransportFailure: If the call failed or timed out
        """
        connection = self.registry.resolve(name)
        timeout = self.settings.call_tool_timeout

        logger.debug("Calling tool", server=name, tool=tool_name)
        try:
            async with asyncio.timeout(timeout):
                return await connection.call_tool(tool_name, args or {})
        except TimeoutError as e:
            raise TransportTimeout(name, f"call tool '{tool_name}' on", timeout) from e
        except Exception as e:
            raise TransportFailure(name, f"call tool '{tool_name}' on", str(e)) from e
