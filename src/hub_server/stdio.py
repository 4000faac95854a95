"""Hub Server - MCP interface over stdio.

Exposes the hub to an MCP host as two tools: ``list-all-tools`` and
``call-tool``. Hub errors become tool errors with a readable message;
they never stop the server.
"""

import json
from contextlib import asynccontextmanager
from typing import Annotated, Any, AsyncIterator

import anyio
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field

from hub.manager import HubManager
from shared.errors import ConfigurationLoadFailure, HubError
from shared.logging import get_logger

logger = get_logger(__name__)

SERVER_NAME = "MCP-Hub-Server"

SERVER_INSTRUCTIONS = (
    "MCP Hub server that connects to and manages other MCP servers. "
    "If you want to call a tool from another server, you can use this hub."
)

LIST_ALL_TOOLS_DESCRIPTION = (
    "List all available tools from all connected servers. Before starting any task "
    "based on the user's request, always begin by using this tool to get a list of "
    "any additional tools that may be available for use."
)

CALL_TOOL_DESCRIPTION = "Call a specific tool from a specific server"

NO_SERVERS_MESSAGE = "No connected servers."


def to_json(data: Any) -> str:
    """Render hub results as indented JSON text."""
    def default(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    return json.dumps(data, indent=2, default=default)


class HubTools:
    """Implementations of the tools the hub exposes to its host."""

    def __init__(self, manager: HubManager) -> None:
        self.manager = manager

    async def list_all_tools(self) -> str:
        if not self.manager.connected_servers():
            return NO_SERVERS_MESSAGE

        try:
            all_tools = await self.manager.list_all_tools()
        except HubError as e:
            raise ToolError(f"Failed to get tools list from all servers: {e.message}") from e
        return to_json(all_tools)

    async def call_tool(
        self,
        server_name: str,
        tool_name: str,
        tool_args: dict[str, Any] | None = None
    ) -> str:
        try:
            result = await self.manager.call_tool(server_name, tool_name, tool_args or {})
        except HubError as e:
            logger.warning("Tool call failed", server=server_name, tool=tool_name, error=e.message)
            raise ToolError(f"Tool call failed: {e.message}") from e
        return to_json(result)


def create_server(manager: HubManager, load_configuration: bool = True) -> FastMCP:
    """
    Build the stdio MCP server for a hub.

    Args:
        manager: Hub manager serving the requests
        load_configuration: Connect configured servers when the server starts

    Returns:
        A FastMCP server; connections are drained when it stops
    """
    tools = HubTools(manager)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[HubManager]:
        if load_configuration:
            try:
                await manager.load_from_configuration()
            except ConfigurationLoadFailure as e:
                logger.error("Failed to load servers from configuration file", error=e.message)
        try:
            yield manager
        finally:
            logger.info("Shutting down server")
            with anyio.CancelScope(shield=True):
                await manager.disconnect_all()

    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS, lifespan=lifespan)

    @server.tool(name="list-all-tools", description=LIST_ALL_TOOLS_DESCRIPTION)
    async def list_all_tools() -> str:
        return await tools.list_all_tools()

    @server.tool(name="call-tool", description=CALL_TOOL_DESCRIPTION)
    async def call_tool(
        serverName: Annotated[str, Field(description="Name of the MCP server to call tool from")],
        toolName: Annotated[str, Field(description="Name of the tool to call")],
        toolArgs: Annotated[
            dict[str, Any] | None,
            Field(description="Arguments to pass to the tool"),
        ] = None,
    ) -> str:
        return await tools.call_tool(serverName, toolName, toolArgs)

    return server
