"""Hub Server - FastAPI Application.

HTTP interface to the hub: list the connected servers and their filtered
tool catalogs, and forward tool calls. Hub errors are returned as
structured failure responses.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

import anyio
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from hub.manager import HubManager
from shared.errors import ConfigurationLoadFailure, ErrorKind, HubError
from shared.logging import get_logger
from shared.models import HubResponse

logger = get_logger(__name__)

API_VERSION = "1.0.0"

ERROR_STATUS_CODES = {
    ErrorKind.NOT_CONNECTED: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_CONNECTED: status.HTTP_409_CONFLICT,
    ErrorKind.CONFIGURATION_LOAD_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.TRANSPORT_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


# Request/Response Models
class CallToolRequest(BaseModel):
    """Request to call a tool on a connected server."""
    server_name: str = Field(..., description="Name of the MCP server to call tool from")
    tool_name: str = Field(..., description="Name of the tool to call")
    tool_args: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    servers: list[str]
    server_count: int


class ServerListResponse(BaseModel):
    """Connected server names."""
    servers: list[str]


def create_app(manager: HubManager, load_configuration: bool = True) -> FastAPI:
    """
    Build the HTTP application for a hub.

    Args:
        manager: Hub manager serving the requests
        load_configuration: Connect configured servers at startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting MCP Hub API")
        if load_configuration:
            try:
                await manager.load_from_configuration()
            except ConfigurationLoadFailure as e:
                logger.error("Failed to load servers from configuration file", error=e.message)

        yield

        logger.info("Shutting down MCP Hub API")
        with anyio.CancelScope(shield=True):
            await manager.disconnect_all()

    app = FastAPI(
        title="MCP Hub",
        description="Aggregates the tools of several MCP servers",
        version=API_VERSION,
        lifespan=lifespan
    )

    @app.exception_handler(HubError)
    async def hub_error_handler(request: Request, exc: HubError) -> JSONResponse:
        response = HubResponse.failure(exc.message, exc.kind.value)
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
            content=response.model_dump(mode="json"),
        )

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check():
        """Health check endpoint."""
        servers = manager.connected_servers()
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            servers=servers,
            server_count=len(servers)
        )

    @app.get("/servers", response_model=ServerListResponse, tags=["Servers"])
    async def list_servers():
        """List connected server names."""
        return ServerListResponse(servers=manager.connected_servers())

    @app.get("/tools", response_model=HubResponse, tags=["Tools"])
    async def list_all_tools():
        """
        List the filtered tools of every connected server.

        A server that fails is reported with an error entry in place of
        its catalog.
        """
        return HubResponse.success(await manager.list_all_tools())

    @app.get("/tools/{server_name}", response_model=HubResponse, tags=["Tools"])
    async def list_tools(server_name: str):
        """List the filtered tools of one server."""
        return HubResponse.success(await manager.list_tools(server_name))

    @app.post("/call", response_model=HubResponse, tags=["Execution"])
    async def call_tool(request: CallToolRequest):
        """
        Call a tool on a connected server.

        Tools hidden by filters can still be called by name.
        """
        result = await manager.call_tool(
            request.server_name,
            request.tool_name,
            request.tool_args
        )
        return HubResponse.success(result)

    return app


def run(manager: HubManager, host: str, port: int, log_level: Optional[str] = None) -> None:
    """Serve the HTTP application with uvicorn."""
    import uvicorn

    uvicorn.run(
        create_app(manager),
        host=host,
        port=port,
        log_level=(log_level or "info").lower()
    )
