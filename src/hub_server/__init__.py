"""Hub Server - host-facing interfaces of the MCP Hub.

The hub is served to an MCP host over stdio, or over HTTP. Both expose
"list all tools" and "call tool" backed by a HubManager.
"""

from hub_server.api import create_app
from hub_server.stdio import HubTools, create_server

__all__ = [
    "HubTools",
    "create_app",
    "create_server",
]
