"""Hub client - sessions to child MCP servers.

Each child server is spawned as a subprocess and spoken to over stdio
through the official MCP client.
"""

from hub_client.connection import ChildConnection

__all__ = [
    "ChildConnection",
]
