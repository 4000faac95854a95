"""
Tiny MCP stdio server for tests.

Run:
  python tests/fixtures/fake_mcp_server.py
"""

from __future__ import annotations

import os

from mcp.server.fastmcp import FastMCP

server = FastMCP("Fake MCP Server")


@server.tool(description="Echo back the input text.")
def echo(text: str) -> str:
    return text


@server.tool(description="Add two integers.")
def add(a: int, b: int) -> int:
    return int(a) + int(b)


@server.tool(description="Return an environment variable of the server process.")
def read_env(key: str) -> str:
    return os.environ.get(key, "")


@server.tool(name="admin_reset", description="Pretend to reset everything.")
def admin_reset() -> str:
    return "reset done"


def main() -> None:
    # Do not print to stdout; stdio transport uses it for protocol messages.
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
