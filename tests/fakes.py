"""In-memory stand-ins for child server connections."""

import asyncio
from typing import Any, Optional

from shared.models import ConnectionSpec


class FakeConnection:
    """Child connection answering from a fixed tool list."""

    def __init__(
        self,
        name: str,
        tool_names: list[str],
        list_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
        hang: bool = False
    ) -> None:
        self.name = name
        self.tool_names = tool_names
        self.list_error = list_error
        self.close_error = close_error
        self.hang = hang
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def list_tools(self) -> dict[str, Any]:
        if self.hang:
            await asyncio.sleep(3600)
        if self.list_error:
            raise self.list_error
        return {
            "tools": [
                {"name": name, "description": f"{name} tool", "inputSchema": {"type": "object"}}
                for name in self.tool_names
            ]
        }

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        if self.hang:
            await asyncio.sleep(3600)
        self.calls.append((name, arguments or {}))
        return {
            "content": [{"type": "text", "text": f"{self.name}:{name}"}],
            "isError": False,
        }

    async def close(self) -> None:
        if self.hang:
            await asyncio.sleep(3600)
        if self.close_error:
            raise self.close_error
        self.closed = True


class FakeConnector:
    """
    Connector returning prepared connections by name.

    A name mapped to an exception fails to connect with that exception.
    """

    def __init__(self, children: Optional[dict[str, Any]] = None) -> None:
        self.children: dict[str, Any] = children or {}
        self.opened: list[str] = []
        self.specs: dict[str, ConnectionSpec] = {}

    async def __call__(self, name: str, spec: ConnectionSpec) -> FakeConnection:
        self.opened.append(name)
        self.specs[name] = spec
        child = self.children.get(name)
        if isinstance(child, BaseException):
            raise child
        if child is None:
            child = FakeConnection(name, [])
            self.children[name] = child
        return child


