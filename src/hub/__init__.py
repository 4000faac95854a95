"""MCP Hub - connection registry, tool filtering and call routing.

The hub launches child MCP servers, lists their combined tool catalogs
through include/exclude filters, and forwards tool calls to the child
that owns the tool.
"""

from hub.filters import apply_filters, filter_tools
from hub.manager import HubManager
from hub.patterns import matches
from hub.registry import ConnectionRegistry

__all__ = [
    "ConnectionRegistry",
    "HubManager",
    "apply_filters",
    "filter_tools",
    "matches",
]
