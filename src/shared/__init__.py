"""Shared utilities and base classes for MCP Hub."""

from shared.models import (
    ConnectionSpec,
    ConnectionState,
    FilterRuleSet,
    HubConfigDocument,
    HubResponse,
    ToolListError,
)
from shared.errors import (
    AlreadyConnected,
    ConfigurationLoadFailure,
    HubError,
    NotConnected,
    TransportFailure,
    TransportTimeout,
)
from shared.config import HubSettings
from shared.logging import get_logger, setup_logging

__all__ = [
    "ConnectionSpec",
    "ConnectionState",
    "FilterRuleSet",
    "HubConfigDocument",
    "HubResponse",
    "ToolListError",
    "AlreadyConnected",
    "ConfigurationLoadFailure",
    "HubError",
    "NotConnected",
    "TransportFailure",
    "TransportTimeout",
    "HubSettings",
    "get_logger",
    "setup_logging",
]
