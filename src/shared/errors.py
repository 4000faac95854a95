"""Error hierarchy for MCP Hub.

Registry violations are raised synchronously to the caller. Batch
operations catch these per connection and report them by name; the
outer shells turn them into structured failure results.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kind of hub failure, exposed as the error code of a failed result."""
    ALREADY_CONNECTED = "already_connected"
    NOT_CONNECTED = "not_connected"
    CONFIGURATION_LOAD_FAILURE = "configuration_load_failure"
    TRANSPORT_FAILURE = "transport_failure"
    TIMEOUT = "timeout"


class HubError(Exception):
    """Base exception for MCP Hub errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str, server_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.server_name = server_name


class AlreadyConnected(HubError):
    """A connection with this name is already established or in progress."""

    kind = ErrorKind.ALREADY_CONNECTED

    def __init__(self, server_name: str) -> None:
        super().__init__(f"Already connected to server '{server_name}'.", server_name)


class NotConnected(HubError):
    """No live connection exists under this name."""

    kind = ErrorKind.NOT_CONNECTED

    def __init__(self, server_name: str) -> None:
        super().__init__(f"Not connected to server '{server_name}'.", server_name)


class ConfigurationLoadFailure(HubError):
    """The configuration document is missing or cannot be parsed."""

    kind = ErrorKind.CONFIGURATION_LOAD_FAILURE


class TransportFailure(HubError):
    """Spawn, handshake or call failure reported by a child connection."""

    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, server_name: str, action: str, reason: str) -> None:
        super().__init__(f"Failed to {action} server '{server_name}': {reason}", server_name)
        self.action = action
        self.reason = reason


class TransportTimeout(TransportFailure):
    """A child connection did not answer within its timeout."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, server_name: str, action: str, timeout: float) -> None:
        super().__init__(server_name, action, f"timed out after {timeout}s")
        self.timeout = timeout
