"""Core data models for MCP Hub.

This module defines the launch parameters of child servers, the filter
rule sets that control tool visibility, the configuration document, and
the structured results handed to the outer shells.
"""

import os
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectionState(str, Enum):
    """Lifecycle state of a named connection."""
    ABSENT = "absent"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class FilterRuleSet(BaseModel):
    """
    Include/exclude pattern lists controlling tool discoverability.

    An absent or empty list means that reduction step is skipped.
    Include is applied before exclude.
    """
    include: Optional[list[str]] = Field(default=None, description="Allow-list patterns")
    exclude: Optional[list[str]] = Field(default=None, description="Deny-list patterns")

    model_config = ConfigDict(extra="ignore")

    @property
    def is_empty(self) -> bool:
        """True when neither list would remove anything."""
        return not self.include and not self.exclude

    @classmethod
    def from_csv(
        cls,
        include: Optional[str] = None,
        exclude: Optional[str] = None
    ) -> Optional["FilterRuleSet"]:
        """
        Build a rule set from comma-separated command-line flags.

        Returns None when both flags are empty, meaning "no filtering".
        """
        include_patterns = _split_csv(include)
        exclude_patterns = _split_csv(exclude)
        if not include_patterns and not exclude_patterns:
            return None
        return cls(
            include=include_patterns or None,
            exclude=exclude_patterns or None,
        )

    def merge(self, other: Optional["FilterRuleSet"]) -> "FilterRuleSet":
        """Concatenate the pattern lists of two rule sets, self first."""
        if other is None:
            return self.model_copy(deep=True)
        include = [*(self.include or []), *(other.include or [])]
        exclude = [*(self.exclude or []), *(other.exclude or [])]
        return FilterRuleSet(include=include or None, exclude=exclude or None)


class ConnectionSpec(BaseModel):
    """Launch parameters for one child server."""
    command: str = Field(..., description="Executable to spawn")
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Overrides merged on top of the host environment"
    )
    cwd: Optional[str] = Field(default=None, description="Working directory of the child")
    filters: Optional[FilterRuleSet] = None

    model_config = ConfigDict(extra="ignore")

    def merged_env(self, base: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Return the host environment with this spec's overrides applied."""
        env = dict(os.environ if base is None else base)
        env.update(self.env)
        return env


class HubConfigDocument(BaseModel):
    """
    Configuration document listing the child servers to launch.

    Field names follow the document's camelCase keys. Server entries are
    kept raw and validated one at a time, so a malformed entry only fails
    its own server.
    """
    mcp_servers: Optional[dict[str, Any]] = Field(default=None, alias="mcpServers")
    global_filters: Optional[FilterRuleSet] = Field(default=None, alias="globalFilters")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def servers(self) -> dict[str, Any]:
        return self.mcp_servers or {}


class ToolListError(BaseModel):
    """Error captured for one connection during catalog aggregation."""
    error: str
    error_code: str


class HubResultStatus(str, Enum):
    """Status of an outer-shell operation."""
    SUCCESS = "success"
    ERROR = "error"


class HubResponse(BaseModel):
    """
    Structured result of an outer-shell operation.

    Carries either the payload or a human-readable error message.
    """
    status: HubResultStatus
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def success(cls, data: Any) -> "HubResponse":
        return cls(status=HubResultStatus.SUCCESS, data=data)

    @classmethod
    def failure(cls, error: str, error_code: str) -> "HubResponse":
        return cls(status=HubResultStatus.ERROR, error=error, error_code=error_code)
