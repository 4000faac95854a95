"""Configuration management for MCP Hub.

Settings come from environment variables (prefix ``MCP_HUB_``) and the
command line. The list of child servers lives in a separate JSON or YAML
document, located through ``find_config_path``.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationLoadFailure
from shared.models import ConnectionSpec, FilterRuleSet, HubConfigDocument

CONFIG_PATH_ENV = "MCP_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "mcp-config.json"


class HubSettings(BaseSettings):
    """Main application settings."""
    config_path: Optional[str] = Field(default=None, description="Server configuration document")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    # HTTP surface
    transport: str = Field(default="stdio", description="Host transport: stdio, http")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8002)

    # Per-connection timeouts, in seconds
    connect_timeout: float = Field(default=30.0, gt=0)
    list_tools_timeout: float = Field(default=30.0, gt=0)
    call_tool_timeout: float = Field(default=300.0, gt=0)
    close_timeout: float = Field(default=5.0, gt=0)

    # Global filters as comma-separated patterns
    include_tools: Optional[str] = Field(default=None)
    exclude_tools: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="MCP_HUB_",
        env_file=".env",
        extra="ignore"
    )

    def global_filters(self) -> Optional[FilterRuleSet]:
        """Global filter rule set built from the include/exclude flags."""
        return FilterRuleSet.from_csv(self.include_tools, self.exclude_tools)


def find_config_path(explicit: str | Path | None = None) -> Optional[Path]:
    """
    Locate the server configuration document.

    Checked in order: the explicit path, the ``MCP_CONFIG_PATH``
    environment variable, then ``./mcp-config.json`` if it exists.
    """
    if explicit:
        return Path(explicit)

    from_env = os.environ.get(CONFIG_PATH_ENV)
    if from_env:
        return Path(from_env)

    default = Path.cwd() / DEFAULT_CONFIG_FILE
    if default.exists():
        return default

    return None


def _parse_document(path: Path, content: str) -> Any:
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(content)
    return json.loads(content)


def load_config_document(path: str | Path) -> HubConfigDocument:
    """
    Load and validate a server configuration document.

    Args:
        path: JSON (``.json``) or YAML (``.yaml``/``.yml``) file

    Returns:
        The parsed configuration document

    Raises:
        ConfigurationLoadFailure: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        data = _parse_document(path, content)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationLoadFailure(
            f"Failed to load configuration file '{path}': {e}"
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationLoadFailure(
            f"Failed to load configuration file '{path}': expected an object at top level"
        )

    try:
        return HubConfigDocument.model_validate(data)
    except ValidationError as e:
        raise ConfigurationLoadFailure(
            f"Failed to load configuration file '{path}': {e}"
        ) from e


def parse_connection_spec(name: str, entry: Any) -> ConnectionSpec:
    """
    Validate one ``mcpServers`` entry.

    Raises:
        ConfigurationLoadFailure: If the entry is not a valid server definition
    """
    try:
        return ConnectionSpec.model_validate(entry)
    except ValidationError as e:
        raise ConfigurationLoadFailure(
            f"Invalid configuration for server '{name}': {e}", name
        ) from e
