"""Command-line entry point for the MCP Hub.

Examples:
  mcp-hub --config-path ./mcp-config.json
  mcp-hub --include-tools "jira.,read*" --exclude-tools "*delete*"
  mcp-hub --transport http --port 8002
"""

import argparse
import sys
from typing import Optional, Sequence

from hub.manager import HubManager
from shared.config import HubSettings
from shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-hub",
        description="Connect to several MCP servers and expose their tools through one server.",
    )
    parser.add_argument(
        "--config-path",
        default=None,
        help="Path to the server configuration document (JSON or YAML)",
    )
    parser.add_argument(
        "--include-tools",
        default=None,
        help="Comma-separated patterns of tools to list (glob, or namespace prefix ending in '.')",
    )
    parser.add_argument(
        "--exclude-tools",
        default=None,
        help="Comma-separated patterns of tools to hide",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default=None,
        help="Host-facing transport (default: stdio)",
    )
    parser.add_argument("--host", default=None, help="Bind address for --transport http")
    parser.add_argument("--port", type=int, default=None, help="Port for --transport http")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    return parser


def settings_from_args(args: argparse.Namespace) -> HubSettings:
    """Environment settings overridden by the flags that were given."""
    overrides = {
        "config_path": args.config_path,
        "include_tools": args.include_tools,
        "exclude_tools": args.exclude_tools,
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
    }
    return HubSettings(**{key: value for key, value in overrides.items() if value is not None})


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the hub until the host disconnects or the process is interrupted."""
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    setup_logging(settings.log_level, json_output=settings.json_logs)

    manager = HubManager(settings=settings)

    try:
        if settings.transport == "http":
            from hub_server.api import run

            run(manager, settings.host, settings.port, settings.log_level)
        else:
            from hub_server.stdio import create_server

            logger.info("MCP Hub server is running", transport="stdio")
            create_server(manager).run(transport="stdio")
    except KeyboardInterrupt:
        # Connections are drained by the server lifespan
        logger.info("Interrupted")
    except Exception as e:
        logger.error("Failed to start server", error=str(e), exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
