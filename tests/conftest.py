"""Shared fixtures for hub tests."""

import json
from typing import Any

import pytest

from hub.manager import HubManager
from hub.registry import ConnectionRegistry
from shared.config import HubSettings
from tests.fakes import FakeConnector


@pytest.fixture
def settings() -> HubSettings:
    return HubSettings(
        connect_timeout=0.5,
        list_tools_timeout=0.5,
        call_tool_timeout=0.5,
        close_timeout=0.5,
    )


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def registry(connector: FakeConnector, settings: HubSettings) -> ConnectionRegistry:
    return ConnectionRegistry(
        connector=connector,
        connect_timeout=settings.connect_timeout,
        close_timeout=settings.close_timeout,
    )


@pytest.fixture
def manager(registry: ConnectionRegistry, settings: HubSettings) -> HubManager:
    return HubManager(settings=settings, registry=registry)


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration document and return its path."""

    def _write(data: dict[str, Any], filename: str = "mcp-config.json"):
        path = tmp_path / filename
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
