"""Tests for configuration loading and models."""

import pytest

from shared.config import (
    HubSettings,
    find_config_path,
    load_config_document,
    parse_connection_spec,
)
from shared.errors import ConfigurationLoadFailure
from shared.models import ConnectionSpec, FilterRuleSet


class TestFindConfigPath:
    """Tests for configuration document discovery."""

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MCP_CONFIG_PATH", "/from/env.json")
        assert find_config_path(tmp_path / "explicit.json") == tmp_path / "explicit.json"

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("MCP_CONFIG_PATH", "/from/env.json")
        assert str(find_config_path()) == "/from/env.json"

    def test_default_file_in_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MCP_CONFIG_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        assert find_config_path() is None

        (tmp_path / "mcp-config.json").write_text("{}", encoding="utf-8")
        assert find_config_path() == tmp_path / "mcp-config.json"


class TestLoadConfigDocument:
    """Tests for parsing configuration documents."""

    def test_json_document(self, write_config):
        path = write_config({
            "mcpServers": {
                "jira": {
                    "command": "npx",
                    "args": ["-y", "jira-mcp"],
                    "env": {"TOKEN": "t"},
                    "filters": {"include": ["jira."]},
                    "unknown": True,
                }
            },
            "globalFilters": {"exclude": ["*delete*"]},
        })

        document = load_config_document(path)

        spec = parse_connection_spec("jira", document.servers["jira"])
        assert spec.command == "npx"
        assert spec.args == ["-y", "jira-mcp"]
        assert spec.env == {"TOKEN": "t"}
        assert spec.filters == FilterRuleSet(include=["jira."])
        assert document.global_filters == FilterRuleSet(exclude=["*delete*"])

    def test_yaml_document(self, tmp_path):
        path = tmp_path / "hub.yaml"
        path.write_text(
            "\n".join([
                "mcpServers:",
                "  files:",
                "    command: files-server",
                "    filters:",
                "      exclude: ['delete*']",
                "",
            ]),
            encoding="utf-8",
        )

        document = load_config_document(path)

        spec = parse_connection_spec("files", document.servers["files"])
        assert spec.args == []
        assert spec.filters.exclude == ["delete*"]
        assert document.global_filters is None

    def test_null_servers(self, write_config):
        assert load_config_document(write_config({"mcpServers": None})).servers == {}

    def test_malformed_server_entry_does_not_fail_document(self, write_config):
        document = load_config_document(write_config({"mcpServers": {"a": {"args": []}}}))
        assert document.servers == {"a": {"args": []}}

    def test_non_object_document_is_invalid(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigurationLoadFailure, match="expected an object"):
            load_config_document(path)

    def test_empty_yaml_document(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert load_config_document(path).servers == {}


class TestFilterRuleSet:
    """Tests for filter rule set helpers."""

    def test_from_csv(self):
        rules = FilterRuleSet.from_csv(" jira. , read* ,", "")
        assert rules == FilterRuleSet(include=["jira.", "read*"])

    def test_from_csv_empty_is_none(self):
        assert FilterRuleSet.from_csv(None, None) is None
        assert FilterRuleSet.from_csv(",", " ") is None

    def test_merge(self):
        merged = FilterRuleSet(include=["a"]).merge(FilterRuleSet(include=["b"], exclude=["c"]))
        assert merged == FilterRuleSet(include=["a", "b"], exclude=["c"])

    def test_merge_with_none_copies(self):
        rules = FilterRuleSet(include=["a"])
        merged = rules.merge(None)
        assert merged == rules
        assert merged is not rules

    def test_is_empty(self):
        assert FilterRuleSet().is_empty
        assert FilterRuleSet(include=[]).is_empty
        assert not FilterRuleSet(exclude=["x"]).is_empty


class TestConnectionSpec:
    """Tests for child launch parameters."""

    def test_env_overrides_win(self):
        spec = ConnectionSpec(command="x", env={"PATH": "/custom", "NEW": "1"})
        env = spec.merged_env({"PATH": "/usr/bin", "HOME": "/root"})
        assert env == {"PATH": "/custom", "HOME": "/root", "NEW": "1"}

    def test_env_defaults_to_host_environment(self, monkeypatch):
        monkeypatch.setenv("HUB_TEST_VAR", "host")
        assert ConnectionSpec(command="x").merged_env()["HUB_TEST_VAR"] == "host"


class TestHubSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = HubSettings()
        assert settings.transport == "stdio"
        assert settings.call_tool_timeout == 300.0
        assert settings.global_filters() is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MCP_HUB_INCLUDE_TOOLS", "jira.")
        monkeypatch.setenv("MCP_HUB_LIST_TOOLS_TIMEOUT", "2.5")

        settings = HubSettings()

        assert settings.list_tools_timeout == 2.5
        assert settings.global_filters() == FilterRuleSet(include=["jira."])


class TestParseConnectionSpec:
    """Tests for validating single server entries."""

    def test_missing_command_is_invalid(self):
        with pytest.raises(ConfigurationLoadFailure, match="Invalid configuration for server 'a'") as exc_info:
            parse_connection_spec("a", {"args": []})
        assert exc_info.value.server_name == "a"

    def test_filters_must_be_lists(self):
        with pytest.raises(ConfigurationLoadFailure):
            parse_connection_spec("a", {"command": "x", "filters": {"include": "jira."}})

    def test_non_object_entry_is_invalid(self):
        with pytest.raises(ConfigurationLoadFailure):
            parse_connection_spec("a", "npx jira-mcp")
