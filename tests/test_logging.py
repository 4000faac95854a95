"""Tests for logging setup."""

import json
import logging

import pytest
import structlog

from shared.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


def test_json_logs_go_to_stderr(capsys, restore_logging):
    setup_logging("INFO", json_output=True)

    get_logger("hub.test").info("Connected to server", server="alpha")
    logging.getLogger("hub.stdlib").warning("plain stdlib record")

    captured = capsys.readouterr()
    assert captured.out == ""

    lines = [json.loads(line) for line in captured.err.strip().splitlines()]
    assert lines[0]["event"] == "Connected to server"
    assert lines[0]["server"] == "alpha"
    assert lines[0]["level"] == "info"
    assert lines[1]["event"] == "plain stdlib record"
    assert lines[1]["logger"] == "hub.stdlib"


def test_level_filters_debug(capsys, restore_logging):
    setup_logging("WARNING", json_output=True)

    get_logger("hub.test").info("hidden")

    assert capsys.readouterr().err == ""
