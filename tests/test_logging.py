"""Tests for the structlog file configuration."""

import json
import logging

import pytest
import structlog

from proctop.config import Config, LoggingConfig
from proctop.logging import configure, get_logger


@pytest.fixture
def restore_logging():
    """Undo global logging configuration after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_events_are_written_as_json_lines(tmp_path, restore_logging):
    """Test log events land in the configured file as JSON."""
    log_file = tmp_path / "logs" / "proctop.log"
    configure(Config(logging=LoggingConfig(log_file=str(log_file))))

    get_logger("proctop.test").info("collector_started", collector="cpu")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = log_file.read_text().splitlines()
    event = json.loads(lines[-1])
    assert event["event"] == "collector_started"
    assert event["collector"] == "cpu"
    assert event["level"] == "info"
    assert "ts" in event


def test_debug_flag_lowers_level(tmp_path, restore_logging):
    """Test --debug enables debug events."""
    configure(Config(logging=LoggingConfig(log_file=str(tmp_path / "p.log"))), debug=True)
    assert logging.getLogger().level == logging.DEBUG


def test_unknown_level_falls_back_to_info(tmp_path, restore_logging):
    """Test a misspelled level does not break configuration."""
    configure(Config(logging=LoggingConfig(log_file=str(tmp_path / "p.log"), level="loud")))
    assert logging.getLogger().level == logging.INFO
