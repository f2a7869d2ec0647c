"""Tests for structlog configuration."""

import io
import json
import logging

import pytest
import structlog

import azslsense.analysis.index as index_module
from azslsense.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_module_loggers_follow_configuration(self):
        stream = io.StringIO()
        configure_logging(level="DEBUG", stream=stream)
        index_module.log.info("index_test_event", files=3)
        out = stream.getvalue()
        assert "index_test_event" in out
        assert "files=3" in out

    def test_json_lines(self):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)
        get_logger("azslsense.test").warning("reindex_done", macros=2)
        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["event"] == "reindex_done"
        assert entry["macros"] == 2
        assert entry["level"] == "warning"
        assert entry["component"] == "azslsense"

    def test_level_filters(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream)
        get_logger("azslsense.test").info("quiet_event")
        assert "quiet_event" not in stream.getvalue()

    def test_unnamed_logger(self):
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream)
        get_logger().info("plain_event")
        assert "plain_event" in stream.getvalue()
