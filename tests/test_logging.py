"""Tests for mimemail.logging."""

from __future__ import annotations

import logging
import sys

import pytest
import structlog

from mimemail.config import LoggingConfig
from mimemail.logging import setup_logging, setup_logging_from_config


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_json_mode(self):
        setup_logging(json=True, level="INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_console_mode(self):
        setup_logging(json=False, level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG

    def test_level_case_insensitive(self):
        setup_logging(level="warning")
        root = logging.getLogger()
        assert root.level == logging.WARNING

    def test_writes_to_stderr(self):
        setup_logging()
        handler = logging.getLogger().handlers[0]
        assert handler.stream is sys.stderr

    def test_replaces_existing_handlers(self):
        root = logging.getLogger()
        root.addHandler(logging.StreamHandler())
        root.addHandler(logging.StreamHandler())
        assert len(root.handlers) >= 2
        setup_logging()
        assert len(root.handlers) == 1

    def test_from_config(self):
        setup_logging_from_config(LoggingConfig(json_output=False, level="ERROR"))
        assert logging.getLogger().level == logging.ERROR

    def test_structlog_produces_output(self, capsys):
        setup_logging(json=True, level="DEBUG")
        logger = structlog.get_logger("test_logger")
        logger.info("email_test_event", key="value")
        assert "email_test_event" in capsys.readouterr().err
