"""Tests for mimemail.config."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mimemail.config import LoggingConfig, MailerConfig
from mimemail.version import __version__


class TestMailerConfig:
    def test_defaults(self):
        cfg = MailerConfig()
        assert cfg.sendmail_path == "sendmail"
        assert cfg.html2text_path == "html2text"
        assert cfg.html2text_width == 70
        assert cfg.html2text_style == "pretty"
        assert cfg.content_language == "en-us"
        assert cfg.branding == f"mimemail v{__version__}"

    def test_override(self):
        cfg = MailerConfig(sendmail_path="/usr/sbin/sendmail", html2text_width=100)
        assert cfg.sendmail_path == "/usr/sbin/sendmail"
        assert cfg.html2text_width == 100

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MIMEMAIL_SENDMAIL_PATH", "/opt/mta/sendmail")
        monkeypatch.setenv("MIMEMAIL_HTML2TEXT_WIDTH", "60")
        monkeypatch.setenv("MIMEMAIL_BRANDING", "Acme")
        cfg = MailerConfig()
        assert cfg.sendmail_path == "/opt/mta/sendmail"
        assert cfg.html2text_width == 60
        assert cfg.branding == "Acme"

    def test_width_must_be_positive(self):
        with pytest.raises(ValidationError):
            MailerConfig(html2text_width=0)


class TestLoggingConfig:
    def test_defaults(self):
        cfg = LoggingConfig()
        assert cfg.json_output is True
        assert cfg.level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MIMEMAIL_LOG_JSON_OUTPUT", "false")
        monkeypatch.setenv("MIMEMAIL_LOG_LEVEL", "DEBUG")
        cfg = LoggingConfig()
        assert cfg.json_output is False
        assert cfg.level == "DEBUG"
