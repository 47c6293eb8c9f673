"""Mailer configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars,
which lets the host decide where ``sendmail`` and ``html2text`` live.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from .version import __version__

DEFAULT_BRANDING = f"mimemail v{__version__}"
DEFAULT_CONTENT_LANGUAGE = "en-us"


class MailerConfig(BaseSettings):
    """External programs and defaults used when rendering and sending."""

    model_config = {"env_prefix": "MIMEMAIL_"}

    sendmail_path: str = Field(
        default="sendmail",
        description="MTA executable receiving the message on its stdin",
    )
    html2text_path: str = Field(
        default="html2text",
        description="Executable converting the HTML body to plain text",
    )
    html2text_width: int = Field(
        default=70,
        gt=0,
        description="Column width of the derived plain text",
    )
    html2text_style: str = Field(
        default="pretty",
        description="html2text output style",
    )
    content_language: str = Field(
        default=DEFAULT_CONTENT_LANGUAGE,
        description="Content-Language added when the email does not define one",
    )
    branding: str = Field(
        default=DEFAULT_BRANDING,
        description="Value of the X-Generated-By and X-Mailer headers",
    )


class LoggingConfig(BaseSettings):
    """Log output settings for the command line entry point."""

    model_config = {"env_prefix": "MIMEMAIL_LOG_"}

    json_output: bool = Field(default=True, description="Emit JSON lines instead of console output")
    level: str = Field(default="INFO", description="Root log level name")
