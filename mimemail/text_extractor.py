"""Plain text alternative of an HTML body, produced by ``html2text``."""

from __future__ import annotations

import subprocess

import structlog

from .config import MailerConfig

logger = structlog.get_logger()


class HtmlToText:
    """Run the ``html2text`` command: HTML on stdin, text on stdout."""

    def __init__(self, config: MailerConfig) -> None:
        self._config = config

    @property
    def command(self) -> list[str]:
        return [
            self._config.html2text_path,
            "-nobs",
            "-utf8",
            "-style",
            self._config.html2text_style,
            "-width",
            str(self._config.html2text_width),
        ]

    def convert(self, html: bytes) -> str:
        """Return the text version of *html*, or ``""`` if the command failed.

        A failure is not fatal: the email simply goes out without a plain
        text alternative.
        """
        try:
            result = subprocess.run(
                self.command,
                input=html,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            logger.warning("html2text_failed_to_start", command=self.command[0], error=str(exc))
            return ""

        if result.returncode != 0:
            logger.warning(
                "html2text_failed",
                exit_code=result.returncode,
                stderr=result.stderr.decode("utf-8", errors="replace").strip(),
            )
            return ""

        return result.stdout.decode("utf-8", errors="replace")
