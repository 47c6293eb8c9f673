"""Shared test fixtures for the mimemail test suite."""

from __future__ import annotations

import random
import stat
from pathlib import Path

import pytest

from mimemail.attachment import Attachment
from mimemail.config import MailerConfig
from mimemail.message import Email


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


# ------------------------------------------------------------------
# Fake external programs
# ------------------------------------------------------------------


class FakeBin:
    """Shell scripts standing in for ``sendmail`` and ``html2text``.

    ``sendmail`` saves its arguments and stdin next to itself,
    ``html2text`` saves the HTML it got and prints ``text``.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.sendmail_args = directory / "sendmail.args"
        self.sendmail_stdin = directory / "sendmail.stdin"
        self.sendmail_log = directory / "sendmail.log"
        self.html2text_args = directory / "html2text.args"
        self.html2text_stdin = directory / "html2text.stdin"

    def sendmail(self, *, exit_code: int = 0, delay: float = 0) -> Path:
        """With a *delay*, each run appends ``start`` and ``end`` to ``sendmail_log``."""
        body = (
            f'printf "%s\\n" "$@" > "{self.sendmail_args}"\n'
            f'cat > "{self.sendmail_stdin}"\n'
        )
        if delay:
            body = (
                f'echo start >> "{self.sendmail_log}"\n'
                f"sleep {delay}\n"
                + body
                + f'echo end >> "{self.sendmail_log}"\n'
            )
        return _write_script(self.directory / "sendmail", body + f"exit {exit_code}\n")

    def html2text(self, text: str = "Hi\n", *, exit_code: int = 0) -> Path:
        (self.directory / "html2text.out").write_text(text, encoding="utf-8")
        return _write_script(
            self.directory / "html2text",
            f'printf "%s\\n" "$@" > "{self.html2text_args}"\n'
            f'cat > "{self.html2text_stdin}"\n'
            f'cat "{self.directory / "html2text.out"}"\n'
            f"exit {exit_code}\n",
        )

    def config(self, **overrides) -> MailerConfig:
        # only write the default scripts that are not overridden
        if "sendmail_path" not in overrides:
            overrides["sendmail_path"] = str(self.sendmail())
        if "html2text_path" not in overrides:
            overrides["html2text_path"] = str(self.html2text())
        return MailerConfig(**overrides)


@pytest.fixture
def fake_bin(tmp_path: Path) -> FakeBin:
    return FakeBin(tmp_path)


@pytest.fixture
def mailer_config(fake_bin: FakeBin) -> MailerConfig:
    return fake_bin.config()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(2024)


# ------------------------------------------------------------------
# Sample emails
# ------------------------------------------------------------------


def make_text_attachment(text: str = "Hello\n") -> Attachment:
    attachment = Attachment()
    attachment.set_data(text.encode("utf-8"), "text/plain; charset=utf-8")
    return attachment


def make_html_attachment(html: str = "<p>Hi</p>", *, quoted_printable: bool = False) -> Attachment:
    attachment = Attachment()
    if quoted_printable:
        attachment.set_data_quoted_printable(html.encode("utf-8"), "text/html; charset=utf-8")
    else:
        attachment.set_data(html.encode("utf-8"), "text/html")
    return attachment


def make_pdf_attachment() -> Attachment:
    attachment = Attachment()
    attachment.set_data(b"JVBERi0xLjQgZmFrZSBwZGY=", "application/pdf")
    attachment.add_header("Content-Transfer-Encoding", "base64")
    attachment.add_header("Content-Disposition", "attachment; filename=x.pdf;")
    return attachment


def make_email(
    *,
    body: Attachment | None = None,
    from_addr: str = "Sender <sender@example.com>",
    to_addr: str = "recipient@example.com",
    subject: str = "Test Subject",
) -> Email:
    message = Email()
    message.set_from(from_addr)
    message.set_to(to_addr)
    message.set_subject(subject)
    message.set_body_attachment(body or make_text_attachment())
    return message


@pytest.fixture
def text_email() -> Email:
    return make_email()


@pytest.fixture
def html_email() -> Email:
    return make_email(body=make_html_attachment())


@pytest.fixture
def html_pdf_email() -> Email:
    message = make_email(body=make_html_attachment())
    message.add_attachment(make_pdf_attachment())
    return message
