"""Command line entry point.

Usage::

    python -m mimemail render <archive>   # print the message sendmail would get
    python -m mimemail send <archive>     # send an archived email
"""

from __future__ import annotations

import sys
from pathlib import Path

import structlog

from .config import LoggingConfig, MailerConfig
from .exceptions import MimeMailError
from .logging import setup_logging_from_config
from .mailer import Mailer
from .message import Email

logger = structlog.get_logger()

USAGE = "Usage: python -m mimemail <render|send> <archive>"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2 or args[0] not in ("render", "send"):
        print(USAGE, file=sys.stderr)
        return 1

    mode, path = args
    setup_logging_from_config(LoggingConfig())

    try:
        message = Email.deserialize(Path(path).read_bytes())
    except OSError as exc:
        logger.error("archive_read_failed", path=path, error=str(exc))
        return 1

    mailer = Mailer(MailerConfig())
    try:
        if mode == "render":
            sys.stdout.buffer.write(mailer.render(message))
            sys.stdout.buffer.flush()
            return 0
        return 0 if mailer.send(message) else 1
    except MimeMailError as exc:
        logger.error("email_rejected", path=path, error=str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
