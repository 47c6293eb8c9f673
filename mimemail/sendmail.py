"""Hand a rendered message to the local MTA (``sendmail``) on its stdin."""

from __future__ import annotations

import enum
import subprocess
from collections.abc import Callable

import structlog

from .config import MailerConfig
from .renderer import Envelope

logger = structlog.get_logger()


class SendState(str, enum.Enum):
    """Progress of one send; states only move forward."""

    NEW = "new"
    VALIDATED = "validated"
    TEXT_DERIVED = "text-derived"
    SPAWNED = "spawned"
    STREAMING = "streaming"
    DONE_OK = "done-ok"
    DONE_FAIL = "done-fail"


class SendmailTransport:
    """Run ``sendmail -f <sender> <recipient>`` and stream the message to it."""

    def __init__(self, config: MailerConfig) -> None:
        self._config = config

    def command(self, envelope: Envelope) -> list[str]:
        return [self._config.sendmail_path, "-f", envelope.sender, envelope.recipient]

    def deliver(
        self,
        envelope: Envelope,
        payload: bytes,
        on_state: Callable[[SendState], None] | None = None,
    ) -> bool:
        """Pipe *payload* to the MTA; return *True* if it exited with 0.

        Failing to start the MTA or to write to it is logged and reported
        as *False*.  The pipe is closed and the child reaped on every path.
        """
        notify = on_state or (lambda state: None)
        command = self.command(envelope)
        logger.debug("sendmail_command", command=command)

        try:
            process = subprocess.Popen(command, stdin=subprocess.PIPE)
        except OSError as exc:
            logger.error("sendmail_failed_to_start", command=command, error=str(exc))
            return False
        notify(SendState.SPAWNED)

        with process:
            notify(SendState.STREAMING)
            try:
                # communicate() closes stdin and waits for the exit status
                process.communicate(payload)
            except OSError as exc:
                logger.error("sendmail_write_failed", command=command, error=str(exc))
                process.kill()
                return False

        if process.returncode != 0:
            logger.error("sendmail_failed", command=command, exit_code=process.returncode)
            return False

        logger.info(
            "email_sent",
            sender=envelope.sender,
            recipient=envelope.recipient,
            size_bytes=len(payload),
        )
        return True
