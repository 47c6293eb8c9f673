"""Send an :class:`~mimemail.message.Email`: validate, render, pipe to the MTA."""

from __future__ import annotations

import asyncio
import random
import threading

import structlog

from .config import MailerConfig
from .message import Email
from .renderer import check_envelope, extract_envelope, html_body, render
from .sendmail import SendmailTransport, SendState
from .text_extractor import HtmlToText

logger = structlog.get_logger()


class Mailer:
    """Turn emails into messages for ``sendmail``.

    Steps of :meth:`send`, in order:

    1. check that From, To and a body are defined (raises
       :class:`~mimemail.exceptions.MissingParameterError`);
    2. derive a plain text alternative when the body is HTML;
    3. extract the envelope addresses (raises
       :class:`~mimemail.exceptions.InvalidParameterError`);
    4. render the message and pipe it to the MTA.

    Errors in steps 1 and 3 are raised before any process is started.

    A mailer runs one send at a time: concurrent calls (e.g. several
    :meth:`send_async` tasks) wait for each other, so :attr:`state`
    always describes a single send.
    """

    def __init__(
        self,
        config: MailerConfig | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or MailerConfig()
        self.state = SendState.NEW
        self._rng = rng
        self._lock = threading.Lock()
        self._html_to_text = HtmlToText(self.config)
        self._transport = SendmailTransport(self.config)

    def derive_plain_text(self, message: Email) -> str:
        """Return the text version of an HTML body, ``""`` otherwise."""
        html = html_body(message)
        if html is None:
            return ""
        return self._html_to_text.convert(html)

    def render(self, message: Email) -> bytes:
        """Render *message* the way :meth:`send` would, without sending it."""
        check_envelope(message)
        return self._render(message, self.derive_plain_text(message))

    def send(self, message: Email) -> bool:
        with self._lock:
            return self._send(message)

    async def send_async(self, message: Email) -> bool:
        """Same as :meth:`send`, run in a worker thread."""
        return await asyncio.to_thread(self.send, message)

    def _send(self, message: Email) -> bool:
        self.state = SendState.NEW
        check_envelope(message)
        self.state = SendState.VALIDATED

        plain_text = self.derive_plain_text(message)
        self.state = SendState.TEXT_DERIVED

        envelope = extract_envelope(message)
        payload = self._render(message, plain_text)
        logger.info(
            "email_sending",
            sender=envelope.sender,
            recipient=envelope.recipient,
            attachments=message.attachment_count,
            text_alternative=bool(plain_text),
        )

        ok = self._transport.deliver(envelope, payload, on_state=self._set_state)
        self.state = SendState.DONE_OK if ok else SendState.DONE_FAIL
        return ok

    def _render(self, message: Email, plain_text: str) -> bytes:
        return render(
            message,
            plain_text=plain_text,
            rng=self._rng,
            branding=self.config.branding,
            content_language=self.config.content_language,
        )

    def _set_state(self, state: SendState) -> None:
        self.state = state
