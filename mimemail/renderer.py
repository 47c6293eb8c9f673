"""Render an :class:`~mimemail.message.Email` to the bytes given to the MTA.

The output uses ``\\n`` line endings (``sendmail`` converts them as
needed) and takes one of two shapes:

* body only: a single attachment and no plain text alternative; the
  body's payload directly follows the top-level headers;
* multipart/mixed: an optional multipart/alternative holding the plain
  text and the body, followed by the other attachments.  An attachment
  with related attachments is written as a multipart/related entity.

The message ends with an empty line and a lone ``.``.
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass
from datetime import datetime

from . import quoted_printable
from .addresses import parse_address_list
from .attachment import Attachment
from .config import DEFAULT_BRANDING, DEFAULT_CONTENT_LANGUAGE
from .dates import format_email_date
from .exceptions import InvalidParameterError, MissingParameterError
from .headers import (
    CONTENT_DESCRIPTION,
    CONTENT_LANGUAGE,
    CONTENT_TRANSFER_ENCODING,
    CONTENT_TYPE,
    MIME_VERSION,
    QUOTED_PRINTABLE,
    HeaderMap,
    HeaderValue,
    propagate_filename,
)
from .message import DATE, FROM, TO, Email

# "=S" is not a valid quoted-printable sequence so the boundary cannot
# appear in quoted-printable data
BOUNDARY_PREFIX = "=Snap.Websites="
BOUNDARY_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
BOUNDARY_LENGTH = 20

PREAMBLE = (
    "The following are various parts of a multipart email.\n"
    "It is likely to include a text version (first part) that you should\n"
    "be able to read as is.\n"
    "It may be followed by HTML and then various attachments.\n"
    "Please consider installing a MIME capable client to read this email.\n"
    "\n"
)


@dataclass(frozen=True)
class Envelope:
    """Bare addresses given to the MTA on its command line."""

    sender: str
    recipient: str


def generate_boundary(rng: random.Random | None = None) -> str:
    """Return a new multipart boundary.

    Uniqueness only matters against the payloads of the email, so a
    non-cryptographic generator is enough; pass *rng* to make it
    reproducible.
    """
    chooser = rng or random
    return BOUNDARY_PREFIX + "".join(chooser.choice(BOUNDARY_ALPHABET) for _ in range(BOUNDARY_LENGTH))


def check_envelope(message: Email) -> None:
    """Make sure the email has a sender, a recipient and a body."""
    if not message.get_header(FROM) or not message.get_header(TO):
        raise MissingParameterError(
            "an email cannot be sent without its From and To header fields; "
            "call set_from() and set_to() first"
        )
    if message.attachment_count < 1:
        raise MissingParameterError("an email cannot be sent without at least one attachment (its body)")


def is_html(content_type: str) -> bool:
    return content_type.startswith("text/html")


def html_body(message: Email) -> bytes | None:
    """Return the decoded HTML of the body, or *None* if the body is not HTML."""
    body = message.get_attachment(0)
    if not is_html(body.get_header(CONTENT_TYPE)):
        return None
    return body.get_decoded_data()


def extract_envelope(message: Email) -> Envelope:
    """Bare addresses of the first ``From`` and first ``To`` mailboxes."""
    from_value = message.get_header(FROM)
    to_value = message.get_header(TO)
    try:
        sender = parse_address_list(from_value)[0]
    except InvalidParameterError as exc:
        raise InvalidParameterError(f'invalid sender email address "{from_value}": {exc}') from exc
    try:
        recipient = parse_address_list(to_value)[0]
    except InvalidParameterError as exc:
        raise InvalidParameterError(f'invalid destination email address "{to_value}": {exc}') from exc
    return Envelope(sender=sender.address, recipient=recipient.address)


class _Output:
    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def write(self, data: str | bytes) -> None:
        self._chunks.append(data.encode("utf-8") if isinstance(data, str) else data)

    def write_headers(self, headers: HeaderMap) -> None:
        for name, value in headers.items():
            self.write(f"{name}: {value}\n")

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)


def render(
    message: Email,
    *,
    plain_text: str = "",
    boundary: str | None = None,
    rng: random.Random | None = None,
    now: float | datetime | None = None,
    branding: str = DEFAULT_BRANDING,
    content_language: str = DEFAULT_CONTENT_LANGUAGE,
) -> bytes:
    """Return the complete message, headers and body, as bytes.

    *plain_text* is the text alternative of an HTML body (see
    :class:`~mimemail.text_extractor.HtmlToText`); when empty no
    alternative is written.  *boundary* defaults to a random one and
    *now* is used for a missing ``Date`` header.
    """
    check_envelope(message)

    body = message.get_attachment(0)
    body_only = message.attachment_count == 1 and not plain_text and not body.related

    headers = message.headers.copy()
    mixed = ""
    if body_only:
        # the body's own headers describe the whole message
        if body.has_header(CONTENT_TRANSFER_ENCODING):
            headers.set(CONTENT_TRANSFER_ENCODING, body.get_header(CONTENT_TRANSFER_ENCODING))
        if body.has_header(CONTENT_TYPE) and not headers.has(CONTENT_TYPE):
            headers.set(CONTENT_TYPE, body.get_header(CONTENT_TYPE))
    else:
        mixed = boundary or generate_boundary(rng)
        headers.set(CONTENT_TYPE, f'multipart/mixed;\n  boundary="{mixed}"')
        headers.set(MIME_VERSION, "1.0")

    if not headers.has(DATE):
        headers.set(DATE, format_email_date(now))
    if not headers.has(CONTENT_LANGUAGE):
        headers.set(CONTENT_LANGUAGE, content_language)

    out = _Output()
    out.write_headers(headers)
    if message.branding:
        out.write(f"X-Generated-By: {branding}\nX-Mailer: {branding}\n")
    out.write("\n")

    if body_only:
        out.write(body.data)
        out.write("\n")
    else:
        out.write(PREAMBLE)

        first = 0
        if plain_text:
            alternative = f"{mixed}.msg"
            out.write(
                f"--{mixed}\n"
                f'{CONTENT_TYPE}: multipart/alternative;\n  boundary="{alternative}"\n'
                "\n"
                f"--{alternative}\n"
                f'{CONTENT_TYPE}: text/plain; charset="utf-8"\n'
                f"{CONTENT_TRANSFER_ENCODING}: {QUOTED_PRINTABLE}\n"
                f"{CONTENT_DESCRIPTION}: Mail message body\n"
                "\n"
            )
            out.write(
                quoted_printable.encode(
                    plain_text.encode("utf-8"),
                    quoted_printable.DEFAULT_FLAGS,
                )
            )
            out.write(f"\n--{alternative}\n")
            _write_entity(out, body, f"{mixed}.rel", is_body=True)
            out.write(f"--{alternative}--\n\n")
            first = 1

        for index in range(first, message.attachment_count):
            out.write(f"--{mixed}\n")
            suffix = ".rel" if index == 0 else f".rel{index}"
            _write_entity(out, message.get_attachment(index), mixed + suffix, is_body=index == 0)

        out.write(f"--{mixed}--\n")

    out.write("\n.\n")
    return out.getvalue()


def _write_entity(out: _Output, attachment: Attachment, related_boundary: str, *, is_body: bool) -> None:
    if not attachment.related:
        _write_part(out, attachment, propagate=not is_body)
        return

    main_type = HeaderValue.parse(attachment.get_header(CONTENT_TYPE)).value or "text/html"
    out.write(
        f"{CONTENT_TYPE}: multipart/related;\n"
        f'  type="{main_type}";\n'
        f'  boundary="{related_boundary}"\n'
        "\n"
    )
    out.write(f"--{related_boundary}\n")
    _write_part(out, attachment, propagate=not is_body)
    for child in attachment.related:
        out.write(f"--{related_boundary}\n")
        _write_part(out, child, propagate=True)
    out.write(f"--{related_boundary}--\n")


def _write_part(out: _Output, attachment: Attachment, *, propagate: bool) -> None:
    headers = attachment.headers.copy()
    if propagate:
        propagate_filename(headers)
    out.write_headers(headers)
    out.write("\n")
    # already encoded
    out.write(attachment.data)
    out.write("\n")
