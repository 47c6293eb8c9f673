"""A single MIME entity of an email: headers, payload and related parts."""

from __future__ import annotations

import copy
import posixpath
import urllib.parse
from dataclasses import dataclass, field
from datetime import datetime

from . import quoted_printable
from .content_type import sniff_mime_type
from .dates import format_email_date
from .exceptions import InvalidParameterError, OutOfRangeError, TooManyLevelsError
from .headers import (
    CONTENT_DISPOSITION,
    CONTENT_TRANSFER_ENCODING,
    CONTENT_TYPE,
    QUOTED_PRINTABLE,
    HeaderMap,
)


@dataclass
class Attachment:
    """One part of an email.

    ``data`` holds the payload exactly as it goes on the wire, i.e. it is
    already encoded as announced by the ``Content-Transfer-Encoding``
    header.  The first attachment of an :class:`~mimemail.message.Email`
    is its body; an HTML body may carry *related* attachments (images,
    CSS) which themselves cannot have related attachments.
    """

    headers: HeaderMap = field(default_factory=HeaderMap)
    data: bytes = b""
    is_sub_part: bool = False
    related: list[Attachment] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    def set_data(self, data: bytes, mime_type: str = "") -> None:
        """Save *data* verbatim and set ``Content-Type``.

        When *mime_type* is empty the type is guessed from the data.
        """
        self.data = bytes(data)
        if not mime_type:
            mime_type = sniff_mime_type(self.data)
        self.headers.set(CONTENT_TYPE, mime_type)

    def set_data_quoted_printable(
        self,
        data: bytes,
        mime_type: str = "",
        flags: int = quoted_printable.DEFAULT_FLAGS,
    ) -> None:
        """Encode *data* as quoted-printable and save it.

        The MIME type is determined from the raw data, before encoding.
        """
        if not mime_type:
            mime_type = sniff_mime_type(data)
        self.set_data(quoted_printable.encode(data, flags), mime_type)
        self.headers.set(CONTENT_TRANSFER_ENCODING, QUOTED_PRINTABLE)

    def get_decoded_data(self) -> bytes:
        """Return the payload with a quoted-printable encoding undone."""
        if self.headers.get(CONTENT_TRANSFER_ENCODING).strip().lower() == QUOTED_PRINTABLE:
            return quoted_printable.decode(self.data)
        return self.data

    def set_content_disposition(
        self,
        filename: str,
        modification_date: float | datetime = 0,
        attachment_type: str = "attachment",
    ) -> None:
        """Define the ``Content-Disposition`` header.

        Only the basename of *filename* is kept, directory names are not
        meant to reach the recipient.  A *modification_date* of ``0``
        means now.
        """
        if not attachment_type:
            raise InvalidParameterError("the attachment type cannot be an empty string")

        disposition = f"{attachment_type};"

        basename = posixpath.basename(filename)
        if basename:
            disposition += f" filename={urllib.parse.quote(basename, safe='')};"

        when = None if modification_date == 0 else modification_date
        disposition += f' modification-date="{format_email_date(when)}";'

        self.headers.set(CONTENT_DISPOSITION, disposition)

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def add_header(self, name: str, value: str) -> None:
        self.headers.set(name, value)

    def remove_header(self, name: str) -> None:
        self.headers.remove(name)

    def has_header(self, name: str) -> bool:
        return self.headers.has(name)

    def get_header(self, name: str) -> str:
        return self.headers.get(name)

    def all_headers(self) -> HeaderMap:
        return self.headers

    # ------------------------------------------------------------------
    # Related attachments
    # ------------------------------------------------------------------

    def add_related(self, other: Attachment) -> None:
        """Append a copy of *other* as a related attachment."""
        if self.is_sub_part:
            raise TooManyLevelsError(
                "this attachment is already a related attachment, it cannot have its own"
            )
        if other.related:
            raise TooManyLevelsError(
                "an attachment with related attachments cannot become a related attachment"
            )

        child = copy.deepcopy(other)
        child.is_sub_part = True
        self.related.append(child)

    @property
    def related_count(self) -> int:
        return len(self.related)

    def get_related(self, index: int) -> Attachment:
        if not 0 <= index < len(self.related):
            raise OutOfRangeError(f"related attachment index {index} is out of range")
        return self.related[index]
