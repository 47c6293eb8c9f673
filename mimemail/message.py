"""The top-level email: headers, attachments and orchestration data."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .addresses import parse_address_list, validate_field
from .attachment import Attachment
from .exceptions import InvalidParameterError, OutOfRangeError
from .headers import HeaderMap

if TYPE_CHECKING:
    from .mailer import Mailer

FROM = "From"
TO = "To"
SUBJECT = "Subject"
DATE = "Date"
X_PRIORITY = "X-Priority"
X_MSMAIL_PRIORITY = "X-MSMail-Priority"
IMPORTANCE = "Importance"
PRECEDENCE = "Precedence"


class Priority(enum.IntEnum):
    """Email priority, written to four headers at once."""

    BULK = 1
    LOW = 2
    NORMAL = 3
    HIGH = 4
    URGENT = 5

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass
class Email:
    """An email ready to be rendered and handed to the MTA.

    The first attachment is the body.  ``parameters`` are not part of
    the message sent; they travel with the archived email for the code
    that posts and later sends it.  ``created_at`` is neither archived
    nor compared.
    """

    branding: bool = True
    cumulative: str = ""
    site_key: str = ""
    email_path: str = ""
    email_key: str = ""
    headers: HeaderMap = field(default_factory=HeaderMap)
    attachments: list[Attachment] = field(default_factory=list)
    parameters: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)

    # ------------------------------------------------------------------
    # Well known headers
    # ------------------------------------------------------------------

    def set_from(self, value: str) -> None:
        """Set the ``From`` header; it must name exactly one mailbox."""
        mailboxes = parse_address_list(value)
        if len(mailboxes) != 1:
            raise InvalidParameterError(f'multiple "From:" emails in "{value}"')
        self.headers.set(FROM, value)

    def set_to(self, value: str) -> None:
        """Set the ``To`` header; it must name at least one address."""
        parse_address_list(value)
        self.headers.set(TO, value)

    def set_subject(self, subject: str) -> None:
        self.headers.set(SUBJECT, subject)

    def set_priority(self, priority: int = Priority.NORMAL) -> None:
        """Set ``X-Priority``, ``X-MSMail-Priority``, ``Importance`` and ``Precedence``."""
        try:
            level = Priority(priority)
        except ValueError:
            raise InvalidParameterError(f'unknown priority "{priority}"') from None

        self.headers.set(X_PRIORITY, f"{level.value} ({level.label})")
        self.headers.set(X_MSMAIL_PRIORITY, level.label)
        self.headers.set(IMPORTANCE, level.label)
        self.headers.set(PRECEDENCE, level.label)

    # ------------------------------------------------------------------
    # Generic headers
    # ------------------------------------------------------------------

    def add_header(self, name: str, value: str) -> None:
        """Set a header; address fields (To, Cc, Sender, ...) are validated."""
        validate_field(name, value)
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
    # Attachments
    # ------------------------------------------------------------------

    def set_body_attachment(self, attachment: Attachment) -> None:
        """Insert a copy of *attachment* as the body (first attachment)."""
        self.attachments.insert(0, copy.deepcopy(attachment))

    def add_attachment(self, attachment: Attachment) -> None:
        self.attachments.append(copy.deepcopy(attachment))

    @property
    def attachment_count(self) -> int:
        return len(self.attachments)

    def get_attachment(self, index: int) -> Attachment:
        if not 0 <= index < len(self.attachments):
            raise OutOfRangeError(f"attachment index {index} is out of range")
        return self.attachments[index]

    # ------------------------------------------------------------------
    # Parameters (never sent)
    # ------------------------------------------------------------------

    def add_parameter(self, name: str, value: str) -> None:
        if not name:
            raise InvalidParameterError("a parameter name cannot be empty")
        self.parameters[name] = value

    def get_parameter(self, name: str) -> str:
        if not name:
            raise InvalidParameterError("a parameter name cannot be empty")
        return self.parameters.get(name, "")

    def has_parameter(self, name: str) -> bool:
        if not name:
            raise InvalidParameterError("a parameter name cannot be empty")
        return name in self.parameters

    def remove_parameter(self, name: str) -> None:
        self.parameters.pop(name, None)

    def all_parameters(self) -> dict[str, str]:
        return self.parameters

    # ------------------------------------------------------------------
    # Archive and delivery
    # ------------------------------------------------------------------

    def serialize(self) -> bytes:
        from .archive import serialize_email

        return serialize_email(self)

    @classmethod
    def deserialize(cls, data: bytes) -> Email:
        from .archive import deserialize_email

        return deserialize_email(data)

    def send(self, mailer: Mailer | None = None) -> bool:
        """Render this email and pipe it to ``sendmail``.

        Returns *True* when the MTA accepted the message.
        """
        if mailer is None:
            from .mailer import Mailer

            mailer = Mailer()
        return mailer.send(self)
