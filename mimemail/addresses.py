"""RFC 2822 address validation for address-bearing header fields.

Address lists are split with ``email.utils.getaddresses`` and each
addr-spec is checked with pydantic's email validator (email-validator
under the hood, without DNS lookups).
"""

from __future__ import annotations

import email.utils
import enum
import re
from dataclasses import dataclass

from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from .exceptions import InvalidParameterError
from .headers import fold_name


class FieldType(enum.Enum):
    """How the value of a header field is validated."""

    INVALID = "invalid"
    UNKNOWN = "unknown"  # not an address field, any value is accepted
    MAILBOX_LIST = "mailbox-list"
    MAILBOX = "mailbox"  # exactly one address
    ADDRESS_LIST = "address-list"
    ADDRESS_LIST_OPT = "address-list-opt"  # may be empty


_ADDRESS_FIELDS: dict[str, FieldType] = {
    "from": FieldType.MAILBOX_LIST,
    "resent-from": FieldType.MAILBOX_LIST,
    "sender": FieldType.MAILBOX,
    "resent-sender": FieldType.MAILBOX,
    "to": FieldType.ADDRESS_LIST,
    "cc": FieldType.ADDRESS_LIST,
    "reply-to": FieldType.ADDRESS_LIST,
    "resent-to": FieldType.ADDRESS_LIST,
    "resent-cc": FieldType.ADDRESS_LIST,
    "bcc": FieldType.ADDRESS_LIST_OPT,
    "resent-bcc": FieldType.ADDRESS_LIST_OPT,
}

# printable US-ASCII except ":" (RFC 5322 ftext)
_FIELD_NAME_RE = re.compile(r"[!-9;-~]+")


@dataclass(frozen=True)
class Mailbox:
    """One parsed address: optional display name and the bare addr-spec."""

    display_name: str
    address: str

    def __str__(self) -> str:
        return email.utils.formataddr((self.display_name, self.address))


def field_type(name: str) -> FieldType:
    """Classify a header field name."""
    if not _FIELD_NAME_RE.fullmatch(name):
        return FieldType.INVALID
    return _ADDRESS_FIELDS.get(fold_name(name), FieldType.UNKNOWN)


def parse_address_list(value: str) -> list[Mailbox]:
    """Parse a comma separated address list.

    Raises :class:`InvalidParameterError` when the list is empty or any
    entry is not a valid address.
    """
    pairs = email.utils.getaddresses([value])
    if not pairs:
        raise InvalidParameterError(f'no email address found in "{value}"')

    mailboxes: list[Mailbox] = []
    for display_name, address in pairs:
        if not address:
            raise InvalidParameterError(f'invalid email address list "{value}"')
        try:
            validate_email(address)
        except PydanticCustomError as exc:
            raise InvalidParameterError(
                f'invalid email address "{address}" in "{value}": {exc.message()}'
            ) from exc
        mailboxes.append(Mailbox(display_name=display_name, address=address))
    return mailboxes


def validate_field(name: str, value: str) -> None:
    """Check *value* against what header field *name* accepts."""
    kind = field_type(name)
    if kind is FieldType.INVALID:
        raise InvalidParameterError(f'invalid header field name "{name}"')
    if kind is FieldType.UNKNOWN:
        return
    if kind is FieldType.ADDRESS_LIST_OPT and not value:
        return

    mailboxes = parse_address_list(value)
    if kind is FieldType.MAILBOX and len(mailboxes) != 1:
        raise InvalidParameterError(
            f'header field expects exactly one email in "{name}: {value}"'
        )
