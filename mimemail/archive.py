"""Archive format used to store an email until it gets sent.

The stream starts with a magic marker followed by records:

* value: ``b"v"``, u8 name length, name, u8 sub-name length, sub-name,
  u32 (big endian) payload length, payload;
* nested start: ``b"("``, u8 name length, name;
* nested end: ``b")"``.

Booleans are one byte, strings UTF-8.  Decoding is lenient: unknown
fields are skipped and a truncated stream keeps what was read so far,
both with a warning.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from .attachment import Attachment
from .exceptions import TooManyLevelsError
from .message import Email
from .version import ARCHIVE_MAJOR_VERSION, ARCHIVE_MINOR_VERSION

logger = structlog.get_logger()

MAGIC = b"BRS\x01"

_VALUE = b"v"
_START = b"("
_END = b")"
_NAME_LENGTH = struct.Struct(">B")
_PAYLOAD_LENGTH = struct.Struct(">I")


class ArchiveTruncatedError(Exception):
    """Internal signal: the stream ended in the middle of a record."""


@dataclass
class ArchiveField:
    """One decoded record; nested records have ``children`` instead of ``payload``."""

    name: str
    sub_name: str = ""
    payload: bytes = b""
    children: list[ArchiveField] | None = None

    @property
    def text(self) -> str:
        return self.payload.decode("utf-8", errors="surrogateescape")

    @property
    def flag(self) -> bool:
        return self.payload not in (b"", b"\x00")


# ----------------------------------------------------------------------
# Writer
# ----------------------------------------------------------------------


class ArchiveWriter:
    """Accumulate records and return the archive with :meth:`getvalue`."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = [MAGIC]

    def add_value(self, name: str, value: str | bytes | bool, sub_name: str = "") -> None:
        if isinstance(value, bool):
            payload = b"\x01" if value else b"\x00"
        elif isinstance(value, str):
            payload = value.encode("utf-8", errors="surrogateescape")
        else:
            payload = bytes(value)
        self._chunks.append(_VALUE)
        self._add_name(name)
        self._add_name(sub_name)
        self._chunks.append(_PAYLOAD_LENGTH.pack(len(payload)))
        self._chunks.append(payload)

    def add_value_if_not_empty(self, name: str, value: str | bytes, sub_name: str = "") -> None:
        if value:
            self.add_value(name, value, sub_name)

    @contextmanager
    def nested(self, name: str) -> Iterator[ArchiveWriter]:
        """Records written inside the ``with`` block belong to field *name*."""
        self._chunks.append(_START)
        self._add_name(name)
        yield self
        self._chunks.append(_END)

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)

    def _add_name(self, name: str) -> None:
        raw = name.encode("utf-8")
        if len(raw) > 255:
            raise ValueError(f'archive field name "{name}" is too long')
        self._chunks.append(_NAME_LENGTH.pack(len(raw)))
        self._chunks.append(raw)


# ----------------------------------------------------------------------
# Reader
# ----------------------------------------------------------------------


class ArchiveReader:
    """Parse an archive into a tree of :class:`ArchiveField`."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    def read(self) -> tuple[list[ArchiveField], bool]:
        """Return the top-level fields and whether the whole stream was read."""
        if bytes(self._data[: len(MAGIC)]) != MAGIC:
            logger.warning("archive_bad_magic")
            return [], False
        self._pos = len(MAGIC)

        fields: list[ArchiveField] = []
        try:
            self._read_fields(fields, nested=False)
        except ArchiveTruncatedError:
            return fields, False
        return fields, True

    def _read_fields(self, fields: list[ArchiveField], *, nested: bool) -> None:
        while self._pos < len(self._data):
            kind = self._take(1)
            if kind == _END:
                if nested:
                    return
                logger.warning("archive_unexpected_end_marker", offset=self._pos - 1)
                raise ArchiveTruncatedError
            if kind == _START:
                children: list[ArchiveField] = []
                fields.append(ArchiveField(name=self._take_name(), children=children))
                self._read_fields(children, nested=True)
            elif kind == _VALUE:
                name = self._take_name()
                sub_name = self._take_name()
                (length,) = _PAYLOAD_LENGTH.unpack(self._take(_PAYLOAD_LENGTH.size))
                fields.append(ArchiveField(name=name, sub_name=sub_name, payload=self._take(length)))
            else:
                logger.warning("archive_unknown_record", kind=kind, offset=self._pos - 1)
                raise ArchiveTruncatedError
        if nested:
            # ran out of data before the end marker
            raise ArchiveTruncatedError

    def _take(self, size: int) -> bytes:
        if self._pos + size > len(self._data):
            self._pos = len(self._data)
            raise ArchiveTruncatedError
        chunk = bytes(self._data[self._pos : self._pos + size])
        self._pos += size
        return chunk

    def _take_name(self) -> str:
        (length,) = _NAME_LENGTH.unpack(self._take(_NAME_LENGTH.size))
        return self._take(length).decode("utf-8", errors="replace")


# ----------------------------------------------------------------------
# Attachment
# ----------------------------------------------------------------------


def _write_attachment(out: ArchiveWriter, attachment: Attachment) -> None:
    for name, value in attachment.headers.items():
        out.add_value("header", value, sub_name=name.folded)
    for child in attachment.related:
        with out.nested("attachment"):
            _write_attachment(out, child)
    # data may be binary
    out.add_value("data", attachment.data)


def _read_attachment(fields: list[ArchiveField], *, is_sub_part: bool) -> Attachment:
    attachment = Attachment(is_sub_part=is_sub_part)
    for item in fields:
        if item.name == "header" and item.children is None:
            if item.sub_name:
                attachment.headers.set(item.sub_name, item.text)
            else:
                logger.warning("archive_unnamed_field", scope="attachment", field=item.name)
        elif item.name == "attachment" and item.children is not None:
            try:
                attachment.add_related(_read_attachment(item.children, is_sub_part=True))
            except TooManyLevelsError:
                logger.warning("archive_too_many_levels", scope="attachment")
        elif item.name == "data" and item.children is None:
            attachment.data = item.payload
        else:
            logger.warning("archive_unknown_field", scope="attachment", field=item.name)
    return attachment


def serialize_attachment(attachment: Attachment) -> bytes:
    out = ArchiveWriter()
    _write_attachment(out, attachment)
    return out.getvalue()


def deserialize_attachment(data: bytes, *, is_sub_part: bool = False) -> Attachment:
    fields, complete = ArchiveReader(data).read()
    if not complete:
        logger.warning("archive_truncated", scope="attachment")
    return _read_attachment(fields, is_sub_part=is_sub_part)


# ----------------------------------------------------------------------
# Email
# ----------------------------------------------------------------------


def serialize_email(message: Email) -> bytes:
    out = ArchiveWriter()
    out.add_value("version", f"{ARCHIVE_MAJOR_VERSION}.{ARCHIVE_MINOR_VERSION}")
    out.add_value("branding", message.branding)
    out.add_value_if_not_empty("cumulative", message.cumulative)
    out.add_value("site_key", message.site_key)
    out.add_value("email_path", message.email_path)
    out.add_value("email_key", message.email_key)
    for name, value in message.headers.items():
        out.add_value("header", value, sub_name=name.folded)
    for attachment in message.attachments:
        with out.nested("attachment"):
            _write_attachment(out, attachment)
    for name, value in message.parameters.items():
        out.add_value("parameter", value, sub_name=name)
    return out.getvalue()


def deserialize_email(data: bytes) -> Email:
    """Rebuild an email from :func:`serialize_email` output.

    ``created_at`` is set to the time of the call.
    """
    fields, complete = ArchiveReader(data).read()
    if not complete:
        logger.warning("archive_truncated", scope="email")

    message = Email()
    for item in fields:
        if item.children is not None:
            if item.name == "attachment":
                message.attachments.append(_read_attachment(item.children, is_sub_part=False))
            else:
                logger.warning("archive_unknown_field", scope="email", field=item.name)
            continue

        match item.name:
            case "version":
                _check_version(item.text)
            case "branding":
                message.branding = item.flag
            case "cumulative":
                message.cumulative = item.text
            case "site_key":
                message.site_key = item.text
            case "email_path":
                message.email_path = item.text
            case "email_key":
                message.email_key = item.text
            case "header" | "parameter" if not item.sub_name:
                logger.warning("archive_unnamed_field", scope="email", field=item.name)
            case "header":
                message.headers.set(item.sub_name, item.text)
            case "parameter":
                message.parameters[item.sub_name] = item.text
            case _:
                logger.warning("archive_unknown_field", scope="email", field=item.name)
    return message


def _check_version(version: str) -> None:
    major, _, _ = version.partition(".")
    if major != str(ARCHIVE_MAJOR_VERSION):
        logger.warning(
            "archive_version_unsupported",
            version=version,
            supported=f"{ARCHIVE_MAJOR_VERSION}.x",
        )
