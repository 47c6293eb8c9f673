"""Quoted-printable codec (RFC 2045 section 6.7) built on ``binascii``."""

from __future__ import annotations

import binascii
import enum
import re


class QuotedPrintableFlag(enum.IntFlag):
    """Options for :func:`encode`."""

    NONE = 0
    # Every "\r" in the data is escaped so the output only has bare "\n"
    # line breaks.  Without it a "\r\n" in the data stays a line break.
    LFONLY = 0x01
    # A line made of a single period is written "=2E" so an MTA reading
    # the message on stdin does not see an end of message marker.
    NO_LONE_PERIOD = 0x02
    # Treat the data as binary: CR and LF are escaped too.
    BINARY = 0x04


DEFAULT_FLAGS = QuotedPrintableFlag.LFONLY | QuotedPrintableFlag.NO_LONE_PERIOD

_LONE_PERIOD = re.compile(rb"^\.(\r?)$", re.MULTILINE)


def encode(data: bytes, flags: int = DEFAULT_FLAGS) -> bytes:
    """Encode *data* to quoted-printable.

    ``decode(encode(data, flags)) == data`` for any *data* and *flags*.
    """
    if flags & QuotedPrintableFlag.BINARY:
        encoded = binascii.b2a_qp(data, quotetabs=False, istext=False)
    else:
        encoded = _encode_text(data, keep_crlf=not flags & QuotedPrintableFlag.LFONLY)

    if flags & QuotedPrintableFlag.NO_LONE_PERIOD:
        encoded = _LONE_PERIOD.sub(rb"=2E\1", encoded)
    return encoded


def _encode_text(data: bytes, *, keep_crlf: bool) -> bytes:
    # b2a_qp() would rewrite the line endings of the whole input after the
    # first "\r\n" it sees, so each line is encoded on its own
    lines = []
    for line in data.split(b"\n"):
        ending = b""
        if keep_crlf and line.endswith(b"\r"):
            line, ending = line[:-1], b"\r"
        # b2a_qp() copies a lone "\r" verbatim
        encoded = binascii.b2a_qp(line, quotetabs=False, istext=True).replace(b"\r", b"=0D")
        lines.append(encoded + ending)
    return b"\n".join(lines)


def decode(data: bytes) -> bytes:
    return binascii.a2b_qp(data)
