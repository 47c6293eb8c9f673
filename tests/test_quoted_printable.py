"""Tests for mimemail.quoted_printable."""

from __future__ import annotations

import random

import pytest

from mimemail.attachment import Attachment
from mimemail.quoted_printable import DEFAULT_FLAGS, QuotedPrintableFlag, decode, encode


class TestEncode:
    def test_ascii_is_unchanged(self):
        assert encode(b"hello world") == b"hello world"

    def test_eight_bit_bytes_are_escaped(self):
        assert encode("café".encode("utf-8")) == b"caf=C3=A9"

    def test_equal_sign_is_escaped(self):
        assert encode(b"a=b") == b"a=3Db"

    def test_trailing_space_is_escaped(self):
        assert encode(b"a \nb") == b"a=20\nb"

    def test_lone_period_is_escaped(self):
        assert encode(b"a\n.\nb") == b"a\n=2E\nb"
        assert encode(b".") == b"=2E"

    def test_period_in_text_is_kept(self):
        assert encode(b"end.\n.. two") == b"end.\n.. two"

    def test_lfonly_escapes_carriage_return(self):
        encoded = encode(b"a\r\nb", DEFAULT_FLAGS)
        assert encoded == b"a=0D\nb"
        assert decode(encoded) == b"a\r\nb"

    def test_long_lines_get_soft_breaks(self):
        data = b"x" * 200
        encoded = encode(data)
        assert b"=\n" in encoded
        assert all(len(line) <= 76 for line in encoded.split(b"\n"))
        assert decode(encoded) == data

    def test_binary_escapes_line_breaks(self):
        assert encode(b"a\nb", QuotedPrintableFlag.BINARY) == b"a=0Ab"


class TestDecode:
    def test_decode(self):
        assert decode(b"caf=C3=A9=\n!") == "café!".encode("utf-8")

    def test_utf8_text_survives(self):
        text = "Ünïcödé line\n.\nsecond = line\t\n".encode("utf-8")
        assert decode(encode(text)) == text

    def test_crlf_is_kept_without_lfonly(self):
        encoded = encode(b"a \r\nb\rc\nd", QuotedPrintableFlag.NONE)
        assert encoded == b"a=20\r\nb=0Dc\nd"
        assert decode(encoded) == b"a \r\nb\rc\nd"

    def test_lone_period_before_crlf(self):
        encoded = encode(b"a\r\n.\r\nb", QuotedPrintableFlag.NO_LONE_PERIOD)
        assert encoded == b"a\r\n=2E\r\nb"


ALL_FLAGS = [QuotedPrintableFlag(value) for value in range(8)]

TRICKY = [
    b"",
    b"\r",
    b"\n",
    b"\r\n",
    b"\n\r",
    b".",
    b".\r\n",
    b"\r\n.\r\n",
    b"a \r\nb\t\n",
    b"trailing space \n",
    b"=\r=\n=",
    b"\n.\r\n\t\x00.\nb",
    b"\t\r\nb\n\t \r a =",
    b"x" * 75 + b"\r\n" + b"." + b" " * 80 + b"\r",
    bytes(range(256)),
]


def _random_payloads(count: int) -> list[bytes]:
    rng = random.Random(1045)
    alphabet = b"ab .=\t\r\n\x00\xff"
    return [bytes(rng.choice(alphabet) for _ in range(rng.randint(0, 120))) for _ in range(count)]


class TestRoundTrip:
    @pytest.mark.parametrize("flags", ALL_FLAGS, ids=str)
    def test_tricky_payloads(self, flags):
        for data in TRICKY:
            assert decode(encode(data, flags)) == data, data

    @pytest.mark.parametrize("flags", ALL_FLAGS, ids=str)
    def test_random_payloads_through_attachment(self, flags):
        attachment = Attachment()
        for data in _random_payloads(2000):
            attachment.set_data_quoted_printable(data, "text/plain", flags)
            assert attachment.get_decoded_data() == data, data

    @pytest.mark.parametrize("flags", [QuotedPrintableFlag.LFONLY, DEFAULT_FLAGS], ids=str)
    def test_lfonly_output_has_no_carriage_return(self, flags):
        for data in TRICKY + _random_payloads(200):
            assert b"\r" not in encode(data, flags)
