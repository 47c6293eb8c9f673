"""Tests for mimemail.content_type."""

from __future__ import annotations

from mimemail.content_type import sniff_mime_type

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n"


class TestSniffMimeType:
    def test_png(self):
        assert sniff_mime_type(PNG) == "image/png"

    def test_pdf(self):
        assert sniff_mime_type(PDF) == "application/pdf"

    def test_plain_text(self):
        assert sniff_mime_type("Bonjour à tous\n".encode("utf-8")) == "text/plain; charset=utf-8"

    def test_html_document(self):
        assert sniff_mime_type(b"  <!DOCTYPE html><html><body>x</body></html>") == "text/html; charset=utf-8"
        assert sniff_mime_type(b"<HTML><p>x</p></HTML>") == "text/html; charset=utf-8"

    def test_html_fragment_is_text(self):
        assert sniff_mime_type(b"<p>Hi</p>") == "text/plain; charset=utf-8"

    def test_unknown_binary(self):
        assert sniff_mime_type(b"\x80\x81\x82\x83\xfe") == "application/octet-stream"
