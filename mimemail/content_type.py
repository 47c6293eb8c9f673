"""Guess the MIME type of an attachment from its content."""

from __future__ import annotations

import filetype

DEFAULT_MIME_TYPE = "application/octet-stream"
TEXT_PLAIN = "text/plain; charset=utf-8"
TEXT_HTML = "text/html; charset=utf-8"

_HTML_MARKERS = (b"<!doctype html", b"<html", b"<head", b"<body")


def sniff_mime_type(data: bytes) -> str:
    """Return the MIME type of *data*.

    Binary formats are recognized by their magic numbers.  Anything else
    that decodes as UTF-8 is text, HTML when it starts like a document.
    """
    if data:
        kind = filetype.guess(data)
        if kind is not None:
            return kind.mime

    head = data[:1024].lstrip().lower()
    if head.startswith(_HTML_MARKERS):
        return TEXT_HTML

    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return DEFAULT_MIME_TYPE
    return TEXT_PLAIN
