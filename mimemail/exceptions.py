"""Exception hierarchy raised by the mimemail library."""

from __future__ import annotations


class MimeMailError(Exception):
    """Base class for all mimemail errors."""


class InvalidParameterError(MimeMailError, ValueError):
    """A name, address, priority or other argument was rejected."""


class MissingParameterError(MimeMailError, ValueError):
    """A field required to send the email is not defined."""


class TooManyLevelsError(MimeMailError):
    """Related attachments cannot be nested more than one level deep."""


class OutOfRangeError(MimeMailError, IndexError):
    """An attachment index is past the end of its list."""
