"""mimemail: compose MIME emails and hand them to the local MTA.

Public API re-exported here for convenience::

    from mimemail import Attachment, Email, Mailer
"""

from .archive import deserialize_email, serialize_email
from .attachment import Attachment
from .config import LoggingConfig, MailerConfig
from .exceptions import (
    InvalidParameterError,
    MimeMailError,
    MissingParameterError,
    OutOfRangeError,
    TooManyLevelsError,
)
from .headers import CaseInsensitiveName, HeaderMap, HeaderValue, propagate_filename
from .logging import setup_logging
from .mailer import Mailer
from .message import Email, Priority
from .quoted_printable import QuotedPrintableFlag
from .renderer import Envelope, generate_boundary, render
from .sendmail import SendState
from .version import __version__

__all__ = [
    "Attachment",
    "CaseInsensitiveName",
    "Email",
    "Envelope",
    "HeaderMap",
    "HeaderValue",
    "InvalidParameterError",
    "LoggingConfig",
    "Mailer",
    "MailerConfig",
    "MimeMailError",
    "MissingParameterError",
    "OutOfRangeError",
    "Priority",
    "QuotedPrintableFlag",
    "SendState",
    "TooManyLevelsError",
    "__version__",
    "deserialize_email",
    "generate_boundary",
    "propagate_filename",
    "render",
    "serialize_email",
    "setup_logging",
]
