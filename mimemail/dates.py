"""RFC 822 dates as used in email headers."""

from __future__ import annotations

import email.utils
from datetime import UTC, datetime


def format_email_date(when: float | datetime | None = None) -> str:
    """Format *when* (seconds since the epoch or a datetime) for a header.

    The result is always English and in UTC, e.g.
    ``Sun, 01 Jun 2025 12:00:00 +0000``.  ``None`` means now.
    """
    if when is None:
        moment = datetime.now(UTC)
    elif isinstance(when, datetime):
        moment = when if when.tzinfo is not None else when.replace(tzinfo=UTC)
        moment = moment.astimezone(UTC)
    else:
        moment = datetime.fromtimestamp(when, UTC)
    return email.utils.format_datetime(moment)
