"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

from .config import LoggingConfig


def setup_logging(*, json: bool = True, level: str = "INFO") -> None:
    """Configure structlog for a process composing and sending emails.

    Parameters
    ----------
    json:
        If *True* (the default, suitable for daemons whose output is
        collected), output JSON lines.  If *False*, use a human-friendly
        console renderer.
    level:
        Root log level name (e.g. ``"DEBUG"``, ``"INFO"``).

    The handler writes to *stderr* so that ``python -m mimemail render``
    can keep stdout for the rendered message.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Apply a :class:`LoggingConfig` (usually read from the environment)."""
    setup_logging(json=config.json_output, level=config.level)
