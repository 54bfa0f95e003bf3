"""Logging setup for retrykit.

The library logs through stdlib loggers under the ``retrykit`` namespace and
attaches no handlers by itself. Applications that want output call
configure_logging() once at startup, or wire the loggers into their own
logging configuration.

Example:
    >>> from retrykit import configure_logging
    >>> configure_logging()                          # settings-driven
    >>> configure_logging(level="DEBUG", format="json")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

from .config import get_settings

ROOT_LOGGER = "retrykit"

# LogRecord attributes that are not caller-supplied extras
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON Lines output for log aggregation (Elasticsearch, Loki, Datadog, etc.)."""

    def __init__(self, *, include_timestamps: bool = True) -> None:
        super().__init__()
        self.include_timestamps = include_timestamps

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {}
        if self.include_timestamps:
            entry["timestamp"] = datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        entry |= {"level": record.levelname.lower(), "logger": record.name, "event": record.getMessage()}
        entry |= {k: v for k, v in vars(record).items() if k not in _RESERVED}
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def _text_formatter(include_timestamps: bool) -> logging.Formatter:
    fmt = "%(levelname)s [%(name)s] %(message)s"
    return logging.Formatter(f"%(asctime)s {fmt}" if include_timestamps else fmt)


def configure_logging(
    level: str | None = None,
    format: str | None = None,  # noqa: A002 - shadows builtin but matches settings field
    *,
    output: TextIO | None = None,
) -> logging.Logger:
    """Attach a handler to the retrykit logger. Unset arguments fall back to LoggingSettings.

    Calling again replaces the handler installed by the previous call.
    """
    settings = get_settings().logging
    level = (level or settings.level).upper()
    format = format or settings.format  # noqa: A001
    match format:
        case "json": formatter: logging.Formatter = JsonFormatter(include_timestamps=settings.include_timestamps)
        case "text": formatter = _text_formatter(settings.include_timestamps)
        case _: raise ValueError(f"Unknown format: {format}. Use 'text' or 'json'")

    logger = logging.getLogger(ROOT_LOGGER)
    for h in [h for h in logger.handlers if getattr(h, "_retrykit", False)]:
        logger.removeHandler(h)
    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)
    handler._retrykit = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level, logging.INFO))
    return logger
