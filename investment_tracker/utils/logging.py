# investment_tracker/utils/logging.py
"""
Logging setup for the Investment Tracker engine.

The engine itself only creates module loggers; the host process calls
setup_logging() once. Every record gets the current correlation id, so the
lines written while one import batch is committed can be grepped together.

    LOG_LEVEL=DEBUG|INFO|WARNING|ERROR|CRITICAL
    LOG_FORMAT=text|json
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from investment_tracker.config import settings
from investment_tracker.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Keys of a bare LogRecord; anything else on a record came from `extra=`
_RECORD_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "correlation_id",
}


# =============================================================================
# FILTER AND FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the active correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Keys: timestamp (record creation time, UTC), level, logger,
    correlation_id, message, plus `exception` when exc_info is set and
    `extra` for fields passed through `extra=`. Values json cannot encode
    (Decimal, UUID, date) are written with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_KEYS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Replace the root logger's handlers with one stdout handler.

    Args:
        level: Level name, case-insensitive. Defaults to settings.log_level.
        log_format: 'json' or 'text'. Defaults to settings.log_format.
    """
    level_name = level or settings.log_level
    format_name = (log_format or settings.log_format).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if format_name == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, TEXT_DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(_get_log_level(level_name))
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger(__name__).debug(f"Logging configured: level={level_name}, format={format_name}")


def _get_log_level(level_name: str) -> int:
    """Map a level name to its logging constant; ValueError when unknown."""
    key = level_name.strip().upper()
    if key not in _LEVELS:
        raise ValueError(f"Invalid log level: '{key}'. Valid levels are: {', '.join(_LEVELS)}")
    return _LEVELS[key]
