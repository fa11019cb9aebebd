"""
Structured logging utilities for the Blog Query Challenges.

Centralizes logging configuration so the CLI, seeding script, orchestrator and
integrity checks log consistently. Standard library logging with a
human-readable formatter by default and a JSON formatter for CI pipelines.

Usage:
    from src.utils.logging import configure_from_settings, configure_logging, get_logger

    configure_logging(level="DEBUG", json_logs=True)  # or configure_from_settings()
    log = get_logger(__name__)
    log.info("Seeded users", extra={"users": 8})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

from src.config import Settings, get_settings

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {
        key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS
    }
    # Older call sites pass a nested dict as `extra={"extra": {...}}`.
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        fields.update(nested)
    return fields


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    payload.update(_extra_fields(record))
    return json.dumps(payload, default=str)


_LIBRARY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    library_level: str = "WARNING",
) -> None:
    """
    Configure root logging, replacing any existing handlers.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Whether to emit logs as JSON. If False, uses a concise human formatter.
    library_level : str
        Level for the SQLAlchemy engine and pool loggers. SQL echo is switched
        on per engine through SQL_ECHO, not here.
    """
    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level,
                }
            },
            "loggers": {name: {"level": library_level} for name in _LIBRARY_LOGGERS},
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )


def configure_from_settings(settings: Optional[Settings] = None) -> None:
    """Configure logging from LOG_LEVEL and LOG_JSON."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name. If name is None, returns the root logger.
    """
    return logging.getLogger(name)


__all__ = ["configure_logging", "configure_from_settings", "get_logger", "JsonFormatter"]
