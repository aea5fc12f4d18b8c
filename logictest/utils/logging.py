"""
Structured logging utilities for logictest.

The runner reports every record as one log line, so the log stream is the
primary test report. Two renderings are supported:

- console: `2024-05-01T12:00:00 | INFO | logictest.runner | select1.test:14: SELECT ... ok`
- json: one object per line carrying the record's `file`, `line` and `status`
  (passed through `extra=`), for CI systems that collect structured logs.

Usage:
    from logictest.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False)
    log = get_logger(__name__)
    log.info("message", extra={"file": "select1.test", "line": 14})
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

# Driver chatter that would drown out per-record lines at INFO.
_QUIET_LOGGERS = ("psycopg", "tenacity")

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in vars(record).items():
        if key not in _STANDARD_ATTRS:
            payload[key] = value
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = True,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure root logging for a test run.

    Parameters
    ----------
    level : str
        Logging level name. DEBUG adds harness connection details and the
        traceback of every record that raised.
    json_logs : bool
        Emit one JSON object per line instead of the console format.
    force : bool
        Replace an existing root configuration. With False, a root logger that
        already has handlers is left alone.
    stream : IO[str], optional
        Destination of log lines; stdout when omitted.
    """
    if not force and logging.getLogger().handlers:
        return

    handler: Dict[str, Any] = {
        "class": "logging.StreamHandler",
        "formatter": "json" if json_logs else "console",
        "level": level,
    }
    if stream is None:
        handler["stream"] = "ext://sys.stdout"
    else:
        handler["stream"] = stream

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": DATE_FORMAT,
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": {"default": handler},
            "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger for a logictest module. Bare names (e.g. "harness") are
    placed under the `logictest` namespace; None returns the root logger.
    """
    if name is not None and name != "logictest" and not name.startswith("logictest."):
        name = f"logictest.{name}"
    return logging.getLogger(name)


__all__ = ["DATE_FORMAT", "JsonFormatter", "configure_logging", "get_logger"]
