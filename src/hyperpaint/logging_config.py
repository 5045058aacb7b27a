"""Logging configuration for hyperpaint.

Configurable via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING (or WARN), ERROR, CRITICAL. Default: INFO
- LOG_FORMAT: 'text' or 'json'. Default: text

Usage:
    from hyperpaint.logging_config import configure_logging
    configure_logging()  # once, at process start
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any, ClassVar

ROOT_LOGGER = "hyperpaint"

LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _short_name(name: str) -> str:
    """Strip the package prefix from a logger name."""
    prefix = ROOT_LOGGER + "."
    return name[len(prefix) :] if name.startswith(prefix) else name


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as a JSON line.

        Args:
            record: Log record to format.

        Returns:
            JSON string.
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno == logging.DEBUG or record.levelno >= logging.ERROR:
            entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines: TIMESTAMP LEVEL [logger] message.

    DEBUG and ERROR lines also carry file:line.
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize formatter.

        Args:
            use_colors: Color the level name. Only honored when stderr is a TTY.
        """
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[
            :-3
        ]
        level = f"{record.levelname:8s}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        line = f"{timestamp} {level} [{_short_name(record.name)}] {record.getMessage()}"

        if record.levelno == logging.DEBUG or record.levelno >= logging.ERROR:
            line += f" ({record.filename}:{record.lineno})"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def get_log_level() -> int:
    """Read LOG_LEVEL from the environment, defaulting to INFO."""
    return LEVELS.get(os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)


def get_log_format() -> str:
    """Read LOG_FORMAT from the environment ('text' or 'json', default text)."""
    value = os.environ.get("LOG_FORMAT", "text").lower()
    return value if value in ("text", "json") else "text"


def configure_logging(
    level: int | None = None,
    format_type: str | None = None,
    use_colors: bool = True,
) -> None:
    """Install a stderr handler on the ``hyperpaint`` logger.

    Safe to call more than once; previous handlers are replaced.

    Args:
        level: Log level. If None, reads LOG_LEVEL.
        format_type: 'text' or 'json'. If None, reads LOG_FORMAT.
        use_colors: Whether text output may use ANSI colors.
    """
    if level is None:
        level = get_log_level()
    if format_type is None:
        format_type = get_log_format()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        JSONFormatter() if format_type == "json" else TextFormatter(use_colors=use_colors)
    )

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False

    # Route uvicorn request logs through the same handler
    access = logging.getLogger("uvicorn.access")
    access.handlers.clear()
    access.addHandler(handler)
    access.setLevel(level)
    access.propagate = False

    root.debug(
        "Logging configured: level=%s, format=%s", logging.getLevelName(level), format_type
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``hyperpaint`` namespace.

    Args:
        name: Module name, typically ``__name__``.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
