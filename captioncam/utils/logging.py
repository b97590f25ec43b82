"""
Logging utilities for CaptionCam.

Two audiences:
- Developers: standard logging, configured once via setup_logging().
- Operators: OperatorLog, a timestamped in-memory trail of recognizer
  lifecycle messages that can be downloaded next to the transcript when
  troubleshooting a device.
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

# Default log format
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

# Log level type
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Oldest operator messages are dropped beyond this
DEFAULT_OPERATOR_LOG_LIMIT = 10000


def setup_logging(
    name: str | None = None,
    level: LogLevel | None = None,
    format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Configure logging and return a logger.

    Args:
        name: Logger name (typically __name__). If None, returns root logger.
        level: Log level. Defaults to LOG_LEVEL env var or INFO.
        format: Log format string.

    Returns:
        Configured logger instance.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    log_level = getattr(logging, level, logging.INFO)

    # Root handler is installed only once per process
    logging.basicConfig(
        level=log_level,
        format=format,
        datefmt=DEFAULT_DATEFMT,
        stream=sys.stdout,
    )

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    return logger


class OperatorLog:
    """
    Timestamped operator messages, one line each.

    Usage:
        oplog = OperatorLog()
        session = RecognitionSessionAdapter(..., on_log=oplog.append)
        oplog.export("captioncam-log.txt")
    """

    def __init__(self, limit: int = DEFAULT_OPERATOR_LOG_LIMIT):
        self._limit = limit
        self._lines: list[str] = []

    def append(self, message: str) -> None:
        """Record a message prefixed with an ISO 8601 UTC timestamp."""
        ts = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        self._lines.append(f"{ts} {message}\n")
        if len(self._lines) > self._limit:
            del self._lines[: len(self._lines) - self._limit]

    def lines(self) -> list[str]:
        return list(self._lines)

    def text(self) -> str:
        return "".join(self._lines)

    def export(self, path: str | Path) -> Path:
        """Write every message to a UTF-8 text file and return its path."""
        path = Path(path)
        path.write_text(self.text(), encoding="utf-8")
        return path

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
