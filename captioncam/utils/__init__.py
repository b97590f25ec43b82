"""Shared utilities for CaptionCam."""

from .logging import DEFAULT_FORMAT, OperatorLog, setup_logging

__all__ = [
    "DEFAULT_FORMAT",
    "OperatorLog",
    "setup_logging",
]
