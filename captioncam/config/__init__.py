"""
Caption Configuration Module

Environment-driven settings for the caption engine and service.
"""

from .settings import (
    DEFAULT_APP_START_DELAY_MS,
    DEFAULT_CLEAR_AFTER_MS,
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_CHARACTERS,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_START_DELAY_MS,
    CaptionSettings,
    get_settings,
)

__all__ = [
    "DEFAULT_APP_START_DELAY_MS",
    "DEFAULT_CLEAR_AFTER_MS",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MAX_CHARACTERS",
    "DEFAULT_MAX_SESSIONS",
    "DEFAULT_START_DELAY_MS",
    "CaptionSettings",
    "get_settings",
]
