"""
Caption Settings

Single source of truth for caption configuration. Values come from the
environment so the same build runs in a browser-backed service, a kiosk
webview or an offline replay.

Embedded webviews fail to start recognition unless the camera has had time to
settle, hence the separate (longer) app start delay.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ============== Defaults ==============
DEFAULT_MAX_CHARACTERS = 300
DEFAULT_LANGUAGE = "ja-JP"
DEFAULT_CLEAR_AFTER_MS = 10000
DEFAULT_START_DELAY_MS = 10
DEFAULT_APP_START_DELAY_MS = 2000
DEFAULT_MAX_SESSIONS = 16


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read a non-negative integer from the environment, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value < minimum:
        logger.warning(f"{name}={value} is below {minimum}, using {default}")
        return default
    return value


@dataclass(frozen=True)
class CaptionSettings:
    """
    Caption configuration.

    Attributes:
        max_characters: Character budget of the live caption window
        language: Recognition language when the client does not send one
        clear_after_ms: Clear the caption after this much silence (0 disables)
        start_delay_ms: Wait between recognizer creation and first start
        app_start_delay_ms: Same, for embedded webview clients
        max_sessions: Finished sessions the service keeps for download
    """

    max_characters: int = DEFAULT_MAX_CHARACTERS
    language: str = DEFAULT_LANGUAGE
    clear_after_ms: int = DEFAULT_CLEAR_AFTER_MS
    start_delay_ms: int = DEFAULT_START_DELAY_MS
    app_start_delay_ms: int = DEFAULT_APP_START_DELAY_MS
    max_sessions: int = DEFAULT_MAX_SESSIONS

    @classmethod
    def from_env(cls) -> "CaptionSettings":
        """Build settings from CAPTION_* environment variables."""
        return cls(
            max_characters=_env_int("CAPTION_MAX_CHARACTERS", DEFAULT_MAX_CHARACTERS, minimum=1),
            language=os.getenv("CAPTION_LANGUAGE", "").strip() or DEFAULT_LANGUAGE,
            clear_after_ms=_env_int("CAPTION_CLEAR_AFTER_MS", DEFAULT_CLEAR_AFTER_MS),
            start_delay_ms=_env_int("CAPTION_START_DELAY_MS", DEFAULT_START_DELAY_MS),
            app_start_delay_ms=_env_int("CAPTION_APP_START_DELAY_MS", DEFAULT_APP_START_DELAY_MS),
            max_sessions=_env_int("CAPTION_MAX_SESSIONS", DEFAULT_MAX_SESSIONS, minimum=1),
        )

    def start_delay_for(self, embedded: bool) -> float:
        """Start delay in seconds for a regular browser or an embedded webview."""
        delay_ms = self.app_start_delay_ms if embedded else self.start_delay_ms
        return delay_ms / 1000.0

    @property
    def clear_after(self) -> float | None:
        """Inactivity clear delay in seconds, or None when disabled."""
        if self.clear_after_ms <= 0:
            return None
        return self.clear_after_ms / 1000.0


def get_settings() -> CaptionSettings:
    """Read settings from the current environment."""
    return CaptionSettings.from_env()
