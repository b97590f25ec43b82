"""
Recognition Module

Keeps an opaque streaming recognizer running and feeds its results into a
TranscriptLedger.

Usage:
    from captioncam.recognition import RecognitionSessionAdapter

    session = RecognitionSessionAdapter(
        recognizer_factory=make_recognizer,
        on_updated=show_caption,
        on_critical=show_alert,
    )
    if session.initialize():
        session.start()
"""

from .base import (
    RECOVERABLE_ERRORS,
    SIGNAL_HANDLERS,
    RecognitionError,
    RecognitionListener,
    Recognizer,
    RecognizerError,
)
from .remote import BrowserRecognizer
from .replay import ReplayRecognizer, load_script, parse_script
from .session import DEFAULT_LANGUAGE, RecognitionSessionAdapter, SessionState

__all__ = [
    "DEFAULT_LANGUAGE",
    "RECOVERABLE_ERRORS",
    "SIGNAL_HANDLERS",
    "BrowserRecognizer",
    "RecognitionError",
    "RecognitionListener",
    "RecognitionSessionAdapter",
    "Recognizer",
    "RecognizerError",
    "ReplayRecognizer",
    "SessionState",
    "load_script",
    "parse_script",
]
