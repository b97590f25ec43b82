"""
Transcript Module

Provides TranscriptLedger, which turns overlapping recognizer snapshots into a
bounded live caption and a complete exportable log.

Usage:
    from captioncam.transcript import RecognitionEvent, TranscriptLedger

    ledger = TranscriptLedger(max_characters=300)
    if ledger.update(RecognitionEvent.from_dict(payload)):
        show(ledger.get_current_speech())
"""

from .ledger import (
    DEFAULT_MAX_CHARACTERS,
    TERMINAL_PUNCTUATION,
    TranscriptLedger,
    ensure_terminal_punctuation,
)
from .result import RecognitionAlternative, RecognitionEvent, RecognitionResult

__all__ = [
    "DEFAULT_MAX_CHARACTERS",
    "TERMINAL_PUNCTUATION",
    "RecognitionAlternative",
    "RecognitionEvent",
    "RecognitionResult",
    "TranscriptLedger",
    "ensure_terminal_punctuation",
]
