"""
CaptionCam - live captions over a camera feed

Provides the transcript reconciliation engine behind the caption overlay:
- transcript: TranscriptLedger and the recognition result data classes
- recognition: Recognizer capability and the restarting session adapter
- config: Environment-driven settings
- context: CaptionContext, the application object tying them together
- utils: Logging helpers and the operator log

Usage:
    from captioncam import CaptionContext

    context = CaptionContext(recognizer_factory=make_recognizer, on_caption=show)
    if context.prepare():
        context.start()
"""

__version__ = "1.1.0"

from .config import CaptionSettings, get_settings
from .context import CaptionContext
from .recognition import (
    BrowserRecognizer,
    RecognitionError,
    RecognitionListener,
    RecognitionSessionAdapter,
    Recognizer,
    RecognizerError,
    ReplayRecognizer,
    SessionState,
)
from .transcript import (
    RecognitionAlternative,
    RecognitionEvent,
    RecognitionResult,
    TranscriptLedger,
    ensure_terminal_punctuation,
)
from .utils import OperatorLog, setup_logging

__all__ = [
    "BrowserRecognizer",
    "CaptionContext",
    "CaptionSettings",
    "OperatorLog",
    "RecognitionAlternative",
    "RecognitionError",
    "RecognitionEvent",
    "RecognitionListener",
    "RecognitionResult",
    "RecognitionSessionAdapter",
    "Recognizer",
    "RecognizerError",
    "ReplayRecognizer",
    "SessionState",
    "TranscriptLedger",
    "ensure_terminal_punctuation",
    "get_settings",
    "setup_logging",
]
