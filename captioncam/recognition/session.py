"""
Recognition Session Adapter

Owns the recognizer lifecycle and keeps it running. Recognition sessions end
by themselves after a stretch of silence, so every "end" is treated as
"idle, please resume": the ledger is checkpointed and the recognizer started
again. The rest of the application sees one continuous stream of captions.

States:
  UNINITIALIZED -> READY -> LISTENING <-> ENDED
  PAUSED    - stopped on request; start() resumes
  DISABLED  - platform judged incapable; terminal

A platform is judged incapable when no recognizer can be created, or when an
error other than "no-speech"/"aborted" arrives before any "speechstart". Some
platforms accept a session start but never process audio, and "speechstart"
is the only reliable sign that they do.
"""

import logging
from collections.abc import Callable
from enum import Enum

from captioncam.transcript import RecognitionEvent, TranscriptLedger

from .base import RecognitionError, RecognitionListener, Recognizer, RecognizerError

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "ja-JP"


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    LISTENING = "listening"
    ENDED = "ended"
    PAUSED = "paused"
    DISABLED = "disabled"


class RecognitionSessionAdapter(RecognitionListener):
    """Drives a TranscriptLedger from a restartable recognizer."""

    def __init__(
        self,
        ledger: TranscriptLedger | None = None,
        recognizer_factory: Callable[[], Recognizer | None] | None = None,
        language: str = DEFAULT_LANGUAGE,
        on_updated: Callable[[str], None] | None = None,
        on_critical: Callable[[str], None] | None = None,
        on_log: Callable[[str], None] | None = None,
    ):
        """
        Initialize session adapter.

        Args:
            ledger: Transcript ledger to drive (a fresh one if None)
            recognizer_factory: Creates the recognizer; returns None when the
                platform has no recognition capability
            language: Recognition language tag
            on_updated: Callback with the current caption on every change
            on_critical: Callback when the platform is judged incapable
            on_log: Callback for operator-facing lifecycle messages
        """
        self.ledger = ledger if ledger is not None else TranscriptLedger()
        self.recognizer_factory = recognizer_factory
        self.language = language
        self.on_updated = on_updated
        self.on_critical = on_critical
        self.on_log = on_log

        self.recognizer: Recognizer | None = None
        self.state = SessionState.UNINITIALIZED
        self.available = True
        self.speech_detected = False

    def _log(self, message: str, level: int = logging.INFO) -> None:
        logger.log(level, message)
        self._notify(self.on_log, message)

    def _notify(self, callback: Callable[[str], None] | None, value: str) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            # Owner errors must not break recognizer event delivery
            logger.exception("Session callback failed")

    def initialize(self) -> bool:
        """
        Create and configure the recognizer. Only the first call does anything.

        Returns:
            True if a recognizer is available
        """
        if self.state != SessionState.UNINITIALIZED:
            return self.available

        recognizer = None
        if self.recognizer_factory is not None:
            try:
                recognizer = self.recognizer_factory()
            except RecognizerError as e:
                self._log(f"Recognizer creation failed: {e}", logging.WARNING)

        if recognizer is None:
            self._log("SpeechRecognition not found.", logging.WARNING)
            self.available = False
            self.state = SessionState.DISABLED
            return False

        self._log(f"{type(recognizer).__name__} found.")
        recognizer.continuous = True
        recognizer.interim_results = True
        recognizer.lang = self.language
        recognizer.bind(self)

        self.recognizer = recognizer
        self.available = True
        self.state = SessionState.READY
        return True

    def start(self) -> bool:
        """
        Start (or restart) recognition.

        Returns:
            True if the recognizer was started
        """
        self._log("SpeechRecognizer.start() begins.", logging.DEBUG)
        if self.state in (SessionState.UNINITIALIZED, SessionState.DISABLED):
            return False
        if not self.available or self.recognizer is None:
            return False

        self.ledger.checkpoint()
        try:
            self.recognizer.start()
        except RecognizerError as e:
            self._log(f"Recognizer start failed: {e}", logging.ERROR)
            return False
        self.state = SessionState.LISTENING
        return True

    def pause(self) -> bool:
        """
        Stop recognition without disabling it; start() resumes.

        Returns:
            True if the adapter is now paused
        """
        if self.state in (SessionState.UNINITIALIZED, SessionState.DISABLED):
            return False
        if self.state == SessionState.PAUSED:
            return True

        self.state = SessionState.PAUSED
        self._log("Recognition paused.")
        try:
            self.recognizer.stop()
        except RecognizerError as e:
            self._log(f"Recognizer stop failed: {e}", logging.WARNING)
        return True

    @property
    def is_disabled(self) -> bool:
        return self.state == SessionState.DISABLED

    # ----- Recognizer signals -----

    def on_start(self) -> None:
        self._log("onstart")

    def on_audio_start(self) -> None:
        self._log("onaudiostart")

    def on_sound_start(self) -> None:
        self._log("onsoundstart")

    def on_speech_start(self) -> None:
        self._log("onspeechstart")
        self.speech_detected = True

    def on_speech_end(self) -> None:
        self._log("onspeechend")

    def on_sound_end(self) -> None:
        self._log("onsoundend")

    def on_audio_end(self) -> None:
        self._log("onaudioend")

    def on_result(self, event: RecognitionEvent) -> None:
        if self.ledger.update(event):
            self._notify(self.on_updated, self.ledger.get_current_speech())

    def on_end(self) -> None:
        self._log("onend")
        self.ledger.checkpoint()
        if self.state in (SessionState.DISABLED, SessionState.PAUSED):
            return
        self.state = SessionState.ENDED
        self.start()

    def on_error(self, error: RecognitionError) -> None:
        self._log(f"onerror({error.error}) msg:{error.message}", logging.WARNING)
        if self.state == SessionState.DISABLED:
            return
        if self.speech_detected or error.is_recoverable:
            # The following "end" signal restarts the session
            return

        self.available = False
        self.state = SessionState.DISABLED
        self._log(
            "Speech recognition seems unavailable: error before onspeechstart.",
            logging.ERROR,
        )
        self._notify(self.on_critical, f"{error.error} ({error.message})")

    def on_nomatch(self) -> None:
        self._log("onnomatch")

    def __repr__(self) -> str:
        return f"RecognitionSessionAdapter(state={self.state.value}, ledger={self.ledger!r})"
