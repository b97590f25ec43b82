"""
Caption Context

The application object: one TranscriptLedger, one RecognitionSessionAdapter,
the caption currently on screen and the operator log, constructed once and
passed around explicitly.

The caption is cleared after a stretch without updates so stale text does not
linger over the camera feed. Only the displayed caption is cleared; the
transcript is untouched.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from captioncam.config import CaptionSettings
from captioncam.recognition import RecognitionSessionAdapter, Recognizer, SessionState
from captioncam.transcript import TranscriptLedger
from captioncam.utils import OperatorLog

logger = logging.getLogger(__name__)


class CaptionContext:
    """Main application class coordinating recognition, transcript and caption."""

    def __init__(
        self,
        settings: CaptionSettings | None = None,
        recognizer_factory: Callable[[], Recognizer | None] | None = None,
        language: str | None = None,
        on_caption: Callable[[str], None] | None = None,
        on_critical: Callable[[str], None] | None = None,
        auto_clear: bool = True,
    ):
        """
        Initialize caption context.

        Args:
            settings: Caption settings (defaults to CaptionSettings())
            recognizer_factory: Creates the recognizer, None if unsupported
            language: Recognition language (settings.language if None)
            on_caption: Callback with the caption to display ("" clears it)
            on_critical: Callback when speech recognition is unusable
            auto_clear: Run the inactivity clear timer in this process
        """
        self.settings = settings or CaptionSettings()
        self.on_caption = on_caption
        self.on_critical = on_critical
        self.auto_clear = auto_clear

        self.operator_log = OperatorLog()
        self.ledger = TranscriptLedger(
            max_characters=self.settings.max_characters,
            on_log=self.operator_log.append,
        )
        self.session = RecognitionSessionAdapter(
            ledger=self.ledger,
            recognizer_factory=recognizer_factory,
            language=language or self.settings.language,
            on_updated=self._on_updated,
            on_critical=self._on_critical,
            on_log=self.operator_log.append,
        )

        self.caption = ""
        self.critical_message: str | None = None
        self._lock = threading.Lock()
        self._clear_timer: threading.Timer | None = None

    # ----- Caption display -----

    def _set_caption(self, caption: str) -> None:
        with self._lock:
            self.caption = caption
        if self.on_caption:
            try:
                self.on_caption(caption)
            except Exception:
                logger.exception("on_caption callback failed")

    def _on_updated(self, caption: str) -> None:
        self._set_caption(caption)
        self._arm_clear_timer()

    def _on_critical(self, message: str) -> None:
        self.critical_message = message
        logger.error(f"Speech recognition unavailable: {message}")
        if self.on_critical:
            try:
                self.on_critical(message)
            except Exception:
                logger.exception("on_critical callback failed")

    def _arm_clear_timer(self) -> None:
        delay = self.settings.clear_after
        if not self.auto_clear or delay is None:
            return
        with self._lock:
            if self._clear_timer is not None:
                self._clear_timer.cancel()
            self._clear_timer = threading.Timer(delay, self._set_caption, args=("",))
            self._clear_timer.daemon = True
            self._clear_timer.start()

    def _cancel_clear_timer(self) -> None:
        with self._lock:
            if self._clear_timer is not None:
                self._clear_timer.cancel()
                self._clear_timer = None

    # ----- Lifecycle -----

    def prepare(self) -> bool:
        """Create the recognizer. Returns False if recognition is unsupported."""
        available = self.session.initialize()
        if not available and self.critical_message is None:
            self._on_critical("speech recognition is not supported")
        return available

    def start(self) -> bool:
        """Clear the waiting caption and start recognition."""
        self._set_caption("")
        return self.session.start()

    def pause(self) -> bool:
        self._cancel_clear_timer()
        return self.session.pause()

    def close(self) -> None:
        """Stop recognition and archive the active window."""
        self._cancel_clear_timer()
        if self.session.state not in (SessionState.UNINITIALIZED, SessionState.DISABLED):
            self.session.pause()
        self.ledger.checkpoint()

    # ----- Export -----

    def transcript_text(self) -> str:
        """Whole transcript, one punctuated utterance per line."""
        return "".join(self.ledger.get_whole_log())

    def export_transcript(self, path: str | Path) -> Path:
        """Write the whole transcript to a UTF-8 text file."""
        path = Path(path)
        path.write_text(self.transcript_text(), encoding="utf-8")
        logger.info(f"Transcript exported to {path}")
        return path

    def export_operator_log(self, path: str | Path) -> Path:
        return self.operator_log.export(path)

    @property
    def state(self) -> SessionState:
        return self.session.state

    def __repr__(self) -> str:
        return f"CaptionContext(state={self.state.value}, caption={self.caption[:20]!r})"
