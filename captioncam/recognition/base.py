"""
Recognizer Capability

The opaque streaming speech recognizer the session adapter drives. Concrete
recognizers (a browser on the other end of a WebSocket, a recorded replay)
only need to implement start/stop and call dispatch() for every lifecycle
signal they observe. Signals are delivered serially.

Signal names follow the Web Speech API event types.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from captioncam.transcript import RecognitionEvent

logger = logging.getLogger(__name__)

# Wire signal name -> RecognitionListener method
SIGNAL_HANDLERS: dict[str, str] = {
    "start": "on_start",
    "audiostart": "on_audio_start",
    "soundstart": "on_sound_start",
    "speechstart": "on_speech_start",
    "speechend": "on_speech_end",
    "soundend": "on_sound_end",
    "audioend": "on_audio_end",
    "result": "on_result",
    "end": "on_end",
    "error": "on_error",
    "nomatch": "on_nomatch",
}

# Error codes that do not indicate an incapable platform
RECOVERABLE_ERRORS = frozenset({"no-speech", "aborted"})


class RecognizerError(RuntimeError):
    """Raised by a recognizer that cannot be created or started."""


@dataclass(frozen=True)
class RecognitionError:
    """Error signal payload (SpeechRecognitionErrorEvent)."""

    error: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "RecognitionError":
        if not isinstance(data, dict):
            return cls()
        return cls(error=str(data.get("error") or ""), message=str(data.get("message") or ""))

    @property
    def is_recoverable(self) -> bool:
        return self.error in RECOVERABLE_ERRORS


class RecognitionListener:
    """Observer for recognizer lifecycle signals. Every method defaults to a no-op."""

    def on_start(self) -> None:
        pass

    def on_audio_start(self) -> None:
        pass

    def on_sound_start(self) -> None:
        pass

    def on_speech_start(self) -> None:
        pass

    def on_speech_end(self) -> None:
        pass

    def on_sound_end(self) -> None:
        pass

    def on_audio_end(self) -> None:
        pass

    def on_result(self, event: RecognitionEvent) -> None:
        pass

    def on_end(self) -> None:
        pass

    def on_error(self, error: RecognitionError) -> None:
        pass

    def on_nomatch(self) -> None:
        pass


class Recognizer(ABC):
    """
    Streaming recognition capability.

    Attributes:
        continuous: Keep listening across utterances
        interim_results: Report provisional results
        lang: BCP 47 language tag
    """

    def __init__(self):
        self.continuous = False
        self.interim_results = False
        self.lang = ""
        self._listener: RecognitionListener | None = None

    def bind(self, listener: RecognitionListener) -> None:
        """Register the listener that receives every lifecycle signal."""
        self._listener = listener

    @abstractmethod
    def start(self) -> None:
        """Begin a recognition session. Raises RecognizerError on failure."""

    @abstractmethod
    def stop(self) -> None:
        """Ask the recognizer to end the current session."""

    def dispatch(self, signal: str, data: Any = None) -> bool:
        """
        Route a lifecycle signal to the bound listener.

        Args:
            signal: Web Speech API event type ("result", "end", "error", ...)
            data: Event payload for "result" and "error"

        Returns:
            True if the signal was delivered
        """
        handler_name = SIGNAL_HANDLERS.get(signal)
        if handler_name is None:
            logger.warning(f"Unknown recognizer signal: {signal!r}")
            return False
        if self._listener is None:
            logger.debug(f"No listener bound, dropping signal {signal!r}")
            return False

        handler = getattr(self._listener, handler_name)
        if signal == "result":
            handler(RecognitionEvent.from_dict(data))
        elif signal == "error":
            handler(RecognitionError.from_dict(data))
        else:
            handler()
        return True
