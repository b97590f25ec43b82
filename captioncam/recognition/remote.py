"""Recognizer running in a browser at the other end of a WebSocket."""

import logging
from collections.abc import Callable
from typing import Any

from .base import Recognizer, RecognizerError

logger = logging.getLogger(__name__)


class BrowserRecognizer(Recognizer):
    """
    Proxy for the page's SpeechRecognition object.

    start()/stop() become command messages for the page; the page forwards
    every SpeechRecognition event back, which the service passes to dispatch().
    """

    def __init__(self, send: Callable[[dict[str, Any]], None]):
        """
        Initialize browser recognizer.

        Args:
            send: Queues a JSON message for the page
        """
        super().__init__()
        self.send = send
        self.start_count = 0
        self.closed = False

    def _command(self, command: str) -> None:
        if self.closed:
            raise RecognizerError(f"Connection closed, cannot send {command!r}")
        self.send(
            {
                "type": "command",
                "command": command,
                "lang": self.lang,
                "continuous": self.continuous,
                "interimResults": self.interim_results,
            }
        )

    def start(self) -> None:
        self._command("start")
        self.start_count += 1
        logger.debug(f"Start command #{self.start_count} sent")

    def stop(self) -> None:
        # A page that has gone away is not listening
        if self.closed:
            return
        self._command("stop")

    def close(self) -> None:
        """Mark the connection gone; later start commands raise RecognizerError."""
        self.closed = True
