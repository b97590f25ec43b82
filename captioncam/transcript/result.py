"""
Recognition Result Data Classes

Represents the snapshots a streaming speech recognizer pushes on every update.

Wire shape (browser SpeechRecognitionEvent, serialized to JSON):
  {"resultIndex": 2,
   "results": [{"isFinal": true, "alternatives": [{"transcript": "hello"}]}, ...]}

The array-like form emitted by a naive serializer ({"isFinal": true, "0": {...}})
is accepted as well.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionAlternative:
    """One ranked hypothesis for a recognized segment."""

    transcript: str | None = ""
    confidence: float = 1.0


@dataclass(frozen=True)
class RecognitionResult:
    """
    Ranked alternatives for one recognized segment.

    Attributes:
        alternatives: Hypotheses, best first (only the first one is consumed)
        is_final: Whether the recognizer will revise this segment again
    """

    alternatives: tuple[RecognitionAlternative, ...] = ()
    is_final: bool = False

    @classmethod
    def final(cls, text: str, confidence: float = 1.0) -> "RecognitionResult":
        """Create a final result with a single alternative."""
        return cls(alternatives=(RecognitionAlternative(text, confidence),), is_final=True)

    @classmethod
    def interim(cls, text: str) -> "RecognitionResult":
        """Create an interim result with a single alternative."""
        return cls(alternatives=(RecognitionAlternative(text),), is_final=False)

    @property
    def transcript(self) -> str | None:
        """Top alternative's transcript, or None when there is no alternative."""
        if not self.alternatives:
            return None
        return self.alternatives[0].transcript

    @classmethod
    def from_dict(cls, data: Any) -> "RecognitionResult":
        """Parse one serialized result. Malformed input yields an empty result."""
        if not isinstance(data, dict):
            return cls()

        raw_alternatives = data.get("alternatives")
        if raw_alternatives is None:
            # Array-like SpeechRecognitionResult: {"0": {...}, "1": {...}, "length": 2}
            raw_alternatives = []
            index = 0
            while str(index) in data:
                raw_alternatives.append(data[str(index)])
                index += 1

        alternatives = []
        if isinstance(raw_alternatives, list):
            for alt in raw_alternatives:
                if not isinstance(alt, dict):
                    continue
                transcript = alt.get("transcript")
                if not isinstance(transcript, str):
                    transcript = None
                confidence = alt.get("confidence", 1.0)
                if not isinstance(confidence, (int, float)):
                    confidence = 1.0
                alternatives.append(RecognitionAlternative(transcript, float(confidence)))

        return cls(alternatives=tuple(alternatives), is_final=data.get("isFinal") is True)

    def __str__(self) -> str:
        status = "final" if self.is_final else "interim"
        text = self.transcript or ""
        if len(text) > 50:
            return f"RecognitionResult({status}: {text[:50]}...)"
        return f"RecognitionResult({status}: {text})"


@dataclass(frozen=True)
class RecognitionEvent:
    """
    Snapshot of every result in the active recognition session.

    Attributes:
        result_index: Lowest index changed since the previous event
        results: Results indexed from 0 for the lifetime of one session
    """

    result_index: int = 0
    results: tuple[RecognitionResult, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> "RecognitionEvent":
        """
        Parse a serialized SpeechRecognitionEvent.

        Never raises: recognizer input is untrusted and a bad payload must
        not break the capture loop. Unknown fields are ignored.
        """
        if not isinstance(data, dict):
            logger.debug(f"Ignoring non-object recognition payload: {type(data).__name__}")
            return cls()

        result_index = data.get("resultIndex", 0)
        if isinstance(result_index, bool) or not isinstance(result_index, int):
            result_index = 0

        raw_results = data.get("results")
        if not isinstance(raw_results, list):
            raw_results = []

        return cls(
            result_index=result_index,
            results=tuple(RecognitionResult.from_dict(r) for r in raw_results),
        )

    def __len__(self) -> int:
        return len(self.results)
