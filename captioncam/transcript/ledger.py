"""
Transcript Ledger

Reconciles the snapshot stream of a streaming recognizer into a de-duplicated
transcript. Pure state: no I/O, no timers.

Recognizer behaviour it absorbs:
  - Every event repeats all results of the session; resultIndex marks the
    lowest changed one.
  - Some platforms finalize empty strings one after another.
  - Some platforms resend a longer version of the utterance they just
    finalized ("こんにち" then "こんにちは").
  - A session ends on silence and the next one restarts indexes from 0.

State:
  finalized_history  - final results of past sessions
  current_window     - final results of the active session, bounded by
                       max_characters
  pending_interim    - provisional results, replaced on every update
"""

import logging
from collections import deque
from collections.abc import Callable

from .result import RecognitionEvent, RecognitionResult

# Set up logger for this module
logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARACTERS = 300

# Characters that already terminate an utterance
TERMINAL_PUNCTUATION = ("。", "、", "？", "！", ".", ",", "?", "!")


def ensure_terminal_punctuation(text: object) -> str:
    """
    Append "。" unless text already ends in terminal punctuation.

    Examples:
        "こんにちは" -> "こんにちは。"
        "Hello!" -> "Hello!"
        "" -> ""
    """
    if not isinstance(text, str) or not text:
        return ""
    if text.endswith(TERMINAL_PUNCTUATION):
        return text
    return text + "。"


class TranscriptLedger:
    """
    Holds finalized history, the current finalized window and interim text.

    Simple API:
        ledger = TranscriptLedger()
        ledger.checkpoint()                 # before each recognition session
        if ledger.update(event):            # on every recognizer result
            show(ledger.get_current_speech())
        ledger.checkpoint()                 # when the session ends

        lines = ledger.get_whole_log()      # for export

    Nothing here raises on malformed recognizer input; anomalies are logged.
    """

    def __init__(
        self,
        max_characters: int = DEFAULT_MAX_CHARACTERS,
        on_log: Callable[[str], None] | None = None,
    ):
        """
        Initialize transcript ledger.

        Args:
            max_characters: Character budget of the current window
            on_log: Callback for operator-facing diagnostic messages
        """
        self._max_characters = max_characters
        self.on_log = on_log

        self._finalized_history: list[RecognitionResult] = []
        self._current_window: deque[RecognitionResult] = deque()
        self._pending_interim: list[RecognitionResult] = []
        self._highest_finalized_index = -1

    @property
    def max_characters(self) -> int:
        return self._max_characters

    @property
    def highest_finalized_index(self) -> int:
        """Highest results[] index marked final in the active session (-1 before any)."""
        return self._highest_finalized_index

    @property
    def finalized_history(self) -> list[RecognitionResult]:
        return list(self._finalized_history)

    @property
    def current_window(self) -> list[RecognitionResult]:
        return list(self._current_window)

    @property
    def pending_interim(self) -> list[RecognitionResult]:
        return list(self._pending_interim)

    def _log(self, message: str, level: int = logging.DEBUG) -> None:
        logger.log(level, message)
        if self.on_log:
            try:
                self.on_log(message)
            except Exception:
                logger.exception("on_log callback failed")

    def checkpoint(self) -> None:
        """
        Fold the current window into history and reset per-session state.

        Call once before each recognition session starts and once when it
        ends. Calling it twice in a row changes nothing.
        """
        if self._current_window:
            self._finalized_history.extend(self._current_window)
        self._current_window.clear()
        self._pending_interim = []
        self._highest_finalized_index = -1

    def update(self, event: RecognitionEvent) -> bool:
        """
        Apply a recognizer snapshot.

        Args:
            event: Snapshot of the active session's results

        Returns:
            True if the displayable transcript changed
        """
        if event is None:
            return False

        if event.result_index <= self._highest_finalized_index:
            self._log(
                f"[warning] resultIndex({event.result_index}) is no more than "
                f"finished({self._highest_finalized_index})",
                logging.WARNING,
            )

        items = self._extract_update(event)
        if not items:
            return False

        # Interim text is superseded by any update
        self._pending_interim = []
        for item in items:
            self._push_update(item)
        return True

    def _extract_update(self, event: RecognitionEvent) -> list[RecognitionResult]:
        """
        Collect results with text in the changed range and advance the finalized index.

        Returns:
            Results from max(highest_finalized_index, result_index) onward whose
            top transcript is non-empty
        """
        updated_items = []
        begin = max(self._highest_finalized_index, event.result_index, 0)
        for ix in range(begin, len(event.results)):
            result = event.results[ix]
            if result.is_final:
                self._highest_finalized_index = max(ix, self._highest_finalized_index)
            # Empty finalizations carry nothing to show
            transcript = result.transcript
            if isinstance(transcript, str) and transcript:
                updated_items.append(result)

        if updated_items:
            self._log(f"onresult new items({len(updated_items)}) index={event.result_index}")
        return updated_items

    def _push_update(self, result: RecognitionResult) -> None:
        if not result.is_final:
            self._pending_interim.append(result)
            return

        # A resent, longer version of the last utterance replaces it
        if self._current_window and result.transcript.startswith(
            self._current_window[-1].transcript
        ):
            replaced = self._current_window.pop()
            logger.debug(f"[REPLACE] '{replaced.transcript}' -> '{result.transcript}'")
        self._current_window.append(result)
        self._trim_current_window()

    def _trim_current_window(self) -> None:
        """
        Evict whole entries from the front until the window fits max_characters.

        Walks from the newest entry backward; the entry whose running sum first
        exceeds the budget is evicted together with everything older.
        Evicted entries are dropped; finalized_history is only fed by checkpoint().
        """
        total = 0
        for ix in range(len(self._current_window) - 1, -1, -1):
            total += len(self._current_window[ix].transcript)
            if total > self._max_characters:
                for _ in range(ix + 1):
                    self._current_window.popleft()
                logger.debug(f"[TRIM] evicted {ix + 1} entries, {len(self._current_window)} left")
                break

    def get_current_speech(self) -> str:
        """
        Get the live caption.

        Returns:
            Punctuated window transcripts followed by raw interim transcripts
        """
        text = "".join(ensure_terminal_punctuation(r.transcript) for r in self._current_window)
        text += "".join(r.transcript or "" for r in self._pending_interim)
        return text

    def get_whole_log(self) -> list[str]:
        """
        Get every utterance of the capture session for export.

        Includes unfinalized text so an export taken mid-sentence is complete.

        Returns:
            One punctuated line (with trailing newline) per entry of history,
            current window and pending interim, in that order
        """
        self._log(f"wholeLog({len(self._finalized_history)})")
        entries = [*self._finalized_history, *self._current_window, *self._pending_interim]
        return [ensure_terminal_punctuation(r.transcript) + "\n" for r in entries]

    @property
    def is_empty(self) -> bool:
        return not (self._finalized_history or self._current_window or self._pending_interim)

    def __repr__(self) -> str:
        return (
            f"TranscriptLedger(history={len(self._finalized_history)}, "
            f"window={len(self._current_window)}, interim={len(self._pending_interim)}, "
            f"finished={self._highest_finalized_index})"
        )
