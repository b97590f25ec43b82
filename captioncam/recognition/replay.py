"""
Replay Recognizer

Plays back a recorded sequence of recognizer signals, for reproducing caption
behaviour offline.

Script format (JSON Lines, one signal per line):
  {"signal": "start"}
  {"signal": "speechstart"}
  {"signal": "result", "data": {"resultIndex": 0, "results": [...]}}
  {"signal": "end"}

Blank lines and lines starting with "#" are skipped.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .base import Recognizer

logger = logging.getLogger(__name__)

Step = tuple[str, Any]


def parse_script(lines: list[str]) -> list[Step]:
    """
    Parse script lines into (signal, data) steps.

    Raises:
        ValueError: If a line is not a JSON object with a "signal" string
    """
    steps: list[Step] = []
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"line {line_no}: invalid JSON ({e.msg})") from e
        if not isinstance(record, dict) or not isinstance(record.get("signal"), str):
            raise ValueError(f"line {line_no}: expected an object with a 'signal' string")
        steps.append((record["signal"], record.get("data")))
    return steps


def load_script(path: str | Path) -> list[Step]:
    """Read a replay script from a JSON Lines file."""
    with open(path, encoding="utf-8") as f:
        return parse_script(f.readlines())


class ReplayRecognizer(Recognizer):
    """Recognizer whose signals come from a recorded script."""

    def __init__(self, steps: list[Step]):
        super().__init__()
        self.steps = list(steps)
        self.start_count = 0
        self.stop_count = 0

    def start(self) -> None:
        # Playback is driven by play(); restarts are only counted
        self.start_count += 1

    def stop(self) -> None:
        self.stop_count += 1

    def play(self) -> int:
        """
        Dispatch every step in order.

        Returns:
            Number of steps delivered to the listener
        """
        delivered = 0
        for signal, data in self.steps:
            if self.dispatch(signal, data):
                delivered += 1
        logger.info(f"Replayed {delivered}/{len(self.steps)} signals")
        return delivered
