"""
Unit tests for the captioncam command line.
"""

import json
from unittest.mock import patch

import pytest

from captioncam.__main__ import main


def write_script(path, records):
    path.write_text(
        "\n".join(json.dumps(r, ensure_ascii=False) for r in records) + "\n", encoding="utf-8"
    )
    return path


def result(text: str, is_final: bool) -> dict:
    return {
        "signal": "result",
        "data": {
            "resultIndex": 0,
            "results": [{"isFinal": is_final, "alternatives": [{"transcript": text}]}],
        },
    }


class TestReplay:
    """Tests for the replay command."""

    def test_replay_prints_captions_and_exports(self, tmp_path, capsys):
        """Test captions are printed and the transcript exported."""
        script = write_script(
            tmp_path / "events.jsonl",
            [
                {"signal": "start"},
                {"signal": "speechstart"},
                result("こんに", False),
                result("こんにちは", True),
                {"signal": "end"},
            ],
        )
        output = tmp_path / "transcript.txt"
        oplog = tmp_path / "log.txt"

        code = main(["replay", str(script), "-o", str(output), "--log-output", str(oplog)])

        assert code == 0
        out = capsys.readouterr().out
        assert "こんに\n" in out
        assert "こんにちは。\n" in out
        assert output.read_text(encoding="utf-8") == "こんにちは。\n"
        assert "onspeechstart" in oplog.read_text(encoding="utf-8")

    def test_replay_fatal_error(self, tmp_path, capsys):
        """Test an early fatal error gives a non-zero exit code."""
        script = write_script(
            tmp_path / "events.jsonl",
            [{"signal": "error", "data": {"error": "not-allowed", "message": "denied"}}],
        )

        assert main(["replay", str(script)]) == 1
        assert "CRITICAL: not-allowed (denied)" in capsys.readouterr().err

    def test_replay_missing_file(self, tmp_path, capsys):
        """Test an unreadable script is reported."""
        assert main(["replay", str(tmp_path / "missing.jsonl")]) == 2
        assert "Cannot read" in capsys.readouterr().err

    def test_replay_max_characters(self, tmp_path):
        """Test --max-characters overrides the window budget."""
        script = write_script(
            tmp_path / "events.jsonl",
            [
                result("abc", True),
                {"signal": "end"},
                result("defghi", True),
            ],
        )
        output = tmp_path / "transcript.txt"

        assert main(["replay", str(script), "--max-characters", "3", "-o", str(output)]) == 0
        # Over-budget utterance is dropped from the window before it is archived
        assert output.read_text(encoding="utf-8") == "abc。\n"


class TestServe:
    """Tests for the serve command."""

    def test_serve_runs_uvicorn(self):
        """Test serve hands the app to uvicorn."""
        with patch("uvicorn.run") as run:
            assert main(["serve", "--port", "9000"]) == 0
        run.assert_called_once_with("captioncam.service:app", host="0.0.0.0", port=9000)

    def test_command_required(self):
        """Test a subcommand is required."""
        with pytest.raises(SystemExit):
            main([])
