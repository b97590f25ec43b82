"""
Unit tests for captioncam.recognition.session module.
"""

from unittest.mock import MagicMock

import pytest

from captioncam.recognition.base import Recognizer, RecognizerError
from captioncam.recognition.session import RecognitionSessionAdapter, SessionState
from captioncam.transcript import TranscriptLedger


class FakeRecognizer(Recognizer):
    """Recognizer that records start/stop calls."""

    def __init__(self, fail_start: bool = False):
        super().__init__()
        self.fail_start = fail_start
        self.start_calls = 0
        self.stop_calls = 0

    def start(self):
        if self.fail_start:
            raise RecognizerError("already started")
        self.start_calls += 1

    def stop(self):
        self.stop_calls += 1


def final_payload(text: str, index: int = 0) -> dict:
    results = [{"isFinal": True, "alternatives": [{"transcript": "x"}]} for _ in range(index)]
    results.append({"isFinal": True, "alternatives": [{"transcript": text}]})
    return {"resultIndex": index, "results": results}


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def callbacks():
    return {"on_updated": MagicMock(), "on_critical": MagicMock(), "on_log": MagicMock()}


@pytest.fixture
def session(recognizer, callbacks):
    adapter = RecognitionSessionAdapter(recognizer_factory=lambda: recognizer, **callbacks)
    assert adapter.initialize() is True
    return adapter


class TestInitialize:
    """Tests for RecognitionSessionAdapter.initialize."""

    def test_no_factory_disables(self):
        """Test a platform without recognizer is disabled."""
        adapter = RecognitionSessionAdapter()
        assert adapter.initialize() is False
        assert adapter.state == SessionState.DISABLED
        assert adapter.start() is False

    def test_factory_returning_none_disables(self):
        """Test a factory returning None reports unavailable."""
        adapter = RecognitionSessionAdapter(recognizer_factory=lambda: None)
        assert adapter.initialize() is False
        assert adapter.available is False

    def test_factory_error_disables(self):
        """Test RecognizerError from the factory reports unavailable."""
        factory = MagicMock(side_effect=RecognizerError("no engine"))
        adapter = RecognitionSessionAdapter(recognizer_factory=factory)
        assert adapter.initialize() is False
        assert adapter.state == SessionState.DISABLED

    def test_configures_recognizer(self, recognizer):
        """Test recognizer is set up for continuous interim recognition."""
        adapter = RecognitionSessionAdapter(recognizer_factory=lambda: recognizer, language="en-US")
        adapter.initialize()

        assert recognizer.continuous is True
        assert recognizer.interim_results is True
        assert recognizer.lang == "en-US"
        assert adapter.state == SessionState.READY

    def test_default_language(self, session, recognizer):
        """Test default recognition language."""
        assert recognizer.lang == "ja-JP"

    def test_initialize_is_idempotent(self, recognizer):
        """Test the factory runs only once."""
        factory = MagicMock(return_value=recognizer)
        adapter = RecognitionSessionAdapter(recognizer_factory=factory)

        assert adapter.initialize() is True
        assert adapter.initialize() is True
        factory.assert_called_once()

    def test_idempotent_when_unavailable(self):
        """Test a second call returns the cached availability."""
        factory = MagicMock(return_value=None)
        adapter = RecognitionSessionAdapter(recognizer_factory=factory)
        assert adapter.initialize() is False
        assert adapter.initialize() is False
        factory.assert_called_once()


class TestStart:
    """Tests for RecognitionSessionAdapter.start."""

    def test_start_before_initialize(self, recognizer):
        """Test start is refused before initialize."""
        adapter = RecognitionSessionAdapter(recognizer_factory=lambda: recognizer)
        assert adapter.start() is False
        assert recognizer.start_calls == 0

    def test_start(self, session, recognizer):
        """Test start runs the recognizer."""
        assert session.start() is True
        assert recognizer.start_calls == 1
        assert session.state == SessionState.LISTENING

    def test_start_checkpoints_ledger(self, session, recognizer):
        """Test start archives the previous window."""
        session.start()
        recognizer.dispatch("result", final_payload("hello"))

        session.start()

        assert [r.transcript for r in session.ledger.finalized_history] == ["hello"]
        assert session.ledger.highest_finalized_index == -1

    def test_start_failure(self, callbacks):
        """Test RecognizerError on start is absorbed."""
        recognizer = FakeRecognizer(fail_start=True)
        adapter = RecognitionSessionAdapter(recognizer_factory=lambda: recognizer, **callbacks)
        adapter.initialize()

        assert adapter.start() is False
        assert adapter.state == SessionState.READY


class TestResults:
    """Tests for result forwarding."""

    def test_result_emits_caption(self, session, recognizer, callbacks):
        """Test a changed transcript is emitted to the owner."""
        session.start()
        recognizer.dispatch("result", final_payload("こんにちは"))
        callbacks["on_updated"].assert_called_once_with("こんにちは。")

    def test_unchanged_result_not_emitted(self, session, recognizer, callbacks):
        """Test empty finalizations do not trigger a redraw."""
        session.start()
        recognizer.dispatch("result", final_payload(""))
        callbacks["on_updated"].assert_not_called()

    def test_shared_ledger(self, recognizer):
        """Test an injected ledger is driven."""
        ledger = TranscriptLedger(max_characters=5)
        adapter = RecognitionSessionAdapter(ledger=ledger, recognizer_factory=lambda: recognizer)
        adapter.initialize()
        adapter.start()
        recognizer.dispatch("result", final_payload("abc"))
        assert adapter.ledger is ledger
        assert ledger.get_current_speech() == "abc。"

    def test_owner_error_is_contained(self, recognizer):
        """Test a raising on_updated does not break event delivery."""
        adapter = RecognitionSessionAdapter(
            recognizer_factory=lambda: recognizer,
            on_updated=MagicMock(side_effect=RuntimeError("ui gone")),
        )
        adapter.initialize()
        adapter.start()
        recognizer.dispatch("result", final_payload("hello"))
        assert adapter.ledger.get_current_speech() == "hello。"


class TestRestart:
    """Tests for restart on session end."""

    def test_end_restarts(self, session, recognizer):
        """Test every end starts a new session."""
        session.start()
        for _ in range(3):
            recognizer.dispatch("end")
        assert recognizer.start_calls == 4
        assert session.state == SessionState.LISTENING

    def test_end_checkpoints(self, session, recognizer):
        """Test end archives the window so text survives the restart."""
        session.start()
        recognizer.dispatch("result", final_payload("before"))
        recognizer.dispatch("end")
        recognizer.dispatch("result", final_payload("after"))

        assert session.ledger.get_whole_log() == ["before。\n", "after。\n"]
        assert session.ledger.get_current_speech() == "after。"

    def test_nomatch_logged_only(self, session, recognizer, callbacks):
        """Test nomatch changes nothing."""
        session.start()
        recognizer.dispatch("nomatch")
        assert session.state == SessionState.LISTENING
        assert any(c.args[0] == "onnomatch" for c in callbacks["on_log"].call_args_list)


class TestErrors:
    """Tests for error classification."""

    def test_fatal_error_before_speech(self, session, recognizer, callbacks):
        """Test an early network error disables recognition for good."""
        session.start()
        recognizer.dispatch("audiostart")
        recognizer.dispatch("error", {"error": "network", "message": "offline"})

        callbacks["on_critical"].assert_called_once()
        assert "network" in callbacks["on_critical"].call_args.args[0]
        assert session.state == SessionState.DISABLED
        assert session.start() is False
        assert session.start() is False

    def test_no_restart_after_fatal(self, session, recognizer, callbacks):
        """Test the end following a fatal error does not restart."""
        session.start()
        recognizer.dispatch("error", {"error": "not-allowed", "message": ""})
        recognizer.dispatch("end")
        recognizer.dispatch("error", {"error": "network", "message": ""})

        assert recognizer.start_calls == 1
        callbacks["on_critical"].assert_called_once()

    @pytest.mark.parametrize("code", ["no-speech", "aborted"])
    def test_recoverable_errors(self, session, recognizer, callbacks, code):
        """Test no-speech and aborted never disable."""
        session.start()
        recognizer.dispatch("error", {"error": code})
        recognizer.dispatch("end")

        callbacks["on_critical"].assert_not_called()
        assert recognizer.start_calls == 2

    def test_error_after_speech(self, session, recognizer, callbacks):
        """Test errors after speechstart are transient."""
        session.start()
        recognizer.dispatch("speechstart")
        recognizer.dispatch("error", {"error": "network"})
        recognizer.dispatch("end")

        assert session.speech_detected is True
        callbacks["on_critical"].assert_not_called()
        assert recognizer.start_calls == 2

    def test_lifecycle_is_logged(self, session, recognizer, callbacks):
        """Test lifecycle signals reach on_log."""
        session.start()
        for signal in ["start", "audiostart", "soundstart", "speechstart",
                       "speechend", "soundend", "audioend", "end"]:
            recognizer.dispatch(signal)

        messages = [c.args[0] for c in callbacks["on_log"].call_args_list]
        for expected in ["onstart", "onaudiostart", "onsoundstart", "onspeechstart",
                         "onspeechend", "onsoundend", "onaudioend", "onend"]:
            assert expected in messages


class TestPause:
    """Tests for RecognitionSessionAdapter.pause."""

    def test_pause_stops_and_blocks_restart(self, session, recognizer):
        """Test a paused session is not restarted on end."""
        session.start()
        assert session.pause() is True
        recognizer.dispatch("end")

        assert recognizer.stop_calls == 1
        assert recognizer.start_calls == 1
        assert session.state == SessionState.PAUSED

    def test_start_resumes(self, session, recognizer):
        """Test start after pause resumes recognition."""
        session.start()
        session.pause()
        assert session.start() is True
        assert session.state == SessionState.LISTENING

    def test_pause_disabled(self):
        """Test a disabled session cannot be paused."""
        adapter = RecognitionSessionAdapter()
        adapter.initialize()
        assert adapter.pause() is False
        assert adapter.state == SessionState.DISABLED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
