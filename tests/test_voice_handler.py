"""Tests for continuous speech recognition."""

import threading
import time

import speech_recognition as sr

from core.car_state import CarState
from core.voice_handler import VoiceHandler


class FakeMicrophone:
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class ScriptedRecognizer:
    """Replays a list of transcripts; exceptions in the list are raised."""

    def __init__(self, script, handler_ref, done):
        self.script = list(script)
        self.handler_ref = handler_ref
        self.done = done

    def adjust_for_ambient_noise(self, source, duration=1):
        pass

    def listen(self, source, timeout=None, phrase_time_limit=None):
        if not self.script:
            self.handler_ref[0].stop_listening()
            self.done.set()
            raise sr.WaitTimeoutError("done")
        return self.script.pop(0)

    def recognize_google(self, audio):
        if isinstance(audio, Exception):
            raise audio
        return audio


def _run(script, on_error=None):
    handler_ref = [None]
    done = threading.Event()
    heard = []
    handler = VoiceHandler(
        CarState(),
        recognizer=ScriptedRecognizer(script, handler_ref, done),
        microphone_factory=FakeMicrophone,
    )
    handler.RESTART_DELAY_S = 0
    handler_ref[0] = handler
    assert handler.start_listening(heard.append, on_error) is True
    assert done.wait(2)
    handler._thread.join(2)
    return handler, heard


def test_transcripts_are_normalised() -> None:
    handler, heard = _run(["  Start Engine ", "BOX BOX"])
    assert heard == ["start engine", "box box"]
    assert not handler.running
    assert handler.state.is_listening is False


def test_unrecognised_audio_is_skipped() -> None:
    _, heard = _run([sr.UnknownValueError(), "Overtake"])
    assert heard == ["overtake"]


def test_restarts_after_failure() -> None:
    """An unexpected error is reported and listening carries on."""
    errors = []
    _, heard = _run([sr.RequestError("network down"), "fuel"], on_error=errors.append)
    assert len(errors) == 1
    assert heard == ["fuel"]


def test_unsupported_reports_error() -> None:
    errors = []
    handler = VoiceHandler(recognizer=object(), microphone_factory=FakeMicrophone)
    handler.AUDIO_AVAILABLE = False
    assert handler.start_listening(lambda text: None, errors.append) is False
    assert len(errors) == 1


class SlowRecognizer:
    """Every ``listen`` blocks for a while and then hears the same phrase."""

    def __init__(self, delay):
        self.delay = delay

    def adjust_for_ambient_noise(self, source, duration=1):
        pass

    def listen(self, source, timeout=None, phrase_time_limit=None):
        time.sleep(self.delay)
        return "Push now"

    def recognize_google(self, audio):
        return audio


def test_restart_while_blocked_keeps_one_listener() -> None:
    """Stopping and starting again must not leave the old loop running."""
    handler = VoiceHandler(CarState(), recognizer=SlowRecognizer(0.2),
                           microphone_factory=FakeMicrophone)
    first, second = [], []

    handler.start_listening(first.append)
    old_thread = handler._thread
    time.sleep(0.05)
    handler.stop_listening()
    handler.start_listening(second.append)

    old_thread.join(1)
    assert not old_thread.is_alive()
    assert first == []
    assert handler.running
    assert handler.state.is_listening is True

    time.sleep(0.3)
    handler.stop_listening()
    handler._thread.join(1)
    assert second
    assert all(text == "push now" for text in second)
    listeners = [t for t in threading.enumerate() if "_listen_loop" in t.name]
    assert listeners == []
