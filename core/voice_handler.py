import logging
import threading
import time

import speech_recognition as sr

from . import config

logger = logging.getLogger(__name__)


class VoiceHandler:
    """Continuous speech recognition on the default microphone.

    Recognised phrases are passed to ``on_result`` trimmed and lower-cased.
    If the listening loop dies unexpectedly it is restarted, unless
    ``stop_listening`` was called.
    """

    RESTART_DELAY_S = 1.0

    def __init__(self, state=None, recognizer=None, microphone_factory=None):
        self.state = state
        self._stop = None
        self._thread = None
        self.AUDIO_AVAILABLE = False

        try:
            self.recognizer = recognizer or sr.Recognizer()
            self.microphone_factory = microphone_factory or sr.Microphone
            self.AUDIO_AVAILABLE = True
        except Exception as e:
            logger.warning("Audio Init Failed: %s", e)

    @property
    def running(self) -> bool:
        return self._stop is not None and not self._stop.is_set()

    def start_listening(self, on_result, on_error=None) -> bool:
        """Start listening in a background thread. Returns False if unsupported.

        Every call gets its own stop event, so a loop left over from an
        earlier session exits even if it is still blocked in ``listen``.
        """
        if not self.AUDIO_AVAILABLE:
            self._report(on_error, RuntimeError("Speech recognition not supported on this system."))
            return False
        if self.running:
            return True

        stop = threading.Event()
        self._stop = stop
        self._thread = threading.Thread(
            target=self._listen_loop, args=(on_result, on_error, stop), daemon=True)
        self._thread.start()
        logger.info("Speech recognition service started.")
        return True

    def stop_listening(self):
        if self._stop is not None:
            self._stop.set()
        self._set_listening(False)

    def _listen_loop(self, on_result, on_error, stop):
        while not stop.is_set():
            try:
                self._listen_session(on_result, stop)
            except Exception as e:
                logger.error("Speech recognition error: %s", e)
                self._report(on_error, e)
                if not stop.is_set():
                    logger.info("Restarting speech recognition...")
                    time.sleep(self.RESTART_DELAY_S)
        # a newer session owns the flag now
        if stop is self._stop:
            self._set_listening(False)
        logger.info("Speech recognition service stopped.")

    def _listen_session(self, on_result, stop):
        with self.microphone_factory() as source:
            self.recognizer.adjust_for_ambient_noise(source, duration=0.5)
            if not stop.is_set():
                self._set_listening(True)
            while not stop.is_set():
                try:
                    audio = self.recognizer.listen(
                        source,
                        timeout=config.LISTEN_TIMEOUT_S,
                        phrase_time_limit=config.PHRASE_TIME_LIMIT_S,
                    )
                except sr.WaitTimeoutError:
                    continue
                if stop.is_set():
                    break

                try:
                    text = self.recognizer.recognize_google(audio)
                except sr.UnknownValueError:
                    logger.debug("Could not understand audio")
                    continue

                transcript = text.strip().lower()
                if not transcript or stop.is_set():
                    continue
                logger.info("Transcript: %s", transcript)
                on_result(transcript)

    def _set_listening(self, value):
        if self.state is not None:
            self.state.is_listening = value

    @staticmethod
    def _report(on_error, error):
        if on_error is not None:
            on_error(error)
