import asyncio
import logging

import pyttsx3

from . import config

logger = logging.getLogger(__name__)


class SpeechError(Exception):
    pass


class SpeechService:
    """Text-to-speech through pyttsx3.

    A new engine is created for every utterance and driven from a worker
    thread, so the event loop is never blocked by ``runAndWait``.
    """

    def __init__(self, state=None, engine_factory=None):
        self.state = state
        self.engine_factory = engine_factory or pyttsx3.init
        self.speaking = False
        self.AUDIO_AVAILABLE = True
        try:
            # probe once so a missing TTS driver is found up front
            self.engine_factory()
        except Exception as e:
            logger.warning("Text-to-speech not available: %s", e)
            self.AUDIO_AVAILABLE = False

    async def speak(self, text: str):
        """Say ``text`` and return when the utterance ends.

        Empty text, or a call made while another utterance is still
        playing, returns immediately. Nothing is queued.
        """
        if not self.AUDIO_AVAILABLE or not text:
            return
        if self.speaking:
            logger.warning("Speech synthesis is already speaking.")
            return

        self.speaking = True
        self._set_talking(True)
        try:
            await asyncio.to_thread(self._say, text)
        except Exception as e:
            logger.error("TTS Error: %s", e)
            raise SpeechError(str(e)) from e
        finally:
            self.speaking = False
            self._set_talking(False)

    def _say(self, text):
        engine = self.engine_factory()
        engine.setProperty("rate", config.TTS_RATE)
        engine.say(text)
        engine.runAndWait()
        del engine

    def _set_talking(self, value):
        if self.state is not None:
            self.state.ai_talking = value
