import asyncio
import logging
import wave
from pathlib import Path

import numpy as np

try:
    import sounddevice as sd
    SD_AVAILABLE = True
except Exception as e:  # PortAudio missing raises OSError at import
    sd = None
    SD_AVAILABLE = False
    logging.getLogger(__name__).warning("sounddevice unavailable: %s", e)

from . import config

logger = logging.getLogger(__name__)

# name -> file in the sounds directory
SOUND_FILES = {
    "engineStart": "engine-start.wav",
    "engineStop": "engine-stop.wav",
    "drsOn": "beep.wav",
    "drsOff": "beep.wav",
    "radioBeep": "radio-beep.wav",
    "overtakeOn": "overtake-on.wav",
}


class SoundError(Exception):
    pass


class SoundNotFoundError(SoundError):
    pass


class SoundPlaybackError(SoundError):
    pass


def _tone(freq_start, freq_end, duration, rate, volume=0.3):
    """Frequency sweep with a short fade in/out, as float32 mono."""
    n = int(duration * rate)
    freqs = np.linspace(freq_start, freq_end, n)
    phase = 2 * np.pi * np.cumsum(freqs) / rate
    wave_data = np.sin(phase)
    fade = min(n // 10, int(0.01 * rate))
    if fade:
        ramp = np.linspace(0.0, 1.0, fade)
        wave_data[:fade] *= ramp
        wave_data[-fade:] *= ramp[::-1]
    return (wave_data * volume).astype(np.float32)


def synthesize(name: str, rate: int) -> np.ndarray:
    """Built-in effect used when no recording is shipped for ``name``."""
    if name == "engineStart":
        return _tone(60, 220, 1.2, rate, volume=0.4)
    if name == "engineStop":
        return _tone(220, 40, 0.9, rate, volume=0.4)
    if name == "overtakeOn":
        return _tone(400, 1200, 0.5, rate)
    if name == "radioBeep":
        return np.concatenate([_tone(1000, 1000, 0.08, rate),
                               np.zeros(int(0.05 * rate), dtype=np.float32),
                               _tone(1000, 1000, 0.08, rate)])
    return _tone(880, 880, 0.15, rate)


def read_wav(path: Path) -> tuple[np.ndarray, int]:
    """Read a 16-bit PCM WAV file into float32 samples."""
    with wave.open(str(path), "rb") as wf:
        rate = wf.getframerate()
        channels = wf.getnchannels()
        if wf.getsampwidth() != 2:
            raise SoundError(f"Unsupported sample width in {path.name}")
        frames = wf.readframes(wf.getnframes())
    data = np.frombuffer(frames, dtype=np.int16).astype(np.float32) / 32768.0
    if channels > 1:
        data = data.reshape(-1, channels)
    return data, rate


class AudioService:
    """Pre-loaded sound effects played through sounddevice."""

    def __init__(self, sounds_dir: Path | None = None, backend=None):
        self.sounds_dir = Path(sounds_dir) if sounds_dir else config.SOUNDS_DIR
        self.backend = backend if backend is not None else sd
        self.sounds = {}
        self.AUDIO_AVAILABLE = self.backend is not None
        if not self.AUDIO_AVAILABLE:
            logger.warning("Audio output not available; sounds are disabled.")

    def load_sounds(self):
        """Load every effect so playback starts without delay."""
        if not self.AUDIO_AVAILABLE:
            return
        logger.info("Loading sounds...")
        for name, filename in SOUND_FILES.items():
            path = self.sounds_dir / filename
            if path.exists():
                try:
                    self.sounds[name] = read_wav(path)
                    continue
                except (SoundError, wave.Error, EOFError) as e:
                    logger.warning("Could not read %s, using built-in tone: %s", path, e)
            self.sounds[name] = (synthesize(name, config.SAMPLE_RATE), config.SAMPLE_RATE)

    async def play_sound(self, name: str):
        """Play a sound and return once it has finished.

        Raises:
            SoundNotFoundError: If no sound named ``name`` is loaded.
            SoundPlaybackError: If the audio device refuses to play it.
        """
        if not self.AUDIO_AVAILABLE:
            return
        if name not in self.sounds:
            warning = f"Sound not found: {name}"
            logger.warning(warning)
            raise SoundNotFoundError(warning)

        data, rate = self.sounds[name]
        try:
            await asyncio.to_thread(self._play_blocking, data, rate)
        except Exception as e:
            logger.error("Could not play sound: %s (%s)", name, e)
            raise SoundPlaybackError(f"Could not play sound: {name}") from e

    def _play_blocking(self, data, rate):
        self.backend.play(data, rate)
        self.backend.wait()
