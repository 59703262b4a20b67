"""Tests for the declared install extras."""

from pathlib import Path

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def test_voice_extra_pulls_in_microphone_driver() -> None:
    """``sr.Microphone`` needs PyAudio, so the voice extra must declare it."""
    text = PYPROJECT.read_text(encoding="utf-8")
    assert 'voice = ["PyAudio"]' in text
