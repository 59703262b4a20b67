"""Shared fixtures: recording collaborators and fast timer settings."""

import asyncio

import pytest

from core.audio_service import SoundNotFoundError
from core.car import Car
from core.config import CarSettings


class FakeAudio:
    """Records sound names into a shared event log."""

    def __init__(self, events, missing=()):
        self.events = events
        self.missing = set(missing)

    async def play_sound(self, name):
        if name in self.missing:
            raise SoundNotFoundError(f"Sound not found: {name}")
        self.events.append(("sound", name))


class FakeSpeech:
    def __init__(self, events):
        self.events = events

    async def speak(self, text):
        self.events.append(("speak", text))


class Harness:
    def __init__(self, car, events):
        self.car = car
        self.state = car.state
        self.events = events

    @property
    def sounds(self):
        return [name for kind, name in self.events if kind == "sound"]

    @property
    def spoken(self):
        return [text for kind, text in self.events if kind == "speak"]


@pytest.fixture
def fast_settings() -> CarSettings:
    return CarSettings(
        overtake_duration_ms=50,
        pit_stop_duration_ms=20,
        simulation_tick_ms=10,
    )


@pytest.fixture
def run_car(fast_settings):
    """Run ``scenario(harness)`` against a fresh car on a new event loop."""

    def _run(scenario, settings=None, state=None, missing_sounds=()):
        async def _main():
            events = []
            car = Car(FakeAudio(events, missing_sounds), FakeSpeech(events),
                      settings=settings or fast_settings, state=state)
            try:
                return await scenario(Harness(car, events))
            finally:
                car.close()

        return asyncio.run(_main())

    return _run
