import asyncio
import logging

from .car_state import CarState
from .config import CarSettings
from . import simulation

logger = logging.getLogger(__name__)


class SimulationDriver:
    """Runs the simulation tick while the engine is on.

    Must be constructed inside a running event loop. The current engine
    state is checked right away, so a car that is already running starts
    ticking without waiting for a transition.
    """

    def __init__(self, state: CarState, settings: CarSettings):
        self.state = state
        self.settings = settings
        self._loop = asyncio.get_running_loop()
        self._task = None
        self.ticks = 0

        state.subscribe(self._on_engine_change)
        self._on_engine_change(state.engine_on)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _on_engine_change(self, engine_on: bool):
        self._cancel()
        if engine_on:
            self._task = self._loop.create_task(self._run())
            logger.debug("Simulation started (every %d ms)", self.settings.simulation_tick_ms)
        else:
            logger.debug("Simulation stopped")

    async def _run(self):
        interval = self.settings.simulation_tick_ms / 1000
        while True:
            await asyncio.sleep(interval)
            if not self.state.engine_on:
                return
            simulation.tick(self.state, self.settings)
            self.ticks += 1

    def _cancel(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def close(self):
        self._cancel()
        self.state.unsubscribe(self._on_engine_change)
