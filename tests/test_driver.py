"""Tests for the periodic simulation driver."""

import asyncio

from core.car_state import CarState
from core.driver import SimulationDriver


def test_ticks_only_while_engine_runs(fast_settings) -> None:
    """Fuel drops while running and stays put once the engine stops."""

    async def scenario():
        state = CarState()
        driver = SimulationDriver(state, fast_settings)
        assert not driver.running

        state.rpm = fast_settings.rpm_idle
        state.engine_on = True
        assert driver.running
        await asyncio.sleep(0.08)
        assert driver.ticks > 0
        assert state.fuel_level < 100

        state.engine_on = False
        assert not driver.running
        fuel, ticks = state.fuel_level, driver.ticks
        await asyncio.sleep(0.05)
        assert state.fuel_level == fuel
        assert driver.ticks == ticks
        driver.close()

    asyncio.run(scenario())


def test_starts_immediately_for_running_engine(fast_settings) -> None:
    """A car that is already running starts ticking at construction."""

    async def scenario():
        state = CarState()
        state.engine_on = True
        driver = SimulationDriver(state, fast_settings)
        assert driver.running
        driver.close()
        assert not driver.running

    asyncio.run(scenario())


def test_restart_replaces_timer(fast_settings) -> None:
    """Off/on keeps exactly one tick task alive."""

    async def scenario():
        state = CarState()
        driver = SimulationDriver(state, fast_settings)
        state.engine_on = True
        first = driver._task
        state.engine_on = False
        state.engine_on = True
        await asyncio.sleep(0)
        assert first.cancelled()
        assert driver.running
        driver.close()

    asyncio.run(scenario())


def test_close_unsubscribes(fast_settings) -> None:
    async def scenario():
        state = CarState()
        driver = SimulationDriver(state, fast_settings)
        driver.close()
        state.engine_on = True
        assert not driver.running

    asyncio.run(scenario())
