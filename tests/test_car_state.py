"""Tests for the car state record."""

import pytest

from core.car_state import CarState, FuelMix, TireStatus


def test_defaults() -> None:
    state = CarState()
    assert state.engine_on is False
    assert state.rpm == 0
    assert state.drs_on is False
    assert state.overtake_active is False
    assert state.tire_status == TireStatus.COLD
    assert state.fuel_level == 100
    assert state.battery_level == 100
    assert state.fuel_mix == FuelMix.STANDARD


def test_low_thresholds() -> None:
    """Low fuel is under 15, low battery under 10."""
    state = CarState()
    state.fuel_level = 15
    state.battery_level = 10
    assert not state.is_low_fuel
    assert not state.is_low_battery
    state.fuel_level = 14.99
    state.battery_level = 9.99
    assert state.is_low_fuel
    assert state.is_low_battery


def test_engine_observers_fire_on_change_only() -> None:
    state = CarState()
    seen = []
    state.subscribe(seen.append)
    state.engine_on = True
    state.engine_on = True
    state.engine_on = False
    assert seen == [True, False]

    state.unsubscribe(seen.append)
    state.engine_on = True
    assert seen == [True, False]


def test_reset_keeps_observers() -> None:
    state = CarState()
    seen = []
    state.subscribe(seen.append)
    state.fuel_level = 3
    state.reset()
    assert state.fuel_level == 100
    state.engine_on = True
    assert seen == [True]


@pytest.mark.parametrize("name,expected", [
    ("lean", FuelMix.LEAN),
    (" Standard ", FuelMix.STANDARD),
    ("RICH", FuelMix.RICH),
])
def test_fuel_mix_parse(name: str, expected: FuelMix) -> None:
    assert FuelMix.parse(name) is expected


def test_fuel_mix_parse_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown fuel mix"):
        FuelMix.parse("turbo")
