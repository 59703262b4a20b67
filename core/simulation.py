from .car_state import CarState
from .config import CarSettings

IDLE_MULTIPLIER = 0.3
RPM_MULTIPLIER_SPAN = 1.7


def consumption_rate(state: CarState, settings: CarSettings) -> float:
    """Fuel burned per tick at the current RPM and fuel mix.

    Idle burns 30% of the mix's base rate, max RPM burns 200%, linear in
    between. RPM below idle counts as idle.
    """
    rpm_ratio = (state.rpm - settings.rpm_idle) / (settings.rpm_max - settings.rpm_idle)
    rpm_ratio = max(0.0, rpm_ratio)
    rpm_multiplier = IDLE_MULTIPLIER + rpm_ratio * RPM_MULTIPLIER_SPAN
    return settings.rate_for(state.fuel_mix) * rpm_multiplier


def tick(state: CarState, settings: CarSettings) -> None:
    """Advance fuel and battery by one simulation period."""
    if state.fuel_level > 0:
        fuel = state.fuel_level - consumption_rate(state, settings)
        state.fuel_level = round(min(100.0, max(0.0, fuel)), 2)

    # battery recharges at a flat rate regardless of RPM
    if state.battery_level < 100:
        battery = state.battery_level + settings.battery_recharge_rate
        state.battery_level = round(min(100.0, max(0.0, battery)), 2)
