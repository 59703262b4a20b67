"""Tunable constants for the car simulation and its voice assistant."""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from .car_state import FuelMix

OLLAMA_MODEL = "llama3.2:1b"
TTS_RATE = 170
LISTEN_TIMEOUT_S = 5
PHRASE_TIME_LIMIT_S = 8
SOUNDS_DIR: Path = Path(__file__).resolve().parent.parent / "sounds"
SAMPLE_RATE = 22050


def _default_rates() -> dict:
    return {
        FuelMix.LEAN: 0.05,
        FuelMix.STANDARD: 0.08,
        FuelMix.RICH: 0.12,
    }


@dataclass(frozen=True)
class CarSettings:
    rpm_idle: float = 750
    rpm_max: float = 7000
    rpm_overtake_boost: float = 1500
    fuel_consumption_rate: dict = field(default_factory=_default_rates)
    battery_recharge_rate: float = 0.5
    overtake_battery_cost: float = 20
    overtake_duration_ms: int = 5000
    pit_stop_duration_ms: int = 3000
    simulation_tick_ms: int = 1000

    def rate_for(self, mix: FuelMix) -> float:
        """Base consumption per tick for a fuel mix.

        A mix missing from the table is charged the standard rate.
        """
        if mix in self.fuel_consumption_rate:
            return self.fuel_consumption_rate[mix]
        return self.fuel_consumption_rate[FuelMix.STANDARD]


CAR_SETTINGS = CarSettings()


def load_settings(path: Path | None = None) -> CarSettings:
    """Load car settings, overriding the defaults with a YAML file.

    The file holds a flat mapping of ``CarSettings`` field names. The fuel
    table is a nested mapping keyed by mix name (``lean``, ``standard``,
    ``rich``).

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist.
        ValueError: On unknown keys or non-positive values.
    """
    if path is None:
        return CAR_SETTINGS
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    known = {f.name for f in fields(CarSettings)}
    overrides = {}
    for key, val in data.items():
        if key not in known:
            raise ValueError(f"Unknown setting '{key}'")
        if key == "fuel_consumption_rate":
            rates = _default_rates()
            for mix_name, rate in val.items():
                rates[FuelMix.parse(mix_name)] = _positive(f"{key}.{mix_name}", rate)
            overrides[key] = rates
        else:
            overrides[key] = _positive(key, val)

    settings = replace(CAR_SETTINGS, **overrides)
    if settings.rpm_max <= settings.rpm_idle:
        raise ValueError("'rpm_max' must be greater than 'rpm_idle'")
    return settings


def _positive(name: str, val) -> float:
    if not isinstance(val, (int, float)) or isinstance(val, bool):
        raise ValueError(f"'{name}' must be numeric, got {type(val).__name__}")
    if val <= 0:
        raise ValueError(f"'{name}' must be positive, got {val}")
    return val
