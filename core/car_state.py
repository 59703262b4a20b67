from enum import Enum


class TireStatus(str, Enum):
    COLD = "Cold"
    OPTIMAL = "Optimal"
    NEW = "New"


class FuelMix(str, Enum):
    LEAN = "Lean"
    STANDARD = "Standard"
    RICH = "Rich"

    @classmethod
    def parse(cls, name: str) -> "FuelMix":
        """Case-insensitive lookup by mix name, raising ValueError if unknown."""
        for mix in cls:
            if mix.value.lower() == str(name).strip().lower():
                return mix
        raise ValueError(f"Unknown fuel mix: {name}")


class CarState:
    """Everything the dashboard knows about the car.

    Observers registered with ``subscribe`` are called with the new value
    whenever ``engine_on`` actually changes.
    """

    def __init__(self):
        self._engine_observers = []
        self.reset()

    def reset(self):
        self._engine_on = False
        self.rpm = 0
        self.drs_on = False
        self.overtake_active = False
        self.tire_status = TireStatus.COLD
        self.fuel_level = 100.0     # %
        self.battery_level = 100.0  # %
        self.fuel_mix = FuelMix.STANDARD

        self.ai_talking = False
        self.is_listening = False

    @property
    def engine_on(self) -> bool:
        return self._engine_on

    @engine_on.setter
    def engine_on(self, value: bool):
        value = bool(value)
        if value == self._engine_on:
            return
        self._engine_on = value
        for callback in list(self._engine_observers):
            callback(value)

    def subscribe(self, callback):
        self._engine_observers.append(callback)

    def unsubscribe(self, callback):
        if callback in self._engine_observers:
            self._engine_observers.remove(callback)

    @property
    def is_low_fuel(self) -> bool:
        return self.fuel_level < 15

    @property
    def is_low_battery(self) -> bool:
        return self.battery_level < 10
