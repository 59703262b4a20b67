import asyncio
import logging

from .audio_service import SoundError
from .car_state import CarState, FuelMix, TireStatus
from .config import CAR_SETTINGS, CarSettings
from .driver import SimulationDriver
from .speech_service import SpeechError

logger = logging.getLogger(__name__)


class Car:
    """Guarded actions on a single car.

    Every action is a coroutine returning the message for the driver.
    Actions run one at a time: a second call waits until the first one has
    finished speaking. A failed precondition leaves the state untouched,
    plays no sound and only speaks the reason.

    Must be constructed inside a running event loop.
    """

    def __init__(self, audio, speech, settings: CarSettings = CAR_SETTINGS,
                 state: CarState | None = None):
        self.audio = audio
        self.speech = speech
        self.settings = settings
        self.state = state if state is not None else CarState()
        self._loop = asyncio.get_running_loop()
        self._lock = asyncio.Lock()
        self._overtake_timer = None
        self._announcement = None
        self.driver = SimulationDriver(self.state, settings)

    # --- collaborators ---

    async def _play(self, name):
        try:
            await self.audio.play_sound(name)
        except SoundError as e:
            logger.warning("Sound '%s' skipped: %s", name, e)

    async def _say(self, message):
        try:
            await self.speech.speak(message)
        except SpeechError as e:
            logger.warning("Could not speak '%s': %s", message, e)

    async def _confirm(self, sound, message):
        if sound:
            await self._play(sound)
        await self._say(message)
        return message

    async def _refuse(self, message):
        logger.info("Refused: %s", message)
        await self._say(message)
        return message

    async def announce(self, message: str) -> str:
        """Speak a message that is not tied to any action."""
        await self._say(message)
        return message

    # --- state transitions (caller holds the lock) ---

    def _cancel_overtake(self):
        if self._overtake_timer is not None:
            self._overtake_timer.cancel()
            self._overtake_timer = None
        self.state.overtake_active = False

    def _engine_on(self):
        self._cancel_overtake()
        self.state.engine_on = True
        self.state.rpm = self.settings.rpm_idle

    def _engine_off(self):
        self._cancel_overtake()
        self.state.engine_on = False
        self.state.rpm = 0
        self.state.drs_on = False

    def _end_overtake(self):
        self._overtake_timer = None
        self.state.overtake_active = False
        self.state.rpm = self.settings.rpm_idle if self.state.engine_on else 0
        logger.info("Overtake finished")
        self._announcement = self._loop.create_task(self._say("Overtake finished."))

    # --- actions ---

    async def start_engine(self) -> str:
        async with self._lock:
            if self.state.engine_on:
                return await self._refuse("The engine is already running.")
            self._engine_on()
            return await self._confirm("engineStart", "Engine started.")

    async def stop_engine(self) -> str:
        async with self._lock:
            if not self.state.engine_on:
                return await self._refuse("The engine is already off.")
            self._engine_off()
            return await self._confirm("engineStop", "Engine stopped.")

    async def activate_drs(self) -> str:
        async with self._lock:
            if not self.state.engine_on:
                return await self._refuse("Cannot activate DRS. The engine is off.")
            if self.state.drs_on:
                return await self._refuse("DRS is already active.")
            self.state.drs_on = True
            return await self._confirm("drsOn", "DRS enabled.")

    async def deactivate_drs(self) -> str:
        async with self._lock:
            if not self.state.drs_on:
                return await self._refuse("DRS is already off.")
            self.state.drs_on = False
            return await self._confirm("drsOff", "DRS disabled.")

    async def activate_overtake(self) -> str:
        async with self._lock:
            # order matters: only the first failing check is reported
            if self.state.overtake_active:
                return await self._refuse("Overtake is already active.")
            if not self.state.engine_on:
                return await self._refuse("Cannot activate overtake, engine is off.")
            if self.state.battery_level < self.settings.overtake_battery_cost:
                return await self._refuse("Not enough battery for overtake.")

            self.state.overtake_active = True
            self.state.battery_level -= self.settings.overtake_battery_cost
            self.state.rpm += self.settings.rpm_overtake_boost
            self._overtake_timer = self._loop.call_later(
                self.settings.overtake_duration_ms / 1000, self._end_overtake)
            return await self._confirm("overtakeOn", "Overtake mode activated.")

    async def check_tire_status(self) -> str:
        async with self._lock:
            if not self.state.engine_on:
                self.state.tire_status = TireStatus.COLD
                message = "Tires are cold."
            else:
                self.state.tire_status = TireStatus.OPTIMAL
                message = "Tires are in the optimal window."
            return await self._confirm(None, message)

    async def get_fuel_status(self) -> str:
        async with self._lock:
            fuel = _percent(self.state.fuel_level)
            if self.state.is_low_fuel:
                message = f"Fuel is critical, only {fuel} percent remaining!"
            else:
                message = f"Fuel level is at {fuel} percent."
            return await self._confirm(None, message)

    async def get_battery_status(self) -> str:
        battery = _percent(self.state.battery_level)
        if self.state.is_low_battery:
            return f"Battery level critical at {battery} percent."
        return f"Battery is at {battery} percent."

    async def set_fuel_mix(self, mix) -> str:
        async with self._lock:
            try:
                mix = FuelMix.parse(mix.value if isinstance(mix, FuelMix) else mix)
            except ValueError as e:
                return await self._refuse(str(e))
            if self.state.fuel_mix == mix:
                return await self._refuse(f"Fuel mix is already set to {mix.value}.")
            self.state.fuel_mix = mix
            return await self._confirm("radioBeep", f"Fuel mix set to {mix.value}.")

    async def perform_pit_stop(self) -> str:
        async with self._lock:
            if self.state.engine_on:
                self._engine_off()
                await self._confirm("engineStop", "Engine stopped.")

            await asyncio.sleep(self.settings.pit_stop_duration_ms / 1000)
            self.state.fuel_level = 100.0
            self.state.battery_level = 100.0
            self.state.tire_status = TireStatus.NEW

            self._engine_on()
            await self._confirm("engineStart", "Engine started.")
            return await self._confirm(None, "Pit stop complete. Car serviced.")

    async def reset(self):
        """Stop everything and put the car back to its starting state."""
        async with self._lock:
            self._cancel_overtake()
            self.state.engine_on = False
            self.state.reset()

    def close(self):
        if self._overtake_timer is not None:
            self._overtake_timer.cancel()
            self._overtake_timer = None
        if self._announcement is not None and not self._announcement.done():
            self._announcement.cancel()
        self._announcement = None
        self.driver.close()


def _percent(level: float) -> str:
    """Format a level the way it is read out: no trailing '.0'."""
    return f"{level:g}" if level == int(level) else f"{round(level, 2)}"
