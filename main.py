import argparse
import sys

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QApplication

from core import commands, config
from core.audio_service import AudioService
from core.car import Car
from core.car_state import CarState
from core.log import setup_logging
from core.runtime import AsyncRunner
from core.speech_service import SpeechService
from core.voice_handler import VoiceHandler
from ui.dashboard import Dashboard


class RadioBridge(QObject):
    """Carries messages from worker threads back to the Qt thread."""
    voice_status = pyqtSignal(str)


async def build_car(state, settings):
    audio = AudioService()
    audio.load_sounds()
    speech = SpeechService(state)
    return Car(audio, speech, settings=settings, state=state)


def main():
    parser = argparse.ArgumentParser(description="Car dashboard simulation")
    parser.add_argument("--settings", help="YAML file overriding car settings")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file")
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_file)
    settings = config.load_settings(args.settings)

    app = QApplication(sys.argv)

    # Shared State
    state = CarState()
    runner = AsyncRunner()
    runner.start()
    car = runner.call(build_car(state, settings))

    # UI
    window = Dashboard(state, settings)
    bridge = RadioBridge()
    bridge.voice_status.connect(window.update_voice_status)

    def reply(message):
        bridge.voice_status.emit(f"Engineer: {message}")

    def run_text(text):
        runner.submit(commands.dispatch(car, text), on_done=reply)

    def run_action(name):
        runner.submit(getattr(car, name)(), on_done=reply)

    window.command_entered.connect(run_text)
    window.action_requested.connect(run_action)

    # Voice Handler
    voice = VoiceHandler(state)

    def heard(text):
        bridge.voice_status.emit(f"You: {text}")
        run_text(text)

    def toggle_listening():
        if voice.running:
            voice.stop_listening()
            bridge.voice_status.emit("Radio off.")
        elif voice.start_listening(heard, lambda e: bridge.voice_status.emit(f"Radio error: {e}")):
            bridge.voice_status.emit("Radio on. Listening...")

    window.listen_requested.connect(toggle_listening)
    window.update_voice_status("Ready. Start the engine to begin.")

    window.show()

    exit_code = app.exec()
    voice.stop_listening()
    runner.call(car.reset())
    car.close()
    runner.stop()
    sys.exit(exit_code)

if __name__ == "__main__":
    main()
