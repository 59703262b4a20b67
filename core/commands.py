"""Turn spoken or typed phrases into car actions.

Simple keyword matching covers the usual radio calls. Anything it does not
recognise is handed to the local language model, which may answer with a
tool call or with a plain reply.
"""

import asyncio
import logging

from . import ollama_handler

logger = logging.getLogger(__name__)

NOT_UNDERSTOOD = "Sorry, I didn't catch that."

# Checked in order, first hit wins
KEYWORDS = [
    (("start engine", "start the engine", "engine on", "fire up"), "start_engine"),
    (("stop engine", "stop the engine", "kill engine", "kill the engine", "engine off"), "stop_engine"),
    (("drs off", "close drs", "disable drs", "deactivate drs"), "deactivate_drs"),
    (("drs",), "activate_drs"),
    (("overtake", "push", "boost"), "activate_overtake"),
    (("pit", "box"), "perform_pit_stop"),
    (("tire", "tyre"), "check_tire_status"),
    (("battery", "charge"), "get_battery_status"),
]

FUEL_MIXES = ("lean", "standard", "rich")


def match_command(text: str):
    """Return ``(action, args)`` for a phrase, or None if nothing matches."""
    text = text.strip().lower()
    if not text:
        return None

    # "rich mix" and "fuel mix lean" beat the plain fuel status query
    for mix in FUEL_MIXES:
        if mix in text and ("mix" in text or "mode" in text):
            return "set_fuel_mix", {"mix": mix}

    for phrases, action in KEYWORDS:
        if any(phrase in text for phrase in phrases):
            return action, {}
    if "fuel" in text:
        return "get_fuel_status", {}
    return None


async def run_action(car, action: str, args: dict) -> str:
    if action == "set_fuel_mix":
        return await car.set_fuel_mix(args.get("mix", ""))
    return await getattr(car, action)()


async def dispatch(car, text: str) -> str:
    """Run whatever ``text`` asks for and return the reply for the driver."""
    command = match_command(text)
    if command is not None:
        logger.info("Command '%s' -> %s", text, command[0])
        return await run_action(car, *command)

    try:
        reply = await asyncio.to_thread(ollama_handler.ask, text)
    except ConnectionError:
        return await car.announce(NOT_UNDERSTOOD)

    try:
        command = ollama_handler.parse_tool_call(reply)
    except ollama_handler.UnknownToolError as e:
        return await car.announce(f"Unknown tool: {e}")
    if command is not None:
        logger.info("Ollama Calling Tool: %s with %s", *command)
        return await run_action(car, *command)

    reply = reply.strip() or NOT_UNDERSTOOD
    return await car.announce(reply)
