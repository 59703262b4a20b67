import json
import logging

import ollama

from . import config

logger = logging.getLogger(__name__)

# Tool names the model may answer with, mapped to Car action names
TOOL_ALIASES = {
    "start_engine": "start_engine",
    "engine_on": "start_engine",
    "stop_engine": "stop_engine",
    "engine_off": "stop_engine",
    "drs_on": "activate_drs",
    "activate_drs": "activate_drs",
    "drs_off": "deactivate_drs",
    "deactivate_drs": "deactivate_drs",
    "overtake": "activate_overtake",
    "activate_overtake": "activate_overtake",
    "pit_stop": "perform_pit_stop",
    "tires": "check_tire_status",
    "fuel": "get_fuel_status",
    "battery": "get_battery_status",
    "fuel_mix": "set_fuel_mix",
}


# System Prompt optimized for small models (1B/2B parameters)
SYSTEM_PROMPT = """
You are a race engineer talking to the driver. You can control the car:

1. ENGINE (start/stop) -> tools "engine_on", "engine_off"
2. DRS (open/close) -> tools "drs_on", "drs_off"
3. OVERTAKE (battery boost) -> tool "overtake"
4. PIT STOP -> tool "pit_stop"
5. STATUS -> tools "tires", "fuel", "battery"
6. FUEL MIX (lean/standard/rich) -> tool "fuel_mix"

When the driver asks for an action, respond ONLY with a JSON object like:
{"tool": "engine_on", "args": {}}
{"tool": "overtake", "args": {}}
{"tool": "fuel", "args": {}}
{"tool": "fuel_mix", "args": {"mix": "lean"}}

If it's just a question, reply normally.
"""


class UnknownToolError(ValueError):
    pass


def parse_tool_call(content: str):
    """Extract ``(action, args)`` from a model reply, or None if it is plain text.

    Raises:
        UnknownToolError: If the reply is a tool call for a tool the car lacks.
    """
    # Strip code blocks if present
    content = content.replace("```json", "").replace("```", "")
    if "{" not in content or "}" not in content:
        return None

    json_str = content[content.find("{"):content.rfind("}") + 1]
    try:
        tool_call = json.loads(json_str)
    except json.JSONDecodeError:
        return None
    if not isinstance(tool_call, dict) or "tool" not in tool_call:
        return None

    action = TOOL_ALIASES.get(str(tool_call["tool"]).lower())
    if action is None:
        logger.warning("Unknown tool: %s", tool_call["tool"])
        raise UnknownToolError(str(tool_call["tool"]))
    args = tool_call.get("args") or {}
    if not isinstance(args, dict):
        args = {}
    return action, args


def ask(text: str) -> str:
    """Send the driver's words to the local model and return its reply.

    Raises:
        ConnectionError: If the ollama server cannot be reached.
    """
    messages = [
        {'role': 'system', 'content': SYSTEM_PROMPT},
        {'role': 'user', 'content': text}
    ]
    try:
        response = ollama.chat(model=config.OLLAMA_MODEL, messages=messages)
    except (ollama.ResponseError, ConnectionError, OSError) as e:
        logger.error("Ollama Error: %s", e)
        raise ConnectionError(str(e)) from e
    return response['message']['content']
