# src/clirig/telemetry/logger/processors.py

import logging
from typing import Any

from structlog.typing import EventDict, WrappedLogger

LOG_EMOJIS = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}
# Keys bound for correlation that are noise in console output.
EXTRA_KEYS_TO_DROP = ("emoji_key",)


def add_emoji_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event with an emoji matching its level, or an explicit `emoji_key`."""
    explicit: Any = event_dict.get("emoji_key")
    level = logging.getLevelName(str(event_dict.get("level", method_name)).upper())
    emoji = explicit or LOG_EMOJIS.get(level, "➡️")
    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key in EXTRA_KEYS_TO_DROP:
        event_dict.pop(key, None)
    return event_dict

# 🔼⚙️
