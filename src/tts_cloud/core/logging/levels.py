"""
Log Level Definitions.

tts-cloud uses four numeric verbosity levels instead of the stdlib names,
so that ``TTS_CLOUD_LOG_LEVEL=3`` reads the same in every environment:

    1 = MINIMAL  - Errors and failed token exchanges only
    2 = NORMAL   - Credential scheme selection, token lifecycle (default)
    3 = VERBOSE  - One line per request with status and timing
    4 = DEBUG    - Header/query assembly, lookup details

Mapping to Python Levels:
    MINIMAL (1) -> logging.WARNING
    NORMAL (2)  -> logging.INFO
    VERBOSE (3) -> logging.DEBUG
    DEBUG (4)   -> logging.DEBUG - 5
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Numeric verbosity levels, higher is chattier."""
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3
    DEBUG = 4


LEVEL_MAP = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG - 5,
}

LEVEL_NAMES = {level.value: level.name for level in LogLevel}

_NAME_MAP = {
    "MINIMAL": LogLevel.MINIMAL,
    "NORMAL": LogLevel.NORMAL,
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.DEBUG,
    "TRACE": LogLevel.DEBUG,
    "CRITICAL": LogLevel.MINIMAL,
    "ERROR": LogLevel.MINIMAL,
    "WARNING": LogLevel.MINIMAL,
    "WARN": LogLevel.MINIMAL,
    "INFO": LogLevel.NORMAL,
}


def coerce_level(value: Any) -> LogLevel:
    """
    Convert an int, numeric string or level name to a LogLevel.

    Python logging levels (``logging.WARNING`` etc.) are accepted too.
    Anything unrecognised falls back to NORMAL.

    Examples:
        >>> coerce_level("3")
        <LogLevel.VERBOSE: 3>
        >>> coerce_level(logging.WARNING)
        <LogLevel.MINIMAL: 1>
    """
    if isinstance(value, LogLevel):
        return value

    if isinstance(value, str):
        text = value.strip().upper()
        if text.isdigit():
            value = int(text)
        else:
            return _NAME_MAP.get(text, LogLevel.NORMAL)

    if isinstance(value, int):
        if 1 <= value <= 4:
            return LogLevel(value)
        if value >= logging.WARNING:
            return LogLevel.MINIMAL
        if value >= logging.INFO:
            return LogLevel.NORMAL
        return LogLevel.DEBUG

    return LogLevel.NORMAL
