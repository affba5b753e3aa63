"""
Logging Context and State.

Holds the per-call request id (a ContextVar, so concurrent ``dispatch``
coroutines on one event loop keep their own ids) and the process-wide
logging configuration.

Environment Variables:
    - TTS_CLOUD_LOG_LEVEL: Log level (1-4 or name)
    - TTS_CLOUD_LOG_DIR: Directory for the JSONL log file
    - TTS_CLOUD_JSONL_FILE: JSONL filename (default: tts-cloud.jsonl)
    - TTS_CLOUD_SETTINGS: Settings YAML whose ``logging`` section is read
"""
from __future__ import annotations

import os
import uuid
from contextvars import ContextVar
from typing import Any, Dict

from .levels import LEVEL_NAMES, LogLevel

_request_id: ContextVar[str] = ContextVar("tts_cloud_request_id", default="-")

_configured: bool = False
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Request id for the current context, or "-" outside a call."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    _request_id.set(rid)


def new_request_id() -> str:
    """Generate a short id, bind it to the current context and return it."""
    rid = uuid.uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(int(_current_level), "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging configuration.

    Priority (highest first):
        1. TTS_CLOUD_LOG_* environment variables
        2. ``logging`` section of the settings file, if one exists
        3. Defaults
    """
    cfg: Dict[str, Any] = {}

    settings_path = os.getenv("TTS_CLOUD_SETTINGS")
    if settings_path:
        from tts_cloud.core.config import load_settings
        try:
            cfg.update(load_settings(settings_path).raw.get("logging", {}) or {})
        except FileNotFoundError:
            pass

    if os.getenv("TTS_CLOUD_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_CLOUD_LOG_LEVEL"]
    if os.getenv("TTS_CLOUD_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_CLOUD_LOG_DIR"]
    if os.getenv("TTS_CLOUD_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_CLOUD_JSONL_FILE"]

    return cfg
