"""
Log Formatters.

    JsonlFormatter: one JSON object per line, for log files
    ConsoleFormatter: ``HH:MM:SS [ TAG ] (rid) message key=value 0.123s``

Both formatters run extra fields through ``redact_fields`` first, so a
credential that reaches a log call by accident is still never written out.
"""
from __future__ import annotations

import json
import logging
import os
import re
import sys
from datetime import datetime
from typing import Any, Dict, Mapping

SECRET_KEYS = frozenset({
    "authorization",
    "password",
    "api_key",
    "apikey",
    "iam_apikey",
    "access_token",
    "refresh_token",
    "token",
    "x-watson-authorization-token",
})

_AUTH_VALUE = re.compile(r"\b(Basic|Bearer)\s+[A-Za-z0-9._~+/=-]+")

_TAG_COLORS = {
    "ERROR": "\033[91m",
    "FAIL": "\033[91m",
    "WARN": "\033[93m",
    "INFO": "\033[96m",
    "DEBUG": "\033[90m",
}
_RESET = "\033[0m"


def mask(value: Any) -> str:
    """Keep the last four characters of a secret, hide the rest."""
    text = str(value)
    if len(text) <= 4:
        return "****"
    return "****" + text[-4:]


def redact_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Mask values whose key names a credential; recurse into dicts."""
    out: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, Mapping):
            out[key] = redact_fields(value)
        elif str(key).lower() in SECRET_KEYS and value:
            out[key] = mask(value)
        else:
            out[key] = value
    return out


def redact_text(text: str) -> str:
    """Hide ``Basic ...`` / ``Bearer ...`` credentials inside free text."""
    return _AUTH_VALUE.sub(lambda m: f"{m.group(1)} ****", text)


def use_colors() -> bool:
    if os.getenv("NO_COLOR") or os.getenv("TTS_CLOUD_NO_COLOR") == "1":
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class JsonlFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "logger": record.name,
            "message": redact_text(record.getMessage()),
            "request_id": getattr(record, "request_id", "-"),
        }

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            payload["seconds"] = seconds

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["extra"] = redact_fields(extra_data)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable single-line format, colored when attached to a TTY."""

    def __init__(self, colors: bool | None = None):
        super().__init__()
        self.colors = use_colors() if colors is None else colors

    def _paint(self, text: str, tag: str) -> str:
        if not self.colors:
            return text
        return f"{_TAG_COLORS.get(tag, '')}{text}{_RESET}"

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [ts, self._paint(f"[{tag:^7}]", tag)]
        if rid != "-":
            parts.append(f"({rid})")
        parts.append(redact_text(record.getMessage()))

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            parts.extend(f"{k}={v}" for k, v in redact_fields(extra_data).items())

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            parts.append(f"{seconds:.3f}s")

        return " ".join(parts)
