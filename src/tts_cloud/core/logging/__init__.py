"""
tts-cloud Structured Logging.

Numeric verbosity levels (1-4), a request id that follows each dispatched
call, console and JSONL output, and credential masking on every record.

Configuration:
    export TTS_CLOUD_LOG_LEVEL=3   # VERBOSE
    export TTS_CLOUD_LOG_DIR=logs  # also write logs/tts-cloud.jsonl

Usage:
    from tts_cloud.core.logging import get_logger, info, verbose

    _LOG = get_logger("tts-cloud.tokens")
    info(_LOG, "token_acquired", expires_in=3600)
    verbose(_LOG, "request_completed", status=200, seconds=0.412)

Library note:
    Importing tts-cloud installs only a NullHandler on the ``tts-cloud``
    logger, so records propagate to whatever the application configured.
    ``configure_logging`` (called by the CLI) attaches the console and JSONL
    handlers and stops propagation.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from .context import (
    get_level,
    get_level_name,
    get_request_id,
    is_configured,
    new_request_id,
    read_logging_config,
    set_configured,
    set_level,
    set_request_id,
)
from .formatters import ConsoleFormatter, JsonlFormatter, mask, redact_fields, redact_text
from .levels import LEVEL_MAP, LEVEL_NAMES, LogLevel, coerce_level

ROOT_LOGGER = "tts-cloud"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def configure_logging(level: Optional[int | str | LogLevel] = None, force: bool = False) -> None:
    """
    Attach console (stderr) and optional JSONL handlers to the package logger.

    Args:
        level: Log level (1-4, level name, or LogLevel). Overrides the
            environment when given.
        force: Reconfigure even if already configured.
    """
    if is_configured() and not force:
        return

    log_config = read_logging_config()
    current = coerce_level(level if level is not None else log_config.get("level", LogLevel.NORMAL))
    set_level(current)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(LEVEL_MAP[current])
    logger.propagate = False
    logger.handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    log_dir = log_config.get("log_dir")
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            Path(log_dir) / str(log_config.get("jsonl_file", "tts-cloud.jsonl")),
            maxBytes=int(log_config.get("rotate_max_bytes", 10 * 1024 * 1024)),
            backupCount=int(log_config.get("rotate_backup_count", 5)),
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(JsonlFormatter())
        logger.addHandler(file_handler)

    set_configured(True)


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return a logger under the ``tts-cloud`` hierarchy. Attaches no handlers."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def _log(
    logger: logging.Logger,
    level: int,
    tag: str,
    msg: str,
    numeric_level: int,
    **fields: Any,
) -> None:
    if numeric_level > get_level():
        return

    seconds = fields.pop("seconds", None)
    logger.log(
        level,
        msg,
        extra={
            "tag": tag,
            "request_id": get_request_id(),
            "seconds": seconds,
            "extra_data": fields or None,
            "numeric_level": numeric_level,
        },
    )


def info(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 2 (NORMAL)."""
    _log(logger, logging.INFO, "INFO", msg, 2, **fields)


def warn(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 2 (NORMAL)."""
    _log(logger, logging.WARNING, "WARN", msg, 2, **fields)


def error(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 1 (MINIMAL)."""
    _log(logger, logging.ERROR, "ERROR", msg, 1, **fields)


def fail(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 1 (MINIMAL)."""
    _log(logger, logging.ERROR, "FAIL", msg, 1, **fields)


def verbose(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 3 (VERBOSE)."""
    _log(logger, logging.DEBUG, "INFO", msg, 3, **fields)


def debug(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 4 (DEBUG)."""
    _log(logger, logging.DEBUG - 5, "DEBUG", msg, 4, **fields)


__all__ = [
    "LogLevel",
    "LEVEL_MAP",
    "LEVEL_NAMES",
    "coerce_level",
    "get_request_id",
    "set_request_id",
    "new_request_id",
    "get_level",
    "get_level_name",
    "JsonlFormatter",
    "ConsoleFormatter",
    "mask",
    "redact_fields",
    "redact_text",
    "configure_logging",
    "get_logger",
    "info",
    "warn",
    "error",
    "fail",
    "verbose",
    "debug",
]
