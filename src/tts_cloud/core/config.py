"""
Configuration Management for tts-cloud.

Client behaviour that is not a credential (timeouts, IAM endpoint, refresh
margin, logging) lives here. Credentials are never read from this file;
they are resolved by ``tts_cloud.auth.credentials``.

Configuration Hierarchy (highest priority first):
    1. Environment variables (TTS_CLOUD_IAM_URL, TTS_CLOUD_TIMEOUT_S)
    2. YAML settings file
    3. Defaults class values

Example settings.yaml:
    http:
      timeout_s: 30
      verify: true

    iam:
      url: https://iam.ng.bluemix.net/identity/token
      timeout_s: 10
      ttl_fraction: 0.8

    logging:
      level: 2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from tts_cloud import __version__


class ConfigValidationError(Exception):
    """Raised when a settings value is out of bounds or of the wrong type."""
    pass


class Defaults:
    """
    Centralized default values.

    Sections:
        - HTTP: service transport settings
        - IAM: token endpoint and refresh margin
        - Logging
    """

    # ─────────────────────────────────────────────────────────────────────────
    # HTTP
    # ─────────────────────────────────────────────────────────────────────────
    HTTP_TIMEOUT_S = 60.0
    HTTP_VERIFY = True
    USER_AGENT = f"tts-cloud-python/{__version__}"

    # ─────────────────────────────────────────────────────────────────────────
    # IAM token service
    # ─────────────────────────────────────────────────────────────────────────
    IAM_URL = "https://iam.ng.bluemix.net/identity/token"
    IAM_TIMEOUT_S = 30.0
    IAM_TTL_FRACTION = 0.8          # Refresh once 80% of the lifetime elapsed
    IAM_CLIENT_AUTH = "Basic Yng6Yng="  # base64("bx:bx"), public client id

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_LEVEL = 2               # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


@dataclass
class HttpConfig:
    """Transport settings shared by every request a client sends."""
    timeout_s: float = Defaults.HTTP_TIMEOUT_S
    verify: bool = Defaults.HTTP_VERIFY
    user_agent: str = Defaults.USER_AGENT


@dataclass
class IamConfig:
    """
    IAM token exchange settings.

    ``ttl_fraction`` is the share of a token's lifetime after which the
    token is refreshed before use.
    """
    url: str = Defaults.IAM_URL
    timeout_s: float = Defaults.IAM_TIMEOUT_S
    ttl_fraction: float = Defaults.IAM_TTL_FRACTION


@dataclass
class LoggingConfig:
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class ClientConfig:
    """
    Validated configuration handed to every service client.

    Usage:
        config = ClientConfig.from_settings(load_settings("settings.yaml"))
        client = TextToSpeechV1(options, config=config)
    """
    http: HttpConfig = field(default_factory=HttpConfig)
    iam: IamConfig = field(default_factory=IamConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ClientConfig":
        """
        Build a ClientConfig from raw settings, applying defaults.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        http_raw = raw.get("http", {}) or {}
        http = HttpConfig(
            timeout_s=cls._as_float("http.timeout_s", http_raw.get("timeout_s", Defaults.HTTP_TIMEOUT_S)),
            verify=bool(http_raw.get("verify", Defaults.HTTP_VERIFY)),
            user_agent=str(http_raw.get("user_agent", Defaults.USER_AGENT)),
        )
        cls._validate_positive("http.timeout_s", http.timeout_s)

        iam_raw = raw.get("iam", {}) or {}
        iam = IamConfig(
            url=str(iam_raw.get("url", Defaults.IAM_URL)),
            timeout_s=cls._as_float("iam.timeout_s", iam_raw.get("timeout_s", Defaults.IAM_TIMEOUT_S)),
            ttl_fraction=cls._as_float("iam.ttl_fraction", iam_raw.get("ttl_fraction", Defaults.IAM_TTL_FRACTION)),
        )
        cls._validate_positive("iam.timeout_s", iam.timeout_s)
        cls._validate_range("iam.ttl_fraction", iam.ttl_fraction, 0.0, 1.0)
        if not iam.url.startswith(("http://", "https://")):
            raise ConfigValidationError(f"iam.url must be an http(s) URL, got {iam.url!r}")

        logging_raw = raw.get("logging", {}) or {}
        from tts_cloud.core.logging import coerce_level
        logging_cfg = LoggingConfig(level=int(coerce_level(logging_raw.get("level", Defaults.LOGGING_LEVEL))))

        return cls(http=http, iam=iam, logging=logging_cfg)

    @staticmethod
    def _as_float(name: str, value: Any) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{name} must be a number, got {value!r}") from None

    @staticmethod
    def _validate_range(name: str, value: float, low: float, high: float) -> None:
        """Exclusive bounds."""
        if not low < value < high:
            raise ConfigValidationError(f"{name} must be between {low} and {high} (exclusive), got {value}")

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class Settings:
    """Raw settings loaded from YAML, before validation."""
    raw: Dict[str, Any]

    def get_client_config(self) -> ClientConfig:
        return ClientConfig.from_settings(self)


def load_settings(path: str, environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    Load settings from a YAML file and apply environment overrides.

    Environment variable overrides:
        - TTS_CLOUD_IAM_URL: iam.url
        - TTS_CLOUD_TIMEOUT_S: http.timeout_s

    Raises:
        FileNotFoundError: If the settings file doesn't exist.
    """
    env = os.environ if environ is None else environ
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    with p.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    if env.get("TTS_CLOUD_IAM_URL"):
        raw.setdefault("iam", {})["url"] = env["TTS_CLOUD_IAM_URL"]
    if env.get("TTS_CLOUD_TIMEOUT_S"):
        raw.setdefault("http", {})["timeout_s"] = env["TTS_CLOUD_TIMEOUT_S"]

    return Settings(raw=raw)
