"""
Tests for configuration validation and defaults.

Tests cover:
- Defaults class values
- ClientConfig.from_settings() for every section
- ConfigValidationError on invalid values
- load_settings() with YAML files and environment overrides
"""

import pytest

from tts_cloud.core.config import (
    ClientConfig,
    ConfigValidationError,
    Defaults,
    HttpConfig,
    IamConfig,
    Settings,
    load_settings,
)


class TestDefaults:
    """Tests for Defaults class values."""

    def test_iam_defaults(self):
        assert Defaults.IAM_URL == "https://iam.ng.bluemix.net/identity/token"
        assert Defaults.IAM_TTL_FRACTION == 0.8
        assert Defaults.IAM_CLIENT_AUTH == "Basic Yng6Yng="

    def test_http_defaults(self):
        assert Defaults.HTTP_TIMEOUT_S == 60.0
        assert Defaults.HTTP_VERIFY is True
        assert Defaults.USER_AGENT.startswith("tts-cloud-python/")

    def test_logging_defaults(self):
        assert Defaults.LOGGING_LEVEL == 2

    def test_dataclass_defaults_follow_defaults_class(self):
        assert HttpConfig().timeout_s == Defaults.HTTP_TIMEOUT_S
        assert IamConfig().url == Defaults.IAM_URL
        assert IamConfig().ttl_fraction == Defaults.IAM_TTL_FRACTION


class TestClientConfigFromSettings:
    """Tests for ClientConfig.from_settings()."""

    def test_empty_settings_use_defaults(self):
        """Missing sections fall back to defaults."""
        cfg = ClientConfig.from_settings(Settings(raw={}))
        assert cfg.http.timeout_s == Defaults.HTTP_TIMEOUT_S
        assert cfg.iam.url == Defaults.IAM_URL
        assert cfg.logging.level == 2

    def test_all_sections(self):
        raw = {
            "http": {"timeout_s": 15, "verify": False, "user_agent": "ua/1"},
            "iam": {"url": "https://iam.example/token", "timeout_s": 5, "ttl_fraction": 0.5},
            "logging": {"level": "DEBUG"},
        }
        cfg = Settings(raw=raw).get_client_config()
        assert cfg.http.timeout_s == 15.0
        assert cfg.http.verify is False
        assert cfg.http.user_agent == "ua/1"
        assert cfg.iam.url == "https://iam.example/token"
        assert cfg.iam.timeout_s == 5.0
        assert cfg.iam.ttl_fraction == 0.5
        assert cfg.logging.level == 4

    def test_none_section_uses_defaults(self):
        cfg = ClientConfig.from_settings(Settings(raw={"http": None, "iam": None}))
        assert cfg.http.timeout_s == Defaults.HTTP_TIMEOUT_S


class TestValidation:
    """ConfigValidationError on out-of-range values."""

    def test_negative_timeout_rejected(self):
        with pytest.raises(ConfigValidationError, match="http.timeout_s"):
            ClientConfig.from_settings(Settings(raw={"http": {"timeout_s": -1}}))

    def test_zero_iam_timeout_rejected(self):
        with pytest.raises(ConfigValidationError, match="iam.timeout_s"):
            ClientConfig.from_settings(Settings(raw={"iam": {"timeout_s": 0}}))

    def test_non_numeric_timeout_rejected(self):
        with pytest.raises(ConfigValidationError, match="must be a number"):
            ClientConfig.from_settings(Settings(raw={"http": {"timeout_s": "soon"}}))

    @pytest.mark.parametrize("fraction", [0, 1, 1.5, -0.2])
    def test_ttl_fraction_out_of_range(self, fraction):
        with pytest.raises(ConfigValidationError, match="ttl_fraction"):
            ClientConfig.from_settings(Settings(raw={"iam": {"ttl_fraction": fraction}}))

    def test_iam_url_must_be_http(self):
        with pytest.raises(ConfigValidationError, match="iam.url"):
            ClientConfig.from_settings(Settings(raw={"iam": {"url": "ftp://iam"}}))


class TestLoadSettings:
    """load_settings() file handling and environment overrides."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(str(tmp_path / "nope.yaml"), environ={})

    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("iam:\n  ttl_fraction: 0.75\n", encoding="utf-8")
        settings = load_settings(str(path), environ={})
        assert settings.raw["iam"]["ttl_fraction"] == 0.75
        assert settings.get_client_config().iam.ttl_fraction == 0.75

    def test_empty_file_is_empty_settings(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(str(path), environ={}).raw == {}

    def test_env_overrides(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("http:\n  timeout_s: 10\n", encoding="utf-8")
        settings = load_settings(
            str(path),
            environ={"TTS_CLOUD_IAM_URL": "https://iam.other/token", "TTS_CLOUD_TIMEOUT_S": "3"},
        )
        cfg = settings.get_client_config()
        assert cfg.iam.url == "https://iam.other/token"
        assert cfg.http.timeout_s == 3.0

    def test_settings_is_frozen(self):
        settings = Settings(raw={})
        with pytest.raises(Exception):
            settings.raw = {"x": 1}
