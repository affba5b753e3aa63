"""Tests for the tts-cloud command-line interface."""
from __future__ import annotations

import json

import httpx
import pytest

from conftest import SERVICE_URL
from tts_cloud import cli
from tts_cloud.text_to_speech import TextToSpeechV1

_CREDENTIAL_VARS = [
    "VCAP_SERVICES",
    "TEXT_TO_SPEECH_USERNAME",
    "TEXT_TO_SPEECH_PASSWORD",
    "TEXT_TO_SPEECH_API_KEY",
    "TEXT_TO_SPEECH_URL",
    "TEXT_TO_SPEECH_ACCESS_TOKEN",
    "TEXT_TO_SPEECH_PLATFORM_API_KEY",
    "TTS_CLOUD_SETTINGS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)


def _last_json(capsys) -> dict:
    out = capsys.readouterr().out.strip().splitlines()
    return json.loads(out[-1])


class TestCredentialsCommand:

    def test_env_basic_credentials_masked(self, monkeypatch, capsys):
        monkeypatch.setenv("TEXT_TO_SPEECH_USERNAME", "alice")
        monkeypatch.setenv("TEXT_TO_SPEECH_PASSWORD", "s3cret-password")

        code = cli.main(["--json", "credentials"])
        payload = _last_json(capsys)

        assert code == 0
        assert payload["scheme"] == "basic"
        assert payload["service"] == "text_to_speech"
        assert payload["credentials"]["username"] == "alice"
        assert payload["credentials"]["password"] == "****word"
        assert payload["credentials"]["url"] == TextToSpeechV1.default_url

    def test_flags_override_env(self, monkeypatch, capsys):
        monkeypatch.setenv("TEXT_TO_SPEECH_API_KEY", "env-key-0000")
        code = cli.main(["--json", "--iam-apikey", "flag-iam-key", "credentials"])
        payload = _last_json(capsys)
        assert code == 0
        assert payload["scheme"] == "iam"
        assert payload["credentials"]["iam_apikey"] == "****-key"

    def test_missing_credentials(self, capsys):
        code = cli.main(["--json", "credentials"])
        payload = _last_json(capsys)
        assert code == 1
        assert payload["error"] == "CONFIGURATION"

    def test_missing_settings_file(self, tmp_path, capsys):
        code = cli.main(["--json", "--api-key", "k", "--settings", str(tmp_path / "none.yaml"), "credentials"])
        assert code == 1
        assert _last_json(capsys)["error"] == "CONFIGURATION"


class TestServiceCommands:
    """Commands that talk to the service, against an in-memory backend."""

    @pytest.fixture
    def patched_client(self, monkeypatch, backend):
        def factory(options, config):
            return TextToSpeechV1(
                {"url": SERVICE_URL, **options},
                config=config,
                environ={},
                deployment_lookup=lambda name: {},
                http_client=backend.client(),
            )

        monkeypatch.setattr(cli, "TextToSpeechV1", factory)
        return backend

    def test_voices(self, patched_client, capsys):
        patched_client.service_response = lambda r: httpx.Response(
            200, json={"voices": [{"name": "en-US_AllisonVoice"}, {"name": "de-DE_BirgitVoice"}]}
        )
        code = cli.main(["--json", "--api-key", "k", "voices"])
        assert code == 0
        assert _last_json(capsys)["voices"] == ["en-US_AllisonVoice", "de-DE_BirgitVoice"]

    def test_synthesize_writes_file(self, patched_client, tmp_path, capsys):
        patched_client.service_response = lambda r: httpx.Response(200, content=b"RIFF....WAVE")
        out = tmp_path / "sub" / "hello.wav"

        code = cli.main(["--json", "--api-key", "k", "synthesize", "Hello", "--voice", "en-US_LisaVoice",
                         "--out", str(out)])

        assert code == 0
        assert out.read_bytes() == b"RIFF....WAVE"
        assert _last_json(capsys) == {"ok": True, "out": str(out), "bytes": 12}
        request = patched_client.service_requests[0]
        assert request.headers["Accept"] == "audio/wav"

    def test_pronounce(self, patched_client, capsys):
        patched_client.service_response = lambda r: httpx.Response(200, json={"pronunciation": ".tə.ˈme͡ɪ.to͡ʊ"})
        code = cli.main(["--json", "--api-key", "k", "pronounce", "tomato", "--format", "ipa"])
        assert code == 0
        assert _last_json(capsys)["pronunciation"] == ".tə.ˈme͡ɪ.to͡ʊ"
        assert patched_client.service_requests[0].url.params["format"] == "ipa"

    def test_service_error_exit_code(self, patched_client, capsys):
        patched_client.service_response = lambda r: httpx.Response(500, json={"error": "internal"})
        code = cli.main(["--json", "--api-key", "k", "voices"])
        payload = _last_json(capsys)
        assert code == 1
        assert payload["error"] == "API_ERROR"
        assert payload["message"] == "internal"
