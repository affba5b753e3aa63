"""Tests for VCAP_SERVICES credential discovery."""
from __future__ import annotations

import json

from tts_cloud.auth.deployment import environ_deployment_lookup, vcap_credentials

VCAP = {
    "text_to_speech": [
        {"name": "my-tts", "credentials": {"url": "https://tts.vcap/api", "username": "vu", "password": "vp"}}
    ],
    "speech_to_text_beta": [
        {"name": "stt", "credentials": {"apikey": "k", "iam_apikey_name": "auto-generated"}}
    ],
    "user-provided": [
        {"name": "custom_service", "credentials": {"api_key": "ups"}}
    ],
}


def _env(services) -> dict:
    return {"VCAP_SERVICES": json.dumps(services)}


class TestVcapCredentials:

    def test_exact_label(self):
        creds = vcap_credentials("text_to_speech", _env(VCAP))
        assert creds["username"] == "vu"
        assert creds["url"] == "https://tts.vcap/api"

    def test_label_prefix(self):
        assert vcap_credentials("speech_to_text", _env(VCAP))["apikey"] == "k"

    def test_instance_name(self):
        assert vcap_credentials("custom_service", _env(VCAP)) == {"api_key": "ups"}

    def test_unknown_service(self):
        assert vcap_credentials("language_translator", _env(VCAP)) == {}

    def test_missing_variable(self):
        assert vcap_credentials("text_to_speech", {}) == {}

    def test_invalid_json(self):
        assert vcap_credentials("text_to_speech", {"VCAP_SERVICES": "{not json"}) == {}

    def test_returns_copy(self):
        env = _env(VCAP)
        creds = vcap_credentials("text_to_speech", env)
        creds["username"] = "changed"
        assert vcap_credentials("text_to_speech", env)["username"] == "vu"


def test_environ_deployment_lookup_binds_mapping():
    lookup = environ_deployment_lookup(_env(VCAP))
    assert lookup("text_to_speech")["password"] == "vp"
