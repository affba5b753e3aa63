"""Tests for request building, response decoding and ApiError mapping."""
from __future__ import annotations

import asyncio

import httpx
import pytest

from tts_cloud.core.config import HttpConfig
from tts_cloud.errors import ApiError
from tts_cloud.service.transport import (
    DetailedResponse,
    RequestSpec,
    Transport,
    clean_params,
    expand_path,
)

BASE = "https://svc.test/api"


def _transport(handler) -> Transport:
    return Transport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _send(transport: Transport, spec: RequestSpec) -> DetailedResponse:
    return asyncio.run(transport.send(spec, base_url=BASE))


class TestExpandPath:

    def test_substitutes_and_quotes(self):
        path = expand_path("/v1/customizations/{customization_id}/words/{word}",
                           {"customization_id": "abc-123", "word": "a b/c"})
        assert path == "/v1/customizations/abc-123/words/a%20b%2Fc"

    def test_no_placeholders(self):
        assert expand_path("/v1/voices", None) == "/v1/voices"

    def test_missing_value_raises(self):
        with pytest.raises(KeyError):
            expand_path("/v1/voices/{voice}", {})


class TestCleanParams:

    def test_drops_none_and_renders_values(self):
        params = clean_params({"a": None, "b": True, "c": False, "d": ["x", "y"], "e": 3})
        assert params == {"b": "true", "c": "false", "d": "x,y", "e": 3}


class TestSend:

    def test_json_response(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"voices": [{"name": "v"}]}, headers={"X-Global-Transaction-Id": "tx"})

        response = _send(_transport(handler), RequestSpec(
            method="GET", url="/v1/voices/{voice}", path_params={"voice": "en-US_AllisonVoice"},
            params={"customization_id": None, "x": "1"},
        ))
        assert response.result == {"voices": [{"name": "v"}]}
        assert response.status_code == 200
        assert response.headers["x-global-transaction-id"] == "tx"
        assert str(seen[0].url) == f"{BASE}/v1/voices/en-US_AllisonVoice?x=1"

    def test_stream_returns_bytes(self):
        audio = b"RIFF\x00\x00\x00\x00WAVE"
        response = _send(
            _transport(lambda r: httpx.Response(200, content=audio, headers={"Content-Type": "audio/wav"})),
            RequestSpec(method="POST", url="/v1/synthesize", json={"text": "hi"}, stream=True),
        )
        assert response.result == audio

    def test_json_body_sent(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"customization_id": "c1"})

        response = _send(_transport(handler), RequestSpec(method="POST", url="/v1/customizations",
                                                          json={"name": "m"}))
        assert seen[0].content == b'{"name":"m"}' or seen[0].content == b'{"name": "m"}'
        assert response.status_code == 201

    def test_empty_body_is_none(self):
        response = _send(_transport(lambda r: httpx.Response(204)), RequestSpec(method="DELETE", url="/v1/x"))
        assert response.result is None

    def test_text_body(self):
        response = _send(_transport(lambda r: httpx.Response(200, text="plain")), RequestSpec(method="GET", url="/t"))
        assert response.result == "plain"

    def test_user_agent_on_owned_client(self):
        transport = Transport(HttpConfig(user_agent="ua/9"))
        assert transport.client.headers["User-Agent"] == "ua/9"
        asyncio.run(transport.aclose())


class TestErrors:

    def test_json_error_message(self):
        def handler(request):
            return httpx.Response(404, json={"error": "Model not found", "code": 404},
                                  headers={"X-Global-Transaction-Id": "tx-404"})

        with pytest.raises(ApiError) as exc:
            _send(_transport(handler), RequestSpec(method="GET", url="/v1/customizations/nope"))
        assert exc.value.status_code == 404
        assert exc.value.message == "Model not found"
        assert exc.value.transaction_id == "tx-404"
        assert exc.value.body == {"error": "Model not found", "code": 404}

    @pytest.mark.parametrize("key", ["error", "message", "errorMessage"])
    def test_message_keys(self, key):
        handler = lambda r: httpx.Response(400, json={key: "bad input"})  # noqa: E731
        with pytest.raises(ApiError, match="bad input"):
            _send(_transport(handler), RequestSpec(method="GET", url="/x"))

    def test_unauthorized_default_message(self):
        with pytest.raises(ApiError, match="invalid credentials") as exc:
            _send(_transport(lambda r: httpx.Response(401)), RequestSpec(method="GET", url="/x"))
        assert exc.value.status_code == 401

    def test_non_json_error(self):
        with pytest.raises(ApiError) as exc:
            _send(_transport(lambda r: httpx.Response(503, text="down")), RequestSpec(method="GET", url="/x"))
        assert exc.value.body == "down"
        assert exc.value.message == "Service Unavailable"

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(ApiError) as exc:
            _send(_transport(handler), RequestSpec(method="GET", url="/x"))
        assert exc.value.status_code == 0
