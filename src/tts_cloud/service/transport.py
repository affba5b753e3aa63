"""
HTTP Transport.

Every service request is described by a RequestSpec and sent through one
Transport, which wraps a single ``httpx.AsyncClient`` per service client.

    RequestSpec(method="GET", url="/v1/voices/{voice}",
                path_params={"voice": "en-US_AllisonVoice"},
                params={"customization_id": None})

becomes ``GET <service-url>/v1/voices/en-US_AllisonVoice``; query values that
are None are dropped. Path parameters are URL-quoted before substitution.

Responses:
    2xx + stream=True   -> DetailedResponse(result=bytes)
    2xx + JSON body     -> DetailedResponse(result=decoded JSON)
    2xx + other body    -> DetailedResponse(result=text, or None when empty)
    anything else       -> ApiError
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from tts_cloud.core.config import HttpConfig
from tts_cloud.core.logging import fail, get_logger, verbose
from tts_cloud.errors import ApiError
from tts_cloud.utils.timeit import timeit

_LOG = get_logger("tts-cloud.transport")

TRANSACTION_ID_HEADER = "X-Global-Transaction-Id"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclass
class RequestSpec:
    """
    One service request before authorization is applied.

    Attributes:
        method: HTTP method.
        url: Operation path with ``{name}`` placeholders, or an absolute URL.
        path_params: Values for the placeholders.
        params: Query parameters; None values are dropped.
        json: JSON body.
        data: Raw body (bytes or str), used when ``json`` is None.
        headers: Request headers; these win over client defaults.
        stream: Return the body as bytes instead of decoding it.
    """
    method: str
    url: str
    path_params: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    json: Any = None
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    stream: bool = False


@dataclass
class DetailedResponse:
    """Decoded result of a successful call, with its headers and status."""
    result: Any
    headers: Dict[str, str]
    status_code: int

    def get_result(self) -> Any:
        return self.result

    def get_headers(self) -> Dict[str, str]:
        return self.headers

    def get_status_code(self) -> int:
        return self.status_code


def expand_path(template: str, path_params: Optional[Mapping[str, Any]]) -> str:
    """
    Substitute ``{name}`` placeholders with URL-quoted values.

    Raises:
        KeyError: If a placeholder has no value.
    """
    params = path_params or {}

    def _sub(match: "re.Match[str]") -> str:
        value = params[match.group(1)]
        return quote(str(value), safe="")

    return _PLACEHOLDER.sub(_sub, template)


def clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop None values and render booleans the way the service expects."""
    out: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        out[key] = value
    return out


def _error_message(response: httpx.Response, body: Any) -> str:
    if isinstance(body, dict):
        for key in ("error", "message", "errorMessage"):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message") or value.get("description")
            if value:
                return str(value)
    if response.status_code == 401:
        return "Unauthorized: Access is denied due to invalid credentials."
    return response.reason_phrase or f"HTTP {response.status_code}"


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class Transport:
    """
    Sends RequestSpecs over one ``httpx.AsyncClient``.

    Args:
        config: Timeout, TLS verification and user agent.
        client: Pre-built AsyncClient (e.g. one over ``httpx.MockTransport``
            in tests). The transport closes only a client it created.
    """

    def __init__(self, config: Optional[HttpConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or HttpConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_s),
                verify=self.config.verify,
                headers={"User-Agent": self.config.user_agent},
            )
        return self._client

    def build_url(self, base_url: Optional[str], spec: RequestSpec) -> str:
        path = expand_path(spec.url, spec.path_params)
        if path.startswith(("http://", "https://")) or not base_url:
            return path
        return base_url.rstrip("/") + path

    async def send(self, spec: RequestSpec, base_url: Optional[str] = None) -> DetailedResponse:
        """
        Send one request and decode its response.

        Raises:
            ApiError: On a non-2xx status, or with status_code 0 when the
                request never got a response.
        """
        url = self.build_url(base_url, spec)
        request = self.client.build_request(
            spec.method,
            url,
            params=clean_params(spec.params),
            headers=spec.headers,
            json=spec.json,
            content=spec.data if spec.json is None else None,
        )
        verbose(_LOG, "request_sent", method=spec.method, path=request.url.path)

        with timeit("request") as t:
            try:
                response = await self.client.send(request)
            except httpx.HTTPError as e:
                fail(_LOG, "request_network_error", method=spec.method, error=type(e).__name__,
                     seconds=t.elapsed)
                raise ApiError(f"Request to {request.url.host} failed: {e}", status_code=0) from e

        transaction_id = response.headers.get(TRANSACTION_ID_HEADER)
        if not response.is_success:
            body = _decode_body(response)
            message = _error_message(response, body)
            fail(_LOG, "request_failed", method=spec.method, status=response.status_code,
                 transaction_id=transaction_id, seconds=t.timing.seconds)
            raise ApiError(message, response.status_code, transaction_id=transaction_id, body=body)

        result = response.content if spec.stream else _decode_body(response)
        verbose(_LOG, "request_completed", method=spec.method, status=response.status_code,
                seconds=t.timing.seconds)
        return DetailedResponse(result=result, headers=dict(response.headers), status_code=response.status_code)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
