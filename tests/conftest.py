"""
Shared fixtures: a controllable clock and an in-memory IAM + service backend.

Nothing here opens a socket. Every client under test is handed an
``httpx.AsyncClient`` over ``httpx.MockTransport`` routed to FakeBackend.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

import httpx
import pytest

IAM_URL = "https://iam.test/identity/token"
SERVICE_URL = "https://tts.test/api"
T0 = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """
    Answers IAM token requests and service requests.

    Attributes:
        iam_requests: Token exchange requests, oldest first.
        service_requests: Everything else.
        iam_status: Status returned by the token endpoint.
        iam_delay: Seconds the token endpoint waits before answering.
        service_response: Factory (request -> httpx.Response) for service calls.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.iam_requests: List[httpx.Request] = []
        self.service_requests: List[httpx.Request] = []
        self.iam_status = 200
        self.iam_delay = 0.0
        self.iam_body: Optional[Dict[str, Any]] = None
        self.service_response = lambda request: httpx.Response(200, json={"voices": []})

    def iam_form(self, index: int = -1) -> Dict[str, str]:
        body = self.iam_requests[index].content.decode()
        return {k: v[0] for k, v in parse_qs(body).items()}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url).startswith(IAM_URL):
            self.iam_requests.append(request)
            if self.iam_delay:
                await asyncio.sleep(self.iam_delay)
            if self.iam_status != 200:
                return httpx.Response(self.iam_status, json={"errorMessage": "Provided API key could not be found"})
            n = len(self.iam_requests)
            body = self.iam_body or {
                "access_token": f"tok-{n}",
                "refresh_token": f"ref-{n}",
                "token_type": "Bearer",
                "expires_in": 3600,
                "expiration": int(self.clock.now) + 3600,
            }
            return httpx.Response(200, json=body)

        self.service_requests.append(request)
        return self.service_response(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content.decode())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock) -> FakeBackend:
    return FakeBackend(clock)

