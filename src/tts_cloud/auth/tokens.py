"""
IAM Token Lifecycle.

When a client resolves an IAM API key, requests are authorized with a short
lived bearer token obtained from the IAM token endpoint. TokenManager owns
that token for one client instance.

States:
    EMPTY     no token fetched yet            -> acquire on next call
    VALID     token inside its usable window  -> reuse, no network
    EXPIRING  past the refresh threshold      -> refresh on next call

A token is treated as expiring once ``ttl_fraction`` (default 0.8) of its
stated lifetime has elapsed:

    expiration - expires_in * (1 - ttl_fraction) < now

so a 3600s token is refreshed 720s before it really expires. The margin
covers the gap between checking a token and the request that carries it
reaching the service.

Concurrency:
    ``ensure_token`` holds one asyncio.Lock per manager while it acquires or
    refreshes, and re-checks the state after taking the lock. Callers that
    queued behind an exchange reuse its token instead of starting their own.

Usage:
    manager = TokenManager("my-iam-key", http_client=client)
    token = await manager.ensure_token()
    headers["Authorization"] = f"Bearer {token}"
"""
from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from tts_cloud.core.config import Defaults, IamConfig
from tts_cloud.core.logging import fail, get_logger, info, verbose
from tts_cloud.errors import TokenAcquisitionError, TokenRefreshError

_LOG = get_logger("tts-cloud.tokens")

APIKEY_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
REFRESH_GRANT_TYPE = "refresh_token"


class TokenStatus(str, Enum):
    EMPTY = "empty"
    VALID = "valid"
    EXPIRING = "expiring"


class TokenState(BaseModel):
    """
    A token record as returned by the IAM endpoint.

    Fields the endpoint adds beyond these are kept as-is; each exchange
    replaces the whole record.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    access_token: str = ""
    refresh_token: str = ""
    token_type: str = ""
    expires_in: int = 0
    expiration: int = 0


class TokenManager:
    """
    Acquires, caches and refreshes the IAM bearer token of one client.

    Args:
        iam_apikey: API key exchanged for tokens.
        iam_url: Token endpoint; defaults to ``config.url``.
        http_client: AsyncClient used for exchanges. The manager creates and
            owns one when none is given.
        config: IAM settings (timeout, ttl_fraction).
        clock: Returns the current UNIX time in seconds.
    """

    def __init__(
        self,
        iam_apikey: str,
        iam_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Optional[IamConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or IamConfig()
        self.iam_apikey = iam_apikey
        self.iam_url = iam_url or self.config.url
        self._clock = clock
        self._client = http_client
        self._owns_client = http_client is None
        self._token_state = TokenState()
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def token_state(self) -> TokenState:
        return self._token_state

    def save_token_info(self, data: Dict[str, Any] | TokenState) -> TokenState:
        """Replace the stored token record wholesale."""
        if isinstance(data, TokenState):
            self._token_state = data
        else:
            self._token_state = TokenState.model_validate(data)
        return self._token_state

    def needs_acquisition(self) -> bool:
        return not self._token_state.access_token

    def is_expired(self, now: Optional[float] = None) -> bool:
        """True once ttl_fraction of the token's lifetime has elapsed."""
        now = self._clock() if now is None else now
        state = self._token_state
        margin = state.expires_in * (1.0 - self.config.ttl_fraction)
        return state.expiration - margin < now

    def status(self, now: Optional[float] = None) -> TokenStatus:
        if self.needs_acquisition():
            return TokenStatus.EMPTY
        if self.is_expired(now):
            return TokenStatus.EXPIRING
        return TokenStatus.VALID

    # ─────────────────────────────────────────────────────────────────────────
    # Exchanges
    # ─────────────────────────────────────────────────────────────────────────

    async def acquire(self, iam_apikey: Optional[str] = None, iam_url: Optional[str] = None) -> TokenState:
        """
        Exchange the API key for a new token record and store it.

        Raises:
            TokenAcquisitionError: On network failure, non-2xx status or an
                unusable response body.
        """
        form = {
            "grant_type": APIKEY_GRANT_TYPE,
            "apikey": iam_apikey or self.iam_apikey,
            "response_type": "cloud_iam",
        }
        data = await self._exchange(form, iam_url or self.iam_url, TokenAcquisitionError)
        state = self.save_token_info(data)
        info(_LOG, "token_acquired", expires_in=state.expires_in, token_type=state.token_type)
        return state

    async def refresh(self, refresh_token: Optional[str] = None, iam_url: Optional[str] = None) -> TokenState:
        """
        Exchange the stored refresh token for a new token record and store it.

        Raises:
            TokenRefreshError: On network failure, non-2xx status or an
                unusable response body.
        """
        form = {
            "grant_type": REFRESH_GRANT_TYPE,
            "refresh_token": refresh_token or self._token_state.refresh_token,
        }
        data = await self._exchange(form, iam_url or self.iam_url, TokenRefreshError)
        state = self.save_token_info(data)
        info(_LOG, "token_refreshed", expires_in=state.expires_in, token_type=state.token_type)
        return state

    async def ensure_token(self, now: Optional[float] = None) -> str:
        """
        Return an access token that is safe to use right now.

        Performs at most one exchange: acquire when EMPTY, refresh when
        EXPIRING, nothing when VALID.
        """
        if self.status(now) is TokenStatus.VALID:
            return self._token_state.access_token

        async with self._get_lock():
            status = self.status(now)
            if status is TokenStatus.EMPTY:
                await self.acquire()
            elif status is TokenStatus.EXPIRING:
                await self.refresh()
            else:
                verbose(_LOG, "token_shared_from_inflight_exchange")
            return self._token_state.access_token

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_s)
        return self._client

    async def _exchange(
        self,
        form: Dict[str, str],
        url: str,
        error_cls: type[TokenAcquisitionError],
    ) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "Authorization": Defaults.IAM_CLIENT_AUTH,
        }
        grant = form["grant_type"]
        try:
            response = await self._get_client().post(
                url, data=form, headers=headers, timeout=self.config.timeout_s
            )
        except httpx.HTTPError as e:
            fail(_LOG, "token_exchange_network_error", grant=grant, error=type(e).__name__)
            raise error_cls(f"IAM token request failed: {e}", details={"url": url}) from e

        if response.status_code >= 400:
            message = _error_message(response)
            fail(_LOG, "token_exchange_rejected", grant=grant, status=response.status_code)
            raise error_cls(
                f"IAM token request rejected ({response.status_code}): {message}",
                status_code=response.status_code,
                details={"url": url},
            )

        try:
            data = response.json()
            if not isinstance(data, dict) or not data.get("access_token"):
                raise ValueError("response carries no access_token")
            TokenState.model_validate(data)
        except (ValueError, ValidationError) as e:
            fail(_LOG, "token_exchange_bad_response", grant=grant, status=response.status_code)
            raise error_cls(
                f"IAM token response unusable: {e}",
                status_code=response.status_code,
                details={"url": url},
            ) from None
        return data


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("errorMessage", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase
