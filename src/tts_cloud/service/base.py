"""
Service Base Class and Request Gate.

BaseService is what every versioned client (e.g. TextToSpeechV1) builds on.
Construction resolves credentials synchronously, so a client that cannot
authorize fails before any network access. Every operation then goes
through ``dispatch``:

    dispatch(spec)
        -> merge client default headers/params with the call's own
        -> if an IAM key was resolved: TokenManager.ensure_token()
               EMPTY     acquire, stamp Bearer, send
               EXPIRING  refresh, stamp Bearer, send
               VALID     stamp Bearer, send (no exchange)
           a failed exchange raises and the request is never sent
        -> Transport.send()

There is no retry at any layer. Awaiting the same operation again is the
retry, and it re-attempts the token exchange as well.
"""
from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import httpx

from tts_cloud.auth.credentials import (
    AuthScheme,
    ResolvedCredentials,
    UserOptions,
    resolve_credentials,
)
from tts_cloud.auth.deployment import DeploymentLookup
from tts_cloud.auth.tokens import TokenManager
from tts_cloud.core.config import ClientConfig
from tts_cloud.core.logging import get_logger, info, new_request_id, verbose
from tts_cloud.errors import MissingParameterError
from tts_cloud.service.transport import DetailedResponse, RequestSpec, Transport

_LOG = get_logger("tts-cloud.service")


def get_missing_params(params: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    """Names in ``required`` whose value in ``params`` is None or empty."""
    return [name for name in required if params.get(name) is None or params.get(name) == ""]


def require_params(params: Mapping[str, Any], required: Iterable[str]) -> None:
    """
    Raises:
        MissingParameterError: Listing every missing name, in order.
    """
    missing = get_missing_params(params, required)
    if missing:
        raise MissingParameterError(missing)


class BaseService:
    """
    Credential-aware base for service clients.

    Subclasses set ``name`` (used for environment and VCAP discovery) and
    ``default_url``.

    Args:
        options: UserOptions or an equivalent mapping.
        config: Transport and IAM settings.
        environ: Environment mapping for credential discovery.
        deployment_lookup: Replacement for VCAP_SERVICES discovery.
        http_client: AsyncClient shared by service calls and token exchanges.
        clock: Time source for token expiry.

    Raises:
        ConfigurationError: If no usable credential is found and
            ``use_unauthenticated`` is not set.
    """

    name: str = ""
    default_url: str = ""

    def __init__(
        self,
        options: "UserOptions | Mapping[str, Any] | None" = None,
        *,
        config: Optional[ClientConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
        deployment_lookup: Optional[DeploymentLookup] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or ClientConfig()
        self._credentials: ResolvedCredentials = resolve_credentials(
            self.name, options, environ=environ, deployment_lookup=deployment_lookup
        )
        self.url = self._credentials.url or self.default_url
        self._headers: Dict[str, str] = dict(self._credentials.headers)
        self._params: Dict[str, Any] = dict(self._credentials.params)
        self._transport = Transport(self.config.http, http_client)

        self.token_manager: Optional[TokenManager] = None
        self._retired_token_managers: List[TokenManager] = []
        if self._credentials.manages_tokens:
            self.token_manager = TokenManager(
                self._credentials.iam_apikey,
                self._credentials.iam_url or self.config.iam.url,
                http_client=http_client,
                config=self.config.iam,
                clock=clock,
            )

    @property
    def scheme(self) -> AuthScheme:
        return self._credentials.scheme

    def get_credentials(self) -> Dict[str, str]:
        """Populated credential fields plus the effective service URL."""
        creds = self._credentials.as_dict()
        if self.url:
            creds["url"] = self.url
        return creds

    def set_access_token(self, access_token: str) -> None:
        """
        Authorize every later request with a caller-managed bearer token.

        Disengages IAM token management, if any.
        """
        if self.token_manager is not None:
            verbose(_LOG, "token_management_disabled", service=self.name)
            self._retired_token_managers.append(self.token_manager)
            self.token_manager = None
        self._params.pop("api_key", None)
        self._headers["Authorization"] = f"Bearer {access_token}"
        self._credentials = replace(
            self._credentials, scheme=AuthScheme.BEARER, access_token=access_token
        )
        info(_LOG, "access_token_set", service=self.name)

    async def dispatch(self, request: RequestSpec) -> DetailedResponse:
        """
        Authorize and send one request.

        Raises:
            TokenAcquisitionError / TokenRefreshError: The IAM exchange
                failed; nothing was sent to the service.
            ApiError: The service answered with a non-2xx status.
        """
        new_request_id()
        headers = {**self._headers, **request.headers}
        params = {**self._params, **request.params}

        if self.token_manager is not None:
            token = await self.token_manager.ensure_token()
            headers["Authorization"] = f"Bearer {token}"

        return await self._transport.send(replace(request, headers=headers, params=params), base_url=self.url)

    async def close(self) -> None:
        managers = list(self._retired_token_managers)
        if self.token_manager is not None:
            managers.append(self.token_manager)
        for manager in managers:
            await manager.aclose()
        self._retired_token_managers.clear()
        await self._transport.aclose()

    async def __aenter__(self) -> "BaseService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
