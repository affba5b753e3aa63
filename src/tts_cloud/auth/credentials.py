"""
Credential Resolution.

Turns what the caller passed to a client constructor, plus what the process
environment and the deployment platform know about the service, into one
resolved credential set with exactly one active authentication scheme.

Sources (highest priority first, merged field by field):
    1. Constructor options (UserOptions)
    2. Environment variables: <SERVICE_NAME>_USERNAME, _PASSWORD, _API_KEY,
       _URL, _ACCESS_TOKEN, _PLATFORM_API_KEY
    3. Deployment metadata (VCAP_SERVICES)

Scheme selection (first match wins):
    legacy token  -> X-Watson-Authorization-Token header, no discovery at all
    IAM API key   -> bearer token managed per call by the TokenManager
    basic pair    -> Authorization: Basic base64(username:password)
    access token  -> Authorization: Bearer <token>
    API key       -> ?api_key=<key> on every request

Example:
    >>> creds = resolve_credentials(
    ...     "text_to_speech",
    ...     UserOptions(username="u", password="p"),
    ...     environ={},
    ...     deployment_lookup=lambda name: {},
    ... )
    >>> creds.scheme
    <AuthScheme.BASIC: 'basic'>
"""
from __future__ import annotations

import base64
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tts_cloud.auth.deployment import DeploymentLookup, environ_deployment_lookup
from tts_cloud.core.logging import debug, get_logger, info
from tts_cloud.errors import ConfigurationError

_LOG = get_logger("tts-cloud.credentials")

LEGACY_TOKEN_HEADER = "X-Watson-Authorization-Token"

CREDENTIAL_FIELDS = (
    "username",
    "password",
    "api_key",
    "url",
    "access_token",
    "iam_apikey",
    "iam_url",
)

ENV_SUFFIXES = {
    "username": "USERNAME",
    "password": "PASSWORD",
    "api_key": "API_KEY",
    "url": "URL",
    "access_token": "ACCESS_TOKEN",
    "iam_apikey": "PLATFORM_API_KEY",
}


def strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


class AuthScheme(str, Enum):
    """The single mechanism that authorizes a client instance."""
    LEGACY_TOKEN = "legacy_token"
    IAM = "iam"
    BASIC = "basic"
    BEARER = "bearer"
    API_KEY = "api_key"
    NONE = "none"


class UserOptions(BaseModel):
    """
    Options accepted by every service client constructor.

    Unknown fields are rejected, so a misspelled option fails loudly instead
    of silently leaving the client unauthenticated.

    Attributes:
        url: Base URL of the service; a trailing slash is removed.
        username / password: Basic-auth pair (both required to count).
        api_key: Static API key. ``apikey`` is accepted as an alias.
        use_unauthenticated: Skip the credential requirement entirely.
        headers: Default headers for every request. Non-string values
            (e.g. ``True`` for X-Watson-Learning-Opt-Out) are stringified.
        token: Legacy per-request authorization token.
        access_token: Caller-managed bearer token.
        iam_apikey: IAM API key; enables automatic token management.
        iam_url: Override for the IAM token endpoint.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    apikey: Optional[str] = Field(default=None, exclude=True)
    use_unauthenticated: bool = False
    headers: Dict[str, str] = Field(default_factory=dict)
    token: Optional[str] = None
    access_token: Optional[str] = None
    iam_apikey: Optional[str] = None
    iam_url: Optional[str] = None

    @field_validator("url", "iam_url")
    @classmethod
    def _strip_slash(cls, value: Optional[str]) -> Optional[str]:
        return strip_trailing_slash(value) if value else value

    @field_validator("headers", mode="before")
    @classmethod
    def _stringify_headers(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            out = {}
            for k, v in value.items():
                if isinstance(v, bool):
                    v = "true" if v else "false"
                out[str(k)] = str(v)
            return out
        return value

    @classmethod
    def coerce(cls, options: "UserOptions | Mapping[str, Any] | None") -> "UserOptions":
        """Accept a UserOptions, a plain mapping, or None."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))

    def explicit_fields(self) -> Dict[str, str]:
        """Credential fields the caller actually set, with api key spellings merged."""
        out = {name: getattr(self, name) for name in CREDENTIAL_FIELDS if getattr(self, name)}
        if not out.get("api_key") and self.apikey:
            out["api_key"] = self.apikey
        return out


@dataclass
class ResolvedCredentials:
    """
    Result of credential resolution.

    ``headers`` and ``params`` are the defaults every request carries; the
    static Authorization header (basic or bearer) is already merged into
    ``headers`` when one of those schemes is active.
    """
    scheme: AuthScheme
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    url: Optional[str] = None
    access_token: Optional[str] = None
    iam_apikey: Optional[str] = None
    iam_url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def manages_tokens(self) -> bool:
        return bool(self.iam_apikey) and self.scheme is AuthScheme.IAM

    def as_dict(self) -> Dict[str, str]:
        """Only the credential fields that are populated."""
        return {name: getattr(self, name) for name in CREDENTIAL_FIELDS if getattr(self, name)}


def has_credentials(bundle: Mapping[str, Any]) -> bool:
    return bool(
        has_basic_credentials(bundle)
        or bundle.get("api_key")
        or bundle.get("access_token")
        or bundle.get("refresh_token")
        or bundle.get("iam_apikey")
    )


def has_basic_credentials(bundle: Mapping[str, Any]) -> bool:
    return bool(bundle.get("username") and bundle.get("password"))


def basic_auth_header(username: str, password: str) -> str:
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def credentials_from_environment(name: str, environ: Mapping[str, str]) -> Dict[str, str]:
    """
    Read ``<NAME>_<SUFFIX>`` variables for one service.

    Both the raw upper-cased name and its hyphen-to-underscore variant are
    tried, in that order. Empty values count as absent.

    Aliases:
        - watson_vision_combined reads visual_recognition variables
        - conversation reads assistant variables when ASSISTANT_USERNAME is set
    """
    if name == "watson_vision_combined":
        return credentials_from_environment("visual_recognition", environ)
    if name == "conversation" and environ.get("ASSISTANT_USERNAME"):
        return credentials_from_environment("assistant", environ)

    upper = name.upper()
    underscored = upper.replace("-", "_")
    found: Dict[str, str] = {}
    for field_name, suffix in ENV_SUFFIXES.items():
        value = environ.get(f"{upper}_{suffix}") or environ.get(f"{underscored}_{suffix}")
        if value:
            found[field_name] = value
    return found


def credentials_from_deployment(name: str, lookup: DeploymentLookup) -> Dict[str, Any]:
    """
    Query the deployment-metadata lookup and normalize its key names.

    visual_recognition is published under watson_vision_combined. A bundle
    carrying ``apikey`` together with an ``iam_apikey_name`` marker holds an
    IAM key, not a static one.
    """
    lookup_name = "watson_vision_combined" if name == "visual_recognition" else name
    bundle = dict(lookup(lookup_name) or {})

    apikey = bundle.pop("apikey", None)
    if apikey:
        if bundle.get("iam_apikey_name"):
            bundle["iam_apikey"] = apikey
        else:
            bundle.setdefault("api_key", apikey)
    return bundle


def resolve_credentials(
    service_name: str,
    options: "UserOptions | Mapping[str, Any] | None",
    environ: Optional[Mapping[str, str]] = None,
    deployment_lookup: Optional[DeploymentLookup] = None,
) -> ResolvedCredentials:
    """
    Resolve the credentials of one service client.

    Args:
        service_name: Snake-case service name, e.g. "text_to_speech".
        options: Constructor options; never mutated.
        environ: Environment mapping (defaults to os.environ).
        deployment_lookup: Callable returning a credential bundle for a
            service name (defaults to VCAP_SERVICES discovery over ``environ``).

    Returns:
        ResolvedCredentials with the active scheme and default headers/params.

    Raises:
        ConfigurationError: If no credential is found and
            ``use_unauthenticated`` is not set.
    """
    opts = UserOptions.coerce(options)
    env = os.environ if environ is None else environ
    headers = dict(opts.headers)

    if opts.token:
        headers[LEGACY_TOKEN_HEADER] = opts.token
        info(_LOG, "credentials_resolved", service=service_name, scheme=AuthScheme.LEGACY_TOKEN.value)
        return ResolvedCredentials(
            scheme=AuthScheme.LEGACY_TOKEN,
            headers=headers,
            **opts.explicit_fields(),
        )

    if deployment_lookup is None:
        deployment_lookup = environ_deployment_lookup(env)

    merged: Dict[str, Any] = {}
    merged.update(credentials_from_deployment(service_name, deployment_lookup))
    merged.update(credentials_from_environment(service_name, env))
    merged.update(opts.explicit_fields())
    debug(_LOG, "credential_sources_merged", service=service_name, fields=sorted(merged))

    fields = {name: merged.get(name) or None for name in CREDENTIAL_FIELDS}
    for name in ("url", "iam_url"):
        if fields[name]:
            fields[name] = strip_trailing_slash(fields[name])

    if opts.use_unauthenticated:
        info(_LOG, "credentials_resolved", service=service_name, scheme=AuthScheme.NONE.value)
        return ResolvedCredentials(scheme=AuthScheme.NONE, headers=headers, **fields)

    if not has_credentials(merged):
        raise ConfigurationError(
            "Insufficient credentials provided in constructor argument. Refer to the "
            "documentation for the required parameters. Common examples are "
            "username/password, api_key, iam_apikey and access_token.",
            details={"service": service_name},
        )

    params: Dict[str, str] = {}
    if fields["iam_apikey"]:
        scheme = AuthScheme.IAM
    elif has_basic_credentials(fields):
        scheme = AuthScheme.BASIC
        headers = {"Authorization": basic_auth_header(fields["username"], fields["password"]), **headers}
    elif fields["access_token"]:
        scheme = AuthScheme.BEARER
        headers = {"Authorization": f"Bearer {fields['access_token']}", **headers}
    elif fields["api_key"]:
        scheme = AuthScheme.API_KEY
        params["api_key"] = fields["api_key"]
    else:
        # Only a refresh token was supplied; nothing can be stamped statically.
        scheme = AuthScheme.NONE

    info(_LOG, "credentials_resolved", service=service_name, scheme=scheme.value)
    return ResolvedCredentials(scheme=scheme, headers=headers, params=params, **fields)
