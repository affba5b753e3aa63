"""Credential resolution and IAM token management."""
from tts_cloud.auth.credentials import (
    AuthScheme,
    ResolvedCredentials,
    UserOptions,
    resolve_credentials,
)
from tts_cloud.auth.tokens import TokenManager, TokenState, TokenStatus

__all__ = [
    "AuthScheme",
    "ResolvedCredentials",
    "TokenManager",
    "TokenState",
    "TokenStatus",
    "UserOptions",
    "resolve_credentials",
]
