"""
tts-cloud: Python client for an IBM Watson style Text to Speech cloud API.

Each client instance resolves its credentials once, at construction, from
constructor options, environment variables and deployment metadata. When an
IAM API key is resolved, a short-lived bearer token is acquired, cached and
refreshed transparently before the requests that need it.

Key Features:
    - Credential discovery with fixed precedence (options > env > VCAP)
    - IAM token management with refresh at 80% of the token lifetime
    - Async transport on httpx, with one token exchange in flight per client
    - Text to Speech v1 operations (voices, synthesis, custom voice models)

Example Usage:
    >>> import asyncio
    >>> from tts_cloud import TextToSpeechV1
    >>>
    >>> async def main():
    ...     async with TextToSpeechV1({"iam_apikey": "..."}) as tts:
    ...         audio = await tts.synthesize("Hello", accept="audio/wav")
    ...         open("hello.wav", "wb").write(audio.result)
    >>> asyncio.run(main())
"""

__version__ = "0.1.0"

from tts_cloud.auth.credentials import AuthScheme, ResolvedCredentials, UserOptions, resolve_credentials
from tts_cloud.errors import (
    ApiError,
    ConfigurationError,
    MissingParameterError,
    TokenAcquisitionError,
    TokenRefreshError,
    TTSCloudError,
)
from tts_cloud.service.base import BaseService
from tts_cloud.service.transport import DetailedResponse, RequestSpec
from tts_cloud.text_to_speech import TextToSpeechV1

__all__ = [
    "__version__",
    "ApiError",
    "AuthScheme",
    "BaseService",
    "ConfigurationError",
    "DetailedResponse",
    "MissingParameterError",
    "RequestSpec",
    "ResolvedCredentials",
    "TextToSpeechV1",
    "TokenAcquisitionError",
    "TokenRefreshError",
    "TTSCloudError",
    "UserOptions",
    "resolve_credentials",
]
