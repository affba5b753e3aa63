"""
Exceptions raised by tts-cloud clients.

Error Taxonomy:
    - ConfigurationError: no usable credential at construction time. Raised
      synchronously from the client constructor, before any network access.
    - TokenAcquisitionError / TokenRefreshError: the IAM exchange failed.
      Raised from the awaited call; the request itself is never sent.
    - MissingParameterError: a required operation argument was not given.
      Raised by the request builders before anything is dispatched.
    - ApiError: the service answered with a non-2xx status.

Nothing here retries. A caller that wants another attempt simply awaits the
same operation again; a failed token exchange is retried on that next call.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class ErrorCode:
    """Machine-readable codes carried by every TTSCloudError."""
    CONFIGURATION = "CONFIGURATION"
    TOKEN_ACQUISITION_FAILED = "TOKEN_ACQUISITION_FAILED"
    TOKEN_REFRESH_FAILED = "TOKEN_REFRESH_FAILED"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    API_ERROR = "API_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TTSCloudError(Exception):
    """
    Base exception for tts-cloud.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(TTSCloudError):
    """No usable credential was found and unauthenticated mode was not requested."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.CONFIGURATION, details)


class TokenAcquisitionError(TTSCloudError):
    """Exchanging the IAM API key for an access token failed."""
    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict] = None):
        self.status_code = status_code
        super().__init__(message, ErrorCode.TOKEN_ACQUISITION_FAILED, details)


class TokenRefreshError(TokenAcquisitionError):
    """Exchanging the stored refresh token for a new access token failed."""
    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict] = None):
        super().__init__(message, status_code, details)
        self.code = ErrorCode.TOKEN_REFRESH_FAILED


class MissingParameterError(TTSCloudError):
    """One or more required operation parameters were not supplied."""
    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing required parameters: {', '.join(self.missing)}",
            ErrorCode.MISSING_PARAMETER,
            {"missing": self.missing},
        )


class ApiError(TTSCloudError):
    """
    The service returned a non-2xx response.

    Attributes:
        status_code: HTTP status of the response.
        transaction_id: Value of the X-Global-Transaction-Id header, if any.
        body: Decoded JSON body, or raw text when the body is not JSON.
    """
    def __init__(
        self,
        message: str,
        status_code: int,
        transaction_id: Optional[str] = None,
        body: Any = None,
    ):
        self.status_code = status_code
        self.transaction_id = transaction_id
        self.body = body
        details: Dict[str, Any] = {"status_code": status_code}
        if transaction_id:
            details["transaction_id"] = transaction_id
        super().__init__(message, ErrorCode.API_ERROR, details)
