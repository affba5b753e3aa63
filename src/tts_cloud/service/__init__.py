"""Service base class and HTTP transport."""
from tts_cloud.service.base import BaseService, get_missing_params, require_params
from tts_cloud.service.transport import DetailedResponse, RequestSpec, Transport, expand_path

__all__ = [
    "BaseService",
    "DetailedResponse",
    "RequestSpec",
    "Transport",
    "expand_path",
    "get_missing_params",
    "require_params",
]
