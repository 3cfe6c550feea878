"""Remote API boundary: response envelope, error formatting and REST client."""

from arubacloud_provider.api.client import ArubaCloudClient
from arubacloud_provider.api.envelope import (
    NO_ERROR,
    ApiErrorBody,
    ApiResponse,
    ErrorInfo,
    introspect,
)
from arubacloud_provider.api.formatting import error_from_response, format_api_error

__all__ = [
    "NO_ERROR",
    "ApiErrorBody",
    "ApiResponse",
    "ArubaCloudClient",
    "ErrorInfo",
    "error_from_response",
    "format_api_error",
    "introspect",
]
