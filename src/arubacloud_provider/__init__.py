"""ArubaCloud infrastructure provider: resource adapters over a reconciliation core."""

from arubacloud_provider.errors import (
    ApiError,
    ArubaCloudProviderError,
    DeleteTimeoutError,
    OperationCancelledError,
    ResourceNotFoundError,
    TransportError,
    UnknownResourceTypeError,
    WaitTimeoutError,
)
from arubacloud_provider.provider import ArubaCloudProvider, ProviderClient

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ArubaCloudProvider",
    "ArubaCloudProviderError",
    "DeleteTimeoutError",
    "OperationCancelledError",
    "ProviderClient",
    "ResourceNotFoundError",
    "TransportError",
    "UnknownResourceTypeError",
    "WaitTimeoutError",
    "__version__",
]
