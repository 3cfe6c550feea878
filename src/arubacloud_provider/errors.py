"""Exception hierarchy for the ArubaCloud provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from arubacloud_provider.api.envelope import ApiErrorBody
    from arubacloud_provider.core.classifier import Verdict


class ArubaCloudProviderError(Exception):
    """Base exception for this package."""


class MissingDependencyError(ArubaCloudProviderError):
    """Raised when an optional dependency is required but not installed."""


class UnknownResourceTypeError(ArubaCloudProviderError):
    """Raised when the host asks for a type name the provider does not register."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unknown resource type: {type_name}")


class TransportError(ArubaCloudProviderError):
    """Raised when the remote API could not be reached (connection, EOF, timeout)."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class ApiError(ArubaCloudProviderError):
    """Raised when the remote API answers with a non-success response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error: ApiErrorBody | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        super().__init__(message)


class ResourceNotFoundError(ApiError):
    """Raised when a data source or import targets an identifier that returns 404."""


class InvalidResponseError(ArubaCloudProviderError):
    """Raised when a success response lacks the data the adapter needs."""


class ReconcileTimeoutError(ArubaCloudProviderError):
    """Base for errors raised when a core loop exhausts its explicit timeout."""

    def __init__(self, message: str, *, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(message)


class WaitTimeoutError(ReconcileTimeoutError):
    """Raised when a resource does not leave its transitional state in time."""

    def __init__(
        self,
        message: str,
        *,
        timeout_seconds: float,
        elapsed_seconds: float,
        last_state: str | None = None,
    ) -> None:
        self.elapsed_seconds = elapsed_seconds
        self.last_state = last_state
        super().__init__(message, timeout_seconds=timeout_seconds)


class DeleteTimeoutError(ReconcileTimeoutError):
    """Raised when a delete keeps failing until the timeout is exhausted."""

    def __init__(
        self,
        message: str,
        *,
        timeout_seconds: float,
        attempts: int,
        last_error: str | None = None,
        last_verdict: Verdict | None = None,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.last_verdict = last_verdict
        super().__init__(message, timeout_seconds=timeout_seconds)


class OperationCancelledError(ArubaCloudProviderError):
    """Raised when the host's cancellation signal fires during a core loop."""

    def __init__(self, message: str, *, elapsed_seconds: float | None = None) -> None:
        self.elapsed_seconds = elapsed_seconds
        super().__init__(message)
