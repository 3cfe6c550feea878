"""Single response envelope shared by every remote API call.

The REST client populates :class:`ApiResponse` for every endpoint, so the
core reads status code and error details directly instead of inspecting
endpoint-specific response types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

_PROBLEM_MEMBERS = frozenset({"type", "title", "status", "detail", "instance", "extensions"})


@dataclass(frozen=True, slots=True)
class ApiErrorBody:
    """Problem-details error object returned by the API."""

    title: str | None = None
    detail: str | None = None
    status: int | None = None
    type: str | None = None
    instance: str | None = None
    extensions: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> ApiErrorBody | None:
        """Parse a decoded JSON error body; ``None`` when it is not an object.

        Extensions are read from an ``extensions`` member when present and
        otherwise collected from non-standard top-level members.
        """
        if not isinstance(payload, Mapping):
            return None

        extensions = payload.get("extensions")
        if not isinstance(extensions, Mapping):
            extensions = {
                key: value for key, value in payload.items() if key not in _PROBLEM_MEMBERS
            }

        return cls(
            title=_optional_str(payload.get("title")),
            detail=_optional_str(payload.get("detail")),
            status=_optional_int(payload.get("status")),
            type=_optional_str(payload.get("type")),
            instance=_optional_str(payload.get("instance")),
            extensions=dict(extensions),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        payload: dict[str, Any] = {}
        for key in ("type", "title", "status", "detail", "instance"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.extensions:
            payload["extensions"] = dict(self.extensions)
        return payload


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Outcome of one remote call that reached the API."""

    status_code: int
    data: Any = None
    error: ApiErrorBody | None = None

    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def data_dict(self) -> dict[str, Any]:
        """Response data as a mapping; empty when the body is not an object."""
        return dict(self.data) if isinstance(self.data, Mapping) else {}


class ErrorInfo(NamedTuple):
    """Status code and human-readable error details of a response."""

    status_code: int
    title: str | None
    detail: str | None
    is_error: bool


NO_ERROR = ErrorInfo(0, None, None, False)


def introspect(response: object) -> ErrorInfo:
    """Extract ``(status_code, title, detail, is_error)`` from a response.

    Anything that is not an :class:`ApiResponse`, and every successful
    response, yields the shared :data:`NO_ERROR` value.
    """
    if not isinstance(response, ApiResponse) or not response.is_error():
        return NO_ERROR
    if response.error is None:
        return ErrorInfo(response.status_code, None, None, True)
    return ErrorInfo(response.status_code, response.error.title, response.error.detail, True)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
