"""Error Classifier: maps a remote outcome to a retry verdict."""

from __future__ import annotations

from enum import Enum

from arubacloud_provider.api.envelope import ErrorInfo, introspect

# Matched as case-insensitive substrings, so short entries such as "in use" or
# "attached" also hit unrelated words ("attached_at").
# TODO: switch to a structured error code once the API exposes one for
# dependency conflicts.
DEPENDENCY_KEYWORDS: tuple[str, ...] = (
    "dependency",
    "dependent",
    "depend",
    "cannot delete",
    "can't delete",
    "still in use",
    "in use",
    "has resources",
    "contains resources",
    "has subnets",
    "has security groups",
    "has securitygroup",
    "must be deleted first",
    "delete first",
    "remove first",
    "still exists",
    "associated",
    "attached",
    "linked",
)


class Verdict(str, Enum):
    """Classification of one remote outcome."""

    OK = "ok"
    GONE = "gone"
    RETRYABLE = "retryable"
    RETRYABLE_DEPENDENCY = "retryable_dependency"

    @property
    def is_success(self) -> bool:
        """Whether a delete may stop on this verdict."""
        return self in (Verdict.OK, Verdict.GONE)

    @property
    def is_retryable(self) -> bool:
        return self in (Verdict.RETRYABLE, Verdict.RETRYABLE_DEPENDENCY)


def error_message(title: str | None, detail: str | None) -> str:
    """Join non-empty title and detail as ``"title: detail"``."""
    parts = [part for part in (title, detail) if part]
    return ": ".join(parts)


def contains_dependency_keywords(message: str) -> bool:
    lower = message.lower()
    return any(keyword in lower for keyword in DEPENDENCY_KEYWORDS)


def classify(info: ErrorInfo) -> Verdict:
    """Classify an introspected response.

    Success wins over everything, then 404, then the dependency keyword
    check on ``title: detail``. Every other error is retryable.
    """
    if not info.is_error:
        return Verdict.OK
    if info.status_code == 404:
        return Verdict.GONE
    message = error_message(info.title, info.detail)
    if message and contains_dependency_keywords(message):
        return Verdict.RETRYABLE_DEPENDENCY
    return Verdict.RETRYABLE


def classify_response(response: object) -> Verdict:
    return classify(introspect(response))


def classify_transport_error(exc: BaseException) -> Verdict:
    """Transport failures are retried without inspecting them."""
    del exc
    return Verdict.RETRYABLE
