"""Reconciliation core: cancellation context, classifier, poller and deleter."""

from arubacloud_provider.core.classifier import (
    DEPENDENCY_KEYWORDS,
    Verdict,
    classify,
    classify_response,
    classify_transport_error,
    contains_dependency_keywords,
    error_message,
)
from arubacloud_provider.core.context import (
    Clock,
    MonotonicClock,
    ReconcileContext,
    format_duration,
)
from arubacloud_provider.core.deleter import RetryingDeleter
from arubacloud_provider.core.poller import (
    TRANSITIONAL_STATES,
    ReadinessPoller,
    is_ready_state,
)

__all__ = [
    "DEPENDENCY_KEYWORDS",
    "TRANSITIONAL_STATES",
    "Clock",
    "MonotonicClock",
    "ReadinessPoller",
    "ReconcileContext",
    "RetryingDeleter",
    "Verdict",
    "classify",
    "classify_response",
    "classify_transport_error",
    "contains_dependency_keywords",
    "error_message",
    "format_duration",
    "is_ready_state",
]
