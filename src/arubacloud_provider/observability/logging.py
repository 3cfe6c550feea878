"""Structured logging bootstrap and reconciliation correlation helpers."""

from __future__ import annotations

import contextvars
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TextIO

from opentelemetry import trace as otel_trace

if TYPE_CHECKING:
    from arubacloud_provider.config.models import ProviderSettings

_RESOURCE_TYPE_CTX: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "arubacloud_resource_type",
    default=None,
)
_RESOURCE_ID_CTX: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "arubacloud_resource_id",
    default=None,
)
_OPERATION_CTX: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "arubacloud_operation",
    default=None,
)

_STANDARD_RECORD_KEYS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)
_RESERVED_PAYLOAD_KEYS = frozenset(
    {"service", "version", "trace_id", "span_id", "operation"}
)


@dataclass(frozen=True, slots=True)
class ReconcileFields:
    """Fields identifying the lifecycle call a log line belongs to."""

    resource_type: str | None = None
    resource_id: str | None = None
    operation: str | None = None


class JsonFormatter(logging.Formatter):
    """JSON formatter with provider and reconciliation correlation fields."""

    def __init__(self, *, service: str, version: str) -> None:
        super().__init__()
        self._service = service
        self._version = version

    def format(self, record: logging.LogRecord) -> str:
        fields = get_reconcile_fields()
        trace_id, span_id = _current_trace_context()
        payload: dict[str, Any] = {
            "timestamp": _format_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service,
            "version": self._version,
            "operation": fields.operation,
            "trace_id": trace_id,
            "span_id": span_id,
        }
        if fields.resource_type is not None:
            payload["resource_type"] = fields.resource_type
        if fields.resource_id is not None:
            payload["resource_id"] = fields.resource_id

        payload.update(_extract_extra_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=True)


class TextFormatter(logging.Formatter):
    """Plain text formatter carrying the same reconciliation fields."""

    def __init__(self, *, service: str, version: str) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")
        self._service = service
        self._version = version

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = get_reconcile_fields()
        return (
            f"{base} "
            f"service={self._service} version={self._version} "
            f"operation={fields.operation or '-'} "
            f"resource_type={fields.resource_type or '-'} "
            f"resource_id={fields.resource_id or '-'}"
        )


def get_reconcile_fields() -> ReconcileFields:
    """Read the reconciliation fields bound to the current context."""
    return ReconcileFields(
        resource_type=_RESOURCE_TYPE_CTX.get(),
        resource_id=_RESOURCE_ID_CTX.get(),
        operation=_OPERATION_CTX.get(),
    )


@contextmanager
def reconcile_scope(
    *,
    resource_type: str | None = None,
    resource_id: str | None = None,
    operation: str | None = None,
) -> Iterator[ReconcileFields]:
    """Bind reconciliation fields for the duration of one lifecycle call.

    Only arguments that are not ``None`` override the enclosing scope, so a
    scope opened before the remote id is known can be narrowed later.
    """
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token[str | None]]] = []
    for context_var, value in (
        (_RESOURCE_TYPE_CTX, resource_type),
        (_RESOURCE_ID_CTX, resource_id),
        (_OPERATION_CTX, operation),
    ):
        if value is not None:
            tokens.append((context_var, context_var.set(value)))

    try:
        yield get_reconcile_fields()
    finally:
        for context_var, token in reversed(tokens):
            context_var.reset(token)


def bootstrap_logging(
    *,
    service: str = "arubacloud-provider",
    version: str = "dev",
    level: str = "INFO",
    log_format: str = "json",
    logger: logging.Logger | None = None,
    stream: TextIO | None = None,
    force: bool = True,
) -> logging.Logger:
    """Configure a logger with structured formatting and reconciliation fields."""
    target_logger = logger or logging.getLogger("arubacloud_provider")

    if force:
        for handler in list(target_logger.handlers):
            target_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(_build_formatter(log_format, service=service, version=version))

    target_logger.addHandler(handler)
    target_logger.setLevel(level.upper())
    if target_logger is not logging.getLogger():
        target_logger.propagate = False
    return target_logger


def bootstrap_logging_from_settings(
    settings: ProviderSettings,
    *,
    version: str = "dev",
    logger: logging.Logger | None = None,
    stream: TextIO | None = None,
    force: bool = True,
) -> logging.Logger:
    """Bootstrap logging using the provider's logging settings."""
    return bootstrap_logging(
        version=version,
        level=settings.logging.level,
        log_format=settings.logging.format,
        logger=logger,
        stream=stream,
        force=force,
    )


def _build_formatter(log_format: str, *, service: str, version: str) -> logging.Formatter:
    if log_format == "text":
        return TextFormatter(service=service, version=version)
    return JsonFormatter(service=service, version=version)


def _current_trace_context() -> tuple[str | None, str | None]:
    span_context = otel_trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None, None
    return f"{span_context.trace_id:032x}", f"{span_context.span_id:016x}"


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_RECORD_KEYS or key.startswith("_"):
            continue
        if key in _RESERVED_PAYLOAD_KEYS:
            continue
        extras[key] = value
    return extras


def _format_timestamp(created: float) -> str:
    timestamp = datetime.fromtimestamp(created, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
