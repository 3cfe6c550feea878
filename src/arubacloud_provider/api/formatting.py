"""Human-readable API error messages and structured error logging."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from arubacloud_provider.api.envelope import ApiErrorBody, ApiResponse
from arubacloud_provider.errors import ApiError, ResourceNotFoundError

logger = logging.getLogger(__name__)


def format_api_error(
    error: ApiErrorBody | None,
    base_message: str,
    *,
    log_context: Mapping[str, Any] | None = None,
) -> str:
    """Build ``"<base>: <title> - <detail>"`` plus a validation block.

    ``extensions["errors"]`` entries are rendered one per line as
    ``  - <fieldName>: <errorMessage>`` under ``Validation Errors:``; any other
    extensions are listed under ``Additional Error Details:``. The full error
    payload is logged at error level as a separate event.
    """
    if error is None:
        return base_message

    message = base_message
    if error.title is not None:
        message = f"{message}: {error.title}"
    if error.detail is not None:
        message = f"{message} - {error.detail}"

    if error.extensions:
        validation_errors = error.extensions.get("errors")
        if isinstance(validation_errors, list):
            message += "\n\nValidation Errors:"
            for item in validation_errors:
                if isinstance(item, Mapping):
                    message += f"\n  - {item.get('fieldName')}: {item.get('errorMessage')}"
        else:
            message += "\n\nAdditional Error Details:"
            for key, value in error.extensions.items():
                message += f"\n  - {key}: {value}"

    details: dict[str, Any] = dict(log_context or {})
    if error.title is not None:
        details["error_title"] = error.title
    if error.detail is not None:
        details["error_detail"] = error.detail
    if error.status is not None:
        details["error_status"] = error.status
    if error.type is not None:
        details["error_type"] = error.type
    if error.extensions:
        details["error_extensions"] = dict(error.extensions)

    logger.error(
        "Full API error response JSON",
        extra={"error_json": json.dumps(error.to_dict(), indent=2, default=str)},
    )
    logger.error("API request failed", extra=details)

    return message


def error_from_response(
    response: ApiResponse,
    base_message: str,
    *,
    log_context: Mapping[str, Any] | None = None,
) -> ApiError:
    """Translate a non-success response into an :class:`ApiError`.

    Responses without an error body fall back to ``API error (status: N)``.
    """
    if response.error is None:
        message = f"{base_message}: API error (status: {response.status_code})"
    else:
        message = format_api_error(response.error, base_message, log_context=log_context)

    if response.status_code == 404:
        return ResourceNotFoundError(
            message, status_code=response.status_code, error=response.error
        )
    return ApiError(message, status_code=response.status_code, error=response.error)
