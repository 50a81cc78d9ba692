"""Exception handling utilities following RFC 7807."""

import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeGuard, TypeVar

import requests

from skinflow.exceptions.base import SkinFlowError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

LambdaResponse = dict[str, Any]

_UNKNOWN_ERROR_CODE = "INTERNAL_ERROR"
_NETWORK_ERROR_CODE = "NETWORK_ERROR"


def classify_error(error: BaseException) -> tuple[str, bool]:
    """Map any exception to an error code and a retryable flag.

    Application errors carry their own classification. Raw network
    failures that escaped a client wrapper are retryable; anything
    else is an unknown, non-retryable error.

    Args:
        error: The exception to classify.

    Returns:
        Tuple of (error_code, retryable).
    """
    if isinstance(error, SkinFlowError):
        return error.error_code, error.retryable
    if isinstance(error, requests.ConnectionError | requests.Timeout):
        return _NETWORK_ERROR_CODE, True
    return _UNKNOWN_ERROR_CODE, False


def create_error_response(
    exception: SkinFlowError,
    *,
    include_context: bool = True,
    request_id: str | None = None,
) -> LambdaResponse:
    """Create an API Gateway error response from an exception.

    Args:
        exception: The SkinFlowError to convert.
        include_context: Whether to include context in response.
        request_id: Optional request ID for tracing.

    Returns:
        Lambda-compatible response dictionary.
    """
    body: dict[str, Any] = {
        "type": f"https://skinflow.app/errors/{exception.error_code}",
        "title": _format_error_title(exception.error_code),
        "status": exception.http_status,
        "detail": exception.message,
        "retryable": exception.retryable,
    }

    if request_id:
        body["instance"] = f"/requests/{request_id}"

    if include_context and exception.context:
        body["context"] = exception.context

    return {
        "statusCode": exception.http_status,
        "headers": {
            "Content-Type": "application/problem+json",
        },
        "body": json.dumps(body, default=str),
    }


def create_success_response(
    status_code: int,
    body: dict[str, Any],
) -> LambdaResponse:
    """Create an API Gateway success response.

    Args:
        status_code: HTTP status code (2xx).
        body: Response body dictionary.

    Returns:
        Lambda-compatible response dictionary.
    """
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": json.dumps(body, default=str),
    }


def create_exception_handler(
    func: Callable[P, T],
) -> Callable[P, T | LambdaResponse]:
    """Decorator that catches SkinFlowError and returns error responses.

    Args:
        func: The handler function to wrap.

    Returns:
        Wrapped function that handles exceptions.
    """

    @wraps(func)
    def handle_call(*args: P.args, **kwargs: P.kwargs) -> T | LambdaResponse:
        try:
            return func(*args, **kwargs)
        except SkinFlowError as error:
            logger.warning(
                "Request failed: %s",
                error.message,
                extra=error.to_log_dict(),
            )
            request_id = _extract_request_id(args)
            return create_error_response(error, request_id=request_id)

    return handle_call


def _format_error_title(error_code: str) -> str:
    """Format error code as human-readable title."""
    return error_code.replace("_", " ").title()


def _is_string_dict(value: object) -> TypeGuard[dict[str, Any]]:
    """Type guard to check if value is a dict with string keys."""
    return isinstance(value, dict)


def _extract_request_id(args: tuple[object, ...]) -> str | None:
    """Extract request ID from Lambda event if present."""
    if not args:
        return None

    event = args[0]
    if not _is_string_dict(event):
        return None

    request_context = event.get("requestContext")
    if not _is_string_dict(request_context):
        return None

    request_id = request_context.get("requestId")
    if isinstance(request_id, str):
        return request_id

    return None

