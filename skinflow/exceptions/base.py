"""Base exception for the skin diagnosis flow."""

from http import HTTPStatus
from typing import Any, ClassVar


class SkinFlowError(Exception):
    """Base exception for every failure the flow reports to its caller.

    Subclasses pin `error_code`, `http_status` and `retryable` as class
    attributes; instances carry the message and optional debugging context.
    A retryable error is one where repeating the same call may succeed.
    """

    error_code: ClassVar[str] = "INTERNAL_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
    retryable: ClassVar[bool] = False

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_log_dict(self) -> dict[str, Any]:
        """Structured fields for a log record's `extra`.

        Keys avoid the reserved LogRecord attributes, so the message itself
        belongs in the log format string.
        """
        return {
            "error_code": self.error_code,
            "http_status": int(self.http_status),
            "retryable": self.retryable,
            "error_context": self.context,
            "exception_type": type(self).__name__,
        }

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message
