"""Client error exceptions (HTTP 4xx)."""

from http import HTTPStatus
from typing import Any, ClassVar

from skinflow.exceptions.base import SkinFlowError


class ClientError(SkinFlowError):
    """Base class for all client errors (4xx)."""

    error_code: ClassVar[str] = "CLIENT_ERROR"
    http_status: ClassVar[int] = HTTPStatus.BAD_REQUEST


class ValidationError(ClientError):
    """A flow precondition or invariant failed.

    Raised at the detection point and never retried: empty input,
    uploaded/label count mismatch, missing credential, missing result id.
    """

    error_code: ClassVar[str] = "VALIDATION_ERROR"
    http_status: ClassVar[int] = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with optional field info.

        Args:
            message: Description of the validation failure.
            field: Name of the field that failed validation.
            value: The invalid value.
            context: Additional context information.
        """
        context_dict = context or {}
        if field is not None:
            context_dict["field"] = field
        if value is not None:
            context_dict["value"] = value
        super().__init__(message, context=context_dict)


class ImageDecodeError(ClientError):
    """Image bytes could not be decoded."""

    error_code: ClassVar[str] = "IMAGE_DECODE_FAILED"
    http_status: ClassVar[int] = HTTPStatus.UNPROCESSABLE_ENTITY


class ImageQualityError(ClientError):
    """Image was rejected by the quality gate."""

    error_code: ClassVar[str] = "IMAGE_QUALITY_REJECTED"
    http_status: ClassVar[int] = HTTPStatus.UNPROCESSABLE_ENTITY


class NotFoundError(ClientError):
    """Requested resource not found."""

    error_code: ClassVar[str] = "NOT_FOUND"
    http_status: ClassVar[int] = HTTPStatus.NOT_FOUND

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize not found error with optional resource info.

        Args:
            message: Description of what was not found.
            resource_type: Type of resource (e.g., "s3_object").
            resource_id: ID of the resource that was not found.
            context: Additional context information.
        """
        context_dict = context or {}
        if resource_type is not None:
            context_dict["resource_type"] = resource_type
        if resource_id is not None:
            context_dict["resource_id"] = resource_id
        super().__init__(message, context=context_dict)


class ConflictError(ClientError):
    """A diagnosis flow is already running on this orchestrator."""

    error_code: ClassVar[str] = "CONFLICT"
    http_status: ClassVar[int] = HTTPStatus.CONFLICT


class AuthenticationError(ClientError):
    """No authenticated principal."""

    error_code: ClassVar[str] = "AUTHENTICATION_FAILED"
    http_status: ClassVar[int] = HTTPStatus.UNAUTHORIZED
