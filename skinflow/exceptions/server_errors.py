"""Server error exceptions (HTTP 5xx)."""

from http import HTTPStatus
from typing import Any, ClassVar

from skinflow.exceptions.base import SkinFlowError


class ServerError(SkinFlowError):
    """Base class for all server errors (5xx)."""

    error_code: ClassVar[str] = "SERVER_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR


class StorageError(ServerError):
    """Object store transfer failed."""

    error_code: ClassVar[str] = "STORAGE_ERROR"
    http_status: ClassVar[int] = HTTPStatus.BAD_GATEWAY

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error.

        Args:
            message: Description of the failure.
            path: Storage path involved in the failed operation.
            context: Additional context information.
        """
        context_dict = context or {}
        if path is not None:
            context_dict["path"] = path
        super().__init__(message, context=context_dict)


class AssetTransformError(ServerError):
    """Building a derived asset failed for one original."""

    error_code: ClassVar[str] = "ASSET_TRANSFORM_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR


class ExternalServiceError(ServerError):
    """External service call failed and should not be repeated as-is."""

    error_code: ClassVar[str] = "EXTERNAL_SERVICE_ERROR"
    http_status: ClassVar[int] = HTTPStatus.BAD_GATEWAY

    def __init__(
        self,
        message: str,
        *,
        service_name: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize external service error.

        Args:
            message: Description of the failure.
            service_name: Name of the external service that failed.
            status_code: HTTP status returned by the service, if any.
            context: Additional context information.
        """
        context_dict = context or {}
        if service_name is not None:
            context_dict["service_name"] = service_name
        if status_code is not None:
            context_dict["status_code"] = status_code
        super().__init__(message, context=context_dict)


class TransientServiceError(ExternalServiceError):
    """Network failure, timeout or temporary service outage."""

    error_code: ClassVar[str] = "TRANSIENT_SERVICE_ERROR"
    http_status: ClassVar[int] = HTTPStatus.SERVICE_UNAVAILABLE
    retryable: ClassVar[bool] = True


class ConfigurationError(ServerError):
    """Configuration is invalid or missing."""

    error_code: ClassVar[str] = "CONFIGURATION_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
