"""Skin diagnosis flow exception hierarchy.

Architecture:
    SkinFlowError (base)
    ├── ClientError (4xx)
    │   ├── ValidationError (400)
    │   ├── AuthenticationError (401)
    │   ├── NotFoundError (404)
    │   ├── ConflictError (409)
    │   ├── ImageDecodeError (422)
    │   └── ImageQualityError (422)
    └── ServerError (5xx)
        ├── AssetTransformError (500)
        ├── ConfigurationError (500)
        ├── StorageError (502)
        └── ExternalServiceError (502)
            └── TransientServiceError (503, retryable)

Usage:
    from skinflow.exceptions import ValidationError

    def require_assets(assets: list[CaptureAsset]) -> None:
        if not assets:
            raise ValidationError("at least one image required", field="assets")
"""

from skinflow.exceptions.base import SkinFlowError
from skinflow.exceptions.client_errors import (
    AuthenticationError,
    ClientError,
    ConflictError,
    ImageDecodeError,
    ImageQualityError,
    NotFoundError,
    ValidationError,
)
from skinflow.exceptions.handlers import (
    classify_error,
    create_error_response,
    create_exception_handler,
    create_success_response,
)
from skinflow.exceptions.server_errors import (
    AssetTransformError,
    ConfigurationError,
    ExternalServiceError,
    ServerError,
    StorageError,
    TransientServiceError,
)

__all__ = [
    "AssetTransformError",
    "AuthenticationError",
    "ClientError",
    "ConfigurationError",
    "ConflictError",
    "ExternalServiceError",
    "ImageDecodeError",
    "ImageQualityError",
    "NotFoundError",
    "ServerError",
    "SkinFlowError",
    "StorageError",
    "TransientServiceError",
    "ValidationError",
    "classify_error",
    "create_error_response",
    "create_exception_handler",
    "create_success_response",
]
