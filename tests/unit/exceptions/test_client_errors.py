"""Tests for client error exceptions."""

import pytest

from skinflow.exceptions.client_errors import (
    AuthenticationError,
    ClientError,
    ConflictError,
    ImageDecodeError,
    ImageQualityError,
    NotFoundError,
    ValidationError,
)


class TestValidationError:
    def test_status(self):
        assert ValidationError("x").http_status == 400

    def test_field_and_value_in_context(self):
        error = ValidationError("bad count", field="angle_labels", value=2)
        assert error.context == {"field": "angle_labels", "value": 2}

    def test_not_retryable(self):
        assert ValidationError("x").retryable is False


class TestNotFoundError:
    def test_resource_info_in_context(self):
        error = NotFoundError("missing", resource_type="s3_object", resource_id="u1/original/front.jpg")
        assert error.context["resource_type"] == "s3_object"
        assert error.context["resource_id"] == "u1/original/front.jpg"
        assert error.http_status == 404


@pytest.mark.parametrize(
    ("error_class", "error_code", "status"),
    [
        (ImageDecodeError, "IMAGE_DECODE_FAILED", 422),
        (ImageQualityError, "IMAGE_QUALITY_REJECTED", 422),
        (ConflictError, "CONFLICT", 409),
        (AuthenticationError, "AUTHENTICATION_FAILED", 401),
    ],
)
def test_client_error_codes(error_class, error_code, status):
    error = error_class("x")
    assert isinstance(error, ClientError)
    assert error.error_code == error_code
    assert error.http_status == status
    assert error.retryable is False
