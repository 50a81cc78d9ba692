"""Tests for diagnosis service models."""

import pytest
from pydantic import ValidationError

from skinflow.diagnosis.models import CaptureMeta, DiagnosisRequest, DiagnosisResponse, DiagnosisResult
from skinflow.transfer.models import AngleLabel


def _make_request(**overrides):
    fields = {
        "asset_urls": ["https://cdn/u1/original/front.jpg"],
        "angle_labels": [AngleLabel.FRONT],
        "owner_id": "u1",
        "access_token": "tok",
    }
    fields.update(overrides)
    return DiagnosisRequest(**fields)


class TestDiagnosisRequest:
    def test_payload(self):
        payload = _make_request(profile={"age": 31}, meta=CaptureMeta(camera="front")).to_payload()
        assert payload == {
            "image_urls": ["https://cdn/u1/original/front.jpg"],
            "image_angles": ["front"],
            "user_id": "u1",
            "access_token": "tok",
            "user_profile": {"age": 31},
            "meta": {"camera": "front"},
        }

    def test_optional_fields_null(self):
        payload = _make_request().to_payload()
        assert payload["user_profile"] is None
        assert payload["meta"] is None

    def test_credential_required(self):
        with pytest.raises(ValidationError):
            _make_request(access_token="")


class TestDiagnosisResponse:
    def test_ignores_unknown_fields(self):
        response = DiagnosisResponse.model_validate({"status": "success", "result_id": "r1", "latency_ms": 12})
        assert response.result_id == "r1"


class TestDiagnosisResult:
    def test_from_response_defaults(self):
        result = DiagnosisResult.from_response(DiagnosisResponse(status="success", result_id="r1"))
        assert result.result_id == "r1"
        assert result.analysis_payload == {}
        assert result.review_needed is False
        assert result.stage_metadata == {}

    def test_result_id_required(self):
        with pytest.raises(ValidationError):
            DiagnosisResult.from_response(DiagnosisResponse(status="success"))
