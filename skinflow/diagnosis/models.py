"""Diagnosis service data models."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from skinflow.transfer.models import AngleLabel


class ResponseStatus(StrEnum):
    """Status reported by the edge functions."""

    SUCCESS = "success"
    ERROR = "error"


class CaptureMeta(BaseModel):
    """Optional capture metadata forwarded to the diagnosis service."""

    camera: str | None = None
    orientation: int | None = None


class DiagnosisRequest(BaseModel):
    """Input to the diagnosis service."""

    asset_urls: list[str] = Field(min_length=1)
    angle_labels: list[AngleLabel] = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    profile: dict[str, Any] | None = None
    meta: CaptureMeta | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire body for the analyze function."""
        return {
            "image_urls": self.asset_urls,
            "image_angles": [str(label) for label in self.angle_labels],
            "user_id": self.owner_id,
            "access_token": self.access_token,
            "user_profile": self.profile,
            "meta": self.meta.model_dump(exclude_none=True) if self.meta else None,
        }


class DiagnosisResponse(BaseModel):
    """Raw analyze response. The result id is validated by the caller."""

    model_config = ConfigDict(extra="ignore")

    status: ResponseStatus
    result_id: str | None = None
    analysis: dict[str, Any] | None = None
    mapping: dict[str, Any] | None = None
    nlg: dict[str, Any] | None = None
    review_needed: bool | None = None
    stage_metadata: dict[str, Any] | None = None
    error: str | None = None
    error_type: str | None = None


class DiagnosisResult(BaseModel):
    """A diagnosis whose result id has been validated."""

    result_id: str = Field(min_length=1)
    analysis_payload: dict[str, Any] = Field(default_factory=dict)
    mapping_payload: dict[str, Any] = Field(default_factory=dict)
    nlg_payload: dict[str, Any] = Field(default_factory=dict)
    review_needed: bool = False
    stage_metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: DiagnosisResponse) -> "DiagnosisResult":
        """Build from a response already known to carry a result id."""
        return cls(
            result_id=response.result_id or "",
            analysis_payload=response.analysis or {},
            mapping_payload=response.mapping or {},
            nlg_payload=response.nlg or {},
            review_needed=bool(response.review_needed),
            stage_metadata=response.stage_metadata or {},
        )
