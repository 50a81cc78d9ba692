"""Persistence data models."""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from skinflow.diagnosis.models import DiagnosisResult, ResponseStatus
from skinflow.transfer.models import AngleLabel


class PersistRequest(BaseModel):
    """Body sent to the save function."""

    owner_id: str
    asset_urls: list[str]
    angle_labels: list[AngleLabel]
    result: DiagnosisResult
    confidence: float
    uncertainty: float
    access_token: str

    def to_payload(self) -> dict[str, Any]:
        """Wire body for the save function."""
        return {
            "user_id": self.owner_id,
            "image_urls": self.asset_urls,
            "image_angles": [str(label) for label in self.angle_labels],
            "result_id": self.result.result_id,
            "analysis_a": self.result.analysis_payload,
            "analysis_b": self.result.mapping_payload,
            "analysis_c": self.result.nlg_payload,
            "confidence": self.confidence,
            "uncertainty_estimate": self.uncertainty,
            "review_needed": self.result.review_needed,
            "stage_metadata": self.result.stage_metadata,
            "access_token": self.access_token,
        }


class PersistResponse(BaseModel):
    """Save function response."""

    status: ResponseStatus
    id: str | None = None
    error: str | None = None


class PersistedRecord(BaseModel):
    """The stored diagnosis record, one asset URL per angle label."""

    saved_id: str | None = None
    derived_asset_urls: list[str]
    angle_labels: list[AngleLabel]

    @model_validator(mode="after")
    def check_lengths(self) -> "PersistedRecord":
        """Every label keeps exactly one URL."""
        if len(self.derived_asset_urls) != len(self.angle_labels):
            error_message = (
                f"derived_asset_urls has {len(self.derived_asset_urls)} entries "
                f"but angle_labels has {len(self.angle_labels)}"
            )
            raise ValueError(error_message)
        return self


class DerivedAsset(BaseModel):
    """Outcome of the derive chain for one original."""

    index: int = Field(ge=0)
    original_url: str
    url: str
    derived: bool
