"""Flow state, progress and result models."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from skinflow.events import FlowStage
from skinflow.transfer.models import AngleLabel


class FlowState(StrEnum):
    """Where a diagnosis flow invocation currently is."""

    IDLE = "idle"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    RETRYING = "retrying"
    SAVING = "saving"
    COMPLETE = "complete"
    FAILED = "failed"


class FlowProgress(BaseModel):
    """Snapshot of the running invocation, as shown to the caller."""

    model_config = ConfigDict(frozen=True)

    stage: FlowStage
    percent: int = Field(ge=0, le=100)
    message: str
    estimated_seconds_remaining: float | None = Field(default=None, ge=0)
    retry_attempt: int | None = None
    max_retries: int | None = None


class FlowResult(BaseModel):
    """Outcome of a successful diagnosis flow."""

    result_id: str = Field(min_length=1)
    analysis_payload: dict[str, Any] = Field(default_factory=dict)
    mapping_payload: dict[str, Any] = Field(default_factory=dict)
    nlg_payload: dict[str, Any] = Field(default_factory=dict)
    review_needed: bool = False
    saved_id: str | None = None
    asset_urls: list[str]
    angle_labels: list[AngleLabel]
