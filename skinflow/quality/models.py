"""Image quality data models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from skinflow.constants import MIN_QUALITY_SCORE


class QualityCheckOptions(BaseModel):
    """Which axes to evaluate and the score a capture needs to pass."""

    model_config = ConfigDict(frozen=True)

    min_acceptable_score: int = Field(default=60, ge=0, le=100)
    evaluate_sharpness: bool = True
    evaluate_brightness: bool = True
    evaluate_framing: bool = True


class QualityReport(BaseModel):
    """Composite quality verdict for one capture. Not persisted."""

    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=100)
    sharpness: int = Field(ge=0, le=100)
    brightness: int = Field(ge=0, le=100)
    angle: int = Field(ge=0, le=100)
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    is_good: bool


class ResizeOptions(BaseModel):
    """Options for the derived-asset resize transform."""

    model_config = ConfigDict(frozen=True)

    max_width: int = Field(default=1024, ge=1)
    quality: float = Field(default=0.85, gt=0.0, le=1.0)
    check_quality: bool = False
    min_quality_score: float = Field(default=MIN_QUALITY_SCORE, ge=0.0, le=1.0)


class ResizedImage(BaseModel):
    """Encoded output of the resize transform."""

    data: bytes
    content_type: str
    extension: str
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    quality_score: float | None = None


class QualityTone(StrEnum):
    """Display tone for a quality score."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class QualityMessage(BaseModel):
    """User-facing summary of a composite score."""

    message: str
    tone: QualityTone
    icon: str
