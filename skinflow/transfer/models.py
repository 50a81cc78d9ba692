"""Capture transfer data models."""

from enum import StrEnum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

from skinflow.constants import DEFAULT_IMAGE_EXTENSION


class AngleLabel(StrEnum):
    """Which side of the face a capture shows."""

    FRONT = "front"
    LEFT = "left"
    RIGHT = "right"


class CaptureAsset(BaseModel):
    """A raw capture as handed over by the caller. Consumed once."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    filename: str = Field(default=f"capture.{DEFAULT_IMAGE_EXTENSION}", min_length=1)
    content_type: str = "image/jpeg"

    @property
    def extension(self) -> str:
        """Lower-case file extension without the dot, defaulting to jpg."""
        suffix = PurePosixPath(self.filename).suffix.lstrip(".").lower()
        return suffix or DEFAULT_IMAGE_EXTENSION


class UploadedAsset(BaseModel):
    """A capture stored at its deterministic per-angle path."""

    model_config = ConfigDict(frozen=True)

    public_url: str
    storage_path: str
    owner_id: str
    angle_label: AngleLabel


class UploadBatch(BaseModel):
    """Upload results in input order."""

    owner_id: str
    results: list[UploadedAsset]

    @property
    def public_urls(self) -> list[str]:
        """Public URLs in input order."""
        return [asset.public_url for asset in self.results]
