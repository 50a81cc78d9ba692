"""Flow event stream.

Components report progress through a single callback receiving one of three
tagged variants, so consumers can match on them exhaustively:

    match event:
        case ProgressEvent(stage=stage, percent=percent):
            ...
        case RetryEvent(attempt=attempt, max_attempts=max_attempts):
            ...
        case TerminalEvent(status=status):
            ...
"""

from collections.abc import Callable
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class FlowStage(StrEnum):
    """Stage a progress report belongs to."""

    UPLOAD = "upload"
    ANALYZE = "analyze"
    SAVE = "save"
    COMPLETE = "complete"
    RETRY = "retry"


class TerminalStatus(StrEnum):
    """How a flow invocation ended."""

    COMPLETED = "completed"
    FAILED = "failed"


class ProgressEvent(BaseModel):
    """A stage advanced to a new percentage."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["progress"] = "progress"
    stage: FlowStage
    percent: int = Field(ge=0, le=100)
    message: str


class RetryEvent(BaseModel):
    """A transient failure is about to be retried after a delay."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["retry"] = "retry"
    attempt: int = Field(ge=1)
    max_attempts: int = Field(ge=1)
    delay_ms: int = Field(ge=0)


class TerminalEvent(BaseModel):
    """The flow finished, successfully or not."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["terminal"] = "terminal"
    status: TerminalStatus
    error_code: str | None = None
    message: str = ""


FlowEvent = Annotated[ProgressEvent | RetryEvent | TerminalEvent, Field(discriminator="kind")]

EventCallback = Callable[[ProgressEvent | RetryEvent | TerminalEvent], None]


def ignore_event(_event: ProgressEvent | RetryEvent | TerminalEvent) -> None:
    """Default callback for callers that do not observe progress."""


def band_percent(start: int, end: int, done: int, total: int) -> int:
    """Position within [start, end] after `done` of `total` steps."""
    if total <= 0:
        return end
    return start + round((end - start) * done / total)
