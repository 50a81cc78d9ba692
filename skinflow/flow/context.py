"""Per-invocation flow context.

Every diagnosis flow run owns one FlowContext. The orchestrator feeds it the
events of the stage components; the context folds them into the current
FlowProgress snapshot and forwards each event to its subscribers. Nothing in
here is shared between invocations.
"""

from skinflow.events import (
    EventCallback,
    FlowStage,
    ProgressEvent,
    RetryEvent,
    TerminalEvent,
    TerminalStatus,
)
from skinflow.flow.models import FlowProgress, FlowState

_STAGE_STATES = {
    FlowStage.UPLOAD: FlowState.UPLOADING,
    FlowStage.ANALYZE: FlowState.ANALYZING,
    FlowStage.SAVE: FlowState.SAVING,
    FlowStage.COMPLETE: FlowState.COMPLETE,
    FlowStage.RETRY: FlowState.RETRYING,
}


class FlowContext:
    """Progress state and subscribers of one flow invocation."""

    def __init__(self) -> None:
        """Initialize an idle context with no progress."""
        self.state = FlowState.IDLE
        self.progress: FlowProgress | None = None
        self._subscribers: list[EventCallback] = []

    def subscribe(self, callback: EventCallback) -> None:
        """Forward every future event to callback."""
        self._subscribers.append(callback)

    def reset(self) -> None:
        """Return to idle with progress absent."""
        self.state = FlowState.IDLE
        self.progress = None

    def publish(
        self,
        event: ProgressEvent | RetryEvent | TerminalEvent,
        *,
        estimated_seconds_remaining: float | None = None,
    ) -> None:
        """Fold event into the progress snapshot, then notify subscribers.

        Args:
            event: Event reported by a stage component or the orchestrator.
            estimated_seconds_remaining: Advisory estimate to attach.
        """
        match event:
            case ProgressEvent(stage=stage, percent=percent, message=message):
                self.state = _STAGE_STATES[stage]
                self.progress = FlowProgress(
                    stage=stage,
                    percent=percent,
                    message=message,
                    estimated_seconds_remaining=estimated_seconds_remaining,
                )
            case RetryEvent(attempt=attempt, max_attempts=max_attempts):
                self.state = FlowState.RETRYING
                self.progress = FlowProgress(
                    stage=FlowStage.RETRY,
                    percent=self.progress.percent if self.progress else 0,
                    message=f"Retrying... ({attempt}/{max_attempts})",
                    estimated_seconds_remaining=estimated_seconds_remaining,
                    retry_attempt=attempt,
                    max_retries=max_attempts,
                )
            case TerminalEvent(status=TerminalStatus.COMPLETED):
                self.state = FlowState.COMPLETE
            case TerminalEvent(status=TerminalStatus.FAILED):
                self.state = FlowState.FAILED
                self.progress = None

        for callback in self._subscribers:
            callback(event)
