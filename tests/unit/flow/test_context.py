"""Tests for the per-invocation flow context."""

from skinflow.events import FlowStage, ProgressEvent, RetryEvent, TerminalEvent, TerminalStatus
from skinflow.flow.context import FlowContext
from skinflow.flow.models import FlowState


class TestFlowContext:
    def test_starts_idle(self):
        context = FlowContext()
        assert context.state == FlowState.IDLE
        assert context.progress is None

    def test_progress_event_updates_snapshot(self):
        context = FlowContext()
        context.publish(
            ProgressEvent(stage=FlowStage.SAVE, percent=57, message="Optimizing images..."),
            estimated_seconds_remaining=4.0,
        )
        assert context.state == FlowState.SAVING
        assert context.progress.percent == 57
        assert context.progress.estimated_seconds_remaining == 4.0

    def test_retry_keeps_last_percent(self):
        context = FlowContext()
        context.publish(ProgressEvent(stage=FlowStage.ANALYZE, percent=0, message="Analyzing skin texture..."))
        context.publish(RetryEvent(attempt=2, max_attempts=3, delay_ms=2000))
        assert context.state == FlowState.RETRYING
        assert context.progress.stage == FlowStage.RETRY
        assert context.progress.message == "Retrying... (2/3)"
        assert context.progress.percent == 0

    def test_failure_clears_progress(self):
        context = FlowContext()
        context.publish(ProgressEvent(stage=FlowStage.UPLOAD, percent=50, message="Uploading images..."))
        context.publish(TerminalEvent(status=TerminalStatus.FAILED, error_code="STORAGE_ERROR"))
        assert context.state == FlowState.FAILED
        assert context.progress is None

    def test_completion_keeps_progress(self):
        context = FlowContext()
        context.publish(ProgressEvent(stage=FlowStage.COMPLETE, percent=100, message="Analysis complete"))
        context.publish(TerminalEvent(status=TerminalStatus.COMPLETED))
        assert context.state == FlowState.COMPLETE
        assert context.progress.percent == 100

    def test_subscribers_receive_events_in_order(self):
        context = FlowContext()
        received = []
        context.subscribe(received.append)
        first = ProgressEvent(stage=FlowStage.UPLOAD, percent=100, message="Uploading images...")
        second = TerminalEvent(status=TerminalStatus.COMPLETED)
        context.publish(first)
        context.publish(second)
        assert received == [first, second]

    def test_reset(self):
        context = FlowContext()
        context.publish(ProgressEvent(stage=FlowStage.UPLOAD, percent=100, message="Uploading images..."))
        context.reset()
        assert context.state == FlowState.IDLE
        assert context.progress is None
