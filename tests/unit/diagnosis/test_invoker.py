"""Tests for the diagnosis invoker."""

from unittest.mock import MagicMock

import pytest

from skinflow.diagnosis.invoker import DiagnosisInvoker
from skinflow.diagnosis.models import DiagnosisRequest
from skinflow.events import FlowStage, ProgressEvent, RetryEvent
from skinflow.exceptions import ExternalServiceError, TransientServiceError
from skinflow.transfer.models import AngleLabel

SUCCESS_BODY = {
    "status": "success",
    "result_id": "r1",
    "analysis": {"confidence": 0.9},
    "mapping": {"zones": []},
    "nlg": {"summary": "ok"},
    "review_needed": False,
}


def _make_request():
    return DiagnosisRequest(
        asset_urls=["https://cdn/front.jpg", "https://cdn/left.jpg"],
        angle_labels=[AngleLabel.FRONT, AngleLabel.LEFT],
        owner_id="u1",
        access_token="tok",
    )


def _make_invoker(client, sleep=None, **kwargs):
    return DiagnosisInvoker(client, sleep=sleep or MagicMock(), **kwargs)


class TestInvoke:
    def test_success(self):
        client = MagicMock()
        client.call.return_value = SUCCESS_BODY
        response = _make_invoker(client).invoke(_make_request())
        assert response.result_id == "r1"
        assert response.analysis == {"confidence": 0.9}
        client.call.assert_called_once_with("analyze", _make_request().to_payload(), access_token="tok")

    def test_milestones(self):
        client = MagicMock()
        client.call.return_value = SUCCESS_BODY
        events = []
        _make_invoker(client).invoke(_make_request(), on_event=events.append)
        assert [event.percent for event in events] == [0, 33, 66, 100]
        assert all(isinstance(event, ProgressEvent) and event.stage == FlowStage.ANALYZE for event in events)

    def test_retry_events_before_each_wait(self):
        client = MagicMock()
        client.call.side_effect = [TransientServiceError("down"), TransientServiceError("down"), SUCCESS_BODY]
        sleep = MagicMock()
        events = []
        _make_invoker(client, sleep=sleep).invoke(_make_request(), on_event=events.append)
        retries = [event for event in events if isinstance(event, RetryEvent)]
        assert [(event.attempt, event.max_attempts, event.delay_ms) for event in retries] == [(1, 3, 1000), (2, 3, 2000)]
        assert [call.args[0] for call in sleep.call_args_list] == [1.0, 2.0]

    def test_exhausted_retries_propagate(self):
        client = MagicMock()
        client.call.side_effect = TransientServiceError("down")
        with pytest.raises(TransientServiceError):
            _make_invoker(client).invoke(_make_request())
        assert client.call.call_count == 3

    def test_error_status_carries_service_message(self):
        client = MagicMock()
        client.call.return_value = {"status": "error", "error": "Face not detected", "error_type": "NO_FACE"}
        with pytest.raises(ExternalServiceError, match="Face not detected") as exc_info:
            _make_invoker(client).invoke(_make_request())
        assert exc_info.value.context["error_type"] == "NO_FACE"

    def test_error_status_without_message(self):
        client = MagicMock()
        client.call.return_value = {"status": "error"}
        with pytest.raises(ExternalServiceError, match="error occurred during AI analysis"):
            _make_invoker(client).invoke(_make_request())

    def test_malformed_response(self):
        client = MagicMock()
        client.call.return_value = {"status": "pending"}
        with pytest.raises(ExternalServiceError, match="Malformed analyze response"):
            _make_invoker(client).invoke(_make_request())

    def test_missing_result_id_is_returned_unvalidated(self):
        client = MagicMock()
        client.call.return_value = {"status": "success"}
        assert _make_invoker(client).invoke(_make_request()).result_id is None

    def test_pacing_between_milestones(self):
        client = MagicMock()
        client.call.return_value = SUCCESS_BODY
        sleep = MagicMock()
        _make_invoker(client, sleep=sleep, pacing_seconds=0.5).invoke(_make_request())
        assert [call.args[0] for call in sleep.call_args_list] == [0.5, 0.5, 0.5]
