"""Tests for the edge function HTTP client."""

from unittest.mock import MagicMock

import pytest
import requests

from skinflow.diagnosis.client import EdgeFunctionClient
from skinflow.exceptions import AuthenticationError, ExternalServiceError, TransientServiceError


def _make_response(status_code=200, payload=None, text_only=False):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if text_only:
        response.json.side_effect = requests.JSONDecodeError("Expecting value", "", 0)
    else:
        response.json.return_value = payload if payload is not None else {}
    return response


def _make_client(response=None, side_effect=None):
    session = MagicMock()
    session.post.return_value = response
    session.post.side_effect = side_effect
    return EdgeFunctionClient("https://edge.example.com/", timeout_seconds=5, session=session), session


class TestCall:
    def test_posts_json_with_bearer(self):
        client, session = _make_client(_make_response(payload={"status": "success"}))
        result = client.call("analyze", {"user_id": "u1"}, access_token="tok")
        assert result == {"status": "success"}
        session.post.assert_called_once_with(
            "https://edge.example.com/functions/v1/analyze",
            json={"user_id": "u1"},
            headers={"Content-Type": "application/json", "Authorization": "Bearer tok"},
            timeout=5,
        )

    def test_connection_error_is_transient(self):
        client, _ = _make_client(side_effect=requests.ConnectionError("refused"))
        with pytest.raises(TransientServiceError, match="Network error"):
            client.call("analyze", {}, access_token="tok")

    def test_timeout_is_transient(self):
        client, _ = _make_client(side_effect=requests.Timeout("slow"))
        with pytest.raises(TransientServiceError):
            client.call("analyze", {}, access_token="tok")

    @pytest.mark.parametrize("status_code", [408, 429, 500, 502, 503, 504])
    def test_retryable_statuses_are_transient(self, status_code):
        client, _ = _make_client(_make_response(status_code, {"error": "busy"}))
        with pytest.raises(TransientServiceError, match="busy") as exc_info:
            client.call("analyze", {}, access_token="tok")
        assert exc_info.value.context["status_code"] == status_code

    def test_unauthorized(self):
        client, _ = _make_client(_make_response(401, {"message": "JWT expired"}))
        with pytest.raises(AuthenticationError, match="JWT expired"):
            client.call("analyze", {}, access_token="tok")

    def test_other_client_error_not_transient(self):
        client, _ = _make_client(_make_response(400, {"error": "image_urls required"}))
        with pytest.raises(ExternalServiceError, match="image_urls required") as exc_info:
            client.call("analyze", {}, access_token="tok")
        assert not isinstance(exc_info.value, TransientServiceError)

    def test_error_without_body_uses_status(self):
        client, _ = _make_client(_make_response(404, text_only=True))
        with pytest.raises(ExternalServiceError, match="status: 404"):
            client.call("analyze", {}, access_token="tok")

    def test_non_json_success_body(self):
        client, _ = _make_client(_make_response(200, text_only=True))
        with pytest.raises(ExternalServiceError, match="non-JSON"):
            client.call("analyze", {}, access_token="tok")
