"""Tests for session lookup."""

import pytest
from pydantic import ValidationError

from skinflow.auth.session import Session, StaticSessionProvider, session_from_event


def _make_event(sub="user-1", authorization="Bearer tok-abc"):
    event = {"requestContext": {"authorizer": {"claims": {"sub": sub}}}, "headers": {}}
    if authorization is not None:
        event["headers"]["Authorization"] = authorization
    return event


class TestSession:
    def test_owner_required(self):
        with pytest.raises(ValidationError):
            Session(owner_id="")

    def test_token_defaults_empty(self):
        assert Session(owner_id="user-1").access_token == ""


class TestStaticSessionProvider:
    def test_returns_session(self):
        session = Session(owner_id="user-1", access_token="tok")
        assert StaticSessionProvider(session).get_session() is session

    def test_anonymous(self):
        assert StaticSessionProvider(None).get_session() is None


class TestSessionFromEvent:
    def test_principal_and_token(self):
        session = session_from_event(_make_event())
        assert session == Session(owner_id="user-1", access_token="tok-abc")

    def test_header_name_case_insensitive(self):
        event = _make_event(authorization=None)
        event["headers"]["authorization"] = "bearer tok-lower"
        assert session_from_event(event).access_token == "tok-lower"

    def test_missing_header_gives_empty_token(self):
        assert session_from_event(_make_event(authorization=None)).access_token == ""

    def test_non_bearer_scheme_ignored(self):
        assert session_from_event(_make_event(authorization="Basic abc")).access_token == ""

    def test_missing_claims(self):
        assert session_from_event({"requestContext": {"authorizer": {}}}) is None

    def test_missing_request_context(self):
        assert session_from_event({"headers": {}}) is None

    def test_empty_sub(self):
        assert session_from_event(_make_event(sub="")) is None
