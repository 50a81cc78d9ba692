"""Session lookup for the authenticated principal."""

from typing import Protocol

from pydantic import BaseModel, Field


class Session(BaseModel):
    """The authenticated principal and its bearer credential."""

    owner_id: str = Field(min_length=1)
    access_token: str = ""


class SessionProvider(Protocol):
    """Looks up the current session. Returns None when nobody is signed in."""

    def get_session(self) -> Session | None:
        """Return the current session, if any."""
        ...


class StaticSessionProvider:
    """Session provider for a principal resolved before the flow starts."""

    def __init__(self, session: Session | None) -> None:
        """Initialize the provider.

        Args:
            session: The resolved session, or None for an anonymous caller.
        """
        self._session = session

    def get_session(self) -> Session | None:
        """Return the session resolved at construction."""
        return self._session


def session_from_event(event: dict[str, object]) -> Session | None:
    """Resolve a session from an API Gateway proxy event.

    The principal comes from the authorizer's ``sub`` claim and the
    credential from an ``Authorization: Bearer`` header.

    Args:
        event: API Gateway proxy event.

    Returns:
        The session, or None if the event carries no principal.
    """
    request_context = event.get("requestContext")
    if not isinstance(request_context, dict):
        return None
    authorizer = request_context.get("authorizer")
    if not isinstance(authorizer, dict):
        return None
    claims = authorizer.get("claims")
    owner_id = claims.get("sub") if isinstance(claims, dict) else None
    if not isinstance(owner_id, str) or not owner_id:
        return None

    headers = event.get("headers")
    access_token = ""
    if isinstance(headers, dict):
        for name, value in headers.items():
            if str(name).lower() == "authorization" and isinstance(value, str):
                scheme, _, token = value.partition(" ")
                if scheme.lower() == "bearer":
                    access_token = token.strip()
                break

    return Session(owner_id=owner_id, access_token=access_token)
