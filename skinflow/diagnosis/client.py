"""HTTP client for the diagnosis edge functions."""

import logging
from http import HTTPStatus
from typing import Any

import requests

from skinflow.exceptions.client_errors import AuthenticationError
from skinflow.exceptions.server_errors import ExternalServiceError, TransientServiceError

logger = logging.getLogger(__name__)

_SERVICE_NAME = "diagnosis-service"
_TRANSIENT_STATUSES = frozenset(
    {
        HTTPStatus.REQUEST_TIMEOUT,
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.INTERNAL_SERVER_ERROR,
        HTTPStatus.BAD_GATEWAY,
        HTTPStatus.SERVICE_UNAVAILABLE,
        HTTPStatus.GATEWAY_TIMEOUT,
    }
)


class EdgeFunctionClient:
    """Posts JSON to ``{base_url}/functions/v1/{name}`` with a bearer credential."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: int = 60,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Edge functions host, without trailing slash.
            timeout_seconds: Per-request timeout.
            session: Optional pre-configured requests session.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def call(self, function_name: str, body: dict[str, Any], *, access_token: str) -> dict[str, Any]:
        """Invoke one edge function once.

        Args:
            function_name: Edge function to call.
            body: JSON request body.
            access_token: Bearer credential of the principal.

        Returns:
            The decoded JSON response body.

        Raises:
            TransientServiceError: Network failure, timeout, 408/429/5xx.
            AuthenticationError: The service rejected the credential.
            ExternalServiceError: Any other non-2xx status or a non-JSON body.
        """
        url = f"{self._base_url}/functions/v1/{function_name}"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

        try:
            response = self._session.post(url, json=body, headers=headers, timeout=self._timeout_seconds)
        except (requests.ConnectionError, requests.Timeout) as error:
            raise TransientServiceError(
                f"Network error calling {function_name}: {error}",
                service_name=_SERVICE_NAME,
            ) from error

        if not response.ok:
            message = _error_message(response)
            logger.warning("Edge function %s returned %d: %s", function_name, response.status_code, message)
            if response.status_code in _TRANSIENT_STATUSES:
                raise TransientServiceError(
                    message,
                    service_name=_SERVICE_NAME,
                    status_code=response.status_code,
                )
            if response.status_code == HTTPStatus.UNAUTHORIZED:
                raise AuthenticationError(message)
            raise ExternalServiceError(
                message,
                service_name=_SERVICE_NAME,
                status_code=response.status_code,
            )

        try:
            payload: dict[str, Any] = response.json()
        except requests.JSONDecodeError as error:
            raise ExternalServiceError(
                f"Edge function {function_name} returned a non-JSON body",
                service_name=_SERVICE_NAME,
                status_code=response.status_code,
            ) from error
        return payload


def _error_message(response: requests.Response) -> str:
    """Prefer the service's own error text over the bare status."""
    fallback = f"Edge function error! status: {response.status_code}"
    try:
        data = response.json()
    except requests.JSONDecodeError:
        return fallback
    if isinstance(data, dict):
        message = data.get("error") or data.get("message")
        if isinstance(message, str) and message:
            return message
    return fallback
