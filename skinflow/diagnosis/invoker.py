"""Invocation of the external diagnosis service."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from skinflow.diagnosis.models import DiagnosisRequest, DiagnosisResponse, ResponseStatus
from skinflow.diagnosis.retry import retry_with_backoff
from skinflow.events import FlowStage, ProgressEvent, RetryEvent, ignore_event
from skinflow.exceptions.server_errors import ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Callable

    from skinflow.diagnosis.client import EdgeFunctionClient
    from skinflow.events import EventCallback

logger = logging.getLogger(__name__)

_DEFAULT_FAILURE_MESSAGE = "An error occurred during AI analysis."

# (percent, message) milestones around the single analyze call
MILESTONE_TEXTURE = (0, "Analyzing skin texture...")
MILESTONE_PIGMENT = (33, "Analyzing pigmentation...")
MILESTONE_LESION = (66, "Predicting skin lesions...")
MILESTONE_DONE = (100, "Analysis complete")


class DiagnosisInvoker:
    """Calls the analyze function with staged progress and retry."""

    def __init__(
        self,
        client: EdgeFunctionClient,
        *,
        function_name: str = "analyze",
        max_attempts: int = 3,
        initial_delay_ms: int = 1000,
        pacing_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the invoker.

        Args:
            client: Edge function HTTP client.
            function_name: Name of the analyze function.
            max_attempts: Total attempts for transient failures.
            initial_delay_ms: First backoff delay.
            pacing_seconds: Artificial delay between milestones.
            sleep: Blocking sleep taking seconds.
        """
        self._client = client
        self._function_name = function_name
        self._max_attempts = max_attempts
        self._initial_delay_ms = initial_delay_ms
        self._pacing_seconds = pacing_seconds
        self._sleep = sleep

    def invoke(self, request: DiagnosisRequest, on_event: EventCallback = ignore_event) -> DiagnosisResponse:
        """Run one diagnosis.

        Args:
            request: Asset URLs, labels, owner, credential and optional extras.
            on_event: Receives analyze milestones and retry notices.

        Returns:
            The successful response. The result id is not validated here.

        Raises:
            TransientServiceError: When every attempt failed transiently.
            ExternalServiceError: When the service reported an error status.
        """
        self._milestone(on_event, MILESTONE_TEXTURE)

        def notify_retry(attempt: int, max_attempts: int, delay_ms: int) -> None:
            on_event(RetryEvent(attempt=attempt, max_attempts=max_attempts, delay_ms=delay_ms))

        body = retry_with_backoff(
            lambda: self._client.call(
                self._function_name,
                request.to_payload(),
                access_token=request.access_token,
            ),
            max_attempts=self._max_attempts,
            initial_delay_ms=self._initial_delay_ms,
            on_retry=notify_retry,
            sleep=self._sleep,
        )
        try:
            response = DiagnosisResponse.model_validate(body)
        except PydanticValidationError as error:
            raise ExternalServiceError(
                f"Malformed analyze response: {error.error_count()} invalid fields",
                service_name=self._function_name,
            ) from error

        self._milestone(on_event, MILESTONE_PIGMENT)

        if response.status == ResponseStatus.ERROR:
            raise ExternalServiceError(
                response.error or _DEFAULT_FAILURE_MESSAGE,
                service_name=self._function_name,
                context={"error_type": response.error_type} if response.error_type else None,
            )

        self._milestone(on_event, MILESTONE_LESION)
        self._milestone(on_event, MILESTONE_DONE)

        logger.info(
            "Diagnosis finished for %d images (result_id=%s)",
            len(request.asset_urls),
            response.result_id,
        )
        return response

    def _milestone(self, on_event: EventCallback, milestone: tuple[int, str]) -> None:
        percent, message = milestone
        on_event(ProgressEvent(stage=FlowStage.ANALYZE, percent=percent, message=message))
        if self._pacing_seconds and percent < 100:
            self._sleep(self._pacing_seconds)
