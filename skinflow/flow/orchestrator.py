"""Diagnosis flow orchestration.

Runs one diagnosis end to end:

    Idle -> Uploading -> Analyzing (-> Retrying -> Analyzing) -> Saving -> Complete

Any error moves the invocation to Failed, resets progress to absent and is
re-raised unchanged. Stage ordering comes from composition: the analyze stage
only sees URLs the upload stage returned, and the save stage only sees a
result whose id has been validated.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any

from skinflow.constants import (
    ANALYZE_SECONDS,
    POSITIONAL_ANGLES,
    SAVE_SECONDS_FIXED,
    SAVE_SECONDS_PER_ASSET,
    UPLOAD_SECONDS_PER_ASSET,
)
from skinflow.diagnosis.models import CaptureMeta, DiagnosisRequest, DiagnosisResult
from skinflow.events import FlowStage, ProgressEvent, RetryEvent, TerminalEvent, TerminalStatus
from skinflow.exceptions.base import SkinFlowError
from skinflow.exceptions.client_errors import ConflictError, ValidationError
from skinflow.exceptions.handlers import classify_error
from skinflow.flow.context import FlowContext
from skinflow.flow.models import FlowResult, FlowState
from skinflow.logging.context import invocation_scope, set_extra_context, set_flow_stage
from skinflow.transfer.models import AngleLabel

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from skinflow.auth.session import SessionProvider
    from skinflow.diagnosis.invoker import DiagnosisInvoker
    from skinflow.persistence.persister import ResultPersister
    from skinflow.transfer.gateway import AssetTransferGateway
    from skinflow.transfer.models import CaptureAsset

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "at least one image required"
COMPLETE_MESSAGE = "Analysis complete"


def derive_angle_labels(count: int) -> list[AngleLabel]:
    """Positional angle labels for `count` captures.

    1 -> [front], 2 -> [front, left], 3 -> [front, left, right]. More than
    three captures engage only the first three. The result always has one
    label per engaged capture.
    """
    engaged = min(count, len(POSITIONAL_ANGLES))
    if 1 <= engaged <= len(POSITIONAL_ANGLES):
        labels = [AngleLabel(angle) for angle in POSITIONAL_ANGLES[:engaged]]
    else:
        # Unreachable for the counts above; kept as an all-front fallback
        labels = [AngleLabel.FRONT] * max(engaged, 0)

    padded = labels + [AngleLabel.FRONT] * (max(engaged, 0) - len(labels))
    return padded[: max(engaged, 0)]


def estimate_total_seconds(asset_count: int) -> float:
    """Static estimate of a whole flow for `asset_count` captures."""
    upload = UPLOAD_SECONDS_PER_ASSET * asset_count
    save = SAVE_SECONDS_PER_ASSET * asset_count + SAVE_SECONDS_FIXED
    return upload + ANALYZE_SECONDS + save


def estimate_remaining_seconds(asset_count: int, elapsed_seconds: float) -> float:
    """Advisory time left: the static estimate minus elapsed time, floored at 0."""
    return round(max(0.0, estimate_total_seconds(asset_count) - elapsed_seconds), 1)


class DiagnosisFlow:
    """Upload, analyze and save a set of captures for the signed-in principal.

    A DiagnosisFlow runs one invocation at a time. A second concurrent call to
    run() fails with ConflictError instead of racing the first.
    """

    def __init__(
        self,
        gateway: AssetTransferGateway,
        session_provider: SessionProvider,
        invoker: DiagnosisInvoker,
        persister: ResultPersister,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the flow.

        Args:
            gateway: Uploads original captures.
            session_provider: Resolves the principal and its credential.
            invoker: Runs the diagnosis.
            persister: Stores derived assets and the record.
            clock: Monotonic clock in seconds, for the time estimate.
        """
        self._gateway = gateway
        self._session_provider = session_provider
        self._invoker = invoker
        self._persister = persister
        self._clock = clock
        self._in_flight = threading.Lock()

    def run(
        self,
        assets: Sequence[CaptureAsset],
        context: FlowContext | None = None,
        *,
        profile: dict[str, Any] | None = None,
        meta: CaptureMeta | None = None,
    ) -> FlowResult:
        """Run one diagnosis.

        Args:
            assets: Captures in caller order. At most three are engaged.
            context: Receives progress and events; a fresh one if omitted.
            profile: Optional user profile forwarded to the diagnosis service.
            meta: Optional capture metadata forwarded to the diagnosis service.

        Returns:
            The diagnosis, the saved record id and the stored asset URLs.

        Raises:
            ConflictError: If another run is in flight on this instance.
            ValidationError: On empty input, a URL/label count mismatch, a
                missing credential or a missing result id.
            SkinFlowError: Any stage failure, re-raised unchanged.
        """
        if not self._in_flight.acquire(blocking=False):
            raise ConflictError("diagnosis flow already in progress")

        flow_context = context or FlowContext()
        with invocation_scope():
            try:
                return self._run(assets, flow_context, profile, meta)
            except Exception as error:
                error_code, retryable = classify_error(error)
                logger.warning(
                    "Diagnosis flow failed in state %s: %s",
                    flow_context.state,
                    error,
                    extra={"error_code": error_code, "retryable": retryable},
                )
                message = error.message if isinstance(error, SkinFlowError) else str(error)
                flow_context.publish(TerminalEvent(status=TerminalStatus.FAILED, error_code=error_code, message=message))
                raise
            finally:
                self._in_flight.release()

    def _run(
        self,
        assets: Sequence[CaptureAsset],
        context: FlowContext,
        profile: dict[str, Any] | None,
        meta: CaptureMeta | None,
    ) -> FlowResult:
        context.reset()
        if not assets:
            raise ValidationError(EMPTY_INPUT_MESSAGE, field="assets")

        angle_labels = derive_angle_labels(len(assets))
        engaged = list(assets[: len(angle_labels)])
        if len(engaged) < len(assets):
            logger.info("Engaging the first %d of %d captures", len(engaged), len(assets))

        started = self._clock()

        def forward(event: ProgressEvent | RetryEvent | TerminalEvent) -> None:
            remaining = estimate_remaining_seconds(len(engaged), self._clock() - started)
            context.publish(event, estimated_seconds_remaining=remaining)

        self._enter(FlowState.UPLOADING, context)
        batch = self._gateway.upload_assets(engaged, angle_labels, on_event=forward)
        asset_urls = batch.public_urls
        if len(asset_urls) != len(angle_labels):
            raise ValidationError(
                "Uploaded image count does not match angle label count",
                context={"url_count": len(asset_urls), "label_count": len(angle_labels)},
            )

        session = self._session_provider.get_session()
        if session is None or not session.access_token:
            raise ValidationError("Access token is missing", field="access_token")
        set_extra_context(owner_id=session.owner_id)

        self._enter(FlowState.ANALYZING, context)
        response = self._invoker.invoke(
            DiagnosisRequest(
                asset_urls=asset_urls,
                angle_labels=angle_labels,
                owner_id=session.owner_id,
                access_token=session.access_token,
                profile=profile,
                meta=meta,
            ),
            on_event=forward,
        )
        if not response.result_id:
            raise ValidationError("Analysis result ID is missing", field="result_id")
        result = DiagnosisResult.from_response(response)

        self._enter(FlowState.SAVING, context)
        record = self._persister.persist(
            asset_urls,
            angle_labels,
            result,
            session.owner_id,
            session.access_token,
            on_event=forward,
        )

        set_flow_stage(FlowState.COMPLETE)
        context.publish(
            ProgressEvent(stage=FlowStage.COMPLETE, percent=100, message=COMPLETE_MESSAGE),
            estimated_seconds_remaining=0.0,
        )
        context.publish(TerminalEvent(status=TerminalStatus.COMPLETED, message=COMPLETE_MESSAGE))
        logger.info(
            "Diagnosis flow complete (result_id=%s, saved_id=%s, elapsed=%.1fs)",
            result.result_id,
            record.saved_id,
            self._clock() - started,
        )

        return FlowResult(
            result_id=result.result_id,
            analysis_payload=result.analysis_payload,
            mapping_payload=result.mapping_payload,
            nlg_payload=result.nlg_payload,
            review_needed=result.review_needed,
            saved_id=record.saved_id,
            asset_urls=record.derived_asset_urls,
            angle_labels=record.angle_labels,
        )

    @staticmethod
    def _enter(state: FlowState, context: FlowContext) -> None:
        context.state = state
        set_flow_stage(state)
        logger.debug("Diagnosis flow entered %s", state)
