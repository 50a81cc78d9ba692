"""Persistence of the final diagnosis record.

For each original capture, in order, the persister downloads the bytes,
runs the resize transform, uploads the result under
``{owner_id}/resized/{timestamp}-{index}-{rand}-{angle}.{ext}`` and takes its
public URL. A failure anywhere in that chain falls back to the original URL
for that index only, so the record always holds one URL per original. The
chain is sequential to keep the fallback bookkeeping positional.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from skinflow.constants import (
    DEFAULT_CONFIDENCE,
    DEFAULT_UNCERTAINTY,
    RESIZED_FOLDER,
    SAVE_ASSET_BAND_END,
    SAVE_ASSET_BAND_START,
    SAVE_RECORD_BAND_END,
)
from skinflow.diagnosis.models import ResponseStatus
from skinflow.events import FlowStage, ProgressEvent, band_percent, ignore_event
from skinflow.exceptions.client_errors import ValidationError
from skinflow.exceptions.server_errors import AssetTransformError, ExternalServiceError
from skinflow.persistence.models import DerivedAsset, PersistedRecord, PersistRequest, PersistResponse
from skinflow.quality.models import ResizeOptions
from skinflow.quality.transform import process_image

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from skinflow.diagnosis.client import EdgeFunctionClient
    from skinflow.diagnosis.models import DiagnosisResult
    from skinflow.events import EventCallback
    from skinflow.transfer.models import AngleLabel
    from skinflow.utils.s3 import AssetStorage

logger = logging.getLogger(__name__)

_SAVE_MESSAGE = "Saving results..."
_OPTIMIZE_MESSAGE = "Optimizing images..."
_DEFAULT_FAILURE_MESSAGE = "Failed to save the analysis result."


def resized_path(owner_id: str, index: int, angle_label: AngleLabel, extension: str, *, timestamp_ms: int) -> str:
    """Append-only storage path of a derived asset."""
    suffix = secrets.token_hex(4)
    return f"{owner_id}/{RESIZED_FOLDER}/{timestamp_ms}-{index}-{suffix}-{angle_label}.{extension}"


def _payload_number(payload: dict[str, object], key: str, default: float) -> float:
    value = payload.get(key)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    return default


class ResultPersister:
    """Builds derived assets and stores the diagnosis record."""

    def __init__(
        self,
        storage: AssetStorage,
        client: EdgeFunctionClient,
        *,
        function_name: str = "analyze-save",
        resize_options: ResizeOptions | None = None,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the persister.

        Args:
            storage: Object store collaborator.
            client: Edge function HTTP client.
            function_name: Name of the save function.
            resize_options: Transform options; the quality gate is always off.
            clock_ms: Wall clock in epoch milliseconds, for derived paths.
        """
        self._storage = storage
        self._client = client
        self._function_name = function_name
        base_options = resize_options or ResizeOptions()
        self._resize_options = base_options.model_copy(update={"check_quality": False})
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)

    def persist(
        self,
        original_urls: Sequence[str],
        angle_labels: Sequence[AngleLabel],
        result: DiagnosisResult,
        owner_id: str,
        access_token: str,
        on_event: EventCallback = ignore_event,
    ) -> PersistedRecord:
        """Derive compact assets and save the record.

        Args:
            original_urls: Public URLs of the originals, in label order.
            angle_labels: One label per original.
            result: Diagnosis with a validated result id.
            owner_id: Owner of the assets and the record.
            access_token: Bearer credential of the principal.
            on_event: Receives save progress.

        Returns:
            The saved record with one URL per label.

        Raises:
            ValidationError: If the result id is missing or counts differ.
                Raised before any network activity.
            ExternalServiceError: If the save function reports an error.
        """
        if not result.result_id:
            raise ValidationError("Analysis result ID is missing.", field="result_id")
        if len(original_urls) != len(angle_labels):
            raise ValidationError(
                "Each image URL needs exactly one angle label",
                context={"url_count": len(original_urls), "label_count": len(angle_labels)},
            )

        total = len(original_urls)
        on_event(ProgressEvent(stage=FlowStage.SAVE, percent=SAVE_ASSET_BAND_START, message=_OPTIMIZE_MESSAGE))

        derived: list[DerivedAsset] = []
        for index, (url, label) in enumerate(zip(original_urls, angle_labels, strict=True)):
            derived.append(self._derive_or_fallback(index, url, label, owner_id))
            on_event(
                ProgressEvent(
                    stage=FlowStage.SAVE,
                    percent=band_percent(SAVE_ASSET_BAND_START, SAVE_ASSET_BAND_END, index + 1, total),
                    message=_OPTIMIZE_MESSAGE,
                )
            )

        asset_urls = [asset.url for asset in derived]
        fallback_count = sum(1 for asset in derived if not asset.derived)
        if fallback_count:
            logger.warning("Using %d original URL(s) in place of derived assets", fallback_count)

        request = PersistRequest(
            owner_id=owner_id,
            asset_urls=asset_urls,
            angle_labels=list(angle_labels),
            result=result,
            confidence=_payload_number(result.analysis_payload, "confidence", DEFAULT_CONFIDENCE),
            uncertainty=_payload_number(result.analysis_payload, "uncertainty_estimate", DEFAULT_UNCERTAINTY),
            access_token=access_token,
        )
        on_event(ProgressEvent(stage=FlowStage.SAVE, percent=SAVE_ASSET_BAND_END, message=_SAVE_MESSAGE))
        response = self._save(request)
        on_event(ProgressEvent(stage=FlowStage.SAVE, percent=SAVE_RECORD_BAND_END, message=_SAVE_MESSAGE))

        logger.info("Saved diagnosis %s as record %s", result.result_id, response.id)
        return PersistedRecord(
            saved_id=response.id,
            derived_asset_urls=asset_urls,
            angle_labels=list(angle_labels),
        )

    def _derive_or_fallback(self, index: int, url: str, label: AngleLabel, owner_id: str) -> DerivedAsset:
        try:
            derived_url = self._derive(index, url, label, owner_id)
        except AssetTransformError as error:
            logger.warning(
                "Derived asset failed at index %d, keeping original: %s",
                index,
                error.message,
                exc_info=error.__cause__ is not None,
            )
            return DerivedAsset(index=index, original_url=url, url=url, derived=False)
        return DerivedAsset(index=index, original_url=url, url=derived_url, derived=True)

    def _derive(self, index: int, url: str, label: AngleLabel, owner_id: str) -> str:
        """Download, resize and upload one original.

        Raises:
            AssetTransformError: Wrapping whatever failed in the chain.
        """
        try:
            original = self._storage.download(url)
            resized = process_image(original, self._resize_options)
            path = resized_path(owner_id, index, label, resized.extension, timestamp_ms=self._clock_ms())
            self._storage.upload(path, resized.data, content_type=resized.content_type, overwrite=False)
            return self._storage.public_url(path)
        except Exception as error:
            raise AssetTransformError(
                f"Could not build derived asset for {label}: {error}",
                context={"index": index, "original_url": url},
            ) from error

    def _save(self, request: PersistRequest) -> PersistResponse:
        body = self._client.call(self._function_name, request.to_payload(), access_token=request.access_token)
        try:
            response = PersistResponse.model_validate(body)
        except PydanticValidationError as error:
            raise ExternalServiceError(
                f"Malformed save response: {error.error_count()} invalid fields",
                service_name=self._function_name,
            ) from error
        if response.status == ResponseStatus.ERROR:
            raise ExternalServiceError(
                response.error or _DEFAULT_FAILURE_MESSAGE,
                service_name=self._function_name,
            )
        return response
