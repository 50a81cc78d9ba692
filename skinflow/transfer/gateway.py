"""Upload of original captures to durable storage.

Each capture lands at ``{owner_id}/original/{angle}.{ext}`` with overwrite
semantics, so a new diagnosis replaces the previous originals instead of
accumulating them. Uploads fan out on a thread pool; results are keyed by
input index, not completion order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from skinflow.constants import ORIGINAL_FOLDER
from skinflow.events import FlowStage, ProgressEvent, ignore_event
from skinflow.exceptions.client_errors import AuthenticationError, ValidationError
from skinflow.transfer.models import AngleLabel, CaptureAsset, UploadBatch, UploadedAsset

if TYPE_CHECKING:
    from collections.abc import Sequence

    from skinflow.auth.session import SessionProvider
    from skinflow.events import EventCallback
    from skinflow.utils.s3 import AssetStorage

logger = logging.getLogger(__name__)

_UPLOAD_MESSAGE = "Uploading images..."


def original_path(owner_id: str, angle_label: AngleLabel, extension: str) -> str:
    """Deterministic storage path of an original capture."""
    return f"{owner_id}/{ORIGINAL_FOLDER}/{angle_label}.{extension}"


class AssetTransferGateway:
    """Uploads raw captures for the authenticated principal."""

    def __init__(
        self,
        storage: AssetStorage,
        session_provider: SessionProvider,
        *,
        max_workers: int = 3,
    ) -> None:
        """Initialize the gateway.

        Args:
            storage: Object store collaborator.
            session_provider: Resolves the principal the uploads belong to.
            max_workers: Upper bound on concurrent uploads.
        """
        self._storage = storage
        self._session_provider = session_provider
        self._max_workers = max_workers

    def upload_assets(
        self,
        assets: Sequence[CaptureAsset],
        angle_labels: Sequence[AngleLabel],
        on_event: EventCallback = ignore_event,
    ) -> UploadBatch:
        """Upload every capture concurrently and join.

        Args:
            assets: Captures in caller order.
            angle_labels: One label per capture.
            on_event: Receives upload progress as uploaded/total.

        Returns:
            The owner and one UploadedAsset per capture, in input order.

        Raises:
            ValidationError: If assets is empty or the label count differs.
            AuthenticationError: If no principal is signed in.
            StorageError: First failed transfer, propagated unchanged.
        """
        if not assets:
            raise ValidationError("at least one image required", field="assets")
        if len(assets) != len(angle_labels):
            raise ValidationError(
                "Each image needs exactly one angle label",
                context={"asset_count": len(assets), "label_count": len(angle_labels)},
            )

        session = self._session_provider.get_session()
        if session is None:
            raise AuthenticationError("Authentication is required")
        owner_id = session.owner_id

        total = len(assets)
        results: list[UploadedAsset | None] = [None] * total

        logger.info("Uploading %d original captures for owner %s", total, owner_id)

        with ThreadPoolExecutor(max_workers=min(self._max_workers, total)) as executor:
            futures = {
                executor.submit(self._upload_one, owner_id, asset, label): index
                for index, (asset, label) in enumerate(zip(assets, angle_labels, strict=True))
            }

            uploaded = 0
            for future in as_completed(futures):
                error = future.exception()
                if error is not None:
                    executor.shutdown(wait=False, cancel_futures=True)
                    logger.error("Upload failed at index %d: %s", futures[future], error)
                    raise error
                results[futures[future]] = future.result()
                uploaded += 1
                on_event(
                    ProgressEvent(
                        stage=FlowStage.UPLOAD,
                        percent=round(uploaded / total * 100),
                        message=_UPLOAD_MESSAGE,
                    )
                )

        return UploadBatch(owner_id=owner_id, results=[result for result in results if result is not None])

    def _upload_one(self, owner_id: str, asset: CaptureAsset, angle_label: AngleLabel) -> UploadedAsset:
        path = original_path(owner_id, angle_label, asset.extension)
        self._storage.upload(path, asset.data, content_type=asset.content_type, overwrite=True)
        logger.debug("Uploaded original capture to %s", path)
        return UploadedAsset(
            public_url=self._storage.public_url(path),
            storage_path=path,
            owner_id=owner_id,
            angle_label=angle_label,
        )
