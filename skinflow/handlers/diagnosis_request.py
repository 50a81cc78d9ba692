"""Diagnosis request Lambda handler.

Accepts an API Gateway proxy event whose JSON body carries base64 captures:

    {
        "images": [{"filename": "front.jpg", "content_type": "image/jpeg", "data": "<base64>"}],
        "profile": {...},
        "meta": {"camera": "front", "orientation": 0}
    }

and runs the diagnosis flow for the principal in the authorizer claims.
"""

import base64
import binascii
import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from skinflow.auth.session import SessionProvider, StaticSessionProvider, session_from_event
from skinflow.config import Settings, validate_startup_config
from skinflow.diagnosis.client import EdgeFunctionClient
from skinflow.diagnosis.invoker import DiagnosisInvoker
from skinflow.diagnosis.models import CaptureMeta
from skinflow.exceptions.client_errors import ValidationError
from skinflow.exceptions.handlers import create_exception_handler, create_success_response
from skinflow.flow.orchestrator import DiagnosisFlow
from skinflow.logging.adapters.lambda_adapter import set_lambda_context
from skinflow.logging.config import LoggingConfig
from skinflow.logging.context import clear_context
from skinflow.logging.logger import setup_logging
from skinflow.persistence.persister import ResultPersister
from skinflow.quality.models import ResizeOptions
from skinflow.transfer.gateway import AssetTransferGateway
from skinflow.transfer.models import CaptureAsset
from skinflow.types import LambdaContext, LambdaEvent
from skinflow.utils.s3 import S3Client

logger = logging.getLogger(__name__)


def _build_flow(settings: Settings, session_provider: SessionProvider) -> DiagnosisFlow:
    """Wire the flow components from settings."""
    storage = S3Client(
        settings.asset_bucket_name,
        public_base_url=settings.public_base_url,
        region_name=settings.aws_region,
        http_timeout_seconds=settings.http_timeout_seconds,
    )
    client = EdgeFunctionClient(settings.diagnosis_service_url, timeout_seconds=settings.http_timeout_seconds)
    return DiagnosisFlow(
        gateway=AssetTransferGateway(storage, session_provider, max_workers=settings.upload_max_workers),
        session_provider=session_provider,
        invoker=DiagnosisInvoker(
            client,
            function_name=settings.analyze_function_name,
            max_attempts=settings.diagnosis_max_attempts,
            initial_delay_ms=settings.diagnosis_initial_delay_ms,
            pacing_seconds=settings.stage_pacing_seconds,
        ),
        persister=ResultPersister(
            storage,
            client,
            function_name=settings.save_function_name,
            resize_options=ResizeOptions(
                max_width=settings.resize_max_width,
                quality=settings.resize_quality,
            ),
        ),
    )


def _parse_body(event: LambdaEvent) -> dict[str, Any]:
    """Decode the JSON body of a proxy event.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    raw_body = event.get("body") or "{}"
    if event.get("isBase64Encoded") and isinstance(raw_body, str):
        try:
            raw_body = base64.b64decode(raw_body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as error:
            raise ValidationError("Request body is not valid base64 JSON") from error
    try:
        body = json.loads(raw_body) if isinstance(raw_body, str) else raw_body
    except json.JSONDecodeError as error:
        raise ValidationError("Request body is not valid JSON") from error
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _parse_assets(images: object) -> list[CaptureAsset]:
    """Decode the captures of a request body, preserving order.

    Raises:
        ValidationError: If an entry is malformed or not base64.
    """
    if not isinstance(images, list):
        raise ValidationError("images must be a list", field="images")

    assets: list[CaptureAsset] = []
    for index, image in enumerate(images):
        if not isinstance(image, dict) or not isinstance(image.get("data"), str):
            raise ValidationError("Each image needs base64 data", field=f"images[{index}].data")
        try:
            data = base64.b64decode(image["data"], validate=True)
        except binascii.Error as error:
            raise ValidationError("Image data is not valid base64", field=f"images[{index}].data") from error

        fields = {key: image[key] for key in ("filename", "content_type") if image.get(key)}
        try:
            assets.append(CaptureAsset(data=data, **fields))
        except PydanticValidationError as error:
            raise ValidationError(
                f"Invalid image entry: {error.error_count()} invalid fields",
                field=f"images[{index}]",
            ) from error
    return assets


def _parse_meta(raw_meta: object) -> CaptureMeta | None:
    if raw_meta is None:
        return None
    try:
        return CaptureMeta.model_validate(raw_meta)
    except PydanticValidationError as error:
        raise ValidationError("Invalid capture metadata", field="meta") from error


@create_exception_handler
def handler(event: LambdaEvent, context: LambdaContext) -> dict[str, Any]:
    """Run the diagnosis flow for one request.

    Args:
        event: API Gateway proxy event.
        context: Lambda context.

    Returns:
        200 with the diagnosis result, or an RFC 7807 error response.
    """
    clear_context()
    set_lambda_context(event, context)
    settings = validate_startup_config()
    setup_logging(LoggingConfig(log_level=settings.log_level, service_name=settings.service_name))

    body = _parse_body(event)
    assets = _parse_assets(body.get("images", []))
    profile = body.get("profile")
    if profile is not None and not isinstance(profile, dict):
        raise ValidationError("profile must be an object", field="profile")
    meta = _parse_meta(body.get("meta"))

    flow = _build_flow(settings, StaticSessionProvider(session_from_event(event)))
    result = flow.run(assets, profile=profile, meta=meta)

    logger.info("Diagnosis request served for %d images", len(assets))
    return create_success_response(200, result.model_dump(mode="json"))
