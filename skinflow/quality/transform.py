"""Resize transform used to build compact derived assets."""

from __future__ import annotations

import io
import logging

from PIL import Image

from skinflow.exceptions.client_errors import ImageQualityError
from skinflow.quality.assessor import decode_image, measure_sharpness
from skinflow.quality.models import ResizedImage, ResizeOptions

logger = logging.getLogger(__name__)

_OUTPUT_FORMAT = "WEBP"
_OUTPUT_CONTENT_TYPE = "image/webp"
_OUTPUT_EXTENSION = "webp"


def target_dimensions(width: int, height: int, max_width: int) -> tuple[int, int]:
    """Cap the width at max_width, scaling height to keep the aspect ratio."""
    if width <= max_width:
        return width, height
    return max_width, max(1, round(height * max_width / width))


def process_image(data: bytes, options: ResizeOptions | None = None) -> ResizedImage:
    """Resize and re-encode one capture as WebP.

    Args:
        data: Raw encoded image bytes.
        options: Width cap, encoder quality (0-1) and optional quality gate.

    Returns:
        The encoded derived image.

    Raises:
        ImageDecodeError: If the bytes cannot be decoded.
        ImageQualityError: If the gate is enabled and the result is too blurry.
    """
    options = options or ResizeOptions()
    image = decode_image(data).convert("RGB")

    width, height = target_dimensions(image.width, image.height, options.max_width)
    if (width, height) != image.size:
        image = image.resize((width, height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    image.save(buffer, format=_OUTPUT_FORMAT, quality=round(options.quality * 100))
    encoded = buffer.getvalue()

    quality_score: float | None = None
    if options.check_quality:
        quality_score = measure_sharpness(image)
        if quality_score < options.min_quality_score:
            raise ImageQualityError(
                "Image is too blurry. Please use a sharper photo.",
                context={"quality_score": round(quality_score, 4)},
            )

    logger.debug(
        "Resized image to %dx%d (%d -> %d bytes)",
        width,
        height,
        len(data),
        len(encoded),
    )

    return ResizedImage(
        data=encoded,
        content_type=_OUTPUT_CONTENT_TYPE,
        extension=_OUTPUT_EXTENSION,
        width=width,
        height=height,
        quality_score=quality_score,
    )
