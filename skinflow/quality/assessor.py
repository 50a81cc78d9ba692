"""Deterministic image quality assessment.

Scores one capture on three independent axes and folds them into a
composite report:

- sharpness: mean absolute 3x3 Laplacian response on a grayscale sample
  downscaled to at most 512x512
- brightness: mean grayscale level mapped piecewise-linearly onto 0-100
- framing: aspect-ratio heuristic standing in for frontal framing; this is
  not pose estimation

Grayscale is the plain mean of R, G and B. Each axis fails on its own: a
failed sub-check is replaced by a sentinel score and the other axes are
unaffected. Only undecodable input raises.
"""

from __future__ import annotations

import io
import logging
import math

import numpy as np
from PIL import Image, ImageStat, UnidentifiedImageError

from skinflow.constants import (
    ANGLE_FALLBACK_SCORE,
    ANGLE_WEIGHT,
    BRIGHTNESS_FAILURE_SCORE,
    BRIGHTNESS_WEIGHT,
    SHARPNESS_FAILURE_SCORE,
    SHARPNESS_NORMALIZER,
    SHARPNESS_SAMPLE_MAX_SIDE,
    SHARPNESS_WEIGHT,
    SKIPPED_CHECK_SCORE,
)
from skinflow.exceptions.client_errors import ImageDecodeError
from skinflow.quality.models import QualityCheckOptions, QualityMessage, QualityReport, QualityTone

logger = logging.getLogger(__name__)

ISSUE_BLURRY = "Image is blurry"
ISSUE_SHARPNESS_FAILED = "Sharpness check failed"
ISSUE_TOO_DARK = "Lighting is too dark"
ISSUE_TOO_BRIGHT = "Lighting is too bright"
ISSUE_BRIGHTNESS_FAILED = "Brightness check failed"
ISSUE_NOT_FRONTAL = "Face is not facing the camera"

RECOMMEND_SHARPER = "Take a sharper photo"
RECOMMEND_FOCUS = "Adjust the focus more precisely"
RECOMMEND_BRIGHTER_PLACE = "Take the photo in a brighter place"
RECOMMEND_MORE_LIGHT = "Increase the lighting"
RECOMMEND_LESS_LIGHT = "Avoid excessive lighting"
RECOMMEND_FACE_FORWARD = "Face the camera directly"
RECOMMEND_TURN_TOWARD = "Turn your face further toward the camera"

_FRAMED_RATIO_MIN = 0.7
_FRAMED_RATIO_MAX = 1.3
_FRAMED_SCORE = 80
_UNFRAMED_SCORE = 60


def decode_image(data: bytes) -> Image.Image:
    """Open image bytes without decoding pixel data.

    Args:
        data: Raw encoded image bytes.

    Returns:
        A lazily-loaded PIL image.

    Raises:
        ImageDecodeError: If the bytes are not a recognizable image.
    """
    if not data:
        raise ImageDecodeError("Image data is empty")
    try:
        return Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, OSError) as error:
        raise ImageDecodeError(
            f"Failed to decode image: {error}",
            context={"size_bytes": len(data)},
        ) from error


def grayscale_array(image: Image.Image) -> np.ndarray:
    """Return the per-pixel mean of R, G and B as a float array.

    Only used on the downscaled sharpness sample.
    """
    rgb = np.asarray(image.convert("RGB"), dtype=np.float64)
    return rgb.mean(axis=2)


def sample_dimensions(width: int, height: int, max_side: int = SHARPNESS_SAMPLE_MAX_SIDE) -> tuple[int, int]:
    """Dimensions of the sharpness sample, preserving aspect ratio."""
    if width <= max_side and height <= max_side:
        return width, height
    ratio = min(max_side / width, max_side / height)
    return max(1, math.floor(width * ratio)), max(1, math.floor(height * ratio))


def mean_absolute_laplacian(gray: np.ndarray) -> float:
    """Mean |response| of the kernel [[0,-1,0],[-1,4,-1],[0,-1,0]] over interior pixels."""
    if gray.shape[0] < 3 or gray.shape[1] < 3:
        return 0.0
    response = (
        4.0 * gray[1:-1, 1:-1]
        - gray[:-2, 1:-1]
        - gray[2:, 1:-1]
        - gray[1:-1, :-2]
        - gray[1:-1, 2:]
    )
    return float(np.abs(response).mean())


def measure_sharpness(image: Image.Image) -> float:
    """Normalized sharpness in [0, 1]."""
    width, height = sample_dimensions(*image.size)
    sample = image.convert("RGB")
    if (width, height) != sample.size:
        sample = sample.resize((width, height), Image.Resampling.BILINEAR)
    response = mean_absolute_laplacian(grayscale_array(sample))
    return min(1.0, max(0.0, response / SHARPNESS_NORMALIZER))


def brightness_score(mean_level: float) -> int:
    """Map a mean grayscale level (0-255) onto a 0-100 brightness score."""
    if mean_level < 80:
        score = (mean_level / 80) * 40
    elif mean_level <= 150:
        score = 40 + ((mean_level - 80) / 70) * 20
    elif mean_level <= 200:
        score = 60 + ((mean_level - 150) / 50) * 20
    else:
        score = min(100.0, 80 + ((mean_level - 200) / 55) * 20)
    return round(max(0.0, score))


def measure_brightness(image: Image.Image) -> int:
    """Brightness score for the full-resolution image.

    Band means are taken by Pillow over the 8-bit frame; their average equals
    the mean grayscale level.
    """
    if image.width == 0 or image.height == 0:
        return BRIGHTNESS_FAILURE_SCORE
    band_means = ImageStat.Stat(image.convert("RGB")).mean
    return brightness_score(sum(band_means) / len(band_means))


def framing_score(width: float, height: float) -> int:
    """Aspect-ratio proxy for centered, frontal framing."""
    if not width or not height:
        return ANGLE_FALLBACK_SCORE
    ratio = width / height
    if not math.isfinite(ratio):
        return ANGLE_FALLBACK_SCORE
    if _FRAMED_RATIO_MIN <= ratio <= _FRAMED_RATIO_MAX:
        return _FRAMED_SCORE
    return _UNFRAMED_SCORE


def composite_score(sharpness: float, brightness: float, angle: float) -> int:
    """Weighted composite of the three axes, clamped to [0, 100]."""
    overall = round(
        sharpness * SHARPNESS_WEIGHT + brightness * BRIGHTNESS_WEIGHT + angle * ANGLE_WEIGHT
    )
    return _clamp(overall)


def assess_quality(data: bytes, options: QualityCheckOptions | None = None) -> QualityReport:
    """Score one capture for sharpness, brightness and framing.

    Args:
        data: Raw encoded image bytes.
        options: Axis toggles and the minimum acceptable composite score.

    Returns:
        The composite quality report.

    Raises:
        ImageDecodeError: If the bytes cannot be decoded at all.
    """
    options = options or QualityCheckOptions()
    image = decode_image(data)

    issues: list[str] = []
    recommendations: list[str] = []

    sharpness = SKIPPED_CHECK_SCORE
    if options.evaluate_sharpness:
        try:
            sharpness = round(measure_sharpness(image) * 100)
        except (OSError, ValueError):
            logger.warning("Sharpness check failed", exc_info=True)
            sharpness = SHARPNESS_FAILURE_SCORE
            issues.append(ISSUE_SHARPNESS_FAILED)
        else:
            if sharpness < 50:
                issues.append(ISSUE_BLURRY)
                recommendations.append(RECOMMEND_SHARPER)
            elif sharpness < 70:
                recommendations.append(RECOMMEND_FOCUS)

    brightness = SKIPPED_CHECK_SCORE
    if options.evaluate_brightness:
        try:
            brightness = measure_brightness(image)
        except (OSError, ValueError):
            logger.warning("Brightness check failed", exc_info=True)
            brightness = BRIGHTNESS_FAILURE_SCORE
            issues.append(ISSUE_BRIGHTNESS_FAILED)
        else:
            if brightness < 40:
                issues.append(ISSUE_TOO_DARK)
                recommendations.append(RECOMMEND_BRIGHTER_PLACE)
            elif brightness < 60:
                recommendations.append(RECOMMEND_MORE_LIGHT)
            elif brightness > 90:
                issues.append(ISSUE_TOO_BRIGHT)
                recommendations.append(RECOMMEND_LESS_LIGHT)

    angle = SKIPPED_CHECK_SCORE
    if options.evaluate_framing:
        try:
            angle = framing_score(*image.size)
        except (OSError, ValueError):
            # Framing is a soft check; fall back without flagging an issue
            logger.warning("Framing check failed", exc_info=True)
            angle = ANGLE_FALLBACK_SCORE
        else:
            if angle < 60:
                issues.append(ISSUE_NOT_FRONTAL)
                recommendations.append(RECOMMEND_FACE_FORWARD)
            elif angle < 80:
                recommendations.append(RECOMMEND_TURN_TOWARD)

    overall = composite_score(sharpness, brightness, angle)

    return QualityReport(
        overall_score=overall,
        sharpness=_clamp(sharpness),
        brightness=_clamp(brightness),
        angle=_clamp(angle),
        issues=issues,
        recommendations=recommendations,
        is_good=overall >= options.min_acceptable_score and not issues,
    )


def describe_quality(score: int) -> QualityMessage:
    """Convert a composite score into a user-facing message."""
    if score >= 80:
        return QualityMessage(
            message="Perfect! This photo is well suited for analysis",
            tone=QualityTone.GREEN,
            icon="check-circle",
        )
    if score >= 60:
        return QualityMessage(
            message="Good! This photo can be analyzed",
            tone=QualityTone.GREEN,
            icon="check-circle",
        )
    if score >= 40:
        return QualityMessage(
            message="Needs improvement. A better photo is recommended",
            tone=QualityTone.YELLOW,
            icon="alert-circle",
        )
    return QualityMessage(
        message="Retaking the photo is recommended",
        tone=QualityTone.RED,
        icon="x-circle",
    )


def _clamp(value: float) -> int:
    return int(max(0, min(100, value)))
