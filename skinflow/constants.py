"""Shared constants for the capture, diagnosis and persistence flow."""

from typing import Final

# Angle labels, in positional order
ANGLE_FRONT: Final = "front"
ANGLE_LEFT: Final = "left"
ANGLE_RIGHT: Final = "right"
POSITIONAL_ANGLES: Final = (ANGLE_FRONT, ANGLE_LEFT, ANGLE_RIGHT)

# Storage layout
ORIGINAL_FOLDER: Final = "original"
RESIZED_FOLDER: Final = "resized"
DEFAULT_IMAGE_EXTENSION: Final = "jpg"

# Quality assessment
SHARPNESS_WEIGHT: Final = 0.4
BRIGHTNESS_WEIGHT: Final = 0.35
ANGLE_WEIGHT: Final = 0.25
SHARPNESS_SAMPLE_MAX_SIDE: Final = 512
SHARPNESS_NORMALIZER: Final = 100.0
SHARPNESS_FAILURE_SCORE: Final = 0
BRIGHTNESS_FAILURE_SCORE: Final = 50
ANGLE_FALLBACK_SCORE: Final = 75
SKIPPED_CHECK_SCORE: Final = 100
MIN_QUALITY_SCORE: Final = 0.1

# Stage time estimates (seconds)
UPLOAD_SECONDS_PER_ASSET: Final = 1.5
ANALYZE_SECONDS: Final = 15.0
SAVE_SECONDS_PER_ASSET: Final = 2.0
SAVE_SECONDS_FIXED: Final = 2.0

# Save stage progress bands (percent)
SAVE_ASSET_BAND_START: Final = 10
SAVE_ASSET_BAND_END: Final = 80
SAVE_RECORD_BAND_END: Final = 100

# Persist request defaults
DEFAULT_CONFIDENCE: Final = 0.8
DEFAULT_UNCERTAINTY: Final = 0.2
