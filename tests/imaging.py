"""In-memory test images."""

import io

import numpy as np
from PIL import Image


def encode_image(pixels: np.ndarray, image_format: str = "PNG") -> bytes:
    """Encode a uint8 grayscale or RGB array as image bytes."""
    buffer = io.BytesIO()
    Image.fromarray(pixels.astype(np.uint8)).save(buffer, format=image_format)
    return buffer.getvalue()


def uniform_image(value: int, width: int = 100, height: int = 100) -> bytes:
    """A flat gray image."""
    return encode_image(np.full((height, width), value, dtype=np.uint8))


def checkerboard_image(low: int, high: int, width: int = 64, height: int = 64) -> bytes:
    """A one-pixel checkerboard alternating low and high."""
    rows, cols = np.indices((height, width))
    return encode_image(np.where((rows + cols) % 2 == 0, low, high))


def rgb_image(width: int = 60, height: int = 40, value: int = 120) -> bytes:
    """A flat RGB image."""
    return encode_image(np.full((height, width, 3), value, dtype=np.uint8))
