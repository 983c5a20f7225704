"""
Image input/output helpers.

Decoding and encoding are delegated to OpenCV. The helpers here only take
care of what the pipeline expects around them: a square image padded to a
size the DCT handles efficiently, intensities normalized to a float range,
and 8-bit renderings of float arrays for storage.
"""

from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np

from constraints import PIXEL_MAX, VALUE_RANGE
from errors import DecodeError, DimensionMismatch, WatermarkError

logger = logging.getLogger(__name__)


def load_grayscale(path: str) -> np.ndarray:
    """Read an image from disk as a single 8-bit channel."""
    img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise DecodeError(f"Could not open or find the image: {path}")
    logger.debug("Loaded %s with shape %s", path, img.shape)
    return img


def pad_to_dft_size(image: np.ndarray) -> np.ndarray:
    """Zero-pad ``image`` at the bottom and right to the optimal DFT size.

    Each axis is padded independently with :func:`cv2.getOptimalDFTSize`.
    The padded image has to be square, otherwise the block grid cannot be
    built.

    Raises:
        DimensionMismatch: if the padded width and height differ.
    """
    if image.ndim != 2:
        raise DimensionMismatch(f"Expected a single channel image, got shape {image.shape}")
    rows, cols = image.shape
    m = cv2.getOptimalDFTSize(rows)
    n = cv2.getOptimalDFTSize(cols)
    if m != n:
        raise DimensionMismatch(
            f"Image width and height do not match ({cols}x{rows} pads to {n}x{m})"
        )
    if (m, n) == (rows, cols):
        return image
    return cv2.copyMakeBorder(image, 0, m - rows, 0, n - cols, cv2.BORDER_CONSTANT, value=0)


def normalize(image: np.ndarray, value_range: Tuple[float, float] = VALUE_RANGE) -> np.ndarray:
    """Map 8-bit intensities [0, 255] linearly onto ``value_range`` as float32."""
    low, high = value_range
    if high <= low:
        raise ValueError(f"Invalid normalization range {value_range}")
    scale = (high - low) / PIXEL_MAX
    return (image.astype(np.float32) * np.float32(scale) + np.float32(low)).astype(np.float32)


def to_uint8(values: np.ndarray, value_range: Tuple[float, float] = VALUE_RANGE) -> np.ndarray:
    """Inverse of :func:`normalize`: rescale, round and saturate to 8 bits.

    Values outside ``value_range`` saturate at 0 or 255, the same way
    OpenCV's ``convertTo`` behaves.
    """
    low, high = value_range
    if high <= low:
        raise ValueError(f"Invalid normalization range {value_range}")
    scaled = (values.astype(np.float64) - low) * (PIXEL_MAX / (high - low))
    return np.clip(np.rint(scaled), 0, PIXEL_MAX).astype(np.uint8)


def save_image(path: str, image: np.ndarray) -> str:
    """Write an 8-bit image with OpenCV and return its path."""
    try:
        ok = cv2.imwrite(path, image)
    except cv2.error as e:
        raise WatermarkError(f"Could not write {path}: {e}") from e
    if not ok:
        raise WatermarkError(f"Could not write {path}")
    logger.info("Saved %s", path)
    return path
