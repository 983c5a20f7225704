"""
Selection of the coefficient that carries the watermark in a DCT block.

The DC term at (0, 0) holds the block average and is always excluded. Among
the remaining coefficients the one with the largest magnitude is chosen. On
ties the first one met in a row-major scan wins, so the choice does not
depend on how a library happens to search for a maximum.
"""

import warnings
from typing import Tuple

import numpy as np

from errors import DegenerateBlock, DimensionMismatch


def is_degenerate(coefficients: np.ndarray) -> bool:
    """True when the largest non-DC magnitude is shared by several coefficients."""
    magnitudes = _non_dc_magnitudes(coefficients)
    return int(np.count_nonzero(magnitudes == magnitudes.max())) > 1


def select_target(coefficients: np.ndarray, warn: bool = True) -> Tuple[int, int]:
    """Coordinate of the largest non-DC coefficient of a transformed block.

    Args:
        coefficients: Square DCT block, at least 2x2.
        warn: Emit a :class:`DegenerateBlock` warning for degenerate blocks.

    Returns:
        ``(row, col)`` of the target; never ``(0, 0)``. For a degenerate
        block (e.g. all zeros) this is the first tied cell in row-major
        order, ``(0, 1)`` for an all-zero block, and unless ``warn`` is
        false a :class:`DegenerateBlock` warning is emitted.
    """
    magnitudes = _non_dc_magnitudes(coefficients)
    flat = magnitudes.ravel()
    # np.argmax returns the first occurrence in C (row-major) order
    idx = int(np.argmax(flat))
    if warn and int(np.count_nonzero(flat == flat[idx])) > 1:
        warnings.warn(
            f"Non-DC maximum {flat[idx]:g} is not unique, using first in row-major order",
            DegenerateBlock,
            stacklevel=2,
        )
    row, col = divmod(idx, magnitudes.shape[1])
    return row, col


def _non_dc_magnitudes(coefficients: np.ndarray) -> np.ndarray:
    if coefficients.ndim != 2 or coefficients.shape[0] != coefficients.shape[1]:
        raise DimensionMismatch(f"Block must be square, got shape {coefficients.shape}")
    if coefficients.shape[0] < 2:
        raise DimensionMismatch("A 1x1 block has no coefficient besides the DC term")
    magnitudes = np.abs(coefficients.astype(np.float64))
    magnitudes[0, 0] = -np.inf
    return magnitudes
