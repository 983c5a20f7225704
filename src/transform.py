from typing import Optional

import numpy as np
from scipy.fft import dct, idct

from errors import DimensionMismatch


def _check_block(block: np.ndarray, n: Optional[int]) -> None:
    if block.ndim != 2 or block.shape[0] != block.shape[1]:
        raise DimensionMismatch(f"Block must be square, got shape {block.shape}")
    if n is not None and block.shape[0] != n:
        raise DimensionMismatch(f"Block side is {block.shape[0]}, expected {n}")


def forward(block: np.ndarray, n: Optional[int] = None) -> np.ndarray:
    """Orthonormal 2-D DCT-II of a square block (same scaling as cv2.dct)."""
    _check_block(block, n)
    return dct(dct(block, axis=0, norm="ortho"), axis=1, norm="ortho")


def inverse(coefficients: np.ndarray, n: Optional[int] = None) -> np.ndarray:
    """Inverse of :func:`forward`."""
    _check_block(coefficients, n)
    return idct(idct(coefficients, axis=1, norm="ortho"), axis=0, norm="ortho")
