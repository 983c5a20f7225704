from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from constraints import ALPHA
from selection import select_target


class EmbeddingStrategy(Enum):
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


@dataclass
class EmbedParameters:
    alpha: float = ALPHA
    strategy: EmbeddingStrategy = field(default=EmbeddingStrategy.ADDITIVE)
    warn_degenerate: bool = True


def embed(
    coefficients: NDArray[np.floating], watermark_value: float, params: EmbedParameters
) -> NDArray[np.floating]:
    """Return a copy of a DCT block with the watermark value placed in it.

    Only the coefficient picked by :func:`selection.select_target` changes:
    ``c + alpha * w`` for the additive strategy and ``c * (1 + alpha * w)``
    for the multiplicative one.
    """
    target = select_target(coefficients, warn=params.warn_degenerate)
    watermarked = coefficients.copy()

    if params.strategy == EmbeddingStrategy.ADDITIVE:
        watermarked[target] = watermarked[target] + params.alpha * watermark_value
    elif params.strategy == EmbeddingStrategy.MULTIPLICATIVE:
        watermarked[target] = watermarked[target] * (1 + params.alpha * watermark_value)

    return watermarked
