"""
Spread-spectrum watermarking of a grayscale image in the block DCT domain.

The pass implemented here goes through the following states, in order and
without retries:

    Loaded -> Normalized -> Tiled -> Transformed -> Embedded
           -> InverseTransformed -> Reassembled -> Written

* The image is decoded as 8-bit grayscale, zero-padded to the optimal DFT
  size (it has to be square afterwards) and normalized to a float range.
* It is cut into a ``grid_size x grid_size`` grid of square blocks and
  every block goes through the forward DCT.
* A watermark field of uniform random values is drawn once, one value per
  block. For every embedding strategy under comparison the value of a block
  is added to its most significant non-DC coefficient, the block goes
  through the inverse DCT and the blocks are reassembled.
* The field, the reassembled DCT coefficients and the reconstructed images
  are written as 8-bit files. Nothing is written unless every artifact has
  been computed.

The per-block stage is a pure map over independent blocks. With
``workers > 1`` it runs on a thread pool; results are collected by block
index so the output equals the sequential one.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from constraints import (
    ALPHA,
    DCT_NAME,
    DEFAULT_PROVIDER,
    GRID_SIZE,
    OUTPUT_DIR,
    RECONSTRUCTED_NAME,
    SEED,
    VALUE_RANGE,
    WATERMARK_NAME,
)
from embed import EmbeddingStrategy, EmbedParameters, embed
from errors import DimensionMismatch, WatermarkError
from image_io import load_grayscale, normalize, pad_to_dft_size, save_image, to_uint8
from random_field import PROVIDERS, RandomFieldProvider, get_provider, timed_generate
from selection import is_degenerate
from tiling import RemainderPolicy, tile
from transform import forward, inverse

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    grid_size: int = GRID_SIZE
    """Blocks per axis; the block side is derived from the image side"""

    block_size: Optional[int] = None
    """Explicit block side, takes precedence over ``grid_size``"""

    alpha: float = ALPHA
    strategies: Tuple[EmbeddingStrategy, ...] = (EmbeddingStrategy.ADDITIVE,)
    value_range: Tuple[float, float] = VALUE_RANGE
    remainder_policy: RemainderPolicy = RemainderPolicy.DROP
    workers: int = 1
    seed: Optional[int] = SEED
    provider: str = DEFAULT_PROVIDER

    def resolve_block_size(self, side: int) -> int:
        if self.block_size is not None:
            return self.block_size
        if self.grid_size <= 0 or side // self.grid_size == 0:
            raise DimensionMismatch(f"Cannot split an image of side {side} into a {self.grid_size}x{self.grid_size} grid")
        return side // self.grid_size


@dataclass
class OutputPaths:
    watermark: str
    dct: str
    reconstructed: str

    @classmethod
    def in_dir(cls, out_dir: str = OUTPUT_DIR) -> "OutputPaths":
        return cls(
            watermark=os.path.join(out_dir, WATERMARK_NAME),
            dct=os.path.join(out_dir, DCT_NAME),
            reconstructed=os.path.join(out_dir, RECONSTRUCTED_NAME),
        )

    def reconstructed_for(self, strategy: EmbeddingStrategy, primary: bool) -> str:
        """The first strategy uses ``reconstructed``, the others get a suffix."""
        if primary:
            return self.reconstructed
        base, ext = os.path.splitext(self.reconstructed)
        return f"{base}_{strategy.value}{ext}"


@dataclass
class PipelineResult:
    field: np.ndarray
    """Watermark field, one value per block"""

    coefficients: np.ndarray
    """Reassembled forward DCT of every block"""

    watermarked: Dict[EmbeddingStrategy, np.ndarray]
    """Reconstructed image for each embedding strategy"""

    timings: Dict[str, float]
    """Elapsed seconds of the field generation and of each strategy"""

    degenerate_blocks: int = 0


@dataclass
class ProviderTiming:
    name: str
    seconds: float
    values: np.ndarray


def generate_field(provider: RandomFieldProvider, shape: Tuple[int, int]) -> Tuple[np.ndarray, float]:
    """Draw a watermark field of ``shape``; value ``field[r, c]`` belongs to block (r, c)."""
    rows, cols = shape
    values, elapsed = timed_generate(provider, rows * cols)
    return values.reshape(rows, cols), elapsed


def benchmark_providers(providers: Iterable[RandomFieldProvider], count: int) -> List[ProviderTiming]:
    """Time each provider generating ``count`` values, one provider at a time."""
    results = []
    for provider in providers:
        values, elapsed = timed_generate(provider, count)
        logger.info("%s time difference = %d [us]", provider.name, round(elapsed * 1e6))
        results.append(ProviderTiming(provider.name, elapsed, values))
    return results


def _map_blocks(fn: Callable, items: Sequence, workers: int) -> list:
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(fn, items))
    return [fn(item) for item in items]


def watermark_image(
    image: np.ndarray, config: PipelineConfig, field: Optional[np.ndarray] = None
) -> PipelineResult:
    """Run tiling, DCT, embedding, inverse DCT and reassembly in memory.

    Args:
        image: Normalized square image.
        config: Pipeline parameters.
        field: Watermark field with one value per block. Drawn from
            ``config.provider`` when omitted.

    Returns:
        A :class:`PipelineResult`; the images have the (padded) shape of
        the tiled image.
    """
    if not np.issubdtype(image.dtype, np.floating):
        image = image.astype(np.float32)

    block_size = config.resolve_block_size(image.shape[0] if image.ndim == 2 else 0)
    grid = tile(image, block_size, config.remainder_policy)
    logger.debug("Tiled %s image into %dx%d blocks of %dpx", image.shape, *grid.shape, block_size)

    timings: Dict[str, float] = {}
    if field is None:
        field, timings["field"] = generate_field(get_provider(config.provider, config.seed), grid.shape)
    elif field.shape != grid.shape:
        raise DimensionMismatch(f"Watermark field has shape {field.shape}, the block grid is {grid.shape}")

    transformed = grid.with_blocks(_map_blocks(forward, grid.sequence(), config.workers))
    coefficients = transformed.assemble()
    degenerate = sum(is_degenerate(block) for block in transformed.sequence())
    if degenerate:
        logger.debug("%d of %d blocks have no unique non-DC maximum", degenerate, len(transformed))

    values = field.ravel()
    watermarked = {}
    for strategy in config.strategies:
        # degenerate blocks are counted above
        params = EmbedParameters(alpha=config.alpha, strategy=strategy, warn_degenerate=False)

        def process(item, params=params):
            block, w = item
            return inverse(embed(block, float(w), params))

        start = time.perf_counter()
        blocks = _map_blocks(process, list(zip(transformed.sequence(), values)), config.workers)
        timings[strategy.value] = time.perf_counter() - start
        watermarked[strategy] = transformed.with_blocks(blocks).assemble()
        logger.info("%s embedding time difference = %d [us]", strategy.value, round(timings[strategy.value] * 1e6))

    return PipelineResult(field, coefficients, watermarked, timings, degenerate)


def run(path: str, config: PipelineConfig, outputs: OutputPaths, benchmark: bool = False) -> PipelineResult:
    """Watermark the image at ``path`` and write every output artifact.

    With ``benchmark`` every random field provider is timed generating a
    field of the size the run used. If any output cannot be written, the
    ones already written are removed before the error propagates.
    """
    image = load_grayscale(path)
    padded = pad_to_dft_size(image)
    normalized = normalize(padded, config.value_range)
    logger.debug("Normalized %s image to %s", padded.shape, config.value_range)

    result = watermark_image(normalized, config)
    if benchmark:
        benchmark_providers([get_provider(name, config.seed) for name in sorted(PROVIDERS)], result.field.size)

    # render everything before writing anything
    artifacts = [
        (outputs.watermark, to_uint8(result.field, (0.0, 1.0))),
        (outputs.dct, to_uint8(result.coefficients, config.value_range)),
    ]
    for i, (strategy, img) in enumerate(result.watermarked.items()):
        artifacts.append((outputs.reconstructed_for(strategy, primary=i == 0), to_uint8(img, config.value_range)))

    written = []
    try:
        for out_path, img in artifacts:
            save_image(out_path, img)
            written.append(out_path)
    except WatermarkError:
        for out_path in written:
            os.remove(out_path)
        raise
    return result
