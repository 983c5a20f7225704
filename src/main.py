"""
Command line entry point.

Usage example:

    digimark lena.png --alpha 0.5 --grid-size 8 --out-dir output --benchmark

This writes ``watermark.png``, ``dcts.png`` and ``reassembled.png`` into
``output``. Exit status is 0 on success, 1 when the image cannot be
decoded, has the wrong dimensions or an output cannot be written, and 2 on
invalid arguments.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

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
from embed import EmbeddingStrategy
from errors import WatermarkError
from pipeline import OutputPaths, PipelineConfig, run
from random_field import PROVIDERS
from tiling import RemainderPolicy

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Embed a spread-spectrum watermark into a grayscale image in the block DCT domain."
    )
    parser.add_argument("image", help="Path to the input image.")
    size = parser.add_mutually_exclusive_group()
    size.add_argument("--grid-size", type=int, default=GRID_SIZE, help="Number of blocks along each axis.")
    size.add_argument("--block-size", type=int, default=None, help="Side of the blocks, overrides --grid-size.")
    parser.add_argument("--alpha", type=float, default=ALPHA, help="Embedding strength.")
    parser.add_argument(
        "--strategy",
        dest="strategies",
        action="append",
        choices=[s.value for s in EmbeddingStrategy],
        help="Embedding strategy; repeat to compare several. Default: additive.",
    )
    parser.add_argument("--provider", choices=sorted(PROVIDERS), default=DEFAULT_PROVIDER,
                        help="Source of the watermark field.")
    parser.add_argument("--seed", type=int, default=SEED, help="Seed of the random field provider.")
    parser.add_argument("--range", dest="value_range", type=float, nargs=2, metavar=("LOW", "HIGH"),
                        default=list(VALUE_RANGE), help="Range intensities are normalized to.")
    parser.add_argument("--remainder", choices=[p.value for p in RemainderPolicy], default=RemainderPolicy.DROP.value,
                        help="Handling of image borders narrower than a block.")
    parser.add_argument("--workers", type=int, default=1, help="Threads used for the per-block stage.")
    parser.add_argument("--out-dir", default=OUTPUT_DIR, help="Folder for the output images.")
    parser.add_argument("--watermark-out", default=WATERMARK_NAME, help="File name of the watermark field image.")
    parser.add_argument("--dct-out", default=DCT_NAME, help="File name of the block DCT image.")
    parser.add_argument("--reconstructed-out", default=RECONSTRUCTED_NAME,
                        help="File name of the watermarked image.")
    parser.add_argument("--benchmark", action="store_true",
                        help="Time every random field provider on a field of the size the run uses.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    strategies = args.strategies or [EmbeddingStrategy.ADDITIVE.value]
    return PipelineConfig(
        grid_size=args.grid_size,
        block_size=args.block_size,
        alpha=args.alpha,
        # keep order, drop repeats
        strategies=tuple(EmbeddingStrategy(s) for s in dict.fromkeys(strategies)),
        value_range=(args.value_range[0], args.value_range[1]),
        remainder_policy=RemainderPolicy(args.remainder),
        workers=args.workers,
        seed=args.seed,
        provider=args.provider,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    config = build_config(args)
    outputs = OutputPaths(
        watermark=os.path.join(args.out_dir, args.watermark_out),
        dct=os.path.join(args.out_dir, args.dct_out),
        reconstructed=os.path.join(args.out_dir, args.reconstructed_out),
    )

    try:
        if config.value_range[1] <= config.value_range[0]:
            raise WatermarkError(f"Invalid normalization range {config.value_range}")
        try:
            os.makedirs(args.out_dir, exist_ok=True)
        except OSError as e:
            raise WatermarkError(f"Could not create output folder {args.out_dir}: {e}") from e
        result = run(args.image, config, outputs, benchmark=args.benchmark)
    except WatermarkError as e:
        logger.error("%s", e)
        return 1

    if result.degenerate_blocks:
        logger.info("%d blocks had no unique non-DC maximum", result.degenerate_blocks)
    return 0


if __name__ == "__main__":
    sys.exit(main())
