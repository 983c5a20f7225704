"""
Block tiling of square images.

An image is cut into a grid of non-overlapping ``block_size x block_size``
blocks. The blocks of one tiling are stored in a :class:`BlockGrid`, an
arena indexed by grid coordinate. Whenever the blocks are handled as a flat
sequence the order is row-major: block ``i`` sits at
``(i // grid_width, i % grid_width)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from errors import DimensionMismatch


class RemainderPolicy(Enum):
    """What to do with trailing rows/columns narrower than a block."""

    DROP = "drop"
    PAD = "pad"
    STRICT = "strict"


@dataclass
class BlockGrid:
    blocks: np.ndarray
    """Array of shape (rows, cols, block_size, block_size)"""

    image_shape: Tuple[int, int]
    """Shape of the image the blocks were cut from"""

    @property
    def shape(self) -> Tuple[int, int]:
        return self.blocks.shape[0], self.blocks.shape[1]

    @property
    def block_size(self) -> int:
        return self.blocks.shape[2]

    def __len__(self) -> int:
        rows, cols = self.shape
        return rows * cols

    def __getitem__(self, coord: Tuple[int, int]) -> np.ndarray:
        return self.blocks[coord]

    def __iter__(self) -> Iterator[Tuple[Tuple[int, int], np.ndarray]]:
        """Yield ``((row, col), block)`` pairs in row-major order."""
        rows, cols = self.shape
        for r in range(rows):
            for c in range(cols):
                yield (r, c), self.blocks[r, c]

    def coordinate(self, index: int) -> Tuple[int, int]:
        """Grid coordinate of the ``index``-th block in row-major order."""
        return divmod(index, self.shape[1])

    def sequence(self) -> list:
        """Blocks as a flat row-major list, the input of :func:`reassemble`."""
        return [block for _, block in self]

    def with_blocks(self, blocks: Sequence[np.ndarray]) -> "BlockGrid":
        """New grid of the same layout from a row-major sequence of blocks."""
        if len(blocks) != len(self):
            raise DimensionMismatch(f"Expected {len(self)} blocks, got {len(blocks)}")
        rows, cols = self.shape
        b = self.block_size
        stacked = np.stack(blocks).reshape(rows, cols, b, b)
        return BlockGrid(stacked.astype(self.blocks.dtype, copy=False), self.image_shape)

    def assemble(self) -> np.ndarray:
        """Put the blocks back into an image of the original shape."""
        return reassemble(self.sequence(), self.shape[1], self.image_shape)


def tile(image: np.ndarray, block_size: int, policy: RemainderPolicy = RemainderPolicy.DROP) -> BlockGrid:
    """Split a square image into a :class:`BlockGrid`.

    Parameters
    ----------
    image : np.ndarray
        2-D square array.
    block_size : int
        Side of the square blocks.
    policy : RemainderPolicy
        ``DROP`` ignores a trailing region smaller than a block, ``PAD``
        zero-pads the image up to the next multiple of ``block_size`` and
        ``STRICT`` refuses sides that are not a multiple of it.

    Returns
    -------
    BlockGrid
        Copies of the blocks; changing them never touches ``image``.
    """
    if image.ndim != 2 or image.shape[0] != image.shape[1]:
        raise DimensionMismatch(f"Image width and height do not match: {image.shape}")
    side = image.shape[0]
    if block_size <= 0 or block_size > side:
        raise DimensionMismatch(f"Block size {block_size} does not fit an image of side {side}")

    remainder = side % block_size
    if remainder:
        if policy == RemainderPolicy.STRICT:
            raise DimensionMismatch(f"Image side {side} is not a multiple of block size {block_size}")
        if policy == RemainderPolicy.PAD:
            padded_side = side + block_size - remainder
            padded = np.zeros((padded_side, padded_side), dtype=image.dtype)
            padded[:side, :side] = image
            image = padded
            side = padded_side

    n = side // block_size
    used = n * block_size
    # (n, b, n, b) -> (n, n, b, b): axis 0/1 are the grid row/column
    blocks = image[:used, :used].reshape(n, block_size, n, block_size).swapaxes(1, 2).copy()
    return BlockGrid(blocks, (side, side))


def reassemble(
    blocks: Sequence[np.ndarray], grid_width: int, shape: Optional[Tuple[int, int]] = None
) -> np.ndarray:
    """Place a row-major sequence of blocks into a zero-initialized image.

    Block ``i`` goes to grid row ``i // grid_width`` and column
    ``i % grid_width``. The sequence has to be in the order :func:`tile`
    produced it; a shuffled sequence silently yields a scrambled image.

    Args:
        blocks: Equally sized square blocks.
        grid_width: Number of blocks per grid row.
        shape: Size of the target image. Defaults to the smallest image
            holding the whole grid; regions not covered by a block stay 0.

    Returns:
        The reassembled image, with the dtype of the blocks.
    """
    if grid_width <= 0:
        raise DimensionMismatch(f"Invalid grid width {grid_width}")
    if len(blocks) == 0:
        return np.zeros(shape if shape is not None else (0, 0), dtype=np.float32)

    b = blocks[0].shape[0]
    grid_rows = -(-len(blocks) // grid_width)
    if shape is None:
        shape = (grid_rows * b, grid_width * b)
    if grid_rows * b > shape[0] or grid_width * b > shape[1]:
        raise DimensionMismatch(f"A {grid_rows}x{grid_width} grid of {b}px blocks does not fit {shape}")

    image = np.zeros(shape, dtype=blocks[0].dtype)
    for i, block in enumerate(blocks):
        if block.shape != (b, b):
            raise DimensionMismatch(f"Block {i} has shape {block.shape}, expected {(b, b)}")
        row, col = divmod(i, grid_width)
        image[row * b:(row + 1) * b, col * b:(col + 1) * b] = block
    return image
