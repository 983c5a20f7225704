"""Exceptions and warnings raised by the watermarking pipeline."""


class WatermarkError(Exception):
    """Base class for every fatal error of the pipeline."""


class DecodeError(WatermarkError, OSError):
    """The input image is missing or cannot be decoded."""


class DimensionMismatch(WatermarkError, ValueError):
    """An image or block does not have the shape an operation requires."""


class DegenerateBlock(UserWarning):
    """A block has no unique non-DC maximum; the row-major tie-break applied."""
