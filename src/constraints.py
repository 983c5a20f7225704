GRID_SIZE = 8
"""Number of blocks along each axis of the image. The watermark field has GRID_SIZE x GRID_SIZE values"""

ALPHA = 0.5
"""Embedding strength used when adding the watermark value to the selected coefficient"""

VALUE_RANGE = (0.0, 1.0)
"""Floating point range the 8-bit intensities are normalized to before the DCT"""

PIXEL_MAX = 255.0
"""Largest value of an 8-bit intensity sample"""

SEED = 0
"""Default seed for the random field providers"""

DEFAULT_PROVIDER = "opencv"
"""Provider used to generate the watermark field when none is requested"""

OUTPUT_DIR = "."
"""Folder where the output artifacts are written"""

WATERMARK_NAME = "watermark.png"
"""File name of the watermark field rendered as an 8-bit image"""

DCT_NAME = "dcts.png"
"""File name of the block-wise DCT of the image rendered as an 8-bit image"""

RECONSTRUCTED_NAME = "reassembled.png"
"""File name of the watermarked image after inverse DCT and reassembly"""
