"""Image export utilities for rendered images.

The renderer already produces display-ready 8-bit pixels (gamma 2, clamped),
so export is a straight conversion to a Pillow image.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from spheretrace.output.export import save_png
    >>> result = renderer.render(scene, camera)
    >>> save_png(result.pixels, "output.png")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def pixels_to_image(pixels: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap an 8-bit pixel buffer in a Pillow image.

    Args:
        pixels: Array of shape (H, W, 3), row 0 at the top.

    Returns:
        An RGB Pillow image.

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 buffer.
    """
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixel array of shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
    return PILImage.fromarray(np.ascontiguousarray(pixels))


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> None:
    """Save an 8-bit pixel buffer as a PNG file.

    Args:
        pixels: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array has the wrong shape or dtype.
        OSError: If the file cannot be written.
    """
    pixels_to_image(pixels).save(filepath, format="PNG")
    logger.info("Wrote %dx%d image to %s", pixels.shape[1], pixels.shape[0], filepath)
