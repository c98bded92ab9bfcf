"""Tests for PNG export."""

import numpy as np
import pytest
from PIL import Image


def test_save_png_round_trip(tmp_path):
    """Test that saved pixels read back unchanged with row 0 at the top."""
    from spheretrace.output.export import save_png

    pixels = np.zeros((4, 6, 3), dtype=np.uint8)
    pixels[0, :, 0] = 255  # red top row
    pixels[3, :, 2] = 200  # blue bottom row
    path = tmp_path / "out.png"

    save_png(pixels, path)

    with Image.open(path) as image:
        assert image.format == "PNG"
        assert image.mode == "RGB"
        assert image.size == (6, 4)
        np.testing.assert_array_equal(np.asarray(image), pixels)


def test_pixels_to_image_accepts_strided_views():
    """Test that non-contiguous slices convert."""
    from spheretrace.output.export import pixels_to_image

    pixels = np.arange(8 * 8 * 3, dtype=np.uint8).reshape(8, 8, 3)[::2, ::2]
    image = pixels_to_image(pixels)
    assert image.size == (4, 4)
    np.testing.assert_array_equal(np.asarray(image), pixels)


@pytest.mark.parametrize(
    "pixels, message",
    [
        (np.zeros((4, 4, 3), dtype=np.float32), "uint8"),
        (np.zeros((4, 4), dtype=np.uint8), "shape"),
        (np.zeros((4, 4, 4), dtype=np.uint8), "shape"),
    ],
)
def test_bad_buffers_raise(pixels, message):
    """Test that wrong shapes or dtypes are rejected."""
    from spheretrace.output.export import pixels_to_image

    with pytest.raises(ValueError, match=message):
        pixels_to_image(pixels)
