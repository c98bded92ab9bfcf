"""Output module for writing rendered images.

Components:
    export: PNG export of 8-bit pixel buffers via Pillow
"""

from .export import pixels_to_image, save_png

__all__ = [
    "pixels_to_image",
    "save_png",
]
