"""Camera module for view and ray generation.

Components:
    thin_lens: Thin-lens camera with optional depth of field

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: top to bottom across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_ray,
    sample_lens,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "sample_lens",
    "get_ray",
    "get_camera_info",
]
