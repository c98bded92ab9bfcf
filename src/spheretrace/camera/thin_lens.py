"""Thin-lens camera model for perspective projection with depth of field.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The virtual image plane sits at ``focus_dist`` in front of the camera, so
objects at that distance stay sharp. Each ray starts at a random point on a
lens disk of radius ``aperture / 2`` and passes through the same point on
the image plane. With ``aperture = 0`` every ray starts at ``lookfrom`` and
the camera is a pinhole.

Image coordinates run left to right (s) and top to bottom (t), matching the
row order of the output pixel buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.camera.thin_lens import ThinLensCamera, setup_camera
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=1.5,
    ...     aperture=0.1,
    ...     focus_dist=5.2,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     lens_sample, state = sample_lens(state)
    ...     ray = get_ray(0.5, 0.5, lens_sample)  # Ray through image center
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Ray, make_ray, vec3
from spheretrace.core.vector import random_in_unit_disk

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_dist: Distance from the camera to the plane in focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    def validate(self) -> None:
        """Check the camera parameters.

        Raises:
            ValueError: If the configuration cannot produce a valid basis.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        view = np.subtract(self.lookfrom, self.lookat)
        if not np.any(view):
            raise ValueError("lookfrom and lookat must differ")
        if not np.any(np.cross(self.vup, view)):
            raise ValueError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Image plane at focus_dist
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width, rightward
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height, upward
_top_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Must be called from Python before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera configuration is invalid.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    half_height = math.tan(theta / 2.0)
    half_width = camera.aspect_ratio * half_height
    focus_dist = camera.focus_dist

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = 2.0 * half_width * focus_dist * u
    vertical = 2.0 * half_height * focus_dist * v
    top_left = (
        lookfrom - half_width * focus_dist * u + half_height * focus_dist * v - focus_dist * w
    )

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _top_left_corner[None] = top_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0

    logger.debug(
        "Camera at %s looking at %s, vfov=%.1f, aperture=%.3f, focus_dist=%.3f",
        camera.lookfrom,
        camera.lookat,
        camera.vfov,
        camera.aperture,
        focus_dist,
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def sample_lens(rng: ti.u32):
    """Draw a point on the unit lens disk.

    Returns:
        A tuple (lens_sample, state) where lens_sample has z == 0.
    """
    return random_in_unit_disk(rng)


@ti.func
def get_ray(s: ti.f32, t: ti.f32, lens_sample: vec3) -> Ray:
    """Generate a ray through image coordinates (s, t).

    Args:
        s: Horizontal coordinate in [0, 1], 0 at the left edge.
        t: Vertical coordinate in [0, 1], 0 at the top edge.
        lens_sample: A point in the unit disk, from ``sample_lens``.

    Returns:
        A Ray from a point on the lens toward the image plane. The direction
        is not normalized.
    """
    rd = _lens_radius[None] * lens_sample
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None] + offset
    target = _top_left_corner[None] + s * _viewport_horizontal[None] - t * _viewport_vertical[None]
    return make_ray(origin, target - origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, top_left and
        lens_radius.
    """

    def as_tuple(value) -> tuple[float, float, float]:
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": as_tuple(_camera_origin[None]),
        "u": as_tuple(_camera_u[None]),
        "v": as_tuple(_camera_v[None]),
        "w": as_tuple(_camera_w[None]),
        "horizontal": as_tuple(_viewport_horizontal[None]),
        "vertical": as_tuple(_viewport_vertical[None]),
        "top_left": as_tuple(_top_left_corner[None]),
        "lens_radius": float(_lens_radius[None]),
    }
