"""Path tracing integrator for Monte Carlo light transport.

``trace_ray`` follows one light path through the scene as a bounded loop:

    1. Intersect the ray with the scene in (T_MIN, T_MAX).
    2. On a miss, add ``throughput * background(direction)`` and stop.
    3. On a hit once ``max_depth`` bounces have been taken, stop. The path
       contributes nothing more, not even that surface's emission.
    4. Otherwise add ``throughput * emission`` and scatter. Absorption, or
       a scattered direction that is numerically zero, ends the path.
    5. Otherwise multiply the throughput by the attenuation and continue
       from the hit point.

A path therefore makes at most ``max_depth + 1`` intersection tests, even
inside a closed mirror box. The scattered ray starts exactly at the hit
point; T_MIN keeps it from re-hitting the surface it just left.

The background seen by escaping rays is either a solid color (black by
default) or the classic white-to-blue sky gradient.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.integrator import Background, setup_background
    >>> setup_background(Background.sky())
    >>> # Inside a Taichi kernel:
    >>> # color, tests, state = trace_ray(ray, 50, state)
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Ray, make_ray
from spheretrace.core.sampler import seed_stream
from spheretrace.core.vector import near_zero, normalize
from spheretrace.materials.palette import emit_material, scatter_material
from spheretrace.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection
T_MIN = 1e-3
T_MAX = 1e10

# =============================================================================
# Background
# =============================================================================


class BackgroundMode(IntEnum):
    """How escaped rays are colored."""

    SOLID = 0
    SKY_GRADIENT = 1


@dataclass(frozen=True)
class Background:
    """Radiance returned by rays that leave the scene.

    Attributes:
        mode: SOLID returns ``color`` for every direction. SKY_GRADIENT blends
            from white at the horizon to light blue overhead, based on the
            ray direction's y component; ``color`` is ignored.
        color: The solid background color.
    """

    mode: BackgroundMode = BackgroundMode.SOLID
    color: tuple[float, float, float] = (0.0, 0.0, 0.0)

    @classmethod
    def solid(cls, color: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> "Background":
        return cls(mode=BackgroundMode.SOLID, color=color)

    @classmethod
    def sky(cls) -> "Background":
        return cls(mode=BackgroundMode.SKY_GRADIENT)


_background_mode = ti.field(dtype=ti.i32, shape=())
_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_background(background: Background) -> None:
    """Write the background configuration to the Taichi fields."""
    _background_mode[None] = int(background.mode)
    _background_color[None] = vec3(background.color[0], background.color[1], background.color[2])
    logger.debug("Background: %s", background)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Return the radiance arriving along a ray that hit nothing."""
    color = _background_color[None]
    if _background_mode[None] == int(BackgroundMode.SKY_GRADIENT):
        t = 0.5 * (normalize(direction).y + 1.0)
        color = (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)
    return color


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(ray: Ray, max_depth: ti.i32, rng: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The camera (or any) ray to follow.
        max_depth: Maximum number of scattering events.
        rng: The current RNG state.

    Returns:
        A tuple of (color, intersection_tests, state).
    """
    origin = ray.origin
    direction = ray.direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    state = rng
    tests = 0

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for bounce in range(max_depth + 1):
        if active == 1:
            hit_record = intersect_scene(make_ray(origin, direction), T_MIN, T_MAX)
            tests += 1

            if hit_record.hit == 0:
                radiance += throughput * background_color(direction)
                active = 0
            elif bounce >= max_depth:
                # Depth exhausted: treat the rest of the path as absorbed
                active = 0
            else:
                material_id = hit_record.material_id
                radiance += throughput * emit_material(material_id)

                scattered_direction, attenuation, did_scatter, st = scatter_material(
                    material_id, direction, hit_record.normal, state
                )
                state = st

                if did_scatter == 0 or near_zero(scattered_direction) == 1:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = hit_record.point
                    direction = scattered_direction

    return radiance, tests, state


# =============================================================================
# Single Path Diagnostics
# =============================================================================

_single_path_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_single_path_tests = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_single_path_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    state = seed_stream(seed, ti.u32(0))
    ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
    color, tests, _ = trace_ray(ray, max_depth, state)
    _single_path_color[None] = color
    _single_path_tests[None] = tests


def trace_single_path(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
) -> tuple[tuple[float, float, float], int]:
    """Trace one path from Python against the uploaded scene.

    Used for testing and debugging. The scene, palette and background must
    already be set up.

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be unit length).
        max_depth: Maximum number of scattering events.
        seed: RNG seed for the path.

    Returns:
        Tuple of ((R, G, B), intersection_tests).
    """
    _trace_single_path_kernel(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        max_depth,
        seed & 0xFFFFFFFF,
    )
    color = _single_path_color[None]
    return (float(color[0]), float(color[1]), float(color[2])), int(_single_path_tests[None])
