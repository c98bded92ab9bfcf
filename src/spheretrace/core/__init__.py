"""Core rendering module.

Components:
    vector: Vector helpers and random point sampling
    ray: Ray data structure
    sampler: Explicit per-stream random number generation
    integrator: Iterative path tracing and background radiance
    renderer: Parallel per-pixel rendering driver

All compute-intensive operations use Taichi kernels.
"""

from .ray import Ray, make_ray, ray_at, vec3
from .sampler import next_uniform, seed_stream, wang_hash, xorshift32
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    reflect,
    refract,
    schlick,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from spheretrace.core.integrator or spheretrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick",
    "near_zero",
    "random_in_unit_sphere",
    "random_in_unit_disk",
    "wang_hash",
    "xorshift32",
    "seed_stream",
    "next_uniform",
]
