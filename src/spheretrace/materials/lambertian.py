"""Lambertian (ideal diffuse) material.

A Lambertian surface scatters toward ``normal + random_in_unit_sphere()``,
which produces a cosine-like distribution around the normal without an
explicit PDF. The path throughput is scaled by the albedo and the ray is
never absorbed.

Example:
    >>> from spheretrace.materials.lambertian import Lambertian
    >>> matte_blue = Lambertian(albedo=(0.1, 0.2, 0.5))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.core.vector import random_in_unit_sphere

vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (R, G, B).
    """

    albedo: tuple[float, float, float]


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, rng: ti.u32):
    """Sample a scattered direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color.
        normal: The surface normal at the hit point (unit length).
        rng: The current RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        The attenuation always equals the albedo and did_scatter is always 1.
        The direction is not normalized.
    """
    offset, state = random_in_unit_sphere(rng)
    scattered_direction = normal + offset
    return scattered_direction, albedo, 1, state
