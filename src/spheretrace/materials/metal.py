"""Metal (specular reflective) material.

The incoming direction is mirrored about the surface normal:

    R = I - 2(I . N)N

then perturbed by ``fuzz * random_in_unit_sphere()``. Fuzz 0 is a perfect
mirror; fuzz is capped at 1. If the perturbed direction ends up pointing into
the surface (``dot(R, N) <= 0``) the ray is absorbed.

Example:
    >>> from spheretrace.materials.metal import Metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
    >>> Metal(albedo=(0.8, 0.8, 0.8), fuzz=3.0).fuzz
    1.0
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.core.vector import normalize, random_in_unit_sphere, reflect

vec3 = tm.vec3


@dataclass(frozen=True)
class Metal:
    """Metal material properties.

    Attributes:
        albedo: The reflective tint (R, G, B).
        fuzz: Roughness of the reflection. Values above 1.0 are clamped to 1.0.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        if self.fuzz > 1.0:
            object.__setattr__(self, "fuzz", 1.0)


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, incident_direction: vec3, normal: vec3, rng: ti.u32):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective tint.
        fuzz: Roughness in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length).
        rng: The current RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        did_scatter is 0 when the fuzzed reflection points into the surface.
    """
    reflected = reflect(normalize(incident_direction), normal)
    offset, state = random_in_unit_sphere(rng)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter, state
