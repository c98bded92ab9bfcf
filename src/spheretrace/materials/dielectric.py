"""Dielectric (glass/water) material.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when no refracted direction exists

Which side of the surface the ray is on comes from the sign of
``dot(direction, normal)``; no front-face flag is stored in the hit record.
Leaving the medium uses the flipped normal and ratio ``n``, entering uses the
stored normal and ratio ``1 / n``. When refraction is impossible the ray
always reflects; otherwise it reflects with the Schlick probability and
refracts the rest of the time. Dielectrics are non-absorptive, so the
attenuation is always white.

Example:
    >>> from spheretrace.materials.dielectric import Dielectric
    >>> glass = Dielectric(refractive_index=1.5)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.core.sampler import next_uniform
from spheretrace.core.vector import normalize, reflect, refract, schlick

vec3 = tm.vec3


@dataclass(frozen=True)
class Dielectric:
    """Dielectric material properties.

    Attributes:
        refractive_index: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refractive_index: float


@ti.func
def reflect_probability(refractive_index: ti.f32, incident_direction: vec3, normal: vec3) -> ti.f32:
    """Compute the probability that a dielectric reflects a ray.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal as stored in the hit record.

    Returns:
        1.0 under total internal reflection, otherwise the Schlick
        reflectance for the incidence angle.
    """
    unit_direction = normalize(incident_direction)
    d_dot_n = tm.dot(unit_direction, normal)

    outward_normal = normal
    ni_over_nt = 1.0 / refractive_index
    if d_dot_n > 0.0:
        # Leaving the medium
        outward_normal = -normal
        ni_over_nt = refractive_index

    _, can_refract = refract(unit_direction, outward_normal, ni_over_nt)

    probability = 1.0
    if can_refract == 1:
        cosine = -d_dot_n
        if d_dot_n > 0.0:
            cosine = ti.sqrt(1.0 - refractive_index * refractive_index * (1.0 - d_dot_n * d_dot_n))
        probability = schlick(cosine, refractive_index)
    return probability


@ti.func
def scatter_dielectric(refractive_index: ti.f32, incident_direction: vec3, normal: vec3, rng: ti.u32):
    """Reflect or refract a ray at a dielectric surface.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal as stored in the hit record.
        rng: The current RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        The attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    unit_direction = normalize(incident_direction)

    outward_normal = normal
    ni_over_nt = 1.0 / refractive_index
    if tm.dot(unit_direction, normal) > 0.0:
        outward_normal = -normal
        ni_over_nt = refractive_index

    refracted, _ = refract(unit_direction, outward_normal, ni_over_nt)
    probability = reflect_probability(refractive_index, incident_direction, normal)

    xi, state = next_uniform(rng)
    scattered_direction = refracted
    if xi < probability:
        scattered_direction = reflect(unit_direction, normal)

    return scattered_direction, attenuation, 1, state
