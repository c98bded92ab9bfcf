"""Vector utilities and uniform sampling for the path tracer.

Vectors are ``taichi.math.vec3`` values, which already provide component-wise
addition, subtraction, multiplication and division as well as scalar
scaling. This module adds the geometric helpers the renderer needs and the
random point samplers used by materials and the thin-lens camera.

Both samplers use rejection sampling: candidates are drawn uniformly from the
enclosing cube (or square) until one falls inside the unit ball (or disk).
The expected number of draws is about 2.03 for the sphere and 1.27 for the
disk. The loop is bounded so kernels always terminate; the chance of hitting
the bound is negligible.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.vector import random_in_unit_sphere, reflect
    >>> # Inside a Taichi kernel:
    >>> # offset, state = random_in_unit_sphere(state)
    >>> # mirrored = reflect(direction, normal)
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.sampler import next_uniform

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Upper bound on rejection sampling attempts
MAX_REJECTION_ATTEMPTS = 100


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input yields NaN components; callers must not pass
    degenerate vectors.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a normal.

    Computes ``d - 2 * dot(d, n) * n``. The normal should be unit length.

    Args:
        incident: The incoming direction.
        normal: The surface normal.

    Returns:
        The reflected direction.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_direction: vec3, normal: vec3, ni_over_nt: ti.f32):
    """Refract a unit direction through a surface using Snell's law.

    Args:
        unit_direction: The incoming direction (unit length).
        normal: The normal on the side the ray arrives from (unit length).
        ni_over_nt: Ratio of the incident to the transmitted refractive index.

    Returns:
        A tuple of (refracted_direction, ok). ``ok`` is 0 and the direction is
        the zero vector when the discriminant is not positive (total internal
        reflection).
    """
    dt = tm.dot(unit_direction, normal)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    refracted = vec3(0.0, 0.0, 0.0)
    ok = 0
    if discriminant > 0.0:
        refracted = ni_over_nt * (unit_direction - normal * dt) - normal * ti.sqrt(discriminant)
        ok = 1
    return refracted, ok


@ti.func
def schlick(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Approximate Fresnel reflectance with Schlick's formula.

    Args:
        cosine: Cosine of the angle between the ray and the normal.
        refractive_index: Refractive index of the material.

    Returns:
        ``r0 + (1 - r0) * (1 - cosine)^5`` with ``r0 = ((1 - n) / (1 + n))^2``.
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_in_unit_sphere(rng: ti.u32):
    """Draw a uniformly distributed point inside the unit sphere.

    Args:
        rng: The current RNG state.

    Returns:
        A tuple of (point, new_state) with ``length_squared(point) < 1``.
    """
    state = rng
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, state = next_uniform(state)
            y, state = next_uniform(state)
            z, state = next_uniform(state)
            p = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 2.0 * z - 1.0)
            if length_squared(p) < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p, state


@ti.func
def random_in_unit_disk(rng: ti.u32):
    """Draw a uniformly distributed point inside the unit disk (z = 0).

    Used for thin-lens aperture sampling.

    Args:
        rng: The current RNG state.

    Returns:
        A tuple of (point, new_state) with ``x^2 + y^2 < 1`` and ``z == 0``.
    """
    state = rng
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, state = next_uniform(state)
            y, state = next_uniform(state)
            p = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p, state
