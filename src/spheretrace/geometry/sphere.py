"""Sphere primitive and ray-sphere intersection.

The intersection solves ``|o + t*d - c|^2 = r^2`` using the half-b form of
the quadratic:

    a = dot(d, d)
    b = dot(oc, d)          (half of the traditional linear coefficient)
    c = dot(oc, oc) - r^2
    discriminant = b^2 - a*c

A discriminant of zero (a tangent ray) counts as a miss. The nearer root is
tried first, then the farther one, each against the open interval
``(t_min, t_max)``.

The surface normal is ``(point - center) / radius``. The radius is signed: a
negative radius keeps the same surface but flips the normal inward. Pairing a
positive and a negative sphere at the same center with a dielectric material
builds a hollow glass bubble. Zero-radius spheres are not guarded against;
their normals divide by zero.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.geometry.sphere import SphereGeometry, hit_sphere
    >>> # Inside a Taichi kernel:
    >>> # rec = hit_sphere(ray, SphereGeometry(center=vec3(0, 0, -1), radius=0.5),
    >>> #                  1e-3, 1e10)
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Ray, ray_at

vec3 = tm.vec3


@ti.dataclass
class SphereGeometry:
    """A sphere defined by center point and signed radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius. Negative values flip the normal inward.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 otherwise.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: ``(point - center) / radius``; unit length, sign set by the
            radius. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def hit_sphere(ray: Ray, sphere: SphereGeometry, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Hits at or below this parameter are rejected (avoids
            self-intersection at the ray origin).
        t_max: Hits at or beyond this parameter are rejected.

    Returns:
        A HitRecord; check the hit field to see whether it is valid.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    # Taichi requires outer-scope declaration
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-b - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)
        if not valid:
            t = (-b + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(ray, t)
            hit_normal = (hit_point - sphere.center) / sphere.radius

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)
