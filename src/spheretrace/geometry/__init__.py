"""Geometry module for the sphere primitive.

Components:
    sphere: Sphere record with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) called from kernels.
"""

from .sphere import HitRecord, SphereGeometry, hit_sphere

__all__ = [
    "SphereGeometry",
    "HitRecord",
    "hit_sphere",
]
