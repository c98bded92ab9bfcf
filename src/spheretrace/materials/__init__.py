"""Materials module.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    diffuse_light: Constant emitter that never scatters
    combined: Scattering from one material, emission from another
    palette: Taichi-side material storage and kernel dispatch

The palette is not imported here: it allocates Taichi fields and must be
imported after ``ti.init``.
"""

from .combined import Combined, emission_source, scattering_source
from .dielectric import Dielectric, reflect_probability, scatter_dielectric
from .diffuse_light import DiffuseLight, emit_diffuse_light
from .lambertian import Lambertian, scatter_lambertian
from .metal import Metal, scatter_metal
from .types import Material

__all__ = [
    "Material",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "reflect_probability",
    # Diffuse light
    "DiffuseLight",
    "emit_diffuse_light",
    # Combined
    "Combined",
    "scattering_source",
    "emission_source",
]
