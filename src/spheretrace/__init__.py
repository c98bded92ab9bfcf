"""Taichi-based Monte Carlo path tracer for sphere scenes.

This package renders scenes of spheres into images by path tracing, with:
- Lambertian, metal, dielectric and diffuse light materials, plus
  combinations of a scattering and an emitting material
- A thin-lens camera with depth of field
- Parallel per-pixel rendering with explicit, reproducible random streams

Subpackages:
    core: Vectors, rays, random streams, the integrator and the renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material models and the material palette
    scene: Scene graph, scene storage, loaders and preset scenes
    camera: Thin-lens camera with ray generation
    output: Image export

Modules that allocate Taichi fields must be imported after ``ti.init``.
"""

__version__ = "0.1.0"
