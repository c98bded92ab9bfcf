"""Scene module.

Components:
    graph: Sphere and SceneList scene graph
    intersection: Taichi sphere storage and closest-hit queries
    config: Building scenes and cameras from dictionaries
    presets: Ready-made scenes

Only the scene graph is imported here. The other modules allocate Taichi
fields (directly or through the palette and camera) and must be imported
after ``ti.init``.
"""

from .graph import Scene, SceneList, Sphere, count_spheres, iter_spheres

__all__ = [
    "Scene",
    "Sphere",
    "SceneList",
    "iter_spheres",
    "count_spheres",
]
