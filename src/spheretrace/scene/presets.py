"""Ready-made scenes.

The default scene is four spheres resting on a large ground sphere:

- Center: matte blue diffuse
- Right: polished gold metal
- Left: hollow glass bubble (a glass sphere with a smaller, negative-radius
  glass sphere inside it)
- Ground: matte yellow diffuse

The camera looks down at the group from above and to the right with a
narrow 20 degree field of view, focused on the center sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.scene.presets import create_default_scene
    >>> scene, camera = create_default_scene(aspect_ratio=900 / 600)
"""

import math

from spheretrace.camera.thin_lens import ThinLensCamera
from spheretrace.materials import Dielectric, Lambertian, Metal
from spheretrace.scene.graph import SceneList, Sphere

DEFAULT_IMAGE_WIDTH = 900
DEFAULT_IMAGE_HEIGHT = 600
DEFAULT_SAMPLES_PER_PIXEL = 100


def create_default_scene(
    aspect_ratio: float = DEFAULT_IMAGE_WIDTH / DEFAULT_IMAGE_HEIGHT,
) -> tuple[SceneList, ThinLensCamera]:
    """Create the default sphere scene and its camera.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (scene, camera).
    """
    blue = Lambertian(albedo=(0.1, 0.2, 0.5))
    yellow = Lambertian(albedo=(0.8, 0.8, 0.0))
    gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
    glass = Dielectric(refractive_index=1.5)

    world = SceneList(
        [
            Sphere(center=(0.0, 0.0, -1.0), radius=0.5, material=blue),
            Sphere(center=(0.0, -100.5, -1.0), radius=100.0, material=yellow),
            Sphere(center=(1.0, 0.0, -1.0), radius=0.5, material=gold),
            Sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material=glass),
            Sphere(center=(-1.0, 0.0, -1.0), radius=-0.4, material=glass),
        ]
    )

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=math.dist(lookfrom, lookat),
    )

    return world, camera
