"""Scene-level ray intersection testing.

The scene graph is flattened into Taichi fields (Structure of Arrays) and
each sphere carries the palette handle of its material. ``intersect_scene``
scans the spheres in upload order, narrowing ``t_max`` to the closest hit
found so far. Since ``upload_scene`` flattens nested lists depth-first, this
returns exactly the hit the nested list would report, including which
object wins a tie.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.materials.palette import MaterialPalette
    >>> from spheretrace.scene.intersection import upload_scene
    >>> palette = MaterialPalette()
    >>> upload_scene(world, palette)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Ray
from spheretrace.geometry.sphere import SphereGeometry, hit_sphere
from spheretrace.materials.palette import MaterialPalette
from spheretrace.scene.graph import Scene, iter_spheres

logger = logging.getLogger(__name__)

vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if any sphere was hit, 0 on a miss.
        t: The ray parameter of the closest hit. Only valid if hit == 1.
        point: The hit point. Only valid if hit == 1.
        normal: The sphere normal at the hit point. Only valid if hit == 1.
        material_id: Palette handle of the hit sphere's material, or -1 on
            a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten as new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene storage.

    Args:
        center: The center point, as a vec3 or (x, y, z) sequence.
        radius: The signed radius.
        material_id: The palette handle of the sphere's material.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def upload_scene(scene: Scene, palette: MaterialPalette) -> int:
    """Replace the scene storage with a flattened scene graph.

    Materials are added to the palette as they are encountered, so shared
    materials map to a single handle.

    Args:
        scene: A Sphere or SceneList.
        palette: The palette that owns the material handles.

    Returns:
        The number of spheres uploaded.
    """
    clear_scene()
    for sphere in iter_spheres(scene):
        add_sphere(sphere.center, sphere.radius, palette.add(sphere.material))
    count = get_sphere_count()
    logger.debug("Uploaded %d spheres, %d materials", count, len(palette))
    return count


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> SceneHitRecord:
    """Find the closest sphere hit by a ray.

    Args:
        ray: The ray to trace.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    closest_t = t_max
    result = SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )

    for i in range(num_spheres[None]):
        sphere = SphereGeometry(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                material_id=sphere_material_ids[i],
            )

    return result
