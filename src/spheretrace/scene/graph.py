"""Scene graph: spheres and (possibly nested) lists of scene objects.

A scene is either a single ``Sphere`` or a ``SceneList`` whose children are
themselves scenes. The closest hit of a list is the closest hit among its
children, with the search window narrowed as each child is tested, so when
two children report the same ``t`` the earlier one wins.

The graph is pure Python data. ``upload_scene`` in
``spheretrace.scene.intersection`` flattens it, depth-first and in order,
into Taichi fields for rendering.

Example:
    >>> from spheretrace.materials import Lambertian
    >>> from spheretrace.scene.graph import SceneList, Sphere
    >>> grey = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> world = SceneList([
    ...     Sphere(center=(0.0, 0.0, -1.0), radius=0.5, material=grey),
    ...     Sphere(center=(0.0, -100.5, -1.0), radius=100.0, material=grey),
    ... ])
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Union

from spheretrace.materials.types import Material


@dataclass(frozen=True)
class Sphere:
    """A sphere with a shared material.

    Attributes:
        center: The center point (x, y, z).
        radius: Signed radius. A negative radius flips the surface normal
            inward, which is how hollow glass shells are built.
        material: The material; may be shared with other objects.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass(frozen=True)
class SceneList:
    """An ordered collection of scene objects.

    Attributes:
        children: The child scenes, tested in order. Any sequence is
            accepted and stored as a tuple.
    """

    children: tuple[Scene, ...]

    def __init__(self, children: Sequence[Scene] = ()) -> None:
        object.__setattr__(self, "children", tuple(children))

    def __len__(self) -> int:
        return len(self.children)


Scene = Union[Sphere, SceneList]


def iter_spheres(scene: Scene) -> Iterator[Sphere]:
    """Yield every sphere in the scene, depth-first and in order.

    Raises:
        TypeError: If the graph contains something other than spheres and
            scene lists.
    """
    if isinstance(scene, Sphere):
        yield scene
    elif isinstance(scene, SceneList):
        for child in scene.children:
            yield from iter_spheres(child)
    else:
        raise TypeError(f"Unsupported scene object: {scene!r}")


def count_spheres(scene: Scene) -> int:
    """Count the spheres in a scene graph."""
    return sum(1 for _ in iter_spheres(scene))
