"""Build scenes and cameras from plain dictionaries.

The dictionary layout mirrors the scene graph and is easy to keep in JSON
or YAML files:

    {
        "materials": {
            "ground": {"type": "lambertian", "albedo": [0.8, 0.8, 0.0]},
            "gold": {"type": "metal", "albedo": [0.8, 0.6, 0.2], "fuzz": 0.0},
            "glass": {"type": "dielectric", "refractive_index": 1.5},
            "lamp": {"type": "diffuse_light", "emittance": [4.0, 4.0, 4.0]},
            "glowing_gold": {"type": "combined", "scatterer": "gold", "emitter": "lamp"}
        },
        "objects": [
            {"type": "sphere", "center": [0, -100.5, -1], "radius": 100, "material": "ground"},
            {"type": "list", "children": [
                {"type": "sphere", "center": [-1, 0, -1], "radius": 0.5, "material": "glass"},
                {"type": "sphere", "center": [-1, 0, -1], "radius": -0.4, "material": "glass"}
            ]}
        ]
    }

Materials are declared once by name and shared by every object that names
them.

Example:
    >>> from spheretrace.scene.config import camera_from_dict, scene_from_dict
    >>> scene = scene_from_dict(data)
    >>> camera = camera_from_dict(data["camera"], aspect_ratio=1.5)
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from spheretrace.camera.thin_lens import ThinLensCamera
from spheretrace.materials import Combined, Dielectric, DiffuseLight, Lambertian, Material, Metal
from spheretrace.scene.graph import Scene, SceneList, Sphere

logger = logging.getLogger(__name__)


def _vec3(value: Any, key: str) -> tuple[float, float, float]:
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 3:
        raise ValueError(f"'{key}' must be a sequence of 3 numbers, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


def _require(spec: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in spec:
        raise ValueError(f"{context} is missing required key '{key}'")
    return spec[key]


def material_from_dict(
    name: str,
    definitions: Mapping[str, Mapping[str, Any]],
    resolved: dict[str, Material] | None = None,
    _resolving: tuple[str, ...] = (),
) -> Material:
    """Build the named material, resolving references of Combined materials.

    Args:
        name: The material to build.
        definitions: All material definitions, keyed by name.
        resolved: Cache of already built materials, shared between calls so
            that every reference to a name yields the same object.

    Returns:
        The material.

    Raises:
        ValueError: On unknown names, unknown types, missing keys or
            circular Combined references.
    """
    if resolved is None:
        resolved = {}
    if name in resolved:
        return resolved[name]
    if name in _resolving:
        cycle = " -> ".join((*_resolving, name))
        raise ValueError(f"Circular material reference: {cycle}")
    if name not in definitions:
        raise ValueError(f"Unknown material '{name}'")

    spec = definitions[name]
    context = f"Material '{name}'"
    kind = _require(spec, "type", context)

    material: Material
    if kind == "lambertian":
        material = Lambertian(albedo=_vec3(_require(spec, "albedo", context), "albedo"))
    elif kind == "metal":
        material = Metal(
            albedo=_vec3(_require(spec, "albedo", context), "albedo"),
            fuzz=float(spec.get("fuzz", 0.0)),
        )
    elif kind == "dielectric":
        material = Dielectric(refractive_index=float(_require(spec, "refractive_index", context)))
    elif kind == "diffuse_light":
        material = DiffuseLight(emittance=_vec3(_require(spec, "emittance", context), "emittance"))
    elif kind == "combined":
        chain = (*_resolving, name)
        material = Combined(
            scatterer=material_from_dict(
                _require(spec, "scatterer", context), definitions, resolved, chain
            ),
            emitter=material_from_dict(
                _require(spec, "emitter", context), definitions, resolved, chain
            ),
        )
    else:
        raise ValueError(f"{context} has unknown type '{kind}'")

    resolved[name] = material
    return material


def _object_from_dict(
    spec: Mapping[str, Any],
    definitions: Mapping[str, Mapping[str, Any]],
    resolved: dict[str, Material],
) -> Scene:
    kind = _require(spec, "type", "Scene object")
    if kind == "sphere":
        return Sphere(
            center=_vec3(_require(spec, "center", "Sphere"), "center"),
            radius=float(_require(spec, "radius", "Sphere")),
            material=material_from_dict(_require(spec, "material", "Sphere"), definitions, resolved),
        )
    if kind == "list":
        return SceneList(
            [
                _object_from_dict(child, definitions, resolved)
                for child in _require(spec, "children", "List")
            ]
        )
    raise ValueError(f"Unknown scene object type '{kind}'")


def scene_from_dict(data: Mapping[str, Any]) -> SceneList:
    """Build a scene graph from a dictionary.

    Args:
        data: Mapping with "materials" (name -> definition) and "objects"
            (list of sphere or list definitions).

    Returns:
        A SceneList holding the top-level objects in order.

    Raises:
        ValueError: If the description is malformed.
    """
    definitions = data.get("materials", {})
    resolved: dict[str, Material] = {}
    scene = SceneList(
        [_object_from_dict(obj, definitions, resolved) for obj in data.get("objects", [])]
    )
    logger.debug(
        "Loaded scene with %d top-level objects and %d materials", len(scene), len(resolved)
    )
    return scene


def camera_from_dict(data: Mapping[str, Any], aspect_ratio: float) -> ThinLensCamera:
    """Build a camera from a dictionary.

    Keys: lookfrom, lookat (required); vup (default (0, 1, 0)); vfov
    (default 90); aperture (default 0); focus_dist (default: the distance
    from lookfrom to lookat).

    Raises:
        ValueError: If the description is malformed.
    """
    lookfrom = _vec3(_require(data, "lookfrom", "Camera"), "lookfrom")
    lookat = _vec3(_require(data, "lookat", "Camera"), "lookat")
    focus_dist = data.get("focus_dist")
    if focus_dist is None:
        focus_dist = sum((a - b) ** 2 for a, b in zip(lookfrom, lookat)) ** 0.5

    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=_vec3(data.get("vup", (0.0, 1.0, 0.0)), "vup"),
        vfov=float(data.get("vfov", 90.0)),
        aspect_ratio=aspect_ratio,
        aperture=float(data.get("aperture", 0.0)),
        focus_dist=float(focus_dist),
    )
    camera.validate()
    return camera
