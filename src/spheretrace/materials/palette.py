"""Material palette: index-based handles into GPU-resident material storage.

Scene objects refer to materials by Python reference, and many objects may
share one material. The palette assigns each distinct material a single
integer ``material_id`` and writes its parameters into Taichi fields so that
kernels can dispatch on it.

Storage is a Structure-of-Arrays indexed by material_id:
    - ``material_kinds``: the MaterialKind tag
    - ``material_colors``: albedo (Lambertian, Metal) or emittance (DiffuseLight)
    - ``material_fuzz``: Metal roughness
    - ``material_refractive_indices``: Dielectric index of refraction
    - ``material_scatter_refs`` / ``material_emit_refs``: the concrete material
      that handles scattering / emission for this id. A concrete material
      refers to itself; a Combined material refers to its resolved parts.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.materials import Lambertian, Metal
    >>> from spheretrace.materials.palette import MaterialPalette
    >>> palette = MaterialPalette()
    >>> matte = palette.add(Lambertian(albedo=(0.5, 0.5, 0.5)))
    >>> mirror = palette.add(Metal(albedo=(0.9, 0.9, 0.9)))
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from spheretrace.materials.combined import Combined, emission_source, scattering_source
from spheretrace.materials.dielectric import Dielectric, scatter_dielectric
from spheretrace.materials.diffuse_light import DiffuseLight, emit_diffuse_light
from spheretrace.materials.lambertian import Lambertian, scatter_lambertian
from spheretrace.materials.metal import Metal, scatter_metal
from spheretrace.materials.types import Material

logger = logging.getLogger(__name__)

vec3 = tm.vec3


class MaterialKind(IntEnum):
    """Tag identifying which material variant occupies a palette slot."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    DIFFUSE_LIGHT = 3
    COMBINED = 4


# Maximum number of distinct materials in a render
MAX_MATERIALS = 1024

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_scatter_refs = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_emit_refs = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_palette() -> None:
    """Reset the material count to zero.

    Field data is not cleared; it is overwritten as materials are added.
    """
    num_materials[None] = 0


def get_material_count() -> int:
    """Get the number of materials currently stored in the palette fields."""
    return int(num_materials[None])


@dataclass
class PaletteEntry:
    """Python-side record of a palette slot.

    Attributes:
        material_id: The slot index.
        kind: The material variant.
        scatter_ref: Slot of the concrete material that scatters.
        emit_ref: Slot of the concrete material that emits.
        material: The material stored in this slot.
    """

    material_id: int
    kind: MaterialKind
    scatter_ref: int
    emit_ref: int
    material: Material


class MaterialPalette:
    """Assigns shared, index-based handles to materials.

    Materials are frozen dataclasses, so equal materials are stored once and
    every reference to them resolves to the same ``material_id``.

    Creating a palette clears the Taichi material storage; only one palette
    is live at a time.

    Attributes:
        entries: PaletteEntry records, indexed by material_id.
    """

    def __init__(self) -> None:
        self.entries: list[PaletteEntry] = []
        self._ids: dict[Material, int] = {}
        clear_palette()

    def clear(self) -> None:
        """Remove every material from the palette."""
        self.entries.clear()
        self._ids.clear()
        clear_palette()

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, material: object) -> bool:
        return material in self._ids

    def material_id(self, material: Material) -> int:
        """Look up the handle of a material that has already been added.

        Raises:
            KeyError: If the material is not in the palette.
        """
        return self._ids[material]

    def add(self, material: Material) -> int:
        """Add a material (and, for Combined, its parts) to the palette.

        Args:
            material: Any member of the closed material set.

        Returns:
            The material_id handle. Adding an equal material again returns
            the existing handle.

        Raises:
            TypeError: If the object is not a supported material.
            RuntimeError: If the maximum number of materials is exceeded.
        """
        existing = self._ids.get(material)
        if existing is not None:
            return existing

        if isinstance(material, Combined):
            scatter_ref = self.entries[self.add(scattering_source(material))].scatter_ref
            emit_ref = self.entries[self.add(emission_source(material))].emit_ref
            material_id = self._allocate()
            self._write(material_id, MaterialKind.COMBINED, (0.0, 0.0, 0.0), 0.0, 1.0)
        else:
            kind = _material_kind(material)
            material_id = self._allocate()
            scatter_ref = emit_ref = material_id
            self._write(material_id, kind, *_material_params(material))

        material_scatter_refs[material_id] = scatter_ref
        material_emit_refs[material_id] = emit_ref
        self.entries.append(
            PaletteEntry(
                material_id=material_id,
                kind=MaterialKind(int(material_kinds[material_id])),
                scatter_ref=scatter_ref,
                emit_ref=emit_ref,
                material=material,
            )
        )
        self._ids[material] = material_id
        logger.debug("Added material %d: %r", material_id, material)
        return material_id

    def _allocate(self) -> int:
        material_id = len(self.entries)
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
        return material_id

    @staticmethod
    def _write(
        material_id: int,
        kind: MaterialKind,
        color: tuple[float, float, float],
        fuzz: float,
        refractive_index: float,
    ) -> None:
        material_kinds[material_id] = int(kind)
        material_colors[material_id] = vec3(color[0], color[1], color[2])
        material_fuzz[material_id] = fuzz
        material_refractive_indices[material_id] = refractive_index
        num_materials[None] = material_id + 1


def _material_kind(material: Material) -> MaterialKind:
    if isinstance(material, Lambertian):
        return MaterialKind.LAMBERTIAN
    if isinstance(material, Metal):
        return MaterialKind.METAL
    if isinstance(material, Dielectric):
        return MaterialKind.DIELECTRIC
    if isinstance(material, DiffuseLight):
        return MaterialKind.DIFFUSE_LIGHT
    if isinstance(material, Combined):
        return MaterialKind.COMBINED
    raise TypeError(f"Unsupported material: {material!r}")


def _material_params(material: Material) -> tuple[tuple[float, float, float], float, float]:
    """Return (color, fuzz, refractive_index) for a concrete material."""
    if isinstance(material, Lambertian):
        return material.albedo, 0.0, 1.0
    if isinstance(material, Metal):
        return material.albedo, material.fuzz, 1.0
    if isinstance(material, Dielectric):
        return (1.0, 1.0, 1.0), 0.0, material.refractive_index
    if isinstance(material, DiffuseLight):
        return material.emittance, 0.0, 1.0
    raise TypeError(f"Unsupported material: {material!r}")


# =============================================================================
# Kernel-side Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Dispatch scattering to the material that handles it for this id.

    Args:
        material_id: The palette handle of the hit surface.
        incident_direction: The incoming ray direction.
        normal: The surface normal from the hit record.
        rng: The current RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        The scattered ray starts at the hit point. did_scatter is 0 when the
        path is absorbed.
    """
    leaf = material_scatter_refs[material_id]
    kind = material_kinds[leaf]

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    state = rng

    if kind == int(MaterialKind.LAMBERTIAN):
        d, att, ok, st = scatter_lambertian(material_colors[leaf], normal, state)
        scattered_direction = d
        attenuation = att
        did_scatter = ok
        state = st
    elif kind == int(MaterialKind.METAL):
        d, att, ok, st = scatter_metal(
            material_colors[leaf], material_fuzz[leaf], incident_direction, normal, state
        )
        scattered_direction = d
        attenuation = att
        did_scatter = ok
        state = st
    elif kind == int(MaterialKind.DIELECTRIC):
        d, att, ok, st = scatter_dielectric(
            material_refractive_indices[leaf], incident_direction, normal, state
        )
        scattered_direction = d
        attenuation = att
        did_scatter = ok
        state = st
    # DIFFUSE_LIGHT always absorbs

    return scattered_direction, attenuation, did_scatter, state


@ti.func
def emit_material(material_id: ti.i32) -> vec3:
    """Return the radiance emitted by the surface with this material.

    Zero for everything except diffuse lights and Combined materials whose
    emitter is a diffuse light.
    """
    leaf = material_emit_refs[material_id]
    emitted = vec3(0.0, 0.0, 0.0)
    if material_kinds[leaf] == int(MaterialKind.DIFFUSE_LIGHT):
        emitted = emit_diffuse_light(material_colors[leaf])
    return emitted
