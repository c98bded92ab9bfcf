"""Combined material: one material's scattering plus another's emission.

``Combined`` lets an object reflect light like one material while glowing
like another, for example a mirror ball that is also a light source. Both
parts are shared references to other materials. Nested ``Combined`` values
are allowed; they are resolved down to concrete materials when the material
palette is built, so kernels never see more than one level of indirection.

Example:
    >>> from spheretrace.materials import Combined, DiffuseLight, Metal
    >>> glowing_mirror = Combined(
    ...     scatterer=Metal(albedo=(0.9, 0.9, 0.9)),
    ...     emitter=DiffuseLight(emittance=(0.5, 0.4, 0.1)),
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spheretrace.materials.types import Material


@dataclass(frozen=True)
class Combined:
    """Composition of two materials.

    Attributes:
        scatterer: Material whose scattering behavior is used.
        emitter: Material whose emission is used.
    """

    scatterer: Material
    emitter: Material


def scattering_source(material: Material) -> Material:
    """Follow ``Combined.scatterer`` links down to a concrete material."""
    while isinstance(material, Combined):
        material = material.scatterer
    return material


def emission_source(material: Material) -> Material:
    """Follow ``Combined.emitter`` links down to a concrete material."""
    while isinstance(material, Combined):
        material = material.emitter
    return material
