"""Diffuse area light material.

A diffuse light never scatters: every path that reaches it terminates there.
Its emission is a constant color, independent of the incoming ray and the
hit location.

Example:
    >>> from spheretrace.materials.diffuse_light import DiffuseLight
    >>> lamp = DiffuseLight(emittance=(4.0, 4.0, 4.0))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@dataclass(frozen=True)
class DiffuseLight:
    """Diffuse light properties.

    Attributes:
        emittance: The emitted radiance (R, G, B). May exceed 1.0.
    """

    emittance: tuple[float, float, float]


@ti.func
def emit_diffuse_light(emittance: vec3) -> vec3:
    """Return the radiance emitted by a diffuse light."""
    return emittance
