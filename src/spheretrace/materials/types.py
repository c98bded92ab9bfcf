"""The closed set of material variants."""

from typing import Union

from spheretrace.materials.combined import Combined
from spheretrace.materials.dielectric import Dielectric
from spheretrace.materials.diffuse_light import DiffuseLight
from spheretrace.materials.lambertian import Lambertian
from spheretrace.materials.metal import Metal

Material = Union[Lambertian, Metal, Dielectric, DiffuseLight, Combined]
