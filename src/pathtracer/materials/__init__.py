"""Material models for path tracing.

Components:
    reflector: Diffuse bounce direction strategies (uniform, Lambertian)
    material: ColorMaterial, a surface color paired with a reflector
"""

from .material import ColorMaterial
from .reflector import Reflector, random_lambertian, random_on_hemisphere, random_unit_vector

__all__ = [
    "ColorMaterial",
    "Reflector",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_lambertian",
]
