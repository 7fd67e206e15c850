"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    vector: Vec3 and Mat3 value types
    ray: Ray data structure
    color: Linear RGB colors and byte conversion
    sampler: Seedable linear congruential generator
    integrator: Recursive path tracing of single pixels
    parallel: Multi-threaded chunk scheduler and buffer merge
"""

from .color import Color, to_percent_byte
from .ray import Ray
from .sampler import Lcg, derive_seed
from .vector import EPSILON, Mat3, Vec3

# Note: integrator and parallel are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or src.pathtracer.core.parallel.
#
# For a full render, use:
#   from src.pathtracer.core.parallel import RenderSettings, render

__all__ = [
    "EPSILON",
    "Vec3",
    "Mat3",
    "Ray",
    "Color",
    "to_percent_byte",
    "Lcg",
    "derive_seed",
]
