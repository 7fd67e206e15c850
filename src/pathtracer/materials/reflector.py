"""Diffuse reflection direction strategies.

A reflector turns a surface normal and a random source into an outgoing
bounce direction. Two strategies are implemented:

    UNIFORM_DIFFUSE: uniform over the hemisphere around the normal.
    LAMBERTIAN: a uniform sphere sample offset by the normal and
        renormalized, which leans samples toward the normal without full
        cosine-weighted importance sampling.

Both start from the same equal-area cylindrical sample of the unit sphere:
the azimuth is uniform in [0, 2*pi), the height uniform in [-1, 1] and the
ring radius sqrt(1 - height^2). By Archimedes' hat-box theorem this is
uniform in solid angle.

Example:
    >>> from src.pathtracer.core.sampler import Lcg
    >>> from src.pathtracer.core.vector import Vec3
    >>> from src.pathtracer.materials.reflector import Reflector
    >>> rng = Lcg.from_seed(7)
    >>> d = Reflector.UNIFORM_DIFFUSE.reflect(Vec3.Y, Vec3.NEG_Y, rng)
    >>> d.dot(Vec3.Y) >= 0.0
    True
"""

from __future__ import annotations

import math
from enum import IntEnum

from src.pathtracer.core.sampler import Lcg
from src.pathtracer.core.vector import Vec3


def random_unit_vector(rng: Lcg) -> Vec3:
    """Sample a direction uniformly distributed on the unit sphere.

    Args:
        rng: The caller's random source.

    Returns:
        A unit vector, with y as the cylinder axis.
    """
    azimuth = rng.next_f64() * math.tau
    height = rng.next_f64() * 2.0 - 1.0
    ring = math.sqrt(max(0.0, 1.0 - height * height))
    return Vec3(ring * math.cos(azimuth), height, ring * math.sin(azimuth))


def random_on_hemisphere(normal: Vec3, rng: Lcg) -> Vec3:
    """Sample a uniform direction in the hemisphere around normal."""
    unit = random_unit_vector(rng)
    if unit.dot(normal) < 0.0:
        return -unit
    return unit


def random_lambertian(normal: Vec3, rng: Lcg) -> Vec3:
    """Sample a direction biased toward the normal.

    The offset sample can cancel the normal exactly; the normal itself is
    returned in that case.
    """
    direction = (random_unit_vector(rng) + normal).normalize_or_zero()
    if direction == Vec3.ZERO:
        return normal
    return direction


class Reflector(IntEnum):
    """Enumeration of the diffuse reflection strategies."""

    UNIFORM_DIFFUSE = 0
    LAMBERTIAN = 1

    def reflect(self, normal: Vec3, incoming: Vec3, rng: Lcg) -> Vec3:
        """Sample an outgoing direction for a hit with the given normal.

        Args:
            normal: The unit surface normal at the hit point.
            incoming: The incoming ray direction. Neither strategy depends on
                it; it is part of the signature for view-dependent reflectors.
            rng: The caller's random source.

        Returns:
            A unit direction in the hemisphere of the normal.
        """
        if self is Reflector.LAMBERTIAN:
            return random_lambertian(normal, rng)
        return random_on_hemisphere(normal, rng)
