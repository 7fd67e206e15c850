"""Ray data structure.

Example:
    >>> from src.pathtracer.core.ray import Ray
    >>> from src.pathtracer.core.vector import Vec3
    >>> ray = Ray.towards(Vec3.ZERO, Vec3(0.0, 0.0, -2.0))
    >>> ray.point_at(5.0)  # Point 5 units along the ray
    Vec3(x=0.0, y=0.0, z=-5.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.pathtracer.core.vector import Vec3


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Intersection code assumes unit
            length so that the hit parameter is a world-space distance; use
            Ray.towards() to normalize on construction.
    """

    origin: Vec3
    direction: Vec3

    @classmethod
    def towards(cls, origin: Vec3, direction: Vec3) -> Ray:
        """Create a ray with the direction normalized."""
        return cls(origin, direction.normalize())

    def point_at(self, t: float) -> Vec3:
        """Compute the point origin + t * direction."""
        return self.origin + self.direction * t

    def translate(self, t: float) -> Ray:
        """Advance the origin by t along the ray, keeping the direction."""
        return Ray(self.point_at(t), self.direction)
