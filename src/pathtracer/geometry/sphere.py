"""Sphere primitives.

This module provides two primitives sharing the same quadratic:

    Sphere: a solid ball; the nearest acceptable root is the hit and the
        normal points away from the center.
    InvertedSphere: an enclosing dome seen from inside; only the farther
        root is taken and the normal points toward the center.

The intersection is found by solving
    |ray_origin + t * ray_direction - center|^2 = radius^2
which, with oc = origin - center, is the quadratic
    a*t^2 + 2*h*t + c = 0
where
    a = dot(direction, direction)
    h = dot(direction, oc)  (half of the traditional b)
    c = dot(oc, oc) - radius^2

Example:
    >>> from src.pathtracer.core.color import Color
    >>> from src.pathtracer.core.ray import Ray
    >>> from src.pathtracer.core.vector import Vec3
    >>> from src.pathtracer.geometry.sphere import Sphere
    >>> sphere = Sphere(Vec3(0.0, 0.0, 0.0), 1.0, Color.WHITE)
    >>> hit = sphere.ray_intersection(Ray(Vec3(0.0, 0.0, 5.0), Vec3.NEG_Z))
    >>> hit.distance, hit.normal
    (4.0, Vec3(x=0.0, y=0.0, z=1.0))
"""

from __future__ import annotations

import math

from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import Vec3
from src.pathtracer.geometry.shape import Collision, Shape, accepts_distance
from src.pathtracer.materials.material import ColorMaterial
from src.pathtracer.materials.reflector import Reflector


def solve_sphere(ray: Ray, center: Vec3, radius: float) -> tuple[float, float] | None:
    """Solve the ray-sphere quadratic.

    Args:
        ray: The ray to test.
        center: Sphere center.
        radius: Sphere radius.

    Returns:
        The two roots (t0, t1) with t0 <= t1, or None if the discriminant
        is negative or NaN (the ray misses or the input is degenerate).
    """
    oc = ray.origin - center
    a = ray.direction.dot(ray.direction)
    h = ray.direction.dot(oc)
    c = oc.dot(oc) - radius * radius

    discriminant = h * h - a * c
    if not discriminant >= 0.0:
        return None

    sqrt_d = math.sqrt(discriminant)
    return (-h - sqrt_d) / a, (-h + sqrt_d) / a


class Sphere(Shape):
    """A solid sphere with a diffuse surface.

    Attributes:
        center: The center point.
        radius: The radius (positive).
        color: The diffuse base color.
        reflector: The bounce direction strategy.
    """

    def __init__(
        self,
        center: Vec3,
        radius: float,
        color: Color,
        reflector: Reflector = Reflector.LAMBERTIAN,
    ) -> None:
        self.center = center
        self.radius = float(radius)
        self.color = color
        self.reflector = reflector

    def _collision(self, ray: Ray, t: float, sign: float) -> Collision:
        hit_point = ray.point_at(t)
        normal = (hit_point - self.center) * (sign / self.radius)
        return Collision(t, ColorMaterial(normal, self.color, self.reflector))

    def ray_intersection(self, ray: Ray, include_start: bool = False) -> Collision | None:
        roots = solve_sphere(ray, self.center, self.radius)
        if roots is None:
            return None

        for t in roots:
            if accepts_distance(t, include_start):
                return self._collision(ray, t, 1.0)
        return None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(center={self.center!r}, radius={self.radius!r}, "
            f"color={self.color!r}, reflector={self.reflector.name})"
        )


class InvertedSphere(Sphere):
    """A sphere seen from the inside, such as an enclosing sky dome.

    Only the far side of the sphere is ever hit, and the normal faces the
    center so that light bounces back into the enclosed volume.
    """

    def ray_intersection(self, ray: Ray, include_start: bool = False) -> Collision | None:
        roots = solve_sphere(ray, self.center, self.radius)
        if roots is None:
            return None

        far = roots[1]
        if not accepts_distance(far, include_start):
            return None
        return self._collision(ray, far, -1.0)
