"""Shape abstraction and collision records.

Every primitive implements Shape.ray_intersection(), which returns the nearest
acceptable hit along a ray as a Collision, or None. A ShapeGroup is itself a
Shape, so a scene's world is one shape regardless of how many primitives it
holds.

The include_start flag decides whether a hit exactly at the ray origin
counts. Rays leaving a surface (bounce and shadow rays) pass False so that
they do not immediately re-hit the surface they start on; only hits farther
than EPSILON are accepted then.

Example:
    >>> from src.pathtracer.core.color import Color
    >>> from src.pathtracer.core.ray import Ray
    >>> from src.pathtracer.core.vector import Vec3
    >>> from src.pathtracer.geometry import ShapeGroup, Sphere
    >>> world = ShapeGroup([
    ...     Sphere(Vec3(0.0, 0.0, -5.0), 1.0, Color.WHITE),
    ...     Sphere(Vec3(0.0, 0.0, -10.0), 1.0, Color.WHITE),
    ... ])
    >>> world.ray_intersection(Ray(Vec3.ZERO, Vec3.NEG_Z)).distance
    4.0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from src.pathtracer.core.ray import Ray
from src.pathtracer.core.sampler import Lcg
from src.pathtracer.core.vector import EPSILON, Vec3
from src.pathtracer.materials.material import ColorMaterial


def accepts_distance(t: float, include_start: bool) -> bool:
    """Check whether a hit parameter is in front of the ray origin.

    Args:
        t: Distance along the ray.
        include_start: Whether a hit at the origin itself counts.

    Returns:
        True for t >= 0 when include_start, otherwise for t > EPSILON.
        Always False for NaN.
    """
    if include_start:
        return t >= 0.0
    return t > EPSILON


@dataclass(frozen=True, slots=True)
class Collision:
    """A hit along a ray.

    Attributes:
        distance: The ray parameter of the hit (world units for a unit ray).
        material: The material sampled at the hit point, including the
            surface normal.
    """

    distance: float
    material: ColorMaterial

    @property
    def normal(self) -> Vec3:
        """The surface normal at the hit point."""
        return self.material.normal


@dataclass(frozen=True, slots=True)
class RayCollision:
    """A collision together with the ray that produced it.

    Derives the hit position and outgoing rays on demand, so a miss-free
    intersection test never pays for them.

    Attributes:
        ray: The ray that was intersected.
        collision: The nearest hit along that ray.
    """

    ray: Ray
    collision: Collision

    @property
    def distance(self) -> float:
        return self.collision.distance

    @property
    def material(self) -> ColorMaterial:
        return self.collision.material

    @property
    def normal(self) -> Vec3:
        return self.collision.material.normal

    def position(self) -> Vec3:
        """Return the hit point."""
        return self.ray.point_at(self.collision.distance)

    def reflection(self) -> Ray:
        """Return the mirror reflection of the ray at the hit point."""
        return Ray(self.position(), self.ray.direction.reflect_across(self.normal))

    def bounce(self, rng: Lcg) -> Ray:
        """Return a diffuse bounce ray sampled from the hit material."""
        return self.material.update_ray(self.ray.translate(self.collision.distance), rng)


class Shape(ABC):
    """Base class for anything a ray can hit."""

    @abstractmethod
    def ray_intersection(self, ray: Ray, include_start: bool = False) -> Collision | None:
        """Find the nearest acceptable hit along a ray.

        Args:
            ray: The ray to test. Its direction should be unit length.
            include_start: Whether a hit at the ray origin counts.

        Returns:
            The nearest Collision, or None if the ray misses.
        """

    def intersect(self, ray: Ray, include_start: bool = False) -> RayCollision | None:
        """Like ray_intersection(), but keep the ray with the result."""
        collision = self.ray_intersection(ray, include_start)
        if collision is None:
            return None
        return RayCollision(ray, collision)


def nearest_collision(collisions: Iterable[Collision | None]) -> Collision | None:
    """Return the collision with the smallest distance, ignoring misses."""
    nearest: Collision | None = None
    for collision in collisions:
        if collision is not None and (nearest is None or collision.distance < nearest.distance):
            nearest = collision
    return nearest


class ShapeGroup(Shape):
    """A collection of shapes intersected as one shape.

    Brute force: every member is tested and the nearest hit wins.
    """

    def __init__(self, shapes: Iterable[Shape] = ()) -> None:
        self._shapes: tuple[Shape, ...] = tuple(shapes)

    @property
    def shapes(self) -> tuple[Shape, ...]:
        """The member shapes."""
        return self._shapes

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._shapes)

    def ray_intersection(self, ray: Ray, include_start: bool = False) -> Collision | None:
        return nearest_collision(
            shape.ray_intersection(ray, include_start) for shape in self._shapes
        )

    def __repr__(self) -> str:
        return f"ShapeGroup({list(self._shapes)!r})"
