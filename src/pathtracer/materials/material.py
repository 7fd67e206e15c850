"""Surface material evaluated at a hit point.

A ColorMaterial is what a Shape hands back with a collision: the diffuse base
color of the surface, the reflector strategy used to scatter bounce rays and
the surface normal at that point.

Example:
    >>> from src.pathtracer.core.color import Color
    >>> from src.pathtracer.core.vector import Vec3
    >>> from src.pathtracer.materials.material import ColorMaterial
    >>> from src.pathtracer.materials.reflector import Reflector
    >>> mat = ColorMaterial(Vec3.Y, Color(0.5, 0.5, 0.5), Reflector.LAMBERTIAN)
    >>> mat.update_color(Color.WHITE)
    Color(r=0.5, g=0.5, b=0.5)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.sampler import Lcg
from src.pathtracer.core.vector import Vec3
from src.pathtracer.materials.reflector import Reflector


@dataclass(frozen=True, slots=True)
class ColorMaterial:
    """A diffuse surface with a base color.

    Attributes:
        normal: The unit surface normal at the hit point, facing the side the
            ray arrived from.
        color: The diffuse base color (albedo), each channel in [0, 1].
        reflector: The strategy used to sample bounce directions.
    """

    normal: Vec3
    color: Color
    reflector: Reflector = Reflector.LAMBERTIAN

    def update_color(self, outgoing: Color) -> Color:
        """Attenuate light leaving the surface by the surface color."""
        return outgoing.reflect_on(self.color)

    def update_ray(self, ray: Ray, rng: Lcg) -> Ray:
        """Replace the ray direction with a sampled diffuse bounce.

        Args:
            ray: A ray whose origin is the hit point.
            rng: The caller's random source.

        Returns:
            A ray with the same origin and a new unit direction.
        """
        direction = self.reflector.reflect(self.normal, ray.direction, rng)
        return Ray(ray.origin, direction)
