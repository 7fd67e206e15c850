"""Scene description and light visibility queries.

A Scene bundles everything the integrator reads: the output resolution, the
camera, one point light, the world shape and the background color. It is
built once before rendering and shared read-only by all render workers.

Example:
    >>> from src.pathtracer.scene.presets import create_sphere_dome_scene
    >>> from src.pathtracer.camera.pinhole import Display
    >>> scene = create_sphere_dome_scene(Display(12, 7))
    >>> ray = scene.pixel_ray(6.0, 3.5)  # Ray through the image center
"""

from __future__ import annotations

from dataclasses import dataclass

from src.pathtracer.camera.pinhole import Camera, Display
from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import EPSILON, Vec3
from src.pathtracer.geometry.shape import Shape


@dataclass(frozen=True)
class Scene:
    """An immutable renderable scene.

    Attributes:
        display: Output resolution.
        camera: The camera generating primary rays.
        light_position: Position of the single point light.
        world: The shape holding all scene geometry.
        background_color: Radiance of rays that escape the world.
    """

    display: Display
    camera: Camera
    light_position: Vec3
    world: Shape
    background_color: Color = Color.BLACK

    def pixel_ray(self, x: float, y: float) -> Ray:
        """Generate the primary ray through a continuous pixel coordinate.

        Args:
            x: Column coordinate, 0 at the left edge, width at the right.
            y: Row coordinate, 0 at the top edge, height at the bottom.

        Returns:
            A unit ray starting at the camera position.
        """
        x_offset = 0.5 - x / self.display.width
        y_offset = 0.5 - y / self.display.height
        return Ray(self.camera.position, self.camera.ray_direction(x_offset, y_offset))

    def brightness(self, ray: Ray) -> float:
        """Cosine between a ray and the direction to the light, clamped at zero.

        Args:
            ray: A ray leaving a surface, typically its mirror reflection.

        Returns:
            A value in [0, 1]; 0 when the ray points away from the light.
        """
        to_light = (self.light_position - ray.origin).normalize()
        return max(0.0, ray.direction.dot(to_light))

    def sees_light(self, point: Vec3) -> bool:
        """Cast a shadow ray from point toward the light.

        Args:
            point: A point on a surface.

        Returns:
            False if any geometry is hit strictly before the light,
            True otherwise.
        """
        to_light = self.light_position - point
        light_distance_sq = to_light.squared_magnitude()
        shadow_ray = Ray.towards(point, to_light)

        collision = self.world.ray_intersection(shadow_ray, include_start=False)
        if collision is None:
            return True
        return not collision.distance * collision.distance < light_distance_sq - EPSILON

    def light_falloff(self, point: Vec3) -> float:
        """Inverse-square attenuation of the light at point.

        A point at the light position itself receives no light.
        """
        distance_sq = (point - self.light_position).squared_magnitude()
        if distance_sq == 0.0:
            return 0.0
        return 1.0 / distance_sq
