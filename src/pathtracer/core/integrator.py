"""Path tracing integrator.

This module estimates the radiance reaching a pixel by recursive Monte Carlo
path tracing with a fixed bounce budget.

Lighting policy (depth-first recursive bounce):
    - A primary ray is cast into the world.
    - A ray that escapes contributes the scene background color.
    - While bounce budget remains, one diffuse bounce direction is sampled
      from the hit material and the path continues; whatever light comes
      back is attenuated by the material color.
    - When the budget reaches zero, the last hit is lit directly by the
      point light: the mirror reflection's cosine to the light, times
      shadow-ray visibility, times inverse-square falloff, attenuated by
      the material color.

There is no Russian roulette: every path runs until it escapes or spends its
whole budget. Paths are sampled, not branched, so the cost of one sample is
linear in the bounce budget.

Example:
    >>> from src.pathtracer.camera.pinhole import Display
    >>> from src.pathtracer.core.integrator import render_pixel
    >>> from src.pathtracer.core.sampler import Lcg
    >>> from src.pathtracer.scene.presets import create_sphere_dome_scene
    >>> scene = create_sphere_dome_scene(Display(12, 7))
    >>> color = render_pixel(scene, 6, 3, samples=4, bounces=2, rng=Lcg.from_seed(1))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.sampler import Lcg

if TYPE_CHECKING:
    from src.pathtracer.geometry.shape import RayCollision
    from src.pathtracer.scene.scene import Scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Samples per pixel
DEFAULT_SAMPLES = 100

# Bounce budget per path
DEFAULT_BOUNCES = 50


def direct_lighting(scene: Scene, hit: RayCollision) -> Color:
    """Estimate the light arriving directly from the point light at a hit.

    Args:
        scene: The scene being rendered.
        hit: The collision to light.

    Returns:
        The attenuated direct contribution; black if the light is occluded
        or sits exactly at the hit point.
    """
    position = hit.position()
    # A light lying on the surface has no direction to shade against
    if position == scene.light_position:
        return Color.BLACK
    if not scene.sees_light(position):
        return Color.BLACK

    intensity = scene.brightness(hit.reflection()) * scene.light_falloff(position)
    return hit.material.update_color(Color.gray(intensity))


def cast_ray(scene: Scene, ray: Ray, bounces: int, rng: Lcg) -> Color:
    """Trace one path starting with ray.

    Args:
        scene: The scene being rendered.
        ray: The ray to trace (unit direction).
        bounces: Remaining bounce budget; 0 lights the first hit directly.
        rng: The calling worker's random source.

    Returns:
        The radiance estimate carried back along the ray.
    """
    hit = scene.world.intersect(ray)
    if hit is None:
        return scene.background_color

    if bounces <= 0:
        return direct_lighting(scene, hit)

    incoming = cast_ray(scene, hit.bounce(rng), bounces - 1, rng)
    return hit.material.update_color(incoming)


def render_pixel(
    scene: Scene,
    x: int,
    y: int,
    samples: int = DEFAULT_SAMPLES,
    bounces: int = DEFAULT_BOUNCES,
    *,
    rng: Lcg,
) -> Color:
    """Estimate the color of one pixel.

    Averages independently jittered primary rays; each sample offsets the
    ray uniformly inside the pixel footprint.

    Args:
        scene: The scene being rendered.
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        samples: Number of primary rays to average.
        bounces: Bounce budget per path.
        rng: The calling worker's random source.

    Returns:
        The mean radiance over all samples.
    """
    r = g = b = 0.0
    for _ in range(samples):
        x_jitter = rng.next_f64()
        y_jitter = rng.next_f64()
        ray = scene.pixel_ray(x + x_jitter, y + y_jitter)
        color = cast_ray(scene, ray, bounces, rng)
        r += color.r
        g += color.g
        b += color.b

    return Color(r / samples, g / samples, b / samples)
