"""Scene description and preset scenes.

Components:
    scene: Scene, the immutable bundle of display, camera, light and world
    presets: Factories for the bundled scenes
"""

from .presets import SCENES, create_cube_scene, create_sphere_dome_scene, create_weekend_scene
from .scene import Scene

__all__ = [
    "Scene",
    "SCENES",
    "create_cube_scene",
    "create_sphere_dome_scene",
    "create_weekend_scene",
]
