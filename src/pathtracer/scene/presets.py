"""Preset scene configurations.

This module provides factory functions for the scenes the renderer ships
with. Each factory takes the output resolution and returns a ready Scene:

- create_cube_scene: a brown cube and two small spheres inside a white
  inward-facing box, seen from above under a sky-blue background
- create_sphere_dome_scene: a single sphere inside a white dome; a small,
  fast regression scene
- create_weekend_scene: the two gray spheres of the "Ray Tracing in One
  Weekend" opening image, lit only by the sky

Example:
    >>> from src.pathtracer.camera.pinhole import Display
    >>> from src.pathtracer.scene.presets import SCENES
    >>> scene = SCENES["cube"](Display(320, 180))
"""

from __future__ import annotations

from collections.abc import Callable

from src.pathtracer.camera.pinhole import Camera, Display
from src.pathtracer.core.color import Color
from src.pathtracer.core.vector import Vec3
from src.pathtracer.geometry.mesh import TriangleMesh, TriangleSpec
from src.pathtracer.geometry.shape import ShapeGroup
from src.pathtracer.geometry.sphere import InvertedSphere, Sphere
from src.pathtracer.materials.reflector import Reflector
from src.pathtracer.scene.scene import Scene

# =============================================================================
# Cube Scene Constants
# =============================================================================

# Unit cube corners. Index bits are (x, y, z), a set bit meaning -1.
CUBE_VERTICES = (
    Vec3(1.0, 1.0, 1.0),
    Vec3(1.0, 1.0, -1.0),
    Vec3(1.0, -1.0, 1.0),
    Vec3(1.0, -1.0, -1.0),
    Vec3(-1.0, 1.0, 1.0),
    Vec3(-1.0, 1.0, -1.0),
    Vec3(-1.0, -1.0, 1.0),
    Vec3(-1.0, -1.0, -1.0),
)

# Outward-facing cube faces, two triangles each
CUBE_TRIANGLES: tuple[TriangleSpec, ...] = (
    # far
    ((0b000, 0b100, 0b110), 0),
    ((0b000, 0b110, 0b010), 0),
    # right
    ((0b100, 0b101, 0b111), 0),
    ((0b100, 0b111, 0b110), 0),
    # near
    ((0b101, 0b001, 0b011), 0),
    ((0b101, 0b011, 0b111), 0),
    # left
    ((0b001, 0b000, 0b010), 0),
    ((0b001, 0b010, 0b011), 0),
    # top
    ((0b000, 0b001, 0b101), 0),
    ((0b000, 0b101, 0b100), 0),
    # bottom
    ((0b110, 0b111, 0b011), 0),
    ((0b110, 0b011, 0b010), 0),
)

CUBE_COLOR = Color(0.6, 0.4, 0.3)
ROOM_SCALE = 20.0

BLUE_SPHERE_COLOR = Color(0.1, 0.1, 1.0)
GREEN_SPHERE_COLOR = Color(0.1, 1.0, 0.1)

SKY_BLUE = Color(0.0, 0.75, 1.0)
CORNER_CAMERA_POSITION = Vec3(-7.0, 10.0, -10.0)
CORNER_LIGHT_POSITION = Vec3(-5.0, 8.0, 10.0)
CORNER_XFOV = 30.0

DOME_RADIUS = 15.0

# =============================================================================
# Weekend Scene Constants
# =============================================================================

WEEKEND_GRAY = Color.gray(0.5)
WEEKEND_SKY = Color(0.5, 0.7, 1.0)
WEEKEND_XFOV = 74.29136217098426
WEEKEND_YFOV = 63.43494882292201


def _corner_camera(display: Display) -> Camera:
    """Camera above a corner of the room, looking at the origin."""
    position = CORNER_CAMERA_POSITION
    toward_origin = -position.normalize()
    up = (Vec3.Y + toward_origin).normalize()
    return Camera.from_display(CORNER_XFOV, display, position, toward_origin, up)


def create_cube(
    scale: float = 1.0,
    color: Color = CUBE_COLOR,
    inward: bool = False,
    reflector: Reflector = Reflector.LAMBERTIAN,
) -> TriangleMesh:
    """Create an axis-aligned cube centered at the origin.

    Args:
        scale: Half the edge length.
        color: Color of every face.
        inward: Reverse the winding so the faces are seen from inside.
        reflector: The bounce direction strategy.

    Returns:
        A 12-triangle mesh.
    """
    triangles = CUBE_TRIANGLES
    if inward:
        triangles = tuple(((c, b, a), i) for (a, b, c), i in CUBE_TRIANGLES)
    vertices = [v * scale for v in CUBE_VERTICES]
    return TriangleMesh(vertices, [color], triangles, reflector)


def create_cube_scene(display: Display, with_dome: bool = False) -> Scene:
    """Create the cube-in-a-room scene.

    The world holds a unit cube, a large blue sphere cutting into it, a
    small green sphere next to it and an inward-facing white box twenty
    times the cube's size.

    Args:
        display: Output resolution.
        with_dome: Also add a white dome of radius 15 inside the room.

    Returns:
        The scene.
    """
    shapes = [
        create_cube(),
        create_cube(ROOM_SCALE, Color.WHITE, inward=True),
        Sphere(Vec3(0.0, 0.0, -0.8), 1.2, BLUE_SPHERE_COLOR),
        Sphere(Vec3(-0.8, 1.2, 0.0), 0.3, GREEN_SPHERE_COLOR),
    ]
    if with_dome:
        shapes.append(InvertedSphere(Vec3.ZERO, DOME_RADIUS, Color.WHITE))

    return Scene(
        display=display,
        camera=_corner_camera(display),
        light_position=CORNER_LIGHT_POSITION,
        world=ShapeGroup(shapes),
        background_color=SKY_BLUE,
    )


def create_sphere_dome_scene(display: Display) -> Scene:
    """Create a blue sphere of radius 1.2 inside a white dome of radius 15.

    The camera sits just outside the dome; the dome's near side is never
    hit because only its far root counts. The background is black, so
    every ray that reaches the image has bounced inside the dome.
    """
    world = ShapeGroup(
        [
            InvertedSphere(Vec3.ZERO, DOME_RADIUS, Color.WHITE),
            Sphere(Vec3.ZERO, 1.2, BLUE_SPHERE_COLOR),
        ]
    )
    return Scene(
        display=display,
        camera=_corner_camera(display),
        light_position=CORNER_LIGHT_POSITION,
        world=world,
    )


def create_weekend_scene(display: Display) -> Scene:
    """Create a small sphere resting on a huge one under a pale sky.

    The field of view is fixed for a 16:9 display. The point light sits at
    the camera position; most of the image is lit by escaping paths picking
    up the sky color.
    """
    reflector = Reflector.UNIFORM_DIFFUSE
    world = ShapeGroup(
        [
            Sphere(Vec3(0.0, 0.0, -1.0), 0.5, WEEKEND_GRAY, reflector),
            Sphere(Vec3(0.0, -100.5, -1.0), 100.0, WEEKEND_GRAY, reflector),
        ]
    )
    camera = Camera(WEEKEND_XFOV, WEEKEND_YFOV, Vec3.ZERO, Vec3.NEG_Z, Vec3.Y)
    return Scene(
        display=display,
        camera=camera,
        light_position=Vec3.ZERO,
        world=world,
        background_color=WEEKEND_SKY,
    )


# Scene name -> factory, for the command line driver
SCENES: dict[str, Callable[[Display], Scene]] = {
    "cube": create_cube_scene,
    "dome": create_sphere_dome_scene,
    "weekend": create_weekend_scene,
}
