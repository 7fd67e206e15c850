"""Pinhole camera model and display resolution.

This module implements the camera that generates primary rays. The camera is
described by its position, a forward and an up direction, and a horizontal
and vertical field of view. From these it precomputes two vectors once:

    max_left_deflection = tan(xfov) * left
    max_up_deflection   = tan(yfov) * up

where left = up x forward. A primary ray direction is then a single
combination per pixel, with no trigonometry in the per-pixel path:

    direction = normalize(forward + x_offset * max_left + y_offset * max_up)

Pixel axis convention, used consistently from ray generation through buffer
indexing to image files: column 0 is the left edge of the image and row 0
is the top edge. Buffers are indexed buffer[y, x].

Example:
    >>> from src.pathtracer.camera.pinhole import Camera, Display
    >>> from src.pathtracer.core.vector import Vec3
    >>> display = Display(16, 9)
    >>> camera = Camera.from_display(30.0, display, Vec3.ZERO, Vec3.NEG_Z, Vec3.Y)
    >>> camera.ray_direction(0.0, 0.0)  # Ray through the image center
    Vec3(x=0.0, y=0.0, z=-1.0)
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from src.pathtracer.core.vector import Vec3

# =============================================================================
# Display
# =============================================================================


@dataclass(frozen=True)
class Display:
    """Output resolution in pixels.

    Iterating a display yields every (x, y) pixel coordinate in row-major
    order, x fastest.

    Attributes:
        width: Number of columns.
        height: Number of rows.
    """

    width: int
    height: int

    @property
    def size(self) -> int:
        """Total number of pixels."""
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def coordinates(self, index: int) -> tuple[int, int]:
        """Convert a row-major linear pixel index to (x, y)."""
        y, x = divmod(index, self.width)
        return x, y

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def __len__(self) -> int:
        return self.size


# =============================================================================
# Camera
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """A pinhole camera.

    Attributes:
        xfov: Horizontal field-of-view angle in degrees.
        yfov: Vertical field-of-view angle in degrees.
        position: Camera position in world space.
        forward: Viewing direction (normalized on construction).
        up: Up direction (normalized on construction). Should be
            perpendicular to forward.
    """

    xfov: float
    yfov: float
    position: Vec3
    forward: Vec3
    up: Vec3
    max_left_deflection: Vec3 = field(init=False, repr=False)
    max_up_deflection: Vec3 = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # Frozen dataclass: derived fields are set through object.__setattr__.
        forward = self.forward.normalize()
        up = self.up.normalize()
        left = up.cross(forward)
        object.__setattr__(self, "forward", forward)
        object.__setattr__(self, "up", up)
        object.__setattr__(
            self, "max_left_deflection", left * math.tan(math.radians(self.xfov))
        )
        object.__setattr__(self, "max_up_deflection", up * math.tan(math.radians(self.yfov)))

    @classmethod
    def from_display(
        cls,
        xfov: float,
        display: Display,
        position: Vec3,
        forward: Vec3,
        up: Vec3,
    ) -> Camera:
        """Create a camera whose vertical field of view follows the aspect ratio.

        Args:
            xfov: Horizontal field-of-view angle in degrees.
            display: The output resolution.
            position: Camera position.
            forward: Viewing direction.
            up: Up direction.

        Returns:
            A camera with yfov = xfov * height / width.
        """
        yfov = (display.height / display.width) * xfov
        return cls(xfov, yfov, position, forward, up)

    @classmethod
    def look_at(
        cls,
        xfov: float,
        display: Display,
        position: Vec3,
        target: Vec3,
        vup: Vec3 = Vec3.Y,
    ) -> Camera:
        """Create a camera at position looking at target.

        The up vector is vup with its component along the view direction
        removed, so it does not need to be perpendicular.
        """
        forward = (target - position).normalize()
        up = vup.reject_wrt(forward).normalize()
        return cls.from_display(xfov, display, position, forward, up)

    @property
    def left(self) -> Vec3:
        """Unit vector pointing to the left of the image."""
        return self.up.cross(self.forward)

    def ray_direction(self, x_offset: float, y_offset: float) -> Vec3:
        """Compute a primary ray direction.

        Args:
            x_offset: Fraction of the image width to the left of center,
                in [-0.5, 0.5].
            y_offset: Fraction of the image height above center, in
                [-0.5, 0.5].

        Returns:
            The unit ray direction.
        """
        return (
            self.forward
            + self.max_left_deflection * x_offset
            + self.max_up_deflection * y_offset
        ).normalize()
