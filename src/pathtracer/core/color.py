"""Linear RGB color values.

Colors hold unclamped, non-negative radiance estimates. Clamping happens only
when converting to display bytes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar

from src.pathtracer.core.vector import Vec3


def to_percent_byte(value: float) -> int:
    """Convert a channel value to a display byte.

    The rule is floor(clamp(value, 0, 1) * 256), saturated to 255, so
    that 1.0 maps to 255 and each byte covers an equal slice of [0, 1].
    NaN maps to 0.
    """
    if not value > 0.0:
        return 0
    return min(255, math.floor(min(value, 1.0) * 256.0))


@dataclass(frozen=True, slots=True)
class Color:
    """An RGB color with floating point channels.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float
    g: float
    b: float

    BLACK: ClassVar[Color]
    WHITE: ClassVar[Color]
    RED: ClassVar[Color]
    GREEN: ClassVar[Color]
    BLUE: ClassVar[Color]

    @classmethod
    def gray(cls, brightness: float) -> Color:
        """Create a color with all channels equal to brightness."""
        return cls(brightness, brightness, brightness)

    @classmethod
    def from_vec(cls, v: Vec3) -> Color:
        """Create a color from a vector (x, y, z) -> (r, g, b)."""
        return cls(v.x, v.y, v.z)

    def to_vec(self) -> Vec3:
        """Return the channels as a vector."""
        return Vec3(self.r, self.g, self.b)

    def as_tuple(self) -> tuple[float, float, float]:
        """Return the channels as an (r, g, b) tuple."""
        return (self.r, self.g, self.b)

    def __add__(self, other: Color) -> Color:
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, scalar: float) -> Color:
        return Color(self.r * scalar, self.g * scalar, self.b * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Color:
        return self * (1.0 / scalar)

    def reflect_on(self, surface: Color) -> Color:
        """Attenuate this color by a surface color, channel by channel."""
        return Color(self.r * surface.r, self.g * surface.g, self.b * surface.b)

    def max_channel(self) -> float:
        """Return the largest of the three channels."""
        return max(self.r, self.g, self.b)

    def to_rgb_bytes(self) -> tuple[int, int, int]:
        """Convert to an (r, g, b) byte triple for display."""
        return (to_percent_byte(self.r), to_percent_byte(self.g), to_percent_byte(self.b))


Color.BLACK = Color(0.0, 0.0, 0.0)
Color.WHITE = Color(1.0, 1.0, 1.0)
Color.RED = Color(1.0, 0.0, 0.0)
Color.GREEN = Color(0.0, 1.0, 0.0)
Color.BLUE = Color(0.0, 0.0, 1.0)
