"""Camera module for primary ray generation."""

from .pinhole import Camera, Display

__all__ = ["Camera", "Display"]
