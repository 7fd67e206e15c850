"""Geometry module for shape primitives.

This module provides the shapes a scene is built from:

Components:
    shape: Shape base class, collision records and ShapeGroup
    sphere: Sphere and InvertedSphere primitives
    mesh: TriangleMesh with precomputed per-triangle bases

Every shape answers one query, ray_intersection(ray, include_start), and
returns the nearest acceptable Collision or None.
"""

from .mesh import TriangleMesh, triangle_basis, triangle_normal
from .shape import Collision, RayCollision, Shape, ShapeGroup, nearest_collision
from .sphere import InvertedSphere, Sphere, solve_sphere

__all__ = [
    # Base types
    "Shape",
    "Collision",
    "RayCollision",
    "ShapeGroup",
    "nearest_collision",
    # Spheres
    "Sphere",
    "InvertedSphere",
    "solve_sphere",
    # Meshes
    "TriangleMesh",
    "triangle_normal",
    "triangle_basis",
]
