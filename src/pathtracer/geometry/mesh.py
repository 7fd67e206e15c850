"""Triangle mesh primitive with precomputed per-triangle basis.

Each triangle (a, b, c) with unit face normal n gets an affine frame whose
columns are the two edges and the normal:

    B = [b - a | c - a | n]

Triangle-local coordinates of a world point p are

    local(p) = B^-1 (p - a) - z_hat

In that frame the triangle plane sits at local z = -1 and the local x and y
of a point on the plane are its barycentric weights (u, v) along the edges
b - a and c - a. A ray is intersected by transforming its origin and
direction once, solving for the t at which local z reaches -1 and checking
u >= 0, v >= 0, u + v <= 1, each with an EPSILON band so that rays hitting a
shared edge are not lost to rounding.

The inverse bases are computed once at construction and stacked into NumPy
arrays, so a query tests every triangle of the mesh in one vectorized pass.

Example:
    >>> from src.pathtracer.core.color import Color
    >>> from src.pathtracer.core.ray import Ray
    >>> from src.pathtracer.core.vector import Vec3
    >>> from src.pathtracer.geometry.mesh import TriangleMesh
    >>> mesh = TriangleMesh(
    ...     vertices=[Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0)],
    ...     palette=[Color.WHITE],
    ...     triangles=[((0, 1, 2), 0)],
    ... )
    >>> hit = mesh.ray_intersection(Ray(Vec3(0.25, 0.25, 2.0), Vec3.NEG_Z))
    >>> round(hit.distance, 6)
    2.0
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import EPSILON, Mat3, Vec3
from src.pathtracer.geometry.shape import Collision, Shape
from src.pathtracer.materials.material import ColorMaterial
from src.pathtracer.materials.reflector import Reflector

# Type aliases for mesh topology
VertexIndex = int
ColorIndex = int
TriangleSpec = tuple[tuple[VertexIndex, VertexIndex, VertexIndex], ColorIndex]

# Local z of the triangle plane in the triangle frame
PLANE_Z = -1.0


def triangle_normal(a: Vec3, b: Vec3, c: Vec3) -> Vec3:
    """Return the unit face normal of a counter-clockwise triangle."""
    return (b - a).cross(c - b).normalize()


def triangle_basis(a: Vec3, b: Vec3, c: Vec3, normal: Vec3) -> Mat3:
    """Return the triangle frame B = [b - a | c - a | normal]."""
    return Mat3.from_col_vectors(b - a, c - a, normal)


class TriangleMesh(Shape):
    """A mesh of single-sided triangles.

    Only the front face of a triangle can be hit: the side its
    counter-clockwise winding normal points to. Reversing a triangle's
    winding turns it inside out.

    Attributes:
        vertices: The vertex positions.
        palette: Colors referenced by triangles.
        triangles: One ((a, b, c), color_index) entry per triangle.
        reflector: The bounce direction strategy shared by all triangles.
    """

    def __init__(
        self,
        vertices: Sequence[Vec3],
        palette: Sequence[Color],
        triangles: Sequence[TriangleSpec],
        reflector: Reflector = Reflector.LAMBERTIAN,
    ) -> None:
        """Build the mesh and precompute per-triangle bases.

        Args:
            vertices: The vertex positions.
            palette: Colors referenced by the triangles' color indices.
            triangles: Vertex index triples with a palette index each.
            reflector: The bounce direction strategy.

        Raises:
            ValueError: If a triangle references a missing vertex or color.
        """
        self.vertices: tuple[Vec3, ...] = tuple(vertices)
        self.palette: tuple[Color, ...] = tuple(palette)
        self.triangles: tuple[TriangleSpec, ...] = tuple(
            ((int(a), int(b), int(c)), int(color)) for (a, b, c), color in triangles
        )
        self.reflector = reflector

        for i, (indices, color_index) in enumerate(self.triangles):
            for index in indices:
                if not 0 <= index < len(self.vertices):
                    raise ValueError(
                        f"Triangle {i} references vertex {index}, "
                        f"but the mesh has {len(self.vertices)} vertices"
                    )
            if not 0 <= color_index < len(self.palette):
                raise ValueError(
                    f"Triangle {i} references color {color_index}, "
                    f"but the palette has {len(self.palette)} colors"
                )

        count = len(self.triangles)
        self.normals: list[Vec3] = []
        self.inverse_bases: list[Mat3 | None] = []

        anchors = np.zeros((count, 3), dtype=np.float64)
        normals = np.zeros((count, 3), dtype=np.float64)
        inverses = np.zeros((count, 3, 3), dtype=np.float64)
        reachable = np.zeros(count, dtype=bool)

        for i, ((ia, ib, ic), _) in enumerate(self.triangles):
            a, b, c = self.vertices[ia], self.vertices[ib], self.vertices[ic]
            normal = triangle_normal(a, b, c)
            inverse = triangle_basis(a, b, c, normal).inverse()

            self.normals.append(normal)
            self.inverse_bases.append(inverse)

            anchors[i] = a.to_array()
            normals[i] = normal.to_array()
            if inverse is not None and np.all(np.isfinite(inverse.rows)):
                inverses[i] = inverse.rows
                reachable[i] = True

        self._anchors: npt.NDArray[np.float64] = anchors
        self._normals: npt.NDArray[np.float64] = normals
        self._inverses: npt.NDArray[np.float64] = inverses
        # Degenerate triangles (zero area) are never hit.
        self._reachable: npt.NDArray[np.bool_] = reachable

    def __len__(self) -> int:
        return len(self.triangles)

    def material_at(self, triangle: int) -> ColorMaterial:
        """Return the material of a triangle."""
        _, color_index = self.triangles[triangle]
        return ColorMaterial(self.normals[triangle], self.palette[color_index], self.reflector)

    def hit_distances(self, ray: Ray, include_start: bool = False) -> npt.NDArray[np.float64]:
        """Compute the hit distance of the ray against every triangle.

        Args:
            ray: The ray to test. Its direction should be unit length.
            include_start: Whether a hit at the ray origin counts.

        Returns:
            Array of shape (len(self),) holding the hit distance for each
            triangle, or +inf where the triangle is missed.
        """
        count = len(self.triangles)
        if count == 0:
            return np.full(0, np.inf)

        origin = ray.origin.to_array()
        direction = ray.direction.to_array()

        # Back faces and grazing hits are culled.
        facing = (self._normals @ direction) < -EPSILON
        candidates = facing & self._reachable

        local_origin = np.einsum("nij,nj->ni", self._inverses, origin - self._anchors)
        local_origin[:, 2] -= 1.0
        local_direction = self._inverses @ direction

        with np.errstate(divide="ignore", invalid="ignore"):
            t = (PLANE_Z - local_origin[:, 2]) / local_direction[:, 2]
            u = local_origin[:, 0] + t * local_direction[:, 0]
            v = local_origin[:, 1] + t * local_direction[:, 1]

            in_front = t >= 0.0 if include_start else t > EPSILON
            inside = (u >= -EPSILON) & (v >= -EPSILON) & (u + v <= 1.0 + EPSILON)
            valid = candidates & np.isfinite(t) & in_front & inside

        return np.where(valid, t, np.inf)

    def ray_intersection(self, ray: Ray, include_start: bool = False) -> Collision | None:
        distances = self.hit_distances(ray, include_start)
        if distances.size == 0:
            return None

        nearest = int(np.argmin(distances))
        distance = float(distances[nearest])
        if not np.isfinite(distance):
            return None
        return Collision(distance, self.material_at(nearest))

    def __repr__(self) -> str:
        return (
            f"TriangleMesh(vertices={len(self.vertices)}, triangles={len(self.triangles)}, "
            f"palette={len(self.palette)}, reflector={self.reflector.name})"
        )
