"""Vector and matrix kernel for CPU path tracing.

This module provides the immutable 3D vector type used by every other layer
of the renderer, plus a small 3x3 matrix type used to build the per-triangle
change of basis for mesh intersection.

Vectors are plain Python floats so that per-ray arithmetic stays cheap; the
matrix type wraps a read-only NumPy array because it is built once per
triangle and then stacked into NumPy arrays by the mesh.

Example:
    >>> from src.pathtracer.core.vector import Vec3, Mat3
    >>> a = Vec3(1.0, 0.0, 0.0)
    >>> b = Vec3(0.0, 1.0, 0.0)
    >>> a.cross(b)
    Vec3(x=0.0, y=0.0, z=1.0)
    >>> Mat3.identity().inverse() == Mat3.identity()
    True
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar

import numpy as np
import numpy.typing as npt

# Shared geometric tolerance: self-intersection, grazing angles, triangle edges.
EPSILON = 1e-5


# =============================================================================
# Vec3
# =============================================================================


@dataclass(frozen=True, slots=True)
class Vec3:
    """An immutable 3-component floating point vector.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    ZERO: ClassVar[Vec3]
    X: ClassVar[Vec3]
    Y: ClassVar[Vec3]
    Z: ClassVar[Vec3]
    NEG_X: ClassVar[Vec3]
    NEG_Y: ClassVar[Vec3]
    NEG_Z: ClassVar[Vec3]

    @classmethod
    def splat(cls, value: float) -> Vec3:
        """Create a vector with all three components equal to value."""
        return cls(value, value, value)

    @classmethod
    def from_array(cls, values: npt.ArrayLike) -> Vec3:
        """Create a vector from any 3-element array-like."""
        x, y, z = np.asarray(values, dtype=np.float64).reshape(3)
        return cls(float(x), float(y), float(z))

    def to_array(self) -> npt.NDArray[np.float64]:
        """Return the components as a float64 NumPy array of shape (3,)."""
        return np.array((self.x, self.y, self.z), dtype=np.float64)

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec3:
        return self * (1.0 / scalar)

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def scale(self, scalar: float) -> Vec3:
        """Return the vector scaled by a scalar."""
        return self * scalar

    def dot(self, other: Vec3) -> float:
        """Return the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        """Return the cross product self x other."""
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def squared_magnitude(self) -> float:
        """Return the squared Euclidean length.

        Cheaper than magnitude() when only comparing distances.
        """
        return self.dot(self)

    def magnitude(self) -> float:
        """Return the Euclidean length."""
        return math.sqrt(self.squared_magnitude())

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        The zero vector has no direction: the result then has non-finite
        components instead of raising. Use normalize_or_zero() when the
        input may be zero.
        """
        mag = self.magnitude()
        inv = 1.0 / mag if mag != 0.0 else math.inf
        return Vec3(self.x * inv, self.y * inv, self.z * inv)

    def normalize_or_zero(self) -> Vec3:
        """Return a unit vector, or the zero vector if self has zero length."""
        mag = self.magnitude()
        if mag == 0.0:
            return Vec3.ZERO
        return self * (1.0 / mag)

    def project_onto(self, direction: Vec3) -> Vec3:
        """Return the component of self parallel to direction."""
        return direction * (self.dot(direction) / direction.dot(direction))

    def reject_wrt(self, direction: Vec3) -> Vec3:
        """Return the component of self perpendicular to direction."""
        return self - self.project_onto(direction)

    def reflect_across(self, normal: Vec3) -> Vec3:
        """Reflect self about the plane whose normal is given.

        The normal need not be unit length.

        Args:
            normal: The surface normal to reflect across.

        Returns:
            The mirrored direction, self - 2 * proj_normal(self).
        """
        return self - 2.0 * self.project_onto(normal)

    def l1_norm(self) -> float:
        """Return the sum of absolute components."""
        return abs(self.x) + abs(self.y) + abs(self.z)


Vec3.ZERO = Vec3(0.0, 0.0, 0.0)
Vec3.X = Vec3(1.0, 0.0, 0.0)
Vec3.Y = Vec3(0.0, 1.0, 0.0)
Vec3.Z = Vec3(0.0, 0.0, 1.0)
Vec3.NEG_X = Vec3(-1.0, 0.0, 0.0)
Vec3.NEG_Y = Vec3(0.0, -1.0, 0.0)
Vec3.NEG_Z = Vec3(0.0, 0.0, -1.0)


# =============================================================================
# Mat3
# =============================================================================


class Mat3:
    """An immutable 3x3 matrix.

    Stored row-major as a read-only float64 NumPy array. Used to build the
    change of basis for each mesh triangle, so inversion happens once per
    triangle at load time and never per ray.

    Attributes:
        rows: The (3, 3) read-only array backing the matrix.
    """

    __slots__ = ("rows",)

    def __init__(self, rows: npt.ArrayLike) -> None:
        array = np.array(rows, dtype=np.float64).reshape(3, 3)
        array.setflags(write=False)
        self.rows: npt.NDArray[np.float64] = array

    @classmethod
    def from_row_vectors(cls, row1: Vec3, row2: Vec3, row3: Vec3) -> Mat3:
        """Create a matrix whose rows are the given vectors."""
        return cls([tuple(row1), tuple(row2), tuple(row3)])

    @classmethod
    def from_col_vectors(cls, col1: Vec3, col2: Vec3, col3: Vec3) -> Mat3:
        """Create a matrix whose columns are the given vectors."""
        return cls.from_row_vectors(col1, col2, col3).transpose()

    @classmethod
    def identity(cls) -> Mat3:
        """Return the 3x3 identity matrix."""
        return cls(np.eye(3))

    def __getitem__(self, index: int) -> Vec3:
        return Vec3.from_array(self.rows[index])

    def __iter__(self) -> Iterator[Vec3]:
        for i in range(3):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mat3):
            return NotImplemented
        return bool(np.array_equal(self.rows, other.rows))

    def __hash__(self) -> int:
        return hash(self.rows.tobytes())

    def __repr__(self) -> str:
        return f"Mat3({self.rows.tolist()!r})"

    def __add__(self, other: Mat3) -> Mat3:
        return Mat3(self.rows + other.rows)

    def __sub__(self, other: Mat3) -> Mat3:
        return Mat3(self.rows - other.rows)

    def __neg__(self) -> Mat3:
        return Mat3(-self.rows)

    def __mul__(self, scalar: float) -> Mat3:
        return self.scale(scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Mat3:
        return self.scale(1.0 / scalar)

    def __matmul__(self, other: Mat3 | Vec3) -> Mat3 | Vec3:
        """Compose with another matrix, or transform a vector.

        Args:
            other: A Mat3 (composition, self applied last) or a Vec3.

        Returns:
            The product matrix, or the transformed vector.
        """
        if isinstance(other, Vec3):
            return Vec3.from_array(self.rows @ other.to_array())
        if isinstance(other, Mat3):
            return Mat3(self.rows @ other.rows)
        return NotImplemented

    def __rmatmul__(self, other: Vec3) -> Vec3:
        # Row vector times matrix.
        if isinstance(other, Vec3):
            return Vec3.from_array(other.to_array() @ self.rows)
        return NotImplemented

    def transpose(self) -> Mat3:
        """Return the transposed matrix."""
        return Mat3(self.rows.T)

    def scale(self, scalar: float) -> Mat3:
        """Return the matrix with every entry multiplied by scalar."""
        return Mat3(self.rows * scalar)

    def inverse(self) -> Mat3 | None:
        """Invert the matrix with Gauss-Jordan elimination.

        Rows are only swapped to avoid a zero pivot; the search takes the
        first row below the diagonal with a nonzero entry in the pivot
        column. A column with no nonzero candidate means the matrix is
        singular.

        Returns:
            The inverse matrix, or None if the matrix is singular.
        """
        work = self.rows.copy()
        inverse = np.eye(3)

        for i in range(3):
            if work[i, i] == 0.0:
                for j in range(i + 1, 3):
                    if work[j, i] != 0.0:
                        work[[i, j]] = work[[j, i]]
                        inverse[[i, j]] = inverse[[j, i]]
                        break
                else:
                    return None

            pivot = 1.0 / work[i, i]
            work[i] *= pivot
            inverse[i] *= pivot

            for j in range(3):
                if j == i:
                    continue
                factor = work[j, i]
                work[j] -= factor * work[i]
                inverse[j] -= factor * inverse[i]

        return Mat3(inverse)
