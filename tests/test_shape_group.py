"""Unit tests for shape groups and collision records."""

import pytest

from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import Vec3
from src.pathtracer.geometry.mesh import TriangleMesh
from src.pathtracer.geometry.shape import (
    Collision,
    RayCollision,
    ShapeGroup,
    accepts_distance,
    nearest_collision,
)
from src.pathtracer.geometry.sphere import InvertedSphere, Sphere
from src.pathtracer.materials.material import ColorMaterial


class TestAcceptsDistance:
    """Tests for the include_start policy."""

    def test_inclusive(self):
        assert accepts_distance(0.0, include_start=True)
        assert not accepts_distance(-1e-12, include_start=True)

    def test_exclusive(self):
        assert not accepts_distance(0.0, include_start=False)
        assert not accepts_distance(1e-6, include_start=False)
        assert accepts_distance(1e-4, include_start=False)

    def test_nan_never_accepted(self):
        assert not accepts_distance(float("nan"), include_start=True)
        assert not accepts_distance(float("nan"), include_start=False)


class TestShapeGroup:
    """Tests for nearest-hit selection across shapes."""

    def test_nearest_member_wins(self):
        near = Sphere(Vec3(0.0, 0.0, -3.0), 1.0, Color.RED)
        far = Sphere(Vec3(0.0, 0.0, -10.0), 1.0, Color.GREEN)
        group = ShapeGroup([far, near])

        hit = group.ray_intersection(Ray(Vec3.ZERO, Vec3.NEG_Z))
        assert hit is not None
        assert hit.distance == pytest.approx(2.0)
        assert hit.material.color == Color.RED

    def test_mixed_primitives(self):
        dome = InvertedSphere(Vec3.ZERO, 15.0, Color.WHITE)
        floor = TriangleMesh(
            [Vec3(-5.0, -1.0, 5.0), Vec3(5.0, -1.0, 5.0), Vec3(0.0, -1.0, -5.0)],
            [Color.GREEN],
            [((0, 1, 2), 0)],
        )
        group = ShapeGroup([dome, floor])

        down = group.ray_intersection(Ray(Vec3.ZERO, Vec3.NEG_Y))
        assert down is not None
        assert down.distance == pytest.approx(1.0)
        assert down.material.color == Color.GREEN

        up = group.ray_intersection(Ray(Vec3.ZERO, Vec3.Y))
        assert up is not None
        assert up.distance == pytest.approx(15.0)

    def test_empty_group_misses(self):
        group = ShapeGroup()
        assert len(group) == 0
        assert group.ray_intersection(Ray(Vec3.ZERO, Vec3.X)) is None

    def test_iteration(self):
        shapes = [Sphere(Vec3.ZERO, 1.0, Color.WHITE), Sphere(Vec3.X, 1.0, Color.WHITE)]
        group = ShapeGroup(shapes)
        assert list(group) == shapes
        assert group.shapes == tuple(shapes)

    def test_groups_nest(self):
        inner = ShapeGroup([Sphere(Vec3(0.0, 0.0, -3.0), 1.0, Color.RED)])
        outer = ShapeGroup([inner, Sphere(Vec3(0.0, 0.0, -6.0), 1.0, Color.BLUE)])
        hit = outer.ray_intersection(Ray(Vec3.ZERO, Vec3.NEG_Z))
        assert hit is not None
        assert hit.material.color == Color.RED


class TestCollisionRecords:
    """Tests for Collision and RayCollision helpers."""

    def test_nearest_collision_ignores_misses(self):
        material = ColorMaterial(Vec3.Y, Color.WHITE)
        a = Collision(3.0, material)
        b = Collision(1.5, material)
        assert nearest_collision([None, a, b, None]) is b
        assert nearest_collision([None, None]) is None

    def test_ray_collision_geometry(self):
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        ray = Ray.towards(Vec3(0.0, 5.0, 5.0), Vec3(0.0, -1.0, -1.0))
        hit = sphere.intersect(ray)

        assert isinstance(hit, RayCollision)
        position = hit.position()
        assert position.magnitude() == pytest.approx(1.0)

        reflection = hit.reflection()
        assert reflection.origin == position
        # Mirror reflection keeps the angle to the normal
        assert reflection.direction.dot(hit.normal) == pytest.approx(
            -ray.direction.dot(hit.normal)
        )

    def test_intersect_miss_is_none(self):
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        assert sphere.intersect(Ray(Vec3(0.0, 5.0, 0.0), Vec3.Y)) is None

    def test_bounce_leaves_from_hit_point_into_normal_hemisphere(self, rng):
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        hit = sphere.intersect(Ray(Vec3(0.0, 0.0, 5.0), Vec3.NEG_Z))
        assert hit is not None

        for _ in range(50):
            bounce = hit.bounce(rng)
            assert bounce.origin == hit.position()
            assert bounce.direction.dot(hit.normal) >= 0.0
            assert bounce.direction.magnitude() == pytest.approx(1.0)
