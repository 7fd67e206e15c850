"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere
- The include_start policy at the ray origin
- InvertedSphere far-root hits and inward normals
- Hits lie on the surface with unit normals
"""

import math

import pytest

from src.pathtracer.core.color import Color
from src.pathtracer.core.ray import Ray
from src.pathtracer.core.sampler import Lcg
from src.pathtracer.core.vector import Vec3
from src.pathtracer.geometry.sphere import InvertedSphere, Sphere, solve_sphere
from src.pathtracer.materials.reflector import Reflector, random_unit_vector


class TestSolveSphere:
    """Tests for the quadratic solver."""

    def test_roots_are_ordered(self):
        roots = solve_sphere(Ray(Vec3(0.0, 0.0, 5.0), Vec3.NEG_Z), Vec3.ZERO, 1.0)
        assert roots == pytest.approx((4.0, 6.0))

    def test_miss_returns_none(self):
        assert solve_sphere(Ray(Vec3(0.0, 2.0, 5.0), Vec3.NEG_Z), Vec3.ZERO, 1.0) is None

    def test_nan_input_returns_none(self):
        ray = Ray(Vec3.ZERO, Vec3(math.nan, 0.0, 0.0))
        assert solve_sphere(ray, Vec3(0.0, 0.0, -3.0), 1.0) is None


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        hit = sphere.ray_intersection(Ray(Vec3(0.0, 0.0, 5.0), Vec3.NEG_Z))

        assert hit is not None
        assert hit.distance == pytest.approx(4.0)
        assert hit.normal.z == pytest.approx(1.0)
        assert hit.material.color == Color.WHITE
        assert hit.material.reflector is Reflector.LAMBERTIAN

    def test_miss(self):
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        assert sphere.ray_intersection(Ray(Vec3(0.0, 0.0, 5.0), Vec3.Z)) is None
        assert sphere.ray_intersection(Ray(Vec3(3.0, 0.0, 5.0), Vec3.NEG_Z)) is None

    def test_ray_from_inside_hits_far_side(self):
        sphere = Sphere(Vec3.ZERO, 2.0, Color.WHITE)
        hit = sphere.ray_intersection(Ray(Vec3.ZERO, Vec3.X))

        assert hit is not None
        assert hit.distance == pytest.approx(2.0)
        # Normal still points away from the center
        assert hit.normal.x == pytest.approx(1.0)

    def test_origin_on_surface_excluded_by_default(self):
        """Test that a bounce ray does not re-hit the surface it left."""
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        ray = Ray(Vec3(0.0, 0.0, 1.0), Vec3.Z)

        assert sphere.ray_intersection(ray) is None

    def test_origin_on_surface_included_on_request(self):
        sphere = Sphere(Vec3.ZERO, 1.0, Color.WHITE)
        ray = Ray(Vec3(0.0, 0.0, 1.0), Vec3.Z)

        hit = sphere.ray_intersection(ray, include_start=True)
        assert hit is not None
        assert hit.distance == pytest.approx(0.0, abs=1e-12)

    def test_hits_lie_on_surface_with_unit_normals(self):
        center = Vec3(1.0, -2.0, 0.5)
        radius = 1.5
        sphere = Sphere(center, radius, Color.WHITE)
        rng = Lcg.from_seed(7)

        hits = 0
        for _ in range(200):
            origin = center + random_unit_vector(rng) * 6.0
            target = center + random_unit_vector(rng) * (radius * 0.9)
            ray = Ray.towards(origin, target - origin)
            collision = sphere.ray_intersection(ray)
            assert collision is not None
            hits += 1

            point = ray.point_at(collision.distance)
            assert (point - center).magnitude() == pytest.approx(radius, abs=1e-9)
            assert collision.normal.magnitude() == pytest.approx(1.0, abs=1e-9)
            # Outward normal faces the incoming ray
            assert collision.normal.dot(point - center) > 0.0
            assert collision.normal.dot(ray.direction) < 0.0
        assert hits == 200


class TestInvertedSphere:
    """Tests for the enclosing dome primitive."""

    def test_hit_from_inside_points_inward(self):
        dome = InvertedSphere(Vec3.ZERO, 15.0, Color.WHITE)
        hit = dome.ray_intersection(Ray(Vec3.ZERO, Vec3.Y))

        assert hit is not None
        assert hit.distance == pytest.approx(15.0)
        assert hit.normal.y == pytest.approx(-1.0)

    def test_ray_from_outside_hits_far_side(self):
        dome = InvertedSphere(Vec3.ZERO, 1.0, Color.WHITE)
        hit = dome.ray_intersection(Ray(Vec3(0.0, 0.0, 5.0), Vec3.NEG_Z))

        assert hit is not None
        assert hit.distance == pytest.approx(6.0)
        # Far side at z = -1, normal toward the center
        assert hit.normal.z == pytest.approx(1.0)

    def test_far_root_behind_ray_is_miss(self):
        dome = InvertedSphere(Vec3.ZERO, 1.0, Color.WHITE)
        assert dome.ray_intersection(Ray(Vec3(0.0, 0.0, 5.0), Vec3.Z)) is None

    def test_normals_point_toward_center(self):
        dome = InvertedSphere(Vec3(0.0, 1.0, 0.0), 4.0, Color.WHITE)
        rng = Lcg.from_seed(3)

        for _ in range(100):
            direction = random_unit_vector(rng)
            hit = dome.ray_intersection(Ray(Vec3(0.0, 1.0, 0.0), direction))
            assert hit is not None
            point = direction * hit.distance + Vec3(0.0, 1.0, 0.0)
            assert hit.normal.dot(Vec3(0.0, 1.0, 0.0) - point) > 0.0
            assert hit.normal.magnitude() == pytest.approx(1.0, abs=1e-9)

    def test_repr_names_subclass(self):
        dome = InvertedSphere(Vec3.ZERO, 2.0, Color.WHITE)
        assert repr(dome).startswith("InvertedSphere(")
