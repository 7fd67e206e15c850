"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules: a seeded random
generator, a small display and the sphere-in-dome regression scene.
"""

import pytest

from src.pathtracer.camera.pinhole import Display
from src.pathtracer.core.sampler import Lcg
from src.pathtracer.scene.presets import create_sphere_dome_scene
from src.pathtracer.scene.scene import Scene

TEST_SEED = 42


@pytest.fixture
def rng() -> Lcg:
    """A generator with a fixed seed, fresh for every test."""
    return Lcg.from_seed(TEST_SEED)


@pytest.fixture
def small_display() -> Display:
    """A 12x7 display, small enough for full renders in tests."""
    return Display(12, 7)


@pytest.fixture
def dome_scene(small_display: Display) -> Scene:
    """The sphere-in-dome scene at the small display size."""
    return create_sphere_dome_scene(small_display)
