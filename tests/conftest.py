"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_tables():
    """Clear the scene tables before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before the fields are touched
    from pathtracer.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()


@pytest.fixture
def gray():
    """A mid-gray diffuse material."""
    from pathtracer.materials.lambertian import Lambertian

    return Lambertian((0.5, 0.5, 0.5))
