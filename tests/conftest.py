"""Pytest configuration for spheretrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the module-level fields.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset scene, material and background state around each test."""
    # Import here so Taichi is initialized before fields are allocated
    from spheretrace.core.integrator import Background, setup_background
    from spheretrace.materials.palette import clear_palette
    from spheretrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_palette()
        setup_background(Background())

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def palette():
    """A fresh material palette."""
    from spheretrace.materials.palette import MaterialPalette

    return MaterialPalette()
