"""Tests for the ready-made scenes."""

import math

import pytest


def test_default_scene_layout():
    """Test the default scene's spheres and shared glass."""
    from spheretrace.materials import Dielectric, Lambertian, Metal
    from spheretrace.scene.graph import iter_spheres
    from spheretrace.scene.presets import create_default_scene

    scene, _ = create_default_scene()
    spheres = list(iter_spheres(scene))
    assert len(spheres) == 5

    center, ground, right, left_outer, left_inner = spheres
    assert center.material == Lambertian(albedo=(0.1, 0.2, 0.5))
    assert ground.radius == 100.0
    assert ground.material == Lambertian(albedo=(0.8, 0.8, 0.0))
    assert right.material == Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
    assert isinstance(left_outer.material, Dielectric)
    assert left_outer.material is left_inner.material
    # Hollow bubble: same center, negative inner radius
    assert left_outer.center == left_inner.center
    assert left_inner.radius == -0.4


def test_default_camera():
    """Test the default camera looks at the center sphere in focus."""
    from spheretrace.scene.presets import create_default_scene

    _, camera = create_default_scene(aspect_ratio=2.0)
    assert camera.lookfrom == (3.0, 3.0, 2.0)
    assert camera.lookat == (0.0, 0.0, -1.0)
    assert camera.vfov == 20.0
    assert camera.aperture == 0.0
    assert camera.aspect_ratio == 2.0
    assert camera.focus_dist == pytest.approx(math.sqrt(27.0))
    camera.validate()
