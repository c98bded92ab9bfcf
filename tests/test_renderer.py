"""Tests for the image renderer.

Tests cover:
- Configuration validation
- Uniform output for a camera enclosed by a light
- Seeded reproducibility
- Progress reporting and cancellation between row batches
- Image orientation (row 0 is the top of the image)
"""

import threading

import numpy as np
import pytest


def _pinhole(aspect_ratio: float = 1.0, vfov: float = 20.0):
    from spheretrace.camera.thin_lens import ThinLensCamera

    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=vfov,
        aspect_ratio=aspect_ratio,
    )


def _matte_ball_scene():
    from spheretrace.materials import Lambertian
    from spheretrace.scene.graph import SceneList, Sphere

    return SceneList(
        [
            Sphere((0.0, 0.0, -3.0), 1.0, Lambertian(albedo=(0.5, 0.5, 0.5))),
            Sphere((0.0, -101.0, -3.0), 100.0, Lambertian(albedo=(0.8, 0.8, 0.0))),
        ]
    )


class TestRenderConfig:
    """Tests for RenderConfig validation."""

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"image_width": 0}, "image_width must be in"),
            ({"image_width": 4096}, "image_width must be in"),
            ({"image_height": 0}, "image_height must be in"),
            ({"samples_per_pixel": 0}, "samples_per_pixel must be at least 1"),
            ({"max_depth": -1}, "max_depth must be non-negative"),
            ({"rows_per_batch": 0}, "rows_per_batch must be at least 1"),
            ({"seed": -1}, "seed must fit in 32 bits"),
            ({"seed": 2**32}, "seed must fit in 32 bits"),
        ],
    )
    def test_invalid_config_raises(self, overrides, message):
        """Test that out-of-range settings are rejected by the renderer."""
        from spheretrace.core.renderer import RenderConfig, Renderer

        params = dict(image_width=8, image_height=8)
        params.update(overrides)
        with pytest.raises(ValueError, match=message):
            Renderer(RenderConfig(**params))

    def test_defaults(self):
        """Test the default settings."""
        from spheretrace.core.integrator import BackgroundMode
        from spheretrace.core.renderer import RenderConfig

        config = RenderConfig(image_width=900, image_height=600)
        config.validate()
        assert config.samples_per_pixel == 100
        assert config.max_depth == 50
        assert config.seed is None
        assert config.background.mode == BackgroundMode.SOLID
        assert config.background.color == (0.0, 0.0, 0.0)
        assert config.aspect_ratio == pytest.approx(1.5)


class TestRender:
    """Tests for Renderer.render."""

    def test_camera_inside_light_is_white(self):
        """Test that every pixel is 255 when all rays hit a unit light."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.materials import DiffuseLight
        from spheretrace.scene.graph import Sphere

        renderer = Renderer(RenderConfig(image_width=8, image_height=8, samples_per_pixel=4, seed=1))
        light = Sphere((0.0, 0.0, -3.0), 2.5, DiffuseLight(emittance=(1.0, 1.0, 1.0)))
        result = renderer.render(light, _pinhole())

        assert result.pixels.shape == (8, 8, 3)
        assert result.pixels.dtype == np.uint8
        assert (result.pixels == 255).all()
        assert np.allclose(result.radiance, 1.0, atol=1e-5)
        assert result.pixels_completed == 64
        assert result.total_pixels == 64
        assert not result.cancelled
        assert result.seed == 1

    def test_empty_scene_with_black_background_is_black(self):
        """Test that nothing to see renders black."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.scene.graph import SceneList

        renderer = Renderer(RenderConfig(image_width=6, image_height=4, samples_per_pixel=2))
        result = renderer.render(SceneList(), _pinhole(aspect_ratio=1.5))
        assert (result.pixels == 0).all()

    def test_same_seed_same_image(self):
        """Test that seeded renders are reproducible."""
        from spheretrace.core.integrator import Background
        from spheretrace.core.renderer import RenderConfig, Renderer

        config = RenderConfig(
            image_width=8,
            image_height=8,
            samples_per_pixel=4,
            seed=42,
            background=Background.sky(),
        )
        renderer = Renderer(config)
        first = renderer.render(_matte_ball_scene(), _pinhole())
        second = renderer.render(_matte_ball_scene(), _pinhole())
        np.testing.assert_array_equal(first.pixels, second.pixels)
        np.testing.assert_array_equal(first.radiance, second.radiance)

    def test_different_seeds_differ(self):
        """Test that the seed changes the noise."""
        from spheretrace.core.integrator import Background
        from spheretrace.core.renderer import RenderConfig, Renderer

        results = []
        for seed in (1, 2):
            config = RenderConfig(
                image_width=8,
                image_height=8,
                samples_per_pixel=4,
                seed=seed,
                background=Background.sky(),
            )
            results.append(Renderer(config).render(_matte_ball_scene(), _pinhole()))
        assert not np.array_equal(results[0].radiance, results[1].radiance)

    def test_unseeded_render_reports_seed(self):
        """Test that a drawn seed is returned and fits in 32 bits."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.scene.graph import SceneList

        result = Renderer(RenderConfig(image_width=2, image_height=2, samples_per_pixel=1)).render(
            SceneList(), _pinhole()
        )
        assert 0 <= result.seed <= 0xFFFFFFFF

    def test_row_zero_is_top(self):
        """Test that the sky is bluer (less red) at the top of the image."""
        from spheretrace.core.integrator import Background
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.scene.graph import SceneList

        config = RenderConfig(
            image_width=4,
            image_height=8,
            samples_per_pixel=4,
            seed=3,
            background=Background.sky(),
        )
        result = Renderer(config).render(SceneList(), _pinhole(aspect_ratio=0.5, vfov=90.0))
        red = result.radiance[:, :, 0].mean(axis=1)
        assert red[0] < red[-1]

    def test_aspect_mismatch_warns(self, caplog):
        """Test that a camera/image aspect mismatch is logged."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.scene.graph import SceneList

        renderer = Renderer(RenderConfig(image_width=4, image_height=2, samples_per_pixel=1))
        with caplog.at_level("WARNING", logger="spheretrace.core.renderer"):
            renderer.render(SceneList(), _pinhole(aspect_ratio=1.0))
        assert "does not match" in caplog.text

    def test_default_scene_renders(self):
        """Test a tiny render of the default scene."""
        from spheretrace.core.integrator import Background
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.scene.presets import create_default_scene

        config = RenderConfig(
            image_width=12,
            image_height=8,
            samples_per_pixel=2,
            seed=7,
            background=Background.sky(),
        )
        scene, camera = create_default_scene(aspect_ratio=config.aspect_ratio)
        renderer = Renderer(config)
        result = renderer.render(scene, camera)

        assert result.pixels.shape == (8, 12, 3)
        assert result.pixels_completed == 96
        assert result.pixels.max() > 0
        # blue, yellow, gold and the shared glass
        assert len(renderer.palette) == 4


class TestProgressAndCancel:
    """Tests for row batches, progress callbacks and cancellation."""

    def test_progress_callback_per_batch(self):
        """Test that the callback fires after every batch with a growing count."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.scene.graph import SceneList

        calls = []
        config = RenderConfig(image_width=8, image_height=10, samples_per_pixel=1, rows_per_batch=4)
        result = Renderer(config).render(
            SceneList(),
            _pinhole(aspect_ratio=0.8),
            callback=lambda done, total: calls.append((done, total)),
        )

        assert calls == [(32, 80), (64, 80), (80, 80)]
        assert result.pixels_completed == 80
        assert not result.cancelled

    def test_cancel_before_start(self):
        """Test that a pre-set cancel event renders nothing."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.materials import DiffuseLight
        from spheretrace.scene.graph import Sphere

        cancel = threading.Event()
        cancel.set()
        config = RenderConfig(image_width=8, image_height=8, samples_per_pixel=1, rows_per_batch=2)
        light = Sphere((0.0, 0.0, -3.0), 2.5, DiffuseLight(emittance=(1.0, 1.0, 1.0)))
        result = Renderer(config).render(light, _pinhole(), cancel_event=cancel)

        assert result.cancelled
        assert result.pixels_completed == 0
        assert (result.pixels == 0).all()

    def test_cancel_from_callback_stops_after_batch(self):
        """Test that cancelling mid-render keeps the finished rows only."""
        from spheretrace.core.renderer import RenderConfig, Renderer
        from spheretrace.materials import DiffuseLight
        from spheretrace.scene.graph import Sphere

        cancel = threading.Event()
        config = RenderConfig(image_width=8, image_height=8, samples_per_pixel=1, rows_per_batch=2)
        light = Sphere((0.0, 0.0, -3.0), 2.5, DiffuseLight(emittance=(1.0, 1.0, 1.0)))
        result = Renderer(config).render(
            light, _pinhole(), callback=lambda done, total: cancel.set(), cancel_event=cancel
        )

        assert result.cancelled
        assert result.pixels_completed == 16
        assert (result.pixels[:2] == 255).all()
        assert (result.pixels[2:] == 0).all()
