"""Parallel image renderer.

The Renderer turns a scene graph and a camera into an 8-bit RGB image:

    - Materials and spheres are uploaded to Taichi fields once per render.
    - Every pixel gets its own RNG stream, seeded from the render seed and
      the pixel index, so a seeded render is reproducible bit for bit.
    - Pixels are traced in parallel by the Taichi kernel; the samples of one
      pixel run serially and are averaged.
    - The image is rendered in bands of rows. Between bands the progress
      callback is invoked and the cancel event is checked.

Each sample is jittered inside its pixel: ``s = (i + xi) / W`` and
``t = (j + xi) / H``, with row 0 at the top. The average radiance is
gamma-corrected with a square root, clamped to [0, 1] and scaled by 255.99
before truncation to uint8. NaN channels are written as 0.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.renderer import RenderConfig, Renderer
    >>> from spheretrace.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene(aspect_ratio=3 / 2)
    >>> renderer = Renderer(RenderConfig(image_width=300, image_height=200))
    >>> result = renderer.render(scene, camera)
    >>> result.pixels.shape
    (200, 300, 3)
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretrace.camera.thin_lens import ThinLensCamera, get_ray, sample_lens, setup_camera
from spheretrace.core.integrator import MAX_DEPTH, Background, setup_background, trace_ray
from spheretrace.core.sampler import next_uniform, seed_stream
from spheretrace.materials.palette import MaterialPalette
from spheretrace.scene.graph import Scene
from spheretrace.scene.intersection import upload_scene

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (pixels_completed, total_pixels)
ProgressCallback = Callable[[int, int], None]

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# =============================================================================
# Configuration and Results
# =============================================================================


@dataclass
class RenderConfig:
    """Settings for a render.

    Attributes:
        image_width: Output width in pixels (1 to MAX_IMAGE_WIDTH).
        image_height: Output height in pixels (1 to MAX_IMAGE_HEIGHT).
        samples_per_pixel: Number of paths averaged per pixel.
        max_depth: Maximum number of scattering events per path.
        seed: RNG seed. None draws a fresh seed for every render.
        background: Radiance for rays that escape the scene.
        rows_per_batch: Rows traced per kernel launch. Progress callbacks
            and cancellation checks happen between batches.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    seed: int | None = None
    background: Background = field(default_factory=Background)
    rows_per_batch: int = 16

    @property
    def aspect_ratio(self) -> float:
        return self.image_width / self.image_height

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not 1 <= self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"image_width must be in [1, {MAX_IMAGE_WIDTH}], got {self.image_width}"
            )
        if not 1 <= self.image_height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"image_height must be in [1, {MAX_IMAGE_HEIGHT}], got {self.image_height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be at least 1, got {self.rows_per_batch}")
        if self.seed is not None and not 0 <= self.seed <= 0xFFFFFFFF:
            raise ValueError(f"seed must fit in 32 bits, got {self.seed}")


@dataclass
class RenderResult:
    """Output of a render.

    Attributes:
        pixels: uint8 array of shape (height, width, 3), row 0 at the top.
        radiance: float32 array of the same shape holding the linear mean
            radiance of each pixel before gamma correction.
        pixels_completed: Number of pixels that were traced.
        cancelled: True if the render stopped early. Untraced pixels are 0.
        elapsed_seconds: Wall-clock render time.
        seed: The seed actually used.
    """

    pixels: npt.NDArray[np.uint8]
    radiance: npt.NDArray[np.float32]
    pixels_completed: int
    cancelled: bool
    elapsed_seconds: float
    seed: int

    @property
    def total_pixels(self) -> int:
        return int(self.pixels.shape[0] * self.pixels.shape[1])


# =============================================================================
# Render Target
# =============================================================================

_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_radiance = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_rng_states = ti.field(dtype=ti.u32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_pixels_completed = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _clear_region(width: ti.i32, height: ti.i32):
    """Zero the active region of the output buffers."""
    for j, i in ti.ndrange(height, width):
        _pixels[j, i] = ti.Vector([0, 0, 0], ti.u8)
        _radiance[j, i] = vec3(0.0, 0.0, 0.0)


@ti.kernel
def _seed_rng_states(width: ti.i32, height: ti.i32, seed: ti.u32):
    """Give every pixel an independent random stream."""
    for j, i in ti.ndrange(height, width):
        _rng_states[j, i] = seed_stream(seed, ti.cast(j * width + i, ti.u32))


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Trace every pixel in rows [row_start, row_end)."""
    for j, i in ti.ndrange((row_start, row_end), (0, width)):
        state = _rng_states[j, i]
        total = vec3(0.0, 0.0, 0.0)

        for _sample in range(samples_per_pixel):
            jitter_s, state = next_uniform(state)
            jitter_t, state = next_uniform(state)
            s = (ti.cast(i, ti.f32) + jitter_s) / ti.cast(width, ti.f32)
            t = (ti.cast(j, ti.f32) + jitter_t) / ti.cast(height, ti.f32)

            lens_sample, state = sample_lens(state)
            color, _tests, state = trace_ray(get_ray(s, t, lens_sample), max_depth, state)
            total += color

        mean = total / ti.cast(samples_per_pixel, ti.f32)
        _radiance[j, i] = mean

        # Gamma 2, then clamp; NaN channels map to black
        mapped = tm.sqrt(mean)
        for c in ti.static(range(3)):
            if tm.isnan(mapped[c]):
                mapped[c] = 0.0
        mapped = tm.clamp(mapped, 0.0, 1.0)
        _pixels[j, i] = ti.cast(ti.cast(mapped * 255.99, ti.i32), ti.u8)

        _rng_states[j, i] = state
        ti.atomic_add(_pixels_completed[None], 1)


# =============================================================================
# Renderer
# =============================================================================


class Renderer:
    """Renders a scene graph through a thin-lens camera.

    Only one render runs at a time; the output buffers are shared Taichi
    fields. The progress callback and cancel event may be used from other
    threads.

    Attributes:
        config: The render settings.
    """

    def __init__(self, config: RenderConfig) -> None:
        """Initialize the renderer.

        Args:
            config: Render settings.

        Raises:
            ValueError: If the configuration is invalid.
        """
        config.validate()
        self._config = config
        self._palette = MaterialPalette()

    @property
    def config(self) -> RenderConfig:
        """Get the render settings."""
        return self._config

    @property
    def width(self) -> int:
        return self._config.image_width

    @property
    def height(self) -> int:
        return self._config.image_height

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    @property
    def palette(self) -> MaterialPalette:
        """Get the material palette built by the most recent render."""
        return self._palette

    def render(
        self,
        scene: Scene,
        camera: ThinLensCamera,
        callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RenderResult:
        """Render the scene.

        Args:
            scene: A Sphere or SceneList.
            camera: The camera to render through.
            callback: Optional function called after each row batch with
                (pixels_completed, total_pixels).
            cancel_event: Optional event; when set, rendering stops at the
                next batch boundary.

        Returns:
            A RenderResult. If cancelled, pixels that were not reached are 0.

        Raises:
            ValueError: If the configuration or camera is invalid.
            RuntimeError: If the scene exceeds sphere or material capacity.
        """
        config = self._config
        config.validate()
        width, height = config.image_width, config.image_height

        if abs(camera.aspect_ratio - config.aspect_ratio) > 1e-3 * config.aspect_ratio:
            logger.warning(
                "Camera aspect ratio %.4f does not match image aspect ratio %.4f",
                camera.aspect_ratio,
                config.aspect_ratio,
            )

        seed = config.seed
        if seed is None:
            seed = int(np.random.default_rng().integers(0, 2**32))

        self._palette.clear()
        sphere_count = upload_scene(scene, self._palette)
        setup_camera(camera)
        setup_background(config.background)

        _clear_region(width, height)
        _seed_rng_states(width, height, seed)
        _pixels_completed[None] = 0

        logger.info(
            "Rendering %dx%d, %d spp, max depth %d, %d spheres, seed %d",
            width,
            height,
            config.samples_per_pixel,
            config.max_depth,
            sphere_count,
            seed,
        )

        start = time.perf_counter()
        cancelled = False
        total = width * height
        for row_start in range(0, height, config.rows_per_batch):
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                logger.info("Render cancelled at row %d of %d", row_start, height)
                break

            row_end = min(row_start + config.rows_per_batch, height)
            _render_rows(
                row_start, row_end, width, height, config.samples_per_pixel, config.max_depth
            )

            if callback is not None:
                callback(int(_pixels_completed[None]), total)

        ti.sync()
        elapsed = time.perf_counter() - start
        completed = int(_pixels_completed[None])
        logger.info("Rendered %d/%d pixels in %.2fs", completed, total, elapsed)

        return RenderResult(
            pixels=_pixels.to_numpy()[:height, :width].copy(),
            radiance=_radiance.to_numpy()[:height, :width].copy(),
            pixels_completed=completed,
            cancelled=cancelled,
            elapsed_seconds=elapsed,
            seed=seed,
        )

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self._config.samples_per_pixel})"
        )
