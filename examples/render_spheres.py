#!/usr/bin/env python3
"""Render the default sphere scene, or a scene loaded from JSON.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 900)
    --height HEIGHT         Image height in pixels (default: 600)
    --samples SAMPLES       Number of samples per pixel (default: 100)
    --max-depth DEPTH       Maximum bounces per path (default: 50)
    --seed SEED             RNG seed for a reproducible image
    --scene FILE            JSON scene description (default: built-in scene)
    --output OUTPUT         Output file path (default: spheres.png)
    --rows-per-batch ROWS   Rows per progress update (default: 16)
    --gpu                   Use a GPU backend instead of the CPU
    --quiet                 Suppress progress output

Example:
    python -m examples.render_spheres --width 300 --height 200 --samples 20 --seed 7
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene by path tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=900, help="Image width in pixels (default: 900)")
    parser.add_argument(
        "--height", type=int, default=600, help="Image height in pixels (default: 600)"
    )
    parser.add_argument(
        "--samples", type=int, default=100, help="Number of samples per pixel (default: 100)"
    )
    parser.add_argument(
        "--max-depth", type=int, default=50, help="Maximum bounces per path (default: 50)"
    )
    parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: random)")
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="JSON scene with 'materials', 'objects' and 'camera' keys",
    )
    parser.add_argument(
        "--output", type=str, default="spheres.png", help="Output file path (default: spheres.png)"
    )
    parser.add_argument(
        "--rows-per-batch", type=int, default=16, help="Rows per progress update (default: 16)"
    )
    parser.add_argument("--gpu", action="store_true", help="Use a GPU backend instead of the CPU")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_spheres(
    width: int = 900,
    height: int = 600,
    num_samples: int = 100,
    max_depth: int = 50,
    seed: int | None = None,
    scene_path: Path | None = None,
    output_path: str = "spheres.png",
    rows_per_batch: int = 16,
    quiet: bool = False,
) -> Path:
    """Render a scene under a sky background and save it as PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretrace.core.integrator import Background
    from spheretrace.core.renderer import RenderConfig, Renderer
    from spheretrace.output.export import save_png
    from spheretrace.scene.config import camera_from_dict, scene_from_dict
    from spheretrace.scene.presets import create_default_scene

    aspect_ratio = width / height
    if scene_path is None:
        scene, camera = create_default_scene(aspect_ratio)
    else:
        data = json.loads(scene_path.read_text())
        scene = scene_from_dict(data)
        camera = camera_from_dict(data.get("camera", {}), aspect_ratio)

    config = RenderConfig(
        image_width=width,
        image_height=height,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        seed=seed,
        background=Background.sky(),
        rows_per_batch=rows_per_batch,
    )
    renderer = Renderer(config)

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            print(
                f"\r  Progress: {done}/{total} pixels ({100.0 * done / total:.1f}%)",
                end="",
                flush=True,
            )

    result = renderer.render(scene, camera, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(result.pixels, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {result.elapsed_seconds:.2f}s (seed {result.seed})")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ti.init(arch=ti.gpu if args.gpu else ti.cpu)

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_path=args.scene,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
