#!/usr/bin/env python3
"""Render one of the preset sphere scenes.

Builds a preset world, renders it band by band and writes the result as PPM
(plain text) or any Pillow-supported format, chosen by the output extension.

Usage:
    python -m examples.render_spheres [options]

Options:
    --scene SCENE       Preset scene: showcase or single (default: showcase)
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 225)
    --samples SAMPLES   Samples per pixel (default: 100)
    --max-depth DEPTH   Maximum bounce depth (default: 50)
    --seed SEED         Seed of the per-pixel random streams (default: 0)
    --band-rows ROWS    Rows rendered per kernel launch (default: 16)
    --deadline SECONDS  Abort the render after this many seconds
    --output OUTPUT     Output file path (default: spheres.png)
    --show              Display the image when done
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --scene single --width 128 --height 128 --output single.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

SCENES = ("showcase", "single")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=SCENES, default="showcase", help="Preset scene (default: showcase)")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=225, help="Image height in pixels (default: 225)")
    parser.add_argument("--samples", type=int, default=100, help="Samples per pixel (default: 100)")
    parser.add_argument("--max-depth", type=int, default=50, help="Maximum bounce depth (default: 50)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--band-rows", type=int, default=16, help="Rows per kernel launch (default: 16)")
    parser.add_argument("--deadline", type=float, default=None, help="Render time budget in seconds")
    parser.add_argument("--output", type=str, default="spheres.png", help="Output file path (default: spheres.png)")
    parser.add_argument("--show", action="store_true", help="Display the image when done")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_spheres(
    scene: str = "showcase",
    width: int = 400,
    height: int = 225,
    num_samples: int = 100,
    max_depth: int = 50,
    seed: int = 0,
    band_rows: int = 16,
    deadline: float | None = None,
    output_path: str = "spheres.png",
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.renderer import Renderer, RenderSettings
    from pathtracer.preview.display import show_image
    from pathtracer.preview.export import ImageBuffer
    from pathtracer.scene.presets import create_material_showcase_scene, create_single_sphere_scene

    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        seed=seed,
        band_rows=band_rows,
        deadline_seconds=deadline,
    )

    if scene == "single":
        world, camera = create_single_sphere_scene(aspect_ratio=settings.aspect_ratio)
    else:
        world, camera = create_material_showcase_scene(aspect_ratio=settings.aspect_ratio)

    if not quiet:
        print(f"Rendering '{scene}' at {width}x{height}, {num_samples} spp...")

    start_time = time.time()

    def progress_callback(rows_done: int, rows_total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Progress: {rows_done}/{rows_total} rows "
                f"({rows_done / rows_total * 100:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    buffer = ImageBuffer(width, height)
    Renderer(world, settings, camera=camera).render(plot=buffer.plot, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = buffer.save(output_path)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    if show:
        show_image(buffer.to_array(), title=scene)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
    except Exception:
        ti.init(arch=ti.cpu)

    try:
        render_spheres(
            scene=args.scene,
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            band_rows=args.band_rows,
            deadline=args.deadline,
            output_path=args.output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
