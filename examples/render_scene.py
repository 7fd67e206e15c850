#!/usr/bin/env python3
"""Render one of the preset scenes.

This script renders a preset scene with the multi-threaded path tracer,
normalizes and gamma encodes the result and writes it to an image file.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 1280)
    --height HEIGHT     Image height in pixels (default: 720)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --bounces BOUNCES   Bounce budget per path (default: 50)
    --threads THREADS   Number of render threads (default: 16)
    --seed SEED         Random seed (default: from the system clock)
    --scene NAME        Scene to render: cube, dome or weekend (default: cube)
    --output OUTPUT     Output file path, .qoi/.ppm/.png (default: image.qoi)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --width 320 --height 180 --samples 16 --output cube.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from src.pathtracer.camera.pinhole import Display
from src.pathtracer.core.integrator import DEFAULT_BOUNCES, DEFAULT_SAMPLES
from src.pathtracer.core.parallel import DEFAULT_THREADS, RenderSettings, render
from src.pathtracer.preview.display import finish_frame
from src.pathtracer.preview.export import save_image
from src.pathtracer.scene.presets import SCENES

DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "--bounces",
        type=int,
        default=DEFAULT_BOUNCES,
        help=f"Bounce budget per path (default: {DEFAULT_BOUNCES})",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=DEFAULT_THREADS,
        help=f"Number of render threads (default: {DEFAULT_THREADS})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: from the system clock)",
    )
    parser.add_argument(
        "--scene",
        choices=sorted(SCENES),
        default="cube",
        help="Scene to render (default: cube)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.qoi",
        help="Output file path, .qoi/.ppm/.png (default: image.qoi)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    scene_name: str = "cube",
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    settings: RenderSettings | None = None,
    output_path: str = "image.qoi",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to file.

    Args:
        scene_name: Key into SCENES.
        width: Image width in pixels.
        height: Image height in pixels.
        settings: Render parameters (default RenderSettings()).
        output_path: Output file path; the suffix selects the format.
        preview: If True, show the finished frame with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    if settings is None:
        settings = RenderSettings()

    display = Display(width, height)
    if not quiet:
        print(f"Creating {scene_name} scene ({width}x{height})...")
    scene = SCENES[scene_name](display)

    if not quiet:
        print(
            f"Rendering {settings.samples} samples per pixel, "
            f"{settings.bounces} bounces, {settings.threads} threads..."
        )

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (done / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {done}/{total} pixels "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    image = render(scene, settings, progress=progress_callback)

    if not quiet:
        print()  # Newline after progress

    frame = finish_frame(image)

    output_file = Path(output_path)
    save_image(frame, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        from src.pathtracer.preview.display import show_preview

        show_preview(frame, title=f"{scene_name} - {settings.samples} SPP")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = RenderSettings(
            samples=args.samples,
            bounces=args.bounces,
            threads=args.threads,
            seed=args.seed,
        )
        render_scene(
            scene_name=args.scene,
            width=args.width,
            height=args.height,
            settings=settings,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
