#!/usr/bin/env python3
"""Render the material showcase scene through the library API.

Builds the three-sphere showcase (hollow glass, diffuse, gold metal), renders
it scanline by scanline with a timing readout and writes a P3 image. The
package CLI (``weekend-tracer``) covers the same ground with more options;
this script shows the pieces it is made of.

Usage:
    python examples/render_showcase.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --output OUTPUT     Output file path (default: showcase.ppm)

Example:
    python examples/render_showcase.py --width 200 --samples 20
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the material showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width (default: 400)")
    parser.add_argument(
        "--samples", type=int, default=100, help="Samples per pixel (default: 100)"
    )
    parser.add_argument(
        "--output", type=str, default="showcase.ppm", help="Output file (default: showcase.ppm)"
    )
    return parser.parse_args()


def render_showcase(width: int, num_samples: int, output_path: str) -> Path:
    """Render the showcase scene at a 16:9 aspect ratio and save it."""
    # Lazy imports to allow Taichi initialization first
    from weekend_tracer.camera.thin_lens import setup_camera
    from weekend_tracer.core.scanline import ScanlineRenderer
    from weekend_tracer.output.ppm import write_ppm
    from weekend_tracer.scene.random_scene import create_material_showcase_scene

    aspect_ratio = 16.0 / 9.0
    height = int(width / aspect_ratio)

    _scene, camera = create_material_showcase_scene(aspect_ratio=aspect_ratio)
    setup_camera(camera)

    renderer = ScanlineRenderer(width, height, samples_per_pixel=num_samples)
    print(f"Rendering {renderer}")

    start_time = time.time()
    for remaining, total in renderer.render_progressive():
        elapsed = time.time() - start_time
        done = total - remaining - 1
        rows_per_sec = done / elapsed if elapsed > 0 else 0.0
        print(f"\r  Scanlines remaining: {remaining} ({rows_per_sec:.1f} rows/s)", end="", flush=True)
    print()

    output_file = Path(output_path)
    with output_file.open("w", encoding="ascii", newline="\n") as f:
        write_ppm(f, renderer.get_image_bytes())

    print(f"Saved to: {output_file.absolute()}")
    print(f"Total time: {time.time() - start_time:.2f}s")
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    ti.init(arch=ti.cpu, default_fp=ti.f64)

    try:
        render_showcase(args.width, args.samples, args.output)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
