"""Command-line entry point: render a scene and write it as a P3 image.

Usage:
    weekend-tracer [options] > image.ppm
    python -m weekend_tracer [options] > image.ppm

Options:
    --width, -w WIDTH     Image width in pixels (default: 1200)
    --aspect-ratio RATIO  Width / height (default: 1.5)
    --samples SAMPLES     Samples per pixel (default: 500)
    --max-depth DEPTH     Bounce budget per sample (default: 50)
    --seed SEED           Random seed (default: 0)
    --scene NAME          random or showcase (default: random)
    --output PATH         Write the image to PATH instead of stdout
    --arch ARCH           Taichi backend, cpu or gpu (default: cpu)
    --threads N           CPU worker threads (default: all cores)
    --quiet               Suppress progress output

The image goes to stdout (or --output); progress goes to stderr.

Example:
    weekend-tracer --width 400 --samples 50 > random_scene.ppm
"""

import argparse
import contextlib
import sys
from typing import TextIO

from weekend_tracer.config import SCENES, RenderConfig


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        prog="weekend-tracer",
        description="Render a sphere scene with a Monte Carlo ray tracer and write a P3 image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        "-w",
        type=int,
        default=defaults.image_width,
        help=f"Image width in pixels (default: {defaults.image_width})",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=defaults.aspect_ratio,
        help=f"Image width divided by height (default: {defaults.aspect_ratio})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum ray bounces (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"Random seed (default: {defaults.seed})",
    )
    parser.add_argument(
        "--scene",
        choices=SCENES,
        default=defaults.scene,
        help=f"Scene to render (default: {defaults.scene})",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of CPU threads; use 1 for byte-reproducible output",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Exits with status 2 (argparse's convention) on malformed arguments.
    """
    return build_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build and validate a RenderConfig from parsed arguments.

    Raises:
        ValueError: If any parameter is out of range.
    """
    if args.threads is not None and args.threads < 1:
        raise ValueError(f"threads = {args.threads} must be at least 1")

    return RenderConfig(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
        scene=args.scene,
    ).validate()


def init_taichi(arch: str, seed: int, threads: int | None = None) -> None:
    """Initialize the Taichi runtime in double precision.

    Taichi prints its banner on import; it is sent to stderr so it never
    mixes with an image written to stdout.
    """
    with contextlib.redirect_stdout(sys.stderr):
        import taichi as ti

        kwargs = {
            "arch": ti.gpu if arch == "gpu" else ti.cpu,
            "default_fp": ti.f64,
            "random_seed": seed,
            "log_level": ti.WARN,
        }
        if threads is not None:
            kwargs["cpu_max_num_threads"] = threads
        ti.init(**kwargs)


def render(config: RenderConfig, stream: TextIO, quiet: bool = False) -> None:
    """Render the configured scene and write it to stream as P3.

    Taichi must already be initialized.

    Args:
        config: A validated render configuration.
        stream: Text stream receiving the image.
        quiet: If True, write nothing to stderr.
    """
    # Lazy imports to allow Taichi initialization first
    from weekend_tracer.camera.thin_lens import setup_camera
    from weekend_tracer.core.scanline import ScanlineRenderer
    from weekend_tracer.output.ppm import write_ppm
    from weekend_tracer.scene.random_scene import (
        create_material_showcase_scene,
        create_random_scene,
    )

    width, height = config.image_width, config.image_height

    if not quiet:
        print(f"Creating image with a resolution of {width}x{height}", file=sys.stderr)

    if config.scene == "showcase":
        _, camera = create_material_showcase_scene(aspect_ratio=config.aspect_ratio)
    else:
        _, camera = create_random_scene(seed=config.seed, aspect_ratio=config.aspect_ratio)
    setup_camera(camera)

    renderer = ScanlineRenderer(
        width,
        height,
        samples_per_pixel=config.samples_per_pixel,
        max_depth=config.max_depth,
    )

    def progress_callback(remaining: int, total: int) -> None:
        print(f"\rScanlines remaining: {remaining:04d}", end="", file=sys.stderr, flush=True)

    renderer.render(callback=None if quiet else progress_callback)

    write_ppm(stream, renderer.get_image_bytes())
    stream.flush()

    if not quiet:
        print("\nDone.", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    init_taichi(args.arch, config.seed, args.threads)

    if args.output is None:
        render(config, sys.stdout, quiet=args.quiet)
    else:
        with open(args.output, "w", encoding="ascii", newline="\n") as f:
            render(config, f, quiet=args.quiet)
        if not args.quiet:
            print(f"Saved to: {args.output}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
