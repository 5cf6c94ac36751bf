"""Scanline renderer driving the integrator one row at a time.

Rows are rendered top first (j = height - 1 down to 0), the order they are
written to a PPM file, and progress is reported before each row as the
number of rows still to render after it. Progress can be consumed either
through a callback or by iterating the generator form.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.core.scanline import ScanlineRenderer
    >>> from weekend_tracer.scene.random_scene import create_random_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=0)
    >>> setup_camera(camera)
    >>>
    >>> renderer = ScanlineRenderer(300, 200, samples_per_pixel=10)
    >>> renderer.render()
    >>> image = renderer.get_image_bytes()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from weekend_tracer.core.integrator import (
    MAX_DEPTH,
    get_image_sums_numpy,
    render_scanline,
    setup_render_target,
)
from weekend_tracer.output.ppm import color_to_bytes

# Callback receives (scanlines_remaining, total_scanlines)
ProgressCallback = Callable[[int, int], None]


class ScanlineRenderer:
    """Renders a full image row by row with progress reporting.

    The renderer owns the image dimensions and sampling parameters and
    delegates to the module-level render target in the integrator (which is
    a set of Taichi fields). The scene and camera must already be set up.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Samples summed per pixel.
        max_depth: Bounce budget per sample.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_pixel: int = 1,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If the dimensions are out of range, samples_per_pixel
                is below 1 or max_depth is negative.
        """
        if samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must be non-negative")

        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._samples_per_pixel = samples_per_pixel
        self._max_depth = max_depth
        self._rows_done = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def samples_per_pixel(self) -> int:
        return self._samples_per_pixel

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def scanlines_remaining(self) -> int:
        """Number of rows not yet rendered."""
        return self._height - self._rows_done

    @property
    def is_complete(self) -> bool:
        return self._rows_done == self._height

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render every remaining row, top row first.

        Args:
            callback: Optional function called before each row with
                (scanlines_remaining, total_scanlines). The count excludes
                the row about to be rendered, so it runs from height - 1
                down to 0.

        Example:
            >>> def progress(remaining, total):
            ...     print(f"\\rScanlines remaining: {remaining}", end="")
            >>> renderer.render(callback=progress)
        """
        for remaining, total in self.render_progressive():
            if callback is not None:
                callback(remaining, total)

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render rows one at a time, yielding progress before each row.

        Each yield reports (scanlines_remaining, total_scanlines) just before
        row j is rendered, where scanlines_remaining is j itself (rows still
        to go after this one). Stopping the iteration early leaves the
        remaining rows unrendered; a later call resumes where it stopped.

        Yields:
            Tuple of (scanlines_remaining, total_scanlines).
        """
        while self._rows_done < self._height:
            j = self._height - 1 - self._rows_done
            yield (j, self._height)
            render_scanline(j, self._samples_per_pixel, self._max_depth)
            self._rows_done += 1

    def get_image_sums(self) -> npt.NDArray[np.float64]:
        """Per-pixel colour sums, shape (height, width, 3), top row first."""
        return get_image_sums_numpy()

    def get_image_bytes(self) -> npt.NDArray[np.uint8]:
        """Gamma-corrected 8-bit image, shape (height, width, 3), top row first."""
        return color_to_bytes(self.get_image_sums(), self._samples_per_pixel)

    def __repr__(self) -> str:
        return (
            f"ScanlineRenderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth}, "
            f"scanlines_remaining={self.scanlines_remaining})"
        )
