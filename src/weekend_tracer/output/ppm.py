"""Plain-text PPM (P3) image output.

Converts per-pixel colour sums into 8-bit values and writes them as a P3
portable pixmap:

    P3
    <width> <height>
    255
    r g b        (one line per pixel, rows top to bottom, left to right)

Each channel is averaged over the sample count, gamma corrected with
gamma 2 (square root), clamped into [0, 0.999] and scaled by 256, so a
channel of exactly 1.0 maps to 255 and 0.0 maps to 0. Negative or NaN sums
map to 0.

Example:
    >>> import sys
    >>> import numpy as np
    >>> from weekend_tracer.output.ppm import color_to_bytes, write_ppm
    >>> sums = np.full((2, 3, 3), 4.0)  # 2 rows, 3 columns, 4 samples of white
    >>> write_ppm(sys.stdout, color_to_bytes(sums, samples_per_pixel=4))
"""

from typing import TextIO

import numpy as np
import numpy.typing as npt


def color_to_bytes(
    color_sum: npt.ArrayLike,
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert summed sample colours to gamma-corrected 8-bit values.

    Args:
        color_sum: Colour sums of any shape whose last axis is RGB, e.g. a
            single (3,) pixel or a (height, width, 3) image.
        samples_per_pixel: Number of samples each sum contains.

    Returns:
        A uint8 array with the same shape as color_sum.

    Raises:
        ValueError: If samples_per_pixel is below 1.
    """
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")

    scale = 1.0 / samples_per_pixel
    scaled = scale * np.asarray(color_sum, dtype=np.float64)

    # sqrt of a negative channel would be NaN; both become 0
    corrected = np.sqrt(np.maximum(scaled, 0.0))
    corrected = np.where(np.isnan(corrected), 0.0, corrected)
    clamped = np.clip(corrected, 0.0, 0.999)

    return (256.0 * clamped).astype(np.uint8)


def ppm_header(width: int, height: int) -> str:
    """Return the P3 header for an image of the given size."""
    return f"P3\n{width} {height}\n255\n"


def write_ppm(stream: TextIO, image: npt.NDArray[np.uint8]) -> None:
    """Write an 8-bit RGB image to a text stream as P3.

    Args:
        stream: Destination text stream (a file or sys.stdout).
        image: Array of shape (height, width, 3), top row first.

    Raises:
        ValueError: If image is not a (height, width, 3) array.
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")

    height, width, _ = image.shape
    stream.write(ppm_header(width, height))

    for row in image:
        stream.write("".join(f"{r} {g} {b}\n" for r, g, b in row.tolist()))
