"""Render configuration with documented defaults and validation.

The defaults reproduce the reference render of the random scene: 1200 pixels
wide at a 3:2 aspect ratio, 500 samples per pixel and a bounce budget of 50.

Randomness is seeded from ``seed`` (default 0), which feeds both the Taichi
per-thread generators and the scene layout generator. With a fixed seed and
a single CPU thread the output is byte-for-byte reproducible; with several
threads the pixel-to-thread assignment, and therefore the noise pattern, may
differ between runs.
"""

from dataclasses import asdict, dataclass
from typing import Any

# Preallocated render target size (see core.integrator)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

SCENES = ("random", "showcase")

# Taichi takes its random seed as a signed 32-bit int
MAX_SEED = 2**31 - 1


@dataclass
class RenderConfig:
    """Parameters for one render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height; the height is derived.
        samples_per_pixel: Jittered samples averaged per pixel.
        max_depth: Bounce budget per sample.
        seed: Seed for all random number generation.
        scene: Name of the scene to render ("random" or "showcase").
    """

    image_width: int = 1200
    aspect_ratio: float = 3.0 / 2.0
    samples_per_pixel: int = 500
    max_depth: int = 50
    seed: int = 0
    scene: str = "random"

    @property
    def image_height(self) -> int:
        """Image height, int(image_width / aspect_ratio)."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> "RenderConfig":
        """Check every parameter and return self.

        Raises:
            ValueError: If any parameter is out of range. The message names
                the offending parameter.
        """
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if not 2 <= self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"image_width = {self.image_width} must be in [2, {MAX_IMAGE_WIDTH}]"
            )
        if not 2 <= self.image_height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"image_height = {self.image_height} (width / aspect_ratio) "
                f"must be in [2, {MAX_IMAGE_HEIGHT}]"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel = {self.samples_per_pixel} must be at least 1"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if not 0 <= self.seed <= MAX_SEED:
            raise ValueError(f"seed = {self.seed} must be in [0, {MAX_SEED}]")
        if self.scene not in SCENES:
            raise ValueError(f"scene = {self.scene!r} must be one of {', '.join(SCENES)}")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration (including the derived height)."""
        data = asdict(self)
        data["image_height"] = self.image_height
        return data
