"""Output module for writing rendered images.

Components:
    ppm: Gamma correction, clamping and the plain-text P3 writer
"""

from .ppm import color_to_bytes, ppm_header, write_ppm

__all__ = [
    "color_to_bytes",
    "ppm_header",
    "write_ppm",
]
