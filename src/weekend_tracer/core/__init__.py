"""Core rendering module.

Components:
    ray: Ray data structure, float64 vector utilities and random sampling
    integrator: ray_color estimator, render target and per-scanline kernel
    scanline: ScanlineRenderer driving the integrator row by row

Only the ray module is imported here. The integrator and scanline modules
allocate Taichi fields at import time, so import them directly once
ti.init has been called:
    from weekend_tracer.core.integrator import ray_color
    from weekend_tracer.core.scanline import ScanlineRenderer
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    random_double,
    random_double_in_range,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "unit_vector",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_double",
    "random_double_in_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
