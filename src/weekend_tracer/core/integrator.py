"""Monte Carlo ray colour estimator and per-scanline sampling kernel.

``ray_color`` follows a camera ray through the scene:

    - miss: the sky gradient, scaled by every attenuation met on the way
    - hit: the material scatters (continue with the new ray, multiplying
      in the attenuation) or absorbs (black)
    - budget: at most ``depth`` intersection tests; a path still bouncing
      when the budget runs out contributes black

Taichi functions cannot recurse, so the estimator is written as a loop with
a running attenuation product. It gives the same result as the recursive
form ``attenuation * ray_color(scattered, depth - 1)``.

The render target holds per-pixel colour *sums* in float64. Averaging,
gamma correction and quantization happen on output (see
``weekend_tracer.output.ppm``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.core.integrator import (
    ...     render_scanline, setup_render_target, get_image_sums_numpy
    ... )
    >>> from weekend_tracer.scene.random_scene import create_random_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=0)
    >>> setup_camera(camera)
    >>> setup_render_target(300, 200)
    >>> for j in reversed(range(200)):
    ...     render_scanline(j, samples_per_pixel=10, max_depth=50)
    >>> sums = get_image_sums_numpy()
"""

import math

import numpy as np
import taichi as ti

from weekend_tracer.camera.thin_lens import get_ray_jittered
from weekend_tracer.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from weekend_tracer.core.ray import unit_vector, vec3
from weekend_tracer.materials.dielectric import scatter_dielectric_by_id
from weekend_tracer.materials.lambertian import scatter_lambertian_by_id
from weekend_tracer.materials.metal import scatter_metal_by_id
from weekend_tracer.scene.intersection import intersect_scene
from weekend_tracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget
MAX_DEPTH = 50

# Lower bound on t; rejects hits at the surface a scattered ray starts from
T_MIN = 0.001
T_MAX = math.inf

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Per-pixel sum of all sample colours, indexed [i, j] with j = 0 at the bottom
_color_sum = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Sets the active image dimensions and clears the colour sums.

    Args:
        width: Image width in pixels, in [2, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [2, MAX_IMAGE_HEIGHT].

    Raises:
        ValueError: If a dimension is below 2 (pixel coordinates divide by
            size - 1) or above the preallocated maximum.
    """
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must both be at least 2")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the colour sums to zero."""
    _color_sum.fill(0.0)


def reset_render_target() -> None:
    """Forget the render target so it must be set up again."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scatter function of the material's kind.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the outward side was hit.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). An
        unknown material id absorbs the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Ray Colour Estimator
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background colour for a ray that escapes the scene.

    A vertical gradient from white at the horizon to light blue overhead,
    driven by t = 0.5 * (unit_direction.y + 1).
    """
    unit_direction = unit_vector(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)


@ti.func
def ray_color(ray_origin: vec3, ray_direction: vec3, depth: ti.i32) -> vec3:
    """Estimate the colour seen along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        depth: Remaining bounce budget. A depth of 0 or less returns black
            without testing the scene.

    Returns:
        The product of all attenuations along the path times the sky colour
        where the path escapes, or black if the path was absorbed or ran out
        of budget.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray_origin
    direction = ray_direction

    # Taichi functions have no early return, so the loop runs on an active flag
    active = 1

    for _bounce in range(depth):
        if active == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Sum samples_per_pixel jittered ray colours for every pixel of row j."""
    for i in range(width):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _sample in range(samples_per_pixel):
            ray = get_ray_jittered(i, j, width, height)
            pixel_color += ray_color(ray.origin, ray.direction, max_depth)
        _color_sum[i, j] = pixel_color


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    pixel_color = vec3(0.0, 0.0, 0.0)
    # Outermost loop would otherwise be parallelized
    ti.loop_config(serialize=True)
    for _sample in range(samples_per_pixel):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        pixel_color += ray_color(ray.origin, ray.direction, max_depth)
    return pixel_color


@ti.kernel
def _trace_ray(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    depth: ti.i32,
) -> vec3:
    return ray_color(vec3(ox, oy, oz), vec3(dx, dy, dz), depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_sampling_args(samples_per_pixel: int, max_depth: int) -> None:
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must be non-negative")


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray against the current scene.

    Python-callable wrapper around the kernel-side estimator, mostly useful
    for tests and debugging.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), non-zero.
        depth: Bounce budget.

    Returns:
        Tuple of (R, G, B).
    """
    color = _trace_ray(
        float(origin[0]),
        float(origin[1]),
        float(origin[2]),
        float(direction[0]),
        float(direction[1]),
        float(direction[2]),
        int(depth),
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_scanline(j: int, samples_per_pixel: int, max_depth: int = MAX_DEPTH) -> None:
    """Render row j (0 = bottom) into the render target.

    Args:
        j: Row index in [0, height).
        samples_per_pixel: Number of jittered samples summed per pixel.
        max_depth: Bounce budget per sample.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If j is out of range or the sampling arguments are
            invalid.
    """
    _check_render_target_initialized()
    _check_sampling_args(samples_per_pixel, max_depth)

    width, height = get_image_dimensions()
    if not 0 <= j < height:
        raise ValueError(f"Scanline {j} is outside [0, {height})")

    _render_scanline(j, width, height, samples_per_pixel, max_depth)


def render_sample(
    pixel_i: int,
    pixel_j: int,
    samples_per_pixel: int = 1,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Return the summed colour of samples_per_pixel samples for one pixel.

    Does not write into the render target.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        samples_per_pixel: Number of samples to sum.
        max_depth: Bounce budget per sample.

    Returns:
        Tuple of (R, G, B) sums.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    _check_sampling_args(samples_per_pixel, max_depth)

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, samples_per_pixel, max_depth)

    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_sums_numpy() -> np.ndarray:
    """Get the per-pixel colour sums as a NumPy array.

    Rows are ordered top to bottom, the order a PPM file stores them.

    Returns:
        float64 array of shape (height, width, 3).

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_sum.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Row 0 of the buffer is the bottom of the image
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)
