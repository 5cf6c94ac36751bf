"""Ray data structure and vector utilities for Monte Carlo ray tracing.

This module provides the Ray dataclass and the vector helpers used by the
intersection and scattering code. Every quantity is a 64-bit float: the
Taichi runtime is expected to be initialised with ``default_fp=ti.f64`` and
all vectors use the explicit ``vec3`` type defined here.

Points, directions and colours all share the same ``vec3`` type.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point_on_ray() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Double precision 3-vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not required to be unit
            length; camera and scatter rays are left unnormalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector."""
    return v.x * v.x + v.y * v.y + v.z * v.z


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The caller must guarantee a non-zero input. A zero-length vector yields
    infinities or NaN, exactly as the plain division would.

    Args:
        v: The input vector.

    Returns:
        v / length(v).
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions before they are traced.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes R = I - 2(I . N)N. The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * dot(incident, normal) * normal


@ti.func
def refract(unit_direction: vec3, normal: vec3, refraction_ratio: ti.f64) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into the component perpendicular to the
    normal and the component parallel to it:

        r_perp = ratio * (uv + cos_theta * n)
        r_parallel = -sqrt(|1 - |r_perp|^2|) * n

    Total internal reflection must be ruled out by the caller; this function
    always returns a direction.

    Args:
        unit_direction: The incoming direction (unit length).
        normal: The surface normal, facing against the incoming ray.
        refraction_ratio: eta_incident / eta_transmitted.

    Returns:
        The refracted direction vector.
    """
    cos_theta = dot(-unit_direction, normal)
    r_out_perp = refraction_ratio * (unit_direction + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, refraction_ratio: ti.f64) -> ti.f64:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        refraction_ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_double() -> ti.f64:
    """Draw a uniform random value in [0, 1) from the per-thread generator."""
    return ti.random(ti.f64)


@ti.func
def random_double_in_range(min_val: ti.f64, max_val: ti.f64) -> ti.f64:
    """Draw a uniform random value in [min_val, max_val)."""
    return min_val + (max_val - min_val) * random_double()


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling to generate uniformly distributed points
    within the unit sphere.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                random_double_in_range(-1.0, 1.0),
                random_double_in_range(-1.0, 1.0),
                random_double_in_range(-1.0, 1.0),
            )
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Samples an azimuth a in [0, 2pi) and a height z in [-1, 1), which is
    uniform over the sphere's surface (Archimedes' hat-box theorem). Added
    to a surface normal this gives the Lambertian distribution.

    Returns:
        A random unit vector.
    """
    a = random_double_in_range(0.0, 2.0 * tm.pi)
    z = random_double_in_range(-1.0, 1.0)
    r = ti.sqrt(1.0 - z * z)
    return vec3(r * ti.cos(a), r * ti.sin(a), z)


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used by the thin lens camera to pick a point on the aperture.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                random_double_in_range(-1.0, 1.0),
                random_double_in_range(-1.0, 1.0),
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
