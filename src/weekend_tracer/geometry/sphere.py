"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord returned by every
intersection test, and the ``set_face_normal`` convention that all materials
rely on: the stored normal always opposes the incoming ray, and
``front_face`` records whether the ray arrived from the outward side.

The intersection solves |O + tD - C|^2 = r^2 in half-b form:

    a = D . D
    half_b = (O - C) . D
    c = |O - C|^2 - r^2
    discriminant = half_b^2 - a * c

A negative radius is allowed. It leaves the hit points unchanged but flips
the outward normal, which turns the sphere into an inward-facing shell (used
for hollow glass).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.geometry.sphere import Sphere, hit_sphere, vec3
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from weekend_tracer.core.ray import dot, length_squared, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative values describe an
            inward-facing surface.
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The ray parameter at the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal, oriented against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray hit the outward-facing side, 0 otherwise.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a surface normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: The geometric normal pointing out of the surface
            (unit length).

    Returns:
        A tuple (front_face, normal) where front_face is 1 when the ray hit
        the outward side and normal is outward_normal, flipped if needed so
        that it points against ray_direction.
    """
    front_face = 0
    normal = -outward_normal
    if dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Only intersections with t strictly inside (t_min, t_max) are reported.
    The nearer root is tried first; if it is out of range the farther root
    is tried, so a ray starting inside the sphere reports the exit point.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be
            normalized).
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Exclusive upper bound on t (closest hit found so far).

    Returns:
        A HitRecord. Check the hit field to determine if intersection
        occurred.
    """
    oc = ray_origin - sphere.center
    a = length_squared(ray_direction)
    half_b = dot(oc, ray_direction)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant > 0.0:
        root = ti.sqrt(discriminant)

        t = (-half_b - root) / a
        valid = t_min < t < t_max

        if not valid:
            t = (-half_b + root) / a
            valid = t_min < t < t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = set_face_normal(ray_direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
