"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "set_face_normal",
]
