"""Scene module for sphere storage, materials bookkeeping and scene setup.

Components:
    intersection: Sphere storage and nearest-hit search
    manager: Unified scene manager coordinating spheres and materials
    random_scene: The random sphere field and the material showcase scene

Sphere data lives in Taichi fields in Structure-of-Arrays layout; each
sphere carries a unified material id shared with any number of spheres.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .random_scene import (
    create_material_showcase_scene,
    create_random_scene,
    default_random_scene_camera,
    grid_range,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Scenes
    "create_random_scene",
    "create_material_showcase_scene",
    "default_random_scene_camera",
    "grid_range",
]
