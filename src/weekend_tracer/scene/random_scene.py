"""Scene factories: the procedural random scene and a material showcase.

The random scene is a large grey ground sphere covered by a grid of small
spheres with randomly chosen materials, plus three large feature spheres
(glass, diffuse brown, polished metal) in a row.

Grid extents follow one convention for both axes: a negative argument ``n``
covers ``n .. |n| - 1``, a positive argument covers ``0 .. n - 1`` and 0
gives no small spheres at all. The default (-11, -11) therefore gives a
22 x 22 grid centered on the origin.

The Python-side random draws use a ``numpy.random.Generator``; passing a
seed makes the scene layout reproducible.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.scene.random_scene import create_random_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=0)
    >>> setup_camera(camera)
"""

import numpy as np

from weekend_tracer.camera.thin_lens import ThinLensCamera
from weekend_tracer.scene.manager import SceneManager

# =============================================================================
# Random Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

SMALL_SPHERE_RADIUS = 0.2
SMALL_SPHERE_HEIGHT = 0.2

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)
KEEP_CLEAR_DISTANCE = 0.9

# Material choice thresholds on a uniform draw
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95  # cumulative; the rest is glass

GLASS_IOR = 1.5

LARGE_SPHERE_RADIUS = 1.0
GLASS_SPHERE_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_SPHERE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_SPHERE_ALBEDO = (0.4, 0.2, 0.1)
METAL_SPHERE_CENTER = (4.0, 1.0, 0.0)
METAL_SPHERE_ALBEDO = (0.7, 0.6, 0.5)
METAL_SPHERE_FUZZ = 0.0


def grid_range(n: int) -> range:
    """Return the grid coordinates covered by a grid extent argument.

    Args:
        n: Negative for a span centered on 0, positive for a span starting
            at 0.

    Returns:
        range(n, -n) for negative n, range(0, n) otherwise.
    """
    if n < 0:
        return range(n, -n)
    return range(0, n)


def default_random_scene_camera(aspect_ratio: float = 3.0 / 2.0) -> ThinLensCamera:
    """Camera looking at the three large spheres from (13, 2, 3)."""
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )


def create_random_scene(
    grid_x: int = -11,
    grid_z: int = -11,
    seed: int | None = None,
    aspect_ratio: float = 3.0 / 2.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random sphere field scene.

    For every grid cell (a, b) one uniform draw chooses the material, two
    more jitter the center to (a + 0.9 * rand, 0.2, b + 0.9 * rand). Cells
    whose sphere would come within KEEP_CLEAR_DISTANCE of KEEP_CLEAR_POINT
    are skipped so the large metal sphere stays unobstructed. Materials:

    - draw < 0.8: diffuse, albedo = random color * random color
    - draw < 0.95: metal, albedo in [0.5, 1), fuzz in [0, 0.5)
    - otherwise: glass with index 1.5

    Args:
        grid_x: Grid extent along x (see grid_range).
        grid_z: Grid extent along z (see grid_range).
        seed: Seed for the scene's random generator. None draws fresh
            entropy, so every call gives a different layout.
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).

    Example:
        >>> scene, camera = create_random_scene(seed=42)
        >>> scene.get_sphere_count() <= 1 + 22 * 22 + 3
        True
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    keep_clear = np.array(KEEP_CLEAR_POINT)
    for a in grid_range(grid_x):
        for b in grid_range(grid_z):
            choose_mat = rng.random()
            center = np.array(
                [a + 0.9 * rng.random(), SMALL_SPHERE_HEIGHT, b + 0.9 * rng.random()]
            )

            if np.linalg.norm(center - keep_clear) <= KEEP_CLEAR_DISTANCE:
                continue

            center_tuple = tuple(center.tolist())
            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(
                    center_tuple, SMALL_SPHERE_RADIUS, tuple(albedo.tolist())
                )
            elif choose_mat < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = rng.uniform(0.0, 0.5)
                scene.add_metal_sphere(
                    center_tuple, SMALL_SPHERE_RADIUS, tuple(albedo.tolist()), fuzz
                )
            else:
                scene.add_dielectric_sphere(center_tuple, SMALL_SPHERE_RADIUS, GLASS_IOR)

    scene.add_dielectric_sphere(GLASS_SPHERE_CENTER, LARGE_SPHERE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(
        DIFFUSE_SPHERE_CENTER, LARGE_SPHERE_RADIUS, DIFFUSE_SPHERE_ALBEDO
    )
    scene.add_metal_sphere(
        METAL_SPHERE_CENTER, LARGE_SPHERE_RADIUS, METAL_SPHERE_ALBEDO, METAL_SPHERE_FUZZ
    )

    return scene, default_random_scene_camera(aspect_ratio)


def create_material_showcase_scene(
    aspect_ratio: float = 3.0 / 2.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a small scene with one sphere of each material kind.

    Three spheres sit side by side on a large ground sphere: a hollow glass
    bubble on the left (a glass sphere with an inner negative-radius glass
    sphere), blue diffuse in the middle and gold metal on the right. The
    camera looks down at them with a wide aperture focused on the middle
    sphere.

    Args:
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material((0.8, 0.8, 0.0))
    center = scene.add_lambertian_material((0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(GLASS_IOR)
    gold = scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.0)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    # Same material, negative radius: the normals point inward and the
    # pair behaves as a thin glass shell
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    focus_dist = float(np.linalg.norm(np.subtract(lookfrom, lookat)))

    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=focus_dist,
    )
    return scene, camera
