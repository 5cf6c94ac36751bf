"""Taichi-based Monte Carlo ray tracer for sphere scenes.

Renders spheres with Lambertian, metal and dielectric materials through a
thin-lens camera and writes the result as a plain-text PPM (P3) image.

Subpackages:
    core: Ray and vector utilities, the ray_color integrator, scanline driver
    geometry: Sphere primitive and intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Sphere storage, nearest-hit search, scene manager, scenes
    camera: Thin lens camera with depth of field
    output: Gamma correction and the PPM writer

Modules that allocate Taichi fields must be imported after ti.init().
"""

__version__ = "0.1.0"
