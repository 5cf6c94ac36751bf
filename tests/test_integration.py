"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete rendering pipeline from scene creation through
final image output. It verifies that all components work together correctly
and that the output meets basic quality criteria.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import io

import numpy as np
import pytest


class TestSingleSphereIntegration:
    """A single diffuse sphere in front of a pinhole camera."""

    def _render(self, width=20, height=10, samples_per_pixel=16):
        from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera
        from weekend_tracer.core.scanline import ScanlineRenderer
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=width / height,
                aperture=0.0,
                focus_dist=1.0,
            )
        )

        renderer = ScanlineRenderer(width, height, samples_per_pixel=samples_per_pixel)
        renderer.render()
        return renderer

    def test_sphere_darker_than_sky(self) -> None:
        """Test the sphere in the image center is darker than the sky above it."""
        renderer = self._render()
        sums = renderer.get_image_sums()

        height, width, _ = sums.shape
        center = sums[height // 2, width // 2].sum()
        top_row = sums[0].sum(axis=1).mean()

        assert center < top_row

    def test_sphere_is_grey(self) -> None:
        """Test the grey sphere reflects at most half the incoming sky light."""
        renderer = self._render()
        sums = renderer.get_image_sums() / renderer.samples_per_pixel

        height, width, _ = sums.shape
        center = sums[height // 2, width // 2]
        # One diffuse bounce off albedo 0.5 into a sky no brighter than 1
        assert (center <= 0.5 + 1e-12).all()
        assert (center > 0.0).all()

    def test_ppm_output(self) -> None:
        """Test the rendered image serializes to a well-formed P3 file."""
        from weekend_tracer.output.ppm import write_ppm

        renderer = self._render(width=6, height=4, samples_per_pixel=2)
        stream = io.StringIO()
        write_ppm(stream, renderer.get_image_bytes())

        lines = stream.getvalue().splitlines()
        assert lines[:3] == ["P3", "6 4", "255"]
        assert len(lines) == 3 + 6 * 4


class TestSceneIntegration:
    """Low resolution renders of the two built-in scenes."""

    def test_random_scene_renders(self) -> None:
        """Test the random scene renders to finite, in-range values."""
        from weekend_tracer.camera.thin_lens import setup_camera
        from weekend_tracer.core.scanline import ScanlineRenderer
        from weekend_tracer.scene.random_scene import create_random_scene

        _scene, camera = create_random_scene(seed=0)
        setup_camera(camera)

        renderer = ScanlineRenderer(12, 8, samples_per_pixel=2, max_depth=10)
        renderer.render()

        sums = renderer.get_image_sums()
        assert np.isfinite(sums).all()
        assert (sums >= 0.0).all()
        # Every sample is at most the brightest sky colour
        assert (sums <= 2.0 + 1e-9).all()

        image = renderer.get_image_bytes()
        assert image.shape == (8, 12, 3)
        assert image.any()

    def test_showcase_scene_renders(self) -> None:
        """Test the showcase scene renders with the wide aperture camera."""
        from weekend_tracer.camera.thin_lens import setup_camera
        from weekend_tracer.core.scanline import ScanlineRenderer
        from weekend_tracer.scene.random_scene import create_material_showcase_scene

        _scene, camera = create_material_showcase_scene(aspect_ratio=2.0)
        setup_camera(camera)

        renderer = ScanlineRenderer(10, 5, samples_per_pixel=4)
        renderer.render()

        sums = renderer.get_image_sums()
        assert np.isfinite(sums).all()
        assert renderer.get_image_bytes().any()

    @pytest.mark.parametrize("max_depth", [0, 1])
    def test_small_budget(self, max_depth) -> None:
        """Test a depth of 0 renders black and a depth of 1 shows only sky."""
        from weekend_tracer.camera.thin_lens import setup_camera
        from weekend_tracer.core.scanline import ScanlineRenderer
        from weekend_tracer.scene.random_scene import create_material_showcase_scene

        _scene, camera = create_material_showcase_scene()
        setup_camera(camera)

        renderer = ScanlineRenderer(6, 4, samples_per_pixel=2, max_depth=max_depth)
        renderer.render()
        sums = renderer.get_image_sums()

        if max_depth == 0:
            assert not sums.any()
        else:
            # Rays that hit a sphere have no budget left to reach the sky
            assert (sums <= 2.0 + 1e-9).all()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
