"""Tests for the ray colour estimator and render target.

This module tests the core rendering functionality including:
- Render target setup and management
- Sky gradient for escaping rays
- Material dispatch (Lambertian, Metal, Dielectric)
- Bounce budget and absorption
- Scanline and single pixel sampling
- Image orientation of the colour sums

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run, so module-level
imports of modules containing ti.field() declarations would fail.
"""

import pytest

SKY_HORIZON = (0.75, 0.85, 1.0)


def _pinhole_looking_down_z(aspect_ratio=1.0):
    from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera

    setup_camera(
        ThinLensCamera(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=90.0,
            aspect_ratio=aspect_ratio,
            aperture=0.0,
            focus_dist=1.0,
        )
    )


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_render_target(self):
        """Test that setup_render_target records dimensions and clears sums."""
        from weekend_tracer.core.integrator import (
            get_image_dimensions,
            get_image_sums_numpy,
            setup_render_target,
        )

        setup_render_target(64, 48)

        assert get_image_dimensions() == (64, 48)
        sums = get_image_sums_numpy()
        assert sums.shape == (48, 64, 3)
        assert sums.dtype.name == "float64"
        assert not sums.any()

    @pytest.mark.parametrize("width, height", [(1, 10), (10, 1), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, width, height):
        """Test dimensions below 2 or above the preallocated size are rejected."""
        from weekend_tracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_render_without_target_raises(self):
        """Test rendering before setup_render_target raises RuntimeError."""
        from weekend_tracer.core.integrator import (
            get_image_sums_numpy,
            render_sample,
            render_scanline,
        )

        with pytest.raises(RuntimeError, match="setup_render_target"):
            render_scanline(0, samples_per_pixel=1)
        with pytest.raises(RuntimeError):
            render_sample(0, 0)
        with pytest.raises(RuntimeError):
            get_image_sums_numpy()

    def test_invalid_sampling_arguments(self):
        """Test out-of-range scanlines and sampling parameters are rejected."""
        from weekend_tracer.core.integrator import render_scanline, setup_render_target

        setup_render_target(4, 3)
        with pytest.raises(ValueError, match="Scanline"):
            render_scanline(3, samples_per_pixel=1)
        with pytest.raises(ValueError, match="samples_per_pixel"):
            render_scanline(0, samples_per_pixel=0)
        with pytest.raises(ValueError, match="max_depth"):
            render_scanline(0, samples_per_pixel=1, max_depth=-1)


class TestSkyColor:
    """Test the background gradient for rays that hit nothing."""

    @pytest.mark.parametrize(
        "direction, expected",
        [
            ((0.0, 1.0, 0.0), (0.5, 0.7, 1.0)),
            ((0.0, -1.0, 0.0), (1.0, 1.0, 1.0)),
            ((0.0, 0.0, -1.0), SKY_HORIZON),
            ((0.0, 0.0, -7.0), SKY_HORIZON),
        ],
    )
    def test_empty_scene_returns_sky(self, direction, expected):
        """Test an empty scene returns the gradient for the ray's direction."""
        from weekend_tracer.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), direction, depth=50)
        assert color == pytest.approx(expected, abs=1e-12)

    def test_zero_depth_is_black(self):
        """Test a depth of 0 returns black without testing the scene."""
        from weekend_tracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == (0.0, 0.0, 0.0)


class TestMaterialDispatch:
    """Test ray_color with each material kind."""

    def test_mirror_reflects_sky(self):
        """Test a head-on mirror bounce returns albedo times the sky behind."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), 0.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=2)
        assert color == pytest.approx(tuple(0.5 * c for c in SKY_HORIZON), abs=1e-12)

    def test_sphere_uses_its_registered_material(self):
        """Test the bounce reads the material stored under the sphere's id."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.9, 0.9, 0.9))
        scene.add_metal_material((1.0, 1.0, 1.0), 0.0)
        tinted = scene.add_metal_material((0.2, 0.4, 0.6), 0.0)
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, tinted)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=2)
        expected = (0.2 * SKY_HORIZON[0], 0.4 * SKY_HORIZON[1], 0.6 * SKY_HORIZON[2])
        assert color == pytest.approx(expected, abs=1e-12)

    def test_budget_exhausted_is_black(self):
        """Test a path still bouncing when the budget runs out contributes black."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5), 0.0)

        # One intersection test: the mirror hit, then no budget to reach the sky
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_enclosed_diffuse_is_black(self):
        """Test a camera inside a closed diffuse sphere never reaches the sky."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 10.0, (0.9, 0.9, 0.9))

        for direction in [(0.0, 1.0, 0.0), (1.0, 0.0, 0.0), (0.3, -0.4, 0.5)]:
            assert trace_ray((0.0, 0.0, 0.0), direction, depth=10) == (0.0, 0.0, 0.0)

    def test_inverted_mirror_still_reflects(self):
        """Test a negative radius mirror reflects a head-on ray back to the sky."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -5.0), -1.0, (1.0, 1.0, 1.0), 0.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=50)
        assert color == pytest.approx(SKY_HORIZON, abs=1e-12)

    def test_index_matched_glass_is_invisible(self):
        """Test glass with index 1 passes a head-on ray through unchanged."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -5.0), 1.0, ior=1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=50)
        assert color == pytest.approx(SKY_HORIZON, abs=1e-12)

    def test_unknown_material_absorbs(self):
        """Test a sphere with an unregistered material id renders black."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=99)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=50) == (0.0, 0.0, 0.0)

    def test_diffuse_color_is_bounded(self):
        """Test diffuse bounces never brighten the sky colour."""
        from weekend_tracer.core.integrator import trace_ray
        from weekend_tracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 999.0, (0.5, 0.5, 0.5))

        for _ in range(20):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), depth=50)
            assert all(0.0 <= c <= 0.5 for c in color)


class TestScanlineSampling:
    """Test the rendering kernels."""

    def test_render_sample_sums(self):
        """Test render_sample returns the sum of its samples."""
        from weekend_tracer.core.integrator import render_sample, setup_render_target

        _pinhole_looking_down_z()
        setup_render_target(5, 5)

        color = render_sample(2, 2, samples_per_pixel=8)
        # Every sample sees sky, each channel in [0.5, 1]
        for c in color:
            assert 8 * 0.5 <= c <= 8 * 1.0

    def test_render_scanline_fills_one_row(self):
        """Test render_scanline writes only the requested row."""
        from weekend_tracer.core.integrator import (
            get_image_sums_numpy,
            render_scanline,
            setup_render_target,
        )

        _pinhole_looking_down_z()
        setup_render_target(6, 4)
        render_scanline(0, samples_per_pixel=2)

        sums = get_image_sums_numpy()
        # j = 0 is the bottom row, the last row of the top-first array
        assert (sums[-1] > 0.0).all()
        assert not sums[:-1].any()

    def test_image_orientation(self):
        """Test the top of the image sees bluer sky than the bottom."""
        from weekend_tracer.core.integrator import (
            get_image_sums_numpy,
            render_scanline,
            setup_render_target,
        )

        _pinhole_looking_down_z()
        setup_render_target(8, 8)
        for j in reversed(range(8)):
            render_scanline(j, samples_per_pixel=4)

        sums = get_image_sums_numpy()
        # Red falls off toward the zenith
        assert sums[0, :, 0].mean() < sums[-1, :, 0].mean()
        # Blue is 1 everywhere in the sky gradient
        assert sums[:, :, 2] == pytest.approx(4.0, abs=1e-9)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
