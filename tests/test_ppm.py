"""Tests for P3 image output.

Tests cover:
- Colour sum to byte conversion (averaging, gamma 2, clamping)
- Handling of negative and NaN sums
- P3 header and body layout
"""

import io

import numpy as np
import pytest

from weekend_tracer.output.ppm import color_to_bytes, ppm_header, write_ppm


class TestColorToBytes:
    """Tests for color_to_bytes."""

    def test_white_and_black(self):
        """Test a channel of exactly 1.0 maps to 255 and 0.0 maps to 0."""
        result = color_to_bytes([1.0, 0.0, 1.0], samples_per_pixel=1)
        assert result.tolist() == [255, 0, 255]
        assert result.dtype == np.uint8

    def test_averages_over_samples(self):
        """Test sums are divided by the sample count before conversion."""
        result = color_to_bytes([100.0, 0.0, 25.0], samples_per_pixel=100)
        # sqrt(1.0) -> 255, sqrt(0.25) = 0.5 -> 128
        assert result.tolist() == [255, 0, 128]

    def test_gamma_two(self):
        """Test the square root gamma correction."""
        result = color_to_bytes([0.25, 0.01, 0.64], samples_per_pixel=1)
        assert result.tolist() == [int(256 * 0.5), int(256 * 0.1), int(256 * 0.8)]

    def test_clamps_bright_values(self):
        """Test values above 1 clamp to 255."""
        result = color_to_bytes([4.0, 1e9, 1.5], samples_per_pixel=1)
        assert result.tolist() == [255, 255, 255]

    def test_negative_and_nan_map_to_zero(self):
        """Test negative and NaN sums produce 0."""
        result = color_to_bytes([-1.0, np.nan, -0.0], samples_per_pixel=1)
        assert result.tolist() == [0, 0, 0]

    def test_image_shape_preserved(self):
        """Test an image array keeps its shape."""
        sums = np.full((2, 3, 3), 4.0)
        result = color_to_bytes(sums, samples_per_pixel=4)
        assert result.shape == (2, 3, 3)
        assert (result == 255).all()

    def test_invalid_samples(self):
        """Test a sample count below 1 is rejected."""
        with pytest.raises(ValueError, match="samples_per_pixel"):
            color_to_bytes([1.0, 1.0, 1.0], samples_per_pixel=0)


class TestWritePpm:
    """Tests for ppm_header and write_ppm."""

    def test_header(self):
        """Test the P3 header format."""
        assert ppm_header(400, 266) == "P3\n400 266\n255\n"

    def test_layout(self):
        """Test one pixel per line, rows top to bottom, left to right."""
        image = np.array(
            [
                [[255, 0, 0], [0, 255, 0]],
                [[0, 0, 255], [1, 2, 3]],
            ],
            dtype=np.uint8,
        )
        stream = io.StringIO()
        write_ppm(stream, image)

        assert stream.getvalue() == (
            "P3\n2 2\n255\n" "255 0 0\n" "0 255 0\n" "0 0 255\n" "1 2 3\n"
        )

    def test_line_count(self):
        """Test the file has three header lines plus one line per pixel."""
        image = np.zeros((3, 5, 3), dtype=np.uint8)
        stream = io.StringIO()
        write_ppm(stream, image)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 3 + 3 * 5
        assert lines[1] == "5 3"
        assert all(line == "0 0 0" for line in lines[3:])

    @pytest.mark.parametrize("shape", [(4, 3), (2, 2, 4), (2, 2, 3, 1)])
    def test_invalid_shape(self, shape):
        """Test arrays that are not (height, width, 3) are rejected."""
        with pytest.raises(ValueError, match="shape"):
            write_ppm(io.StringIO(), np.zeros(shape, dtype=np.uint8))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
