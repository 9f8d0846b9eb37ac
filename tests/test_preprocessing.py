"""
Unit tests for image decoding and normalization.
"""

import io

import numpy as np
import pytest
from PIL import Image

from src.face_attributes import DecodeError, center_crop_box, load_image, normalize, preprocess
from src.face_attributes.config import INPUT_SHAPE
from src.face_attributes.preprocessing import get_resample_filter


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class TestCenterCropBox:
    """Tests for the center crop geometry."""

    @pytest.mark.parametrize("side", [1, 2, 96, 97, 500])
    def test_square_has_no_offset(self, side):
        """Test square images are not offset."""
        assert center_crop_box(side, side) == (0, 0, side, side)

    @pytest.mark.parametrize(
        "width,height,expected_box",
        [
            (200, 100, (50, 0, 150, 100)),
            (100, 200, (0, 50, 100, 150)),
            (5, 2, (1, 0, 3, 2)),
            (2, 7, (0, 2, 2, 4)),
            (1, 40, (0, 19, 1, 20)),
        ],
    )
    def test_offsets_use_floor_division(self, width, height, expected_box):
        """Test crop box for landscape, portrait and odd margins."""
        assert center_crop_box(width, height) == expected_box

    def test_crop_stays_inside_image(self):
        """Test crop box never exceeds the source bounds."""
        for width, height in [(3, 96), (96, 3), (17, 1000), (1000, 17)]:
            left, top, right, bottom = center_crop_box(width, height)
            assert left >= 0 and top >= 0
            assert right <= width and bottom <= height
            assert right - left == bottom - top == min(width, height)


class TestNormalize:
    """Tests for tensor normalization."""

    def test_output_shape_and_dtype(self):
        """Test output is always (1, 96, 96, 3) float32."""
        for size in [(200, 100), (100, 200), (96, 96), (31, 7)]:
            tensor = normalize(Image.new("RGB", size, color="gray"))
            assert tensor.shape == INPUT_SHAPE
            assert tensor.dtype == np.float32

    def test_identity_for_96_square(self):
        """Test a 96x96 image maps to per-pixel /255 with no resampling."""
        rng = np.random.default_rng(0)
        pixels = rng.integers(0, 256, (96, 96, 3), dtype=np.uint8)

        tensor = normalize(Image.fromarray(pixels))

        expected = pixels.astype(np.float32) / np.float32(255.0)
        np.testing.assert_array_equal(tensor[0], expected)

    def test_values_in_unit_range(self):
        """Test every value lies in [0, 1]."""
        rng = np.random.default_rng(1)
        pixels = rng.integers(0, 256, (150, 240, 3), dtype=np.uint8)
        pixels[0, 0] = [0, 0, 0]
        pixels[-1, -1] = [255, 255, 255]

        tensor = normalize(Image.fromarray(pixels))

        assert tensor.min() >= 0.0
        assert tensor.max() <= 1.0

    def test_rows_are_outer_index(self):
        """Test tensor[0][y][x] holds pixel (x, y), not its transpose."""
        image = Image.new("RGB", (96, 96), color="black")
        image.putpixel((10, 3), (255, 0, 0))

        tensor = normalize(image)

        np.testing.assert_array_equal(tensor[0, 3, 10], [1.0, 0.0, 0.0])
        np.testing.assert_array_equal(tensor[0, 10, 3], [0.0, 0.0, 0.0])

    def test_channels_are_rgb(self):
        """Test channel order is R, G, B."""
        tensor = normalize(Image.new("RGB", (96, 96), color=(255, 128, 0)))

        np.testing.assert_allclose(tensor[0, 0, 0], [1.0, 128 / 255, 0.0], rtol=1e-6)

    def test_solid_red_landscape(self):
        """Test a solid red 200x100 image stays red after crop and resize."""
        tensor = normalize(Image.new("RGB", (200, 100), color=(255, 0, 0)))

        expected = np.broadcast_to(np.array([1.0, 0.0, 0.0], dtype=np.float32), INPUT_SHAPE)
        np.testing.assert_allclose(tensor, expected, atol=1e-3)

    def test_crop_discards_margins(self):
        """Test only the center square reaches the tensor."""
        # Left and right quarters blue, center square green
        image = Image.new("RGB", (200, 100), color=(0, 0, 255))
        image.paste(Image.new("RGB", (100, 100), color=(0, 255, 0)), (50, 0))

        tensor = normalize(image)

        np.testing.assert_allclose(tensor[0, :, :, 1], 1.0, atol=1e-3)
        np.testing.assert_allclose(tensor[0, :, :, 2], 0.0, atol=1e-3)

    def test_one_pixel_image(self):
        """Test a 1x1 image is upscaled to a uniform tensor."""
        tensor = normalize(Image.new("RGB", (1, 1), color=(51, 102, 204)))

        assert tensor.shape == INPUT_SHAPE
        np.testing.assert_allclose(tensor[0, 50, 50], [0.2, 0.4, 0.8], atol=1e-3)
        np.testing.assert_allclose(tensor[0], tensor[0, 0, 0] * np.ones((96, 96, 3)), atol=1e-3)

    def test_alpha_is_discarded(self):
        """Test an opaque RGBA image gives the same tensor as its RGB version."""
        rgba = Image.new("RGBA", (96, 96), color=(10, 20, 30, 255))
        rgb = Image.new("RGB", (96, 96), color=(10, 20, 30))

        np.testing.assert_array_equal(normalize(rgba), normalize(rgb))

    @pytest.mark.parametrize("mode", ["L", "P", "LA"])
    def test_other_modes_are_converted(self, mode):
        """Test non-RGB modes are converted before normalization."""
        image = Image.new("RGB", (120, 80), color=(200, 200, 200)).convert(mode)

        tensor = normalize(image)

        assert tensor.shape == INPUT_SHAPE
        assert 0.0 <= tensor.min() <= tensor.max() <= 1.0

    def test_16bit_grayscale_is_scaled(self):
        """Test 16-bit values are scaled to 8 bits, not clipped at 255."""
        pixels = np.full((50, 50), 32768, dtype=np.uint16)
        image = load_image(_png_bytes(Image.fromarray(pixels)))

        tensor = normalize(image)

        assert image.mode in {"I;16", "I"}
        np.testing.assert_allclose(tensor, 128 / 255, atol=1e-6)

    @pytest.mark.parametrize("value,expected", [(0, 0), (255, 0), (256, 1), (65535, 255)])
    def test_16bit_range_endpoints(self, value, expected):
        image = Image.fromarray(np.full((96, 96), value, dtype=np.uint16))

        tensor = normalize(image)

        np.testing.assert_allclose(tensor, expected / 255, atol=1e-6)

    def test_invalid_resample_filter(self):
        """Test unknown filter names are rejected."""
        with pytest.raises(ValueError):
            get_resample_filter("cubic-spline")


class TestLoadImage:
    """Tests for image decoding."""

    def test_load_from_path(self, tmp_path):
        """Test decoding from a file path."""
        path = tmp_path / "face.png"
        Image.new("RGB", (64, 48), color=(120, 200, 80)).save(path)

        image = load_image(str(path))

        assert image.size == (64, 48)

    def test_load_from_bytes_and_file(self):
        """Test decoding from raw bytes and a binary file object."""
        data = _png_bytes(Image.new("RGB", (30, 20), color="white"))

        assert load_image(data).size == (30, 20)
        assert load_image(io.BytesIO(data)).size == (30, 20)

    def test_load_from_numpy(self):
        """Test decoding from a uint8 numpy array."""
        array = np.zeros((48, 64, 3), dtype=np.uint8)

        assert load_image(array).size == (64, 48)

    def test_exif_orientation_applied(self):
        """Test EXIF orientation rotates the decoded image."""
        exif = Image.Exif()
        exif[0x0112] = 6  # Rotate 90 CW on display
        buffer = io.BytesIO()
        Image.new("RGB", (40, 20), color="white").save(buffer, format="JPEG", exif=exif)

        image = load_image(buffer.getvalue())

        assert image.size == (20, 40)

    def test_undecodable_bytes(self):
        """Test garbage bytes raise DecodeError."""
        with pytest.raises(DecodeError):
            load_image(b"definitely not an image")

    def test_missing_file(self, tmp_path):
        """Test a missing path raises DecodeError."""
        with pytest.raises(DecodeError):
            load_image(str(tmp_path / "missing.jpg"))

    def test_unsupported_source_type(self):
        """Test an unsupported source raises DecodeError."""
        with pytest.raises(DecodeError):
            load_image(12345)

    def test_unsupported_array_dtype(self):
        """Test an array PIL cannot interpret raises DecodeError."""
        with pytest.raises(DecodeError):
            load_image(np.zeros((4, 4, 3), dtype=np.float64))

    def test_oversized_image(self, monkeypatch):
        """Test images over the pixel limit raise DecodeError."""
        data = _png_bytes(Image.new("RGB", (20, 20), color="white"))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        with pytest.raises(DecodeError):
            load_image(data)

    def test_preprocess_matches_normalize(self):
        """Test preprocess is decode followed by normalize."""
        image = Image.new("RGB", (150, 90), color=(30, 60, 90))

        np.testing.assert_array_equal(preprocess(_png_bytes(image)), normalize(image))
