"""Unit tests for RasterBuffer construction, access and ownership."""
import numpy as np
import pytest

from solarscan.core.exceptions import InvalidDimension, OutOfBounds, UnsupportedChannelCount
from solarscan.core.raster import RasterBuffer


class TestRasterBufferCreation:
    """Test suite for constructing buffers."""

    def test_zero_filled_default(self):
        buf = RasterBuffer(4, 3)
        assert buf.size == (4, 3)
        assert buf.channels == 3
        assert len(buf) == 4 * 3 * 3
        assert buf.data == bytes(36)

    def test_from_bytes(self):
        data = bytes(range(2 * 2 * 4))
        buf = RasterBuffer(2, 2, 4, data)
        assert buf.get_pixel(1, 0) == (4, 5, 6, 7)
        assert buf.data == data

    @pytest.mark.parametrize("width,height", [(0, 1), (1, 0), (-3, 4)])
    def test_invalid_extent(self, width, height):
        with pytest.raises(InvalidDimension):
            RasterBuffer(width, height)

    @pytest.mark.parametrize("channels", [1, 2, 5])
    def test_invalid_channel_count(self, channels):
        with pytest.raises(UnsupportedChannelCount):
            RasterBuffer(2, 2, channels)

    def test_data_length_mismatch(self):
        with pytest.raises(InvalidDimension):
            RasterBuffer(2, 2, 3, bytes(11))

    def test_values_out_of_range(self):
        with pytest.raises(ValueError):
            RasterBuffer(1, 1, 3, [0, 256, 0])

    def test_float_values_rounded(self):
        buf = RasterBuffer(1, 1, 3, np.array([254.9, 0.4, 0.6]))
        assert buf.get_pixel(0, 0) == (255, 0, 1)

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            RasterBuffer(1, 1, 3, np.array([0.0, np.nan, 0.0]))

    def test_from_array_copies(self):
        arr = np.zeros((2, 3, 3), dtype=np.uint8)
        buf = RasterBuffer.from_array(arr)
        arr[0, 0] = 99
        assert buf.get_pixel(0, 0) == (0, 0, 0)
        assert buf.size == (3, 2)

    def test_from_array_rejects_2d(self):
        with pytest.raises(InvalidDimension):
            RasterBuffer.from_array(np.zeros((2, 2), dtype=np.uint8))

    def test_filled(self):
        buf = RasterBuffer.filled(3, 2, (10, 20, 30))
        assert all(buf.get_pixel(x, y) == (10, 20, 30) for x in range(3) for y in range(2))


class TestRasterBufferAccess:
    """Test suite for pixel access and ownership rules."""

    def test_set_and_get_pixel(self):
        buf = RasterBuffer(3, 3)
        buf.set_pixel(2, 1, (1, 2, 3))
        assert buf.get_pixel(2, 1) == (1, 2, 3)
        assert buf.as_array()[1, 2].tolist() == [1, 2, 3]

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (3, 0), (0, 3)])
    def test_out_of_bounds(self, x, y):
        buf = RasterBuffer(3, 3)
        with pytest.raises(OutOfBounds):
            buf.get_pixel(x, y)
        with pytest.raises(OutOfBounds):
            buf.set_pixel(x, y, (0, 0, 0))

    def test_set_pixel_wrong_length(self):
        buf = RasterBuffer(2, 2)
        with pytest.raises(UnsupportedChannelCount):
            buf.set_pixel(0, 0, (1, 2, 3, 4))

    def test_array_view_is_read_only(self):
        buf = RasterBuffer(2, 2)
        view = buf.as_array()
        with pytest.raises(ValueError):
            view[0, 0, 0] = 1

    def test_copy_is_independent(self, sample_buffer):
        clone = sample_buffer.copy()
        assert clone == sample_buffer
        clone.set_pixel(0, 0, (0, 0, 0) if sample_buffer.get_pixel(0, 0) != (0, 0, 0) else (1, 1, 1))
        assert clone != sample_buffer

    def test_equality_considers_shape(self):
        assert RasterBuffer(2, 3) != RasterBuffer(3, 2)
        assert RasterBuffer(2, 2) == RasterBuffer(2, 2)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(RasterBuffer(1, 1))
