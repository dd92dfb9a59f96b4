"""Owned pixel grid that every imaging operation reads and produces."""
from __future__ import annotations
from typing import Sequence, Tuple, Union
import numpy as np

from .exceptions import InvalidDimension, OutOfBounds, UnsupportedChannelCount

VALID_CHANNEL_COUNTS = (3, 4)

Pixel = Tuple[int, ...]


class RasterBuffer:
    """Row-major grid of unsigned 8-bit pixels with 3 (RGB) or 4 (RGBA) channels.

    The buffer owns its storage. Imaging operations never write into a buffer
    they were given; they build a new one. ``set_pixel`` exists for the code
    that creates a buffer and still holds the only reference to it.
    """

    __slots__ = ("_pixels",)

    def __init__(self, width: int, height: int, channels: int = 3,
                 data: Union[bytes, Sequence[int], np.ndarray, None] = None):
        if width <= 0 or height <= 0:
            raise InvalidDimension(f"Buffer extent must be positive, got {width}x{height}")
        if channels not in VALID_CHANNEL_COUNTS:
            raise UnsupportedChannelCount(
                f"Buffer must have 3 or 4 channels, got {channels}",
                details={"channels": channels},
            )

        expected = width * height * channels
        if data is None:
            flat = np.zeros(expected, dtype=np.uint8)
        elif isinstance(data, (bytes, bytearray)):
            flat = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        else:
            raw = np.asarray(data)
            if raw.size and not np.all((raw >= 0) & (raw <= 255)):
                raise ValueError("Pixel values must lie in [0, 255]")
            if not np.issubdtype(raw.dtype, np.integer):
                raw = np.rint(raw)
            flat = raw.astype(np.uint8).reshape(-1).copy()

        if flat.size != expected:
            raise InvalidDimension(
                f"Pixel data has {flat.size} values, expected {expected} "
                f"({width}x{height}x{channels})"
            )
        self._pixels = flat.reshape(height, width, channels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterBuffer":
        """Build a buffer from an (H, W, C) array. The array is copied."""
        if array.ndim != 3:
            raise InvalidDimension(f"Expected an (H, W, C) array, got shape {array.shape}")
        height, width, channels = array.shape
        return cls(width, height, channels, np.ascontiguousarray(array))

    @classmethod
    def filled(cls, width: int, height: int, value: Sequence[int],
               channels: int = 3) -> "RasterBuffer":
        """Build a buffer where every pixel equals ``value``."""
        buf = cls(width, height, channels)
        buf._pixels[:, :] = np.asarray(value, dtype=np.uint8)
        return buf

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def channels(self) -> int:
        return self._pixels.shape[2]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def data(self) -> bytes:
        """Flat row-major pixel bytes."""
        return self._pixels.tobytes()

    def __len__(self) -> int:
        return self._pixels.size

    def as_array(self) -> np.ndarray:
        """Read-only (H, W, C) view of the pixels."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def copy(self) -> "RasterBuffer":
        return RasterBuffer.from_array(self._pixels)

    def get_pixel(self, x: int, y: int) -> Pixel:
        self._check_coordinates(x, y)
        return tuple(int(v) for v in self._pixels[y, x])

    def set_pixel(self, x: int, y: int, value: Sequence[int]) -> None:
        self._check_coordinates(x, y)
        if len(value) != self.channels:
            raise UnsupportedChannelCount(
                f"Pixel has {len(value)} values, buffer has {self.channels} channels"
            )
        if any(v < 0 or v > 255 for v in value):
            raise ValueError("Pixel values must lie in [0, 255]")
        self._pixels[y, x] = value

    def _check_coordinates(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(
                f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer",
                details={"x": x, "y": y, "width": self.width, "height": self.height},
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return (self._pixels.shape == other._pixels.shape
                and bool(np.array_equal(self._pixels, other._pixels)))

    __hash__ = None  # mutable through set_pixel

    def __repr__(self) -> str:
        return f"RasterBuffer(width={self.width}, height={self.height}, channels={self.channels})"
