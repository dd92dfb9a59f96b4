"""3x3 kernel convolution used for sharpening and Sobel edge detection."""
from __future__ import annotations
import logging
from typing import Optional, Sequence, Union

import cv2
import numpy as np

from ..core.constants import SHARPEN_KERNEL, SOBEL_X_KERNEL, SOBEL_Y_KERNEL
from ..core.exceptions import InvalidDimension, InvalidOptions
from ..core.raster import RasterBuffer
from .quality import to_grayscale

logger = logging.getLogger(__name__)

KernelLike = Union[Sequence[float], Sequence[Sequence[float]], np.ndarray]

MIN_EXTENT = 3


def _as_kernel(kernel: KernelLike, expected_sum: Optional[float] = None) -> np.ndarray:
    k = np.asarray(kernel, dtype=np.float32)
    if k.size != 9:
        raise InvalidDimension(f"Kernel must have 9 coefficients, got {k.size}")
    k = k.reshape(3, 3)
    if expected_sum is not None and not np.isclose(float(k.sum()), expected_sum):
        raise InvalidOptions(
            f"Kernel sums to {float(k.sum())}, expected {expected_sum}",
            details={"kernel": k.tolist(), "expected_sum": expected_sum},
        )
    return k


def _filter_plane(plane: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Raw float response of ``kernel`` at every interior pixel of a 2-D plane.

    cv2.filter2D computes correlation, matching the kernel layout callers
    write row by row (top-left coefficient applies to the top-left neighbour).
    """
    return cv2.filter2D(plane.astype(np.float32), cv2.CV_32F, kernel,
                        borderType=cv2.BORDER_REPLICATE)


def _clamp(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _convolve_plane(plane: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    out = plane.copy()
    response = _filter_plane(plane, kernel)
    # Outermost ring keeps its original values
    out[1:-1, 1:-1] = _clamp(response[1:-1, 1:-1])
    return out


def convolve(buf: RasterBuffer, kernel: KernelLike, per_channel: bool = True,
             expected_sum: Optional[float] = None) -> RasterBuffer:
    """Apply a 3x3 kernel and return a new buffer.

    Args:
        buf: Source buffer (3 or 4 channels; alpha is never filtered)
        kernel: Nine coefficients, row-major, or a 3x3 nested sequence
        per_channel: Filter R, G and B independently. When False the kernel is
            applied to the grayscale image and the result replicated into RGB.
        expected_sum: If given, the kernel coefficients must sum to this value

    Returns:
        New buffer with every interior value clamped to [0, 255]. Buffers
        smaller than 3x3 have no interior and come back as an unchanged copy.
    """
    k = _as_kernel(kernel, expected_sum)

    if buf.width < MIN_EXTENT or buf.height < MIN_EXTENT:
        logger.debug(f"Convolution skipped for {buf.width}x{buf.height} buffer")
        return buf.copy()

    src = buf.as_array()
    out = src.copy()
    if per_channel:
        for c in range(3):
            out[:, :, c] = _convolve_plane(src[:, :, c], k)
    else:
        filtered = _convolve_plane(to_grayscale(buf), k)
        out[:, :, :3] = filtered[:, :, np.newaxis]
    return RasterBuffer.from_array(out)


def sharpen(buf: RasterBuffer) -> RasterBuffer:
    return convolve(buf, SHARPEN_KERNEL, per_channel=True, expected_sum=1)


def sobel_magnitude(gray: np.ndarray) -> RasterBuffer:
    """Gradient magnitude ``sqrt(gx^2 + gy^2)`` of a grayscale plane.

    The result is replicated into a 3-channel buffer for display. Border
    pixels have no full neighbourhood and are set to 0.
    """
    gray = np.asarray(gray)
    if gray.ndim != 2:
        raise InvalidDimension(f"Expected a 2-D grayscale plane, got shape {gray.shape}")
    height, width = gray.shape
    if width == 0 or height == 0:
        raise InvalidDimension(f"Grayscale plane is empty ({width}x{height})")

    magnitude = np.zeros((height, width), dtype=np.uint8)
    if width >= MIN_EXTENT and height >= MIN_EXTENT:
        gx = _filter_plane(gray, _as_kernel(SOBEL_X_KERNEL, 0))
        gy = _filter_plane(gray, _as_kernel(SOBEL_Y_KERNEL, 0))
        mag = np.sqrt(gx.astype(np.float64) ** 2 + gy.astype(np.float64) ** 2)
        magnitude[1:-1, 1:-1] = _clamp(np.minimum(mag[1:-1, 1:-1], 255))

    return RasterBuffer.from_array(np.repeat(magnitude[:, :, np.newaxis], 3, axis=2))


def detect_edges(buf: RasterBuffer) -> RasterBuffer:
    """Sobel edge map of a color buffer."""
    return sobel_magnitude(to_grayscale(buf))
