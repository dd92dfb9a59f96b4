"""Geometric operations on raster buffers.

All functions are pure: they return a new ``RasterBuffer`` and leave the
input untouched.
"""
from __future__ import annotations
from typing import Tuple

import cv2
import numpy as np

from ..core.exceptions import InvalidDimension, OutOfBounds
from ..core.raster import RasterBuffer


def letterbox_geometry(src_w: int, src_h: int, target_w: int,
                       target_h: int) -> Tuple[float, int, int, int, int]:
    """Placement of a source image inside a letterboxed target canvas.

    Returns:
        (scale, scaled_w, scaled_h, offset_x, offset_y)
    """
    if target_w <= 0 or target_h <= 0:
        raise InvalidDimension(
            f"Target extent must be positive, got {target_w}x{target_h}",
            details={"target_width": target_w, "target_height": target_h},
        )
    scale = min(target_w / src_w, target_h / src_h)
    scaled_w = min(target_w, max(1, int(round(src_w * scale))))
    scaled_h = min(target_h, max(1, int(round(src_h * scale))))
    offset_x = (target_w - scaled_w) // 2
    offset_y = (target_h - scaled_h) // 2
    return scale, scaled_w, scaled_h, offset_x, offset_y


def resize_letterboxed(buf: RasterBuffer, target_w: int, target_h: int) -> RasterBuffer:
    """Resize preserving aspect ratio, centered on a black target-sized canvas."""
    scale, scaled_w, scaled_h, off_x, off_y = letterbox_geometry(
        buf.width, buf.height, target_w, target_h)

    src = buf.as_array()
    if (scaled_w, scaled_h) == (buf.width, buf.height):
        scaled = src
    else:
        interpolation = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_LINEAR
        scaled = cv2.resize(src, (scaled_w, scaled_h), interpolation=interpolation)
        if scaled.ndim == 2:  # cv2 drops a singleton channel axis
            scaled = scaled[:, :, np.newaxis]

    canvas = np.zeros((target_h, target_w, buf.channels), dtype=np.uint8)
    canvas[off_y:off_y + scaled_h, off_x:off_x + scaled_w] = scaled
    return RasterBuffer.from_array(canvas)


def crop(buf: RasterBuffer, x: int, y: int, w: int, h: int) -> RasterBuffer:
    """Copy out the rectangle (x, y, w, h)."""
    if w <= 0 or h <= 0:
        raise InvalidDimension(f"Crop extent must be positive, got {w}x{h}")
    if x < 0 or y < 0 or x + w > buf.width or y + h > buf.height:
        raise OutOfBounds(
            f"Crop ({x}, {y}, {w}, {h}) exceeds {buf.width}x{buf.height} buffer",
            details={"x": x, "y": y, "width": w, "height": h,
                     "buffer_width": buf.width, "buffer_height": buf.height},
        )
    return RasterBuffer.from_array(buf.as_array()[y:y + h, x:x + w])


def rotate90(buf: RasterBuffer, times: int) -> RasterBuffer:
    """Rotate clockwise by ``times`` quarter turns (taken mod 4)."""
    times %= 4
    # np.rot90 turns counter-clockwise for positive k
    return RasterBuffer.from_array(np.rot90(buf.as_array(), k=-times))
