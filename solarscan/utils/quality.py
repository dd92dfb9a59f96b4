"""Read-only image statistics: grayscale, brightness, contrast, sharpness, histogram."""
from __future__ import annotations
from typing import Dict, Optional

import numpy as np

from ..core.constants import GRAY_WEIGHTS
from ..core.entities import ImageQuality
from ..core.raster import RasterBuffer


def to_grayscale(buf: RasterBuffer) -> np.ndarray:
    """Luma plane ``0.299R + 0.587G + 0.114B`` rounded half-up, as uint8 (H, W)."""
    rgb = buf.as_array()[:, :, :3].astype(np.float64)
    wr, wg, wb = GRAY_WEIGHTS
    luma = wr * rgb[:, :, 0] + wg * rgb[:, :, 1] + wb * rgb[:, :, 2]
    return np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)


def brightness(gray: np.ndarray) -> float:
    """Mean gray value scaled to [0, 1]."""
    return float(np.mean(gray, dtype=np.float64)) / 255.0


def contrast(gray: np.ndarray, mean_brightness: Optional[float] = None) -> float:
    """Mean absolute deviation from the mean gray value, scaled to [0, 1].

    Args:
        gray: Grayscale plane
        mean_brightness: Value previously returned by ``brightness`` for the
            same plane; computed when omitted
    """
    if mean_brightness is None:
        mean_brightness = brightness(gray)
    mean_gray = mean_brightness * 255.0
    return float(np.mean(np.abs(gray.astype(np.float64) - mean_gray))) / 255.0


def sharpness(gray: np.ndarray, width: int, height: int) -> float:
    """Mean absolute discrete Laplacian over interior pixels, scaled to [0, 1].

    A single Laplacian can reach 4 * 255, so extremely busy images (e.g. a
    one-pixel checkerboard) saturate at 1.0.
    """
    if width < 3 or height < 3:
        return 0.0
    g = gray.reshape(height, width).astype(np.int32)
    center = g[1:-1, 1:-1]
    laplacian = np.abs(4 * center - g[:-2, 1:-1] - g[2:, 1:-1] - g[1:-1, :-2] - g[1:-1, 2:])
    return min(1.0, float(np.mean(laplacian)) / 255.0)


def histogram(buf: RasterBuffer) -> Dict[str, np.ndarray]:
    """Exact 256-bin value counts per channel plus grayscale.

    Every array sums to ``width * height``.
    """
    pixels = buf.as_array()
    return {
        "red": np.bincount(pixels[:, :, 0].ravel(), minlength=256),
        "green": np.bincount(pixels[:, :, 1].ravel(), minlength=256),
        "blue": np.bincount(pixels[:, :, 2].ravel(), minlength=256),
        "gray": np.bincount(to_grayscale(buf).ravel(), minlength=256),
    }


def analyze_quality(buf: RasterBuffer) -> ImageQuality:
    gray = to_grayscale(buf)
    mean = brightness(gray)
    return ImageQuality(
        brightness=mean,
        contrast=contrast(gray, mean),
        sharpness=sharpness(gray, buf.width, buf.height),
    )
