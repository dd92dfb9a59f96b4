"""Pixel-level utility functions package."""

from .geometry import letterbox_geometry, resize_letterboxed, crop, rotate90
from .quality import to_grayscale, brightness, contrast, sharpness, histogram, analyze_quality
from .convolution import convolve, sharpen, sobel_magnitude, detect_edges
from .image_utils import (
    decode_image, to_rgb, adjust_contrast, enhance_image, generate_thumbnail,
)

__all__ = [
    "letterbox_geometry", "resize_letterboxed", "crop", "rotate90",
    "to_grayscale", "brightness", "contrast", "sharpness", "histogram", "analyze_quality",
    "convolve", "sharpen", "sobel_magnitude", "detect_edges",
    "decode_image", "to_rgb", "adjust_contrast", "enhance_image", "generate_thumbnail",
]
