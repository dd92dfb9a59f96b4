"""Image decoding and enhancement utilities."""

import io
import logging
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..core.constants import SUPPORTED_IMAGE_FORMATS
from ..core.exceptions import DecodeFailure, UnsupportedFormat
from ..core.raster import RasterBuffer
from .convolution import sharpen
from .geometry import resize_letterboxed

logger = logging.getLogger(__name__)

# MIME type -> Pillow format name
_PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}


def decode_image(data: bytes, mime: str, max_size: Optional[int] = None) -> RasterBuffer:
    """Decode an uploaded image into a RasterBuffer.

    Args:
        data: Raw file bytes
        mime: Declared MIME type; the bytes must actually be in this format
        max_size: Optional upper bound on ``len(data)`` in bytes

    Returns:
        RGB buffer, or RGBA when the source carries transparency

    Raises:
        UnsupportedFormat: MIME type is not jpeg, png or webp
        DecodeFailure: Payload is empty, too large or not a valid image
    """
    mime = (mime or "").lower().strip()
    if mime not in SUPPORTED_IMAGE_FORMATS:
        raise UnsupportedFormat(
            f"Unsupported image type: {mime or '<none>'}",
            details={"mime": mime, "supported": list(SUPPORTED_IMAGE_FORMATS)},
        )
    if not data:
        raise DecodeFailure("Image payload is empty")
    if max_size is not None and len(data) > max_size:
        raise DecodeFailure(
            f"Image payload of {len(data)} bytes exceeds limit of {max_size} bytes",
            details={"size": len(data), "max_size": max_size},
        )

    try:
        with Image.open(io.BytesIO(data), formats=[_PIL_FORMATS[mime]]) as img:
            img.load()
            has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
            converted = img.convert("RGBA" if has_alpha else "RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Could not decode {mime} image: {e}") from e

    buf = RasterBuffer.from_array(np.asarray(converted, dtype=np.uint8))
    logger.debug(f"Decoded {mime} image: {buf.width}x{buf.height}x{buf.channels}")
    return buf


def to_rgb(buf: RasterBuffer) -> RasterBuffer:
    """Drop the alpha channel if present."""
    if buf.channels == 3:
        return buf.copy()
    return RasterBuffer.from_array(buf.as_array()[:, :, :3])


def adjust_contrast(buf: RasterBuffer, factor: float = 1.2) -> RasterBuffer:
    """Stretch RGB values around mid-gray: ``(v - 128) * factor + 128``."""
    pixels = buf.as_array()
    out = pixels.copy()
    stretched = (pixels[:, :, :3].astype(np.float64) - 128.0) * factor + 128.0
    out[:, :, :3] = np.clip(np.rint(stretched), 0, 255).astype(np.uint8)
    return RasterBuffer.from_array(out)


def enhance_image(buf: RasterBuffer, contrast_factor: float = 1.2) -> RasterBuffer:
    """Contrast stretch followed by the standard sharpen kernel."""
    return sharpen(adjust_contrast(buf, contrast_factor))


def generate_thumbnail(buf: RasterBuffer, max_width: int = 200, max_height: int = 200) -> RasterBuffer:
    return resize_letterboxed(buf, max_width, max_height)
