"""Conversion of a RasterBuffer into the classifier's input tensor."""

import numpy as np

from ..core.exceptions import UnsupportedChannelCount
from ..core.raster import RasterBuffer
from ..utils.geometry import resize_letterboxed

DEFAULT_INPUT_SIZE = (224, 224)  # (width, height)


def encode(buf: RasterBuffer, target_w: int = DEFAULT_INPUT_SIZE[0],
           target_h: int = DEFAULT_INPUT_SIZE[1]) -> np.ndarray:
    """Letterbox to the model extent and scale values to [0, 1].

    Returns:
        float32 array of shape (target_h, target_w, 3)

    Raises:
        UnsupportedChannelCount: buffer is not 3-channel RGB
        InvalidDimension: target extent is not positive
    """
    if buf.channels != 3:
        raise UnsupportedChannelCount(
            f"Tensor encoding needs a 3-channel buffer, got {buf.channels}",
            details={"channels": buf.channels},
        )
    resized = resize_letterboxed(buf, target_w, target_h)
    return resized.as_array().astype(np.float32) / np.float32(255.0)
