"""Map findings between source-image pixels and the on-screen display.

Boxes are projected by the ratio of display size to natural image size on
each axis. The display transform's zoom and rotation are applied by the
presentation layer to the whole rendered layer about the display center
(see ``layer_transform``); they are not folded into box coordinates. Hit
testing therefore works in the untransformed display space, and annotations
line up with the image only at 0 degrees rotation.
"""
from __future__ import annotations
import logging
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..core.entities import BoundingBox, DisplayBox, DisplayTransform, Finding, Severity, Size
from ..core.exceptions import InvalidDimension
from ..core.raster import RasterBuffer

logger = logging.getLogger(__name__)

SEVERITY_COLORS: Dict[Severity, str] = {
    Severity.LOW: "#10B981",
    Severity.MEDIUM: "#F59E0B",
    Severity.HIGH: "#EF4444",
}

_IDENTITY = DisplayTransform()


def _scale_factors(image_natural_size: Size, display_size: Size) -> Tuple[float, float]:
    nat_w, nat_h = image_natural_size
    disp_w, disp_h = display_size
    if nat_w <= 0 or nat_h <= 0 or disp_w <= 0 or disp_h <= 0:
        raise InvalidDimension(
            f"Sizes must be positive, got natural {image_natural_size} and display {display_size}")
    return disp_w / nat_w, disp_h / nat_h


def to_display_space(box: BoundingBox, image_natural_size: Size, display_size: Size,
                     transform: Optional[DisplayTransform] = None) -> DisplayBox:
    """Project a source-pixel box into display coordinates.

    ``transform`` is validated but does not alter the result; the zoom and
    rotation act on the rendered layer as a whole.
    """
    sx, sy = _scale_factors(image_natural_size, display_size)
    return DisplayBox(
        x=box.x * sx,
        y=box.y * sy,
        width=box.width * sx,
        height=box.height * sy,
    )


def hit_test(pointer_x: float, pointer_y: float, findings: Sequence[Finding],
             image_natural_size: Size, display_size: Size) -> Optional[Finding]:
    """First finding, in list order, whose projected box contains the pointer.

    Box edges count as inside.
    """
    for finding in findings:
        if to_display_space(finding.bounding_box, image_natural_size,
                            display_size).contains(pointer_x, pointer_y):
            return finding
    return None


def layer_transform(transform: DisplayTransform, display_size: Size) -> Dict[str, float]:
    """Visual transform the presentation layer applies to image and overlay together."""
    disp_w, disp_h = display_size
    return {
        "origin_x": disp_w / 2.0,
        "origin_y": disp_h / 2.0,
        "scale": transform.zoom,
        "rotation_degrees": float(transform.rotation_degrees),
    }


class OverlayProjector:
    """Projector bound to one displayed image."""

    def __init__(self, image_natural_size: Size, display_size: Size,
                 transform: Optional[DisplayTransform] = None):
        _scale_factors(image_natural_size, display_size)
        self.image_natural_size = image_natural_size
        self.display_size = display_size
        self.transform = transform or _IDENTITY

    def project(self, finding: Finding, transform: Optional[DisplayTransform] = None) -> DisplayBox:
        return to_display_space(finding.bounding_box, self.image_natural_size,
                                self.display_size, transform or self.transform)

    def hit_test(self, pointer_x: float, pointer_y: float,
                 findings: Sequence[Finding]) -> Optional[Finding]:
        return hit_test(pointer_x, pointer_y, findings, self.image_natural_size, self.display_size)

    def layer_transform(self) -> Dict[str, float]:
        return layer_transform(self.transform, self.display_size)


def severity_color(severity: Severity) -> str:
    return SEVERITY_COLORS[severity]


def overlay_label(finding: Finding) -> str:
    return f"{finding.category.value} ({finding.confidence * 100:.1f}%)"


def _hex_to_rgb(color: str) -> Tuple[int, int, int]:
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


def render_overlay(buf: RasterBuffer, findings: Sequence[Finding],
                   line_width: int = 2) -> RasterBuffer:
    """Draw each finding's box and label onto a copy of ``buf``."""
    canvas = np.ascontiguousarray(buf.as_array().copy())
    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = 0.4
    label_height = 16

    for finding in findings:
        box = finding.bounding_box
        color = _hex_to_rgb(severity_color(finding.severity))
        if buf.channels == 4:
            color = color + (255,)
        x1, y1 = box.x, box.y
        x2, y2 = box.x + box.width, box.y + box.height
        cv2.rectangle(canvas, (x1, y1), (x2, y2), color, line_width)

        label = overlay_label(finding)
        (text_w, _), _ = cv2.getTextSize(label, font, font_scale, 1)
        # Label sits above the box unless that would leave the image
        top = y1 - label_height if y1 >= label_height else y1
        cv2.rectangle(canvas, (x1, top), (x1 + text_w + 8, top + label_height), color, -1)
        white = (255, 255, 255, 255) if buf.channels == 4 else (255, 255, 255)
        cv2.putText(canvas, label, (x1 + 4, top + label_height - 4), font, font_scale,
                    white, 1, cv2.LINE_AA)

    logger.debug(f"Rendered {len(findings)} findings onto {buf.width}x{buf.height} image")
    return RasterBuffer.from_array(canvas)
