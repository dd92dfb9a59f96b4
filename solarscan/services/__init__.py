"""Analysis pipeline services."""

from .tensor_codec import encode
from .finding_synthesizer import FindingSynthesizer, SEVERITY_BY_CATEGORY, DEFAULT_ANCHORS
from .recommendation_service import generate_recommendations, overall_status, summarize
from .overlay_projector import (
    OverlayProjector, to_display_space, hit_test, layer_transform, render_overlay,
    severity_color, overlay_label,
)
from .analysis_service import AnalysisService, analyze

__all__ = [
    "encode", "FindingSynthesizer", "SEVERITY_BY_CATEGORY", "DEFAULT_ANCHORS",
    "generate_recommendations", "overall_status", "summarize",
    "OverlayProjector", "to_display_space", "hit_test", "layer_transform", "render_overlay",
    "severity_color", "overlay_label",
    "AnalysisService", "analyze",
]
