"""Core domain entities, pixel buffer and constants."""

from .entities import (
    Category, Severity, OverallStatus, RecommendationType, BoundingBox, Finding,
    Recommendation, AnalysisSummary, AnalysisOptions, AnalysisResult,
    BatchAnalysisResult, ImageQuality, DisplayTransform, DisplayBox, Size, ClassScore,
)
from .exceptions import (
    ApplicationError, ConfigError, ModelError, PipelineError, InvalidDimension,
    OutOfBounds, UnsupportedChannelCount, UnsupportedFormat, DecodeFailure,
    ClassifierFailure, InvalidOptions,
)
from .raster import RasterBuffer
from .constants import APP_NAME, VERSION, SUPPORTED_IMAGE_FORMATS

__all__ = [
    "Category", "Severity", "OverallStatus", "RecommendationType", "BoundingBox",
    "Finding", "Recommendation", "AnalysisSummary", "AnalysisOptions", "AnalysisResult",
    "BatchAnalysisResult", "ImageQuality", "DisplayTransform", "DisplayBox", "Size",
    "ClassScore",
    "ApplicationError", "ConfigError", "ModelError", "PipelineError", "InvalidDimension",
    "OutOfBounds", "UnsupportedChannelCount", "UnsupportedFormat", "DecodeFailure",
    "ClassifierFailure", "InvalidOptions",
    "RasterBuffer",
    "APP_NAME", "VERSION", "SUPPORTED_IMAGE_FORMATS",
]
