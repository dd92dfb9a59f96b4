"""
Solar panel condition analysis pipeline.
"""

__version__ = "1.0.0"

from .config.settings import Config, load_config, save_config
from .core.entities import (
    Category, Severity, OverallStatus, BoundingBox, Finding, Recommendation,
    AnalysisOptions, AnalysisResult, DisplayTransform,
)
from .core.raster import RasterBuffer
from .services.analysis_service import AnalysisService, analyze

__all__ = [
    "Config", "load_config", "save_config",
    "Category", "Severity", "OverallStatus", "BoundingBox", "Finding", "Recommendation",
    "AnalysisOptions", "AnalysisResult", "DisplayTransform",
    "RasterBuffer", "AnalysisService", "analyze",
]
