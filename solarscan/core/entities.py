"""Domain entities (data-only structures) used across services."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .constants import DETAIL_LEVELS, MAX_ZOOM, MIN_ZOOM, VALID_ROTATIONS
from .exceptions import InvalidOptions

Size = Tuple[int, int]  # (width, height)
ClassScore = Tuple[int, float]  # (category index, confidence)


class Category(Enum):
    """Panel condition categories, declared in classifier index order."""
    NORMAL = "normal"
    LEAVES = "leaves"
    DUST = "dust"
    SHADOW = "shadow"
    OTHER = "other"

    @classmethod
    def from_index(cls, index: int) -> "Category":
        members = list(cls)
        if not 0 <= index < len(members):
            raise IndexError(f"No category for classifier index {index}")
        return members[index]

    @property
    def index(self) -> int:
        return list(Category).index(self)

    @property
    def description(self) -> str:
        return _CATEGORY_DESCRIPTIONS[self]


_CATEGORY_DESCRIPTIONS = {
    Category.NORMAL: "Normal panel area",
    Category.LEAVES: "Leaf coverage detected",
    Category.DUST: "Dust accumulation detected",
    Category.SHADOW: "Shadow obstruction detected",
    Category.OTHER: "Anomaly detected",
}


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


class OverallStatus(Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class RecommendationType(Enum):
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"
    INSPECTION = "inspection"
    REPLACEMENT = "replacement"


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box in source-image pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if min(self.x, self.y, self.width, self.height) < 0:
            raise ValueError(f"Bounding box values must be non-negative: {self}")

    def fits_within(self, image_width: int, image_height: int) -> bool:
        return self.x + self.width <= image_width and self.y + self.height <= image_height

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class Finding:
    """One classified region of interest."""
    category: Category
    confidence: float
    bounding_box: BoundingBox
    severity: Severity

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must lie in [0, 1], got {self.confidence}")

    @property
    def description(self) -> str:
        return self.category.description

    @property
    def is_issue(self) -> bool:
        return self.category is not Category.NORMAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "confidence": self.confidence,
            "boundingBox": self.bounding_box.to_dict(),
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class Recommendation:
    type: RecommendationType
    priority: Severity
    description: str
    estimated_cost: Optional[int] = None
    estimated_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "priority": self.priority.value,
            "description": self.description,
        }
        if self.estimated_cost is not None:
            data["estimatedCost"] = self.estimated_cost
        if self.estimated_time is not None:
            data["estimatedTime"] = self.estimated_time
        return data


@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    overall_status: OverallStatus
    total_issues: int
    confidence: float
    processing_time_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallStatus": self.overall_status.value,
            "totalIssues": self.total_issues,
            "confidence": self.confidence,
            "processingTime": self.processing_time_ms,
        }


@dataclass(frozen=True, slots=True)
class ImageQuality:
    """Brightness, contrast and sharpness, each normalized to [0, 1]."""
    brightness: float
    contrast: float
    sharpness: float

    def to_dict(self) -> Dict[str, float]:
        return {"brightness": self.brightness, "contrast": self.contrast,
                "sharpness": self.sharpness}


@dataclass(frozen=True, slots=True)
class AnalysisOptions:
    confidence_threshold: float = 0.5
    detail_level: str = "detailed"

    def __post_init__(self):
        if not isinstance(self.confidence_threshold, (int, float)) or \
                not 0.0 <= self.confidence_threshold <= 1.0:
            raise InvalidOptions(
                f"Confidence threshold must lie in [0, 1], got {self.confidence_threshold!r}",
                details={"confidence_threshold": self.confidence_threshold},
            )
        if self.detail_level not in DETAIL_LEVELS:
            raise InvalidOptions(
                f"Detail level must be one of {DETAIL_LEVELS}, got {self.detail_level!r}",
                details={"detail_level": self.detail_level},
            )


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    findings: List[Finding]
    summary: AnalysisSummary
    recommendations: List[Recommendation]
    processing_time_ms: float
    image_size: Size
    quality: Optional[ImageQuality] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "results": [f.to_dict() for f in self.findings],
            "summary": self.summary.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "processingTime": self.processing_time_ms,
        }
        if self.quality is not None:
            data["quality"] = self.quality.to_dict()
        return data


@dataclass(slots=True)
class BatchAnalysisResult:
    successful: List[Tuple[int, AnalysisResult]] = field(default_factory=list)
    failed: List[Tuple[int, Dict[str, Any]]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


@dataclass(frozen=True, slots=True)
class DisplayTransform:
    """Zoom and rotation the presentation layer applies to the rendered image."""
    zoom: float = 1.0
    rotation_degrees: int = 0

    def __post_init__(self):
        if not MIN_ZOOM <= self.zoom <= MAX_ZOOM:
            raise InvalidOptions(f"Zoom must lie in [{MIN_ZOOM}, {MAX_ZOOM}], got {self.zoom}")
        if self.rotation_degrees not in VALID_ROTATIONS:
            raise InvalidOptions(
                f"Rotation must be one of {VALID_ROTATIONS}, got {self.rotation_degrees}"
            )


@dataclass(frozen=True, slots=True)
class DisplayBox:
    """Box in display space; fractional because display scaling is continuous."""
    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height
