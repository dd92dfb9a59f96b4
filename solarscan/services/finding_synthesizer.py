"""Turn classifier scores into located, graded findings.

The classifier scores the whole image; it does not localize anything. Each
category is therefore given a fixed anchor region picked by its index from a
short list of candidate boxes. The boxes say nothing about where the
condition actually is in the image. Real localization needs a detector that
returns (category, confidence, box) triples, which this service does not
consume.
"""
from __future__ import annotations
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.entities import BoundingBox, Category, ClassScore, Finding, Severity
from ..core.exceptions import ClassifierFailure, InvalidOptions

logger = logging.getLogger(__name__)

NormalizedBox = Tuple[float, float, float, float]  # (x, y, w, h) as fractions of the image

DEFAULT_ANCHORS: Tuple[NormalizedBox, ...] = (
    (0.1, 0.1, 0.3, 0.2),
    (0.4, 0.3, 0.2, 0.15),
    (0.6, 0.5, 0.25, 0.2),
)

SEVERITY_BY_CATEGORY: Dict[Category, Severity] = {
    Category.NORMAL: Severity.LOW,
    Category.LEAVES: Severity.MEDIUM,
    Category.DUST: Severity.MEDIUM,
    Category.SHADOW: Severity.LOW,
    Category.OTHER: Severity.HIGH,
}

DEFAULT_CONFIDENCE_THRESHOLD = 0.5


class FindingSynthesizer:
    """Applies the confidence threshold, anchor table and severity table."""

    def __init__(self, confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
                 anchors: Optional[Sequence[NormalizedBox]] = None):
        if not 0.0 <= confidence_threshold <= 1.0:
            raise InvalidOptions(
                f"Confidence threshold must lie in [0, 1], got {confidence_threshold}")
        anchors = tuple(anchors) if anchors is not None else DEFAULT_ANCHORS
        if not anchors:
            raise InvalidOptions("At least one anchor region is required")
        for anchor in anchors:
            if len(anchor) != 4 or any(not 0.0 <= v <= 1.0 for v in anchor):
                raise InvalidOptions(f"Anchor must be four fractions in [0, 1], got {anchor}")
        self.confidence_threshold = confidence_threshold
        self.anchors: Tuple[NormalizedBox, ...] = anchors

    def anchor_box(self, category: Category, image_width: int, image_height: int) -> BoundingBox:
        """Anchor region for ``category`` scaled to the image, clamped inside it."""
        ax, ay, aw, ah = self.anchors[min(category.index, len(self.anchors) - 1)]
        x = min(int(round(ax * image_width)), image_width)
        y = min(int(round(ay * image_height)), image_height)
        w = min(int(round(aw * image_width)), image_width - x)
        h = min(int(round(ah * image_height)), image_height - y)
        return BoundingBox(x, y, w, h)

    def synthesize(self, scores: Iterable[ClassScore], image_width: int,
                   image_height: int) -> List[Finding]:
        """Build the sorted, deduplicated finding list.

        Args:
            scores: (category index, confidence) pairs from the classifier
            image_width: Width of the source image the boxes refer to
            image_height: Height of the source image the boxes refer to

        Returns:
            Findings at or above the threshold, one per category, ordered by
            confidence descending with ties in category declaration order.

        Raises:
            ClassifierFailure: a pair has an unknown index or a confidence
                outside [0, 1] (not retryable)
        """
        best: Dict[Category, float] = {}
        for index, confidence in scores:
            category = self._category_for(index)
            confidence = self._validated_confidence(confidence, category)
            if confidence < self.confidence_threshold:
                continue
            if confidence > best.get(category, -1.0):
                best[category] = confidence

        findings = [
            Finding(
                category=category,
                confidence=confidence,
                bounding_box=self.anchor_box(category, image_width, image_height),
                severity=SEVERITY_BY_CATEGORY[category],
            )
            for category, confidence in best.items()
        ]
        findings.sort(key=lambda f: (-f.confidence, f.category.index))
        logger.debug(f"Synthesized {len(findings)} findings at threshold {self.confidence_threshold}")
        return findings

    @staticmethod
    def _category_for(index) -> Category:
        try:
            return Category.from_index(int(index))
        except (IndexError, TypeError, ValueError) as e:
            raise ClassifierFailure(
                f"Classifier returned unknown category index {index!r}",
                details={"index": repr(index)}, retryable=False,
            ) from e

    @staticmethod
    def _validated_confidence(confidence, category: Category) -> float:
        try:
            value = float(confidence)
        except (TypeError, ValueError):
            value = math.nan
        if math.isnan(value) or not 0.0 <= value <= 1.0:
            raise ClassifierFailure(
                f"Classifier returned confidence {confidence!r} for {category.value}",
                details={"category": category.value, "confidence": repr(confidence)},
                retryable=False,
            )
        return value
