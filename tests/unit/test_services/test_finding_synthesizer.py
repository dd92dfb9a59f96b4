"""Unit tests for turning classifier scores into findings."""
import math

import numpy as np
import pytest

from solarscan.core.entities import BoundingBox, Category, Severity
from solarscan.core.exceptions import ClassifierFailure, InvalidOptions
from solarscan.services.finding_synthesizer import (
    DEFAULT_ANCHORS, SEVERITY_BY_CATEGORY, FindingSynthesizer,
)


class TestFindingSynthesizer:
    """Test suite for threshold, anchors, severity and ordering."""

    def test_scenario_three_findings(self):
        synthesizer = FindingSynthesizer(confidence_threshold=0.7)
        scores = [(0, 0.95), (1, 0.82), (2, 0.75), (3, 0.10)]

        findings = synthesizer.synthesize(scores, 400, 300)

        assert [f.category for f in findings] == [Category.NORMAL, Category.LEAVES, Category.DUST]
        assert [f.confidence for f in findings] == [0.95, 0.82, 0.75]
        assert findings[0].bounding_box == BoundingBox(40, 30, 120, 60)
        assert findings[1].bounding_box == BoundingBox(160, 90, 80, 45)
        assert findings[2].bounding_box == BoundingBox(240, 150, 100, 60)
        assert [f.severity for f in findings] == [Severity.LOW, Severity.MEDIUM, Severity.MEDIUM]

    def test_threshold_is_inclusive(self):
        findings = FindingSynthesizer(0.7).synthesize([(4, 0.7)], 100, 100)
        assert len(findings) == 1

    def test_later_categories_reuse_last_anchor(self):
        synthesizer = FindingSynthesizer()
        assert synthesizer.anchor_box(Category.SHADOW, 400, 300) == \
            synthesizer.anchor_box(Category.DUST, 400, 300)
        assert synthesizer.anchor_box(Category.OTHER, 400, 300) == BoundingBox(240, 150, 100, 60)

    def test_custom_anchor_list(self):
        synthesizer = FindingSynthesizer(anchors=[(0.0, 0.0, 1.0, 1.0)])
        for category in Category:
            assert synthesizer.anchor_box(category, 50, 40) == BoundingBox(0, 0, 50, 40)

    @pytest.mark.parametrize("width,height", [(1, 1), (3, 7), (1000, 1), (4032, 3024)])
    def test_boxes_fit_inside_image(self, width, height):
        synthesizer = FindingSynthesizer(0.0)
        scores = [(c.index, 0.5) for c in Category]
        for finding in synthesizer.synthesize(scores, width, height):
            assert finding.bounding_box.fits_within(width, height)

    def test_duplicates_keep_highest(self):
        findings = FindingSynthesizer(0.5).synthesize([(2, 0.6), (2, 0.9), (2, 0.7)], 100, 100)
        assert len(findings) == 1
        assert findings[0].confidence == 0.9

    def test_ties_follow_category_order(self):
        findings = FindingSynthesizer(0.5).synthesize([(4, 0.8), (1, 0.8), (3, 0.8)], 100, 100)
        assert [f.category for f in findings] == [Category.LEAVES, Category.SHADOW, Category.OTHER]

    def test_severity_table(self):
        assert SEVERITY_BY_CATEGORY[Category.OTHER] is Severity.HIGH
        assert SEVERITY_BY_CATEGORY[Category.SHADOW] is Severity.LOW
        assert len(DEFAULT_ANCHORS) == 3

    @pytest.mark.parametrize("scores", [
        [(5, 0.9)],
        [(-1, 0.9)],
        [("dust", 0.9)],
        [(1, 1.2)],
        [(1, -0.1)],
        [(1, math.nan)],
        [(1, "high")],
    ])
    def test_malformed_scores_not_retryable(self, scores):
        with pytest.raises(ClassifierFailure) as exc_info:
            FindingSynthesizer().synthesize(scores, 100, 100)
        assert exc_info.value.retryable is False

    @pytest.mark.parametrize("threshold", [-0.1, 1.1])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(InvalidOptions):
            FindingSynthesizer(threshold)

    @pytest.mark.parametrize("anchors", [[], [(0.1, 0.1, 0.2)], [(0.1, 0.1, 0.2, 1.5)]])
    def test_invalid_anchors(self, anchors):
        with pytest.raises(InvalidOptions):
            FindingSynthesizer(anchors=anchors)

    @pytest.mark.parametrize("seed", range(10))
    def test_threshold_property(self, seed):
        """Every kept score is at or above the threshold and none above it is lost."""
        rng = np.random.default_rng(seed)
        threshold = float(rng.uniform(0.0, 1.0))
        indices = rng.integers(0, len(Category), size=12)
        confidences = rng.uniform(0.0, 1.0, size=12)
        scores = [(int(i), float(c)) for i, c in zip(indices, confidences)]

        findings = FindingSynthesizer(threshold).synthesize(scores, 640, 480)

        expected = {}
        for index, confidence in scores:
            if confidence >= threshold:
                category = Category.from_index(index)
                expected[category] = max(confidence, expected.get(category, 0.0))
        assert {f.category: f.confidence for f in findings} == expected
        assert all(f.confidence >= threshold for f in findings)
        keys = [(-f.confidence, f.category.index) for f in findings]
        assert keys == sorted(keys)
