"""Maintenance recommendations and status rollup derived from findings."""
from __future__ import annotations
from typing import List, Sequence

from ..core.entities import (
    AnalysisSummary, Category, Finding, OverallStatus, Recommendation,
    RecommendationType, Severity,
)

# Checked in this order; each category present yields its recommendation once.
_RULES = (
    (Category.LEAVES, Recommendation(
        type=RecommendationType.CLEANING,
        priority=Severity.MEDIUM,
        description="Remove leaves covering the panel surface to restore generation efficiency",
        estimated_cost=200,
        estimated_time="2-4 hours",
    )),
    (Category.DUST, Recommendation(
        type=RecommendationType.CLEANING,
        priority=Severity.MEDIUM,
        description="Clean dust off the panel surface; regular cleaning can raise output by 15-20%",
        estimated_cost=150,
        estimated_time="1-2 hours",
    )),
    (Category.SHADOW, Recommendation(
        type=RecommendationType.INSPECTION,
        priority=Severity.LOW,
        description="Shading detected; check the surroundings for new obstructions",
        estimated_cost=100,
        estimated_time="1 hour",
    )),
    (Category.OTHER, Recommendation(
        type=RecommendationType.INSPECTION,
        priority=Severity.HIGH,
        description="Anomaly detected; schedule a detailed inspection to identify the problem",
        estimated_cost=500,
        estimated_time="4-6 hours",
    )),
)

ROUTINE_MAINTENANCE = Recommendation(
    type=RecommendationType.MAINTENANCE,
    priority=Severity.LOW,
    description="Panel is in good condition; continue regular preventive maintenance",
    estimated_cost=300,
    estimated_time="2-3 hours",
)


def generate_recommendations(findings: Sequence[Finding]) -> List[Recommendation]:
    """Never empty: falls back to routine maintenance when no rule fires."""
    present = {f.category for f in findings}
    recommendations = [rec for category, rec in _RULES if category in present]
    if not recommendations:
        recommendations.append(ROUTINE_MAINTENANCE)
    return recommendations


def overall_status(findings: Sequence[Finding]) -> OverallStatus:
    """Critical on any High severity issue, Warning on any Medium, else Healthy."""
    issues = [f for f in findings if f.is_issue]
    if not issues:
        return OverallStatus.HEALTHY
    worst = max(f.severity.rank for f in issues)
    if worst >= Severity.HIGH.rank:
        return OverallStatus.CRITICAL
    if worst >= Severity.MEDIUM.rank:
        return OverallStatus.WARNING
    return OverallStatus.HEALTHY


def count_issues(findings: Sequence[Finding]) -> int:
    return sum(1 for f in findings if f.is_issue)


def summarize(findings: Sequence[Finding], processing_time_ms: float) -> AnalysisSummary:
    """Status rollup; mean confidence covers Normal findings too (0.0 when empty)."""
    mean_confidence = (
        sum(f.confidence for f in findings) / len(findings) if findings else 0.0
    )
    return AnalysisSummary(
        overall_status=overall_status(findings),
        total_issues=count_issues(findings),
        confidence=mean_confidence,
        processing_time_ms=processing_time_ms,
    )
