"""
Data models package.

Contains the Pydantic schemas of the FPA data model.
"""

from fpa_core.models.schemas import (
    ComponentKind,
    Complexity,
    CalculationMethod,
    TrendDirection,
    TrendMetric,
    EstimateStatus,
    ComponentCounts,
    ComponentRecord,
    ScoredComponent,
    ValidationResult,
    Estimate,
    BreakdownEntry,
    EstimateTotals,
    EstimationMetrics,
    TeamConstraints,
    TeamSizeResult,
    TeamSizeRange,
    TrendPoint,
    TrendResult,
    BatchItemResult,
    CalculationRequest,
)

__all__ = [
    # Enums
    "ComponentKind",
    "Complexity",
    "CalculationMethod",
    "TrendDirection",
    "TrendMetric",
    "EstimateStatus",
    # Components
    "ComponentCounts",
    "ComponentRecord",
    "ScoredComponent",
    "ValidationResult",
    # Estimates
    "Estimate",
    "BreakdownEntry",
    "EstimateTotals",
    "EstimationMetrics",
    "CalculationRequest",
    "BatchItemResult",
    # Team sizing
    "TeamConstraints",
    "TeamSizeResult",
    "TeamSizeRange",
    # Trends
    "TrendPoint",
    "TrendResult",
]
