"""
Services package.

Contains the FPA calculation services.
"""

from fpa_core.services.complexity import (
    FP_WEIGHTS,
    classify,
    classify_component,
    classify_eq_dual,
    function_points_for,
)
from fpa_core.services.validation import (
    DEFAULT_STAGES,
    ValidationContext,
    ValidationPipeline,
)
from fpa_core.services.function_points import FunctionPointCalculator
from fpa_core.services.team_size import TeamSizeEstimator, TeamSizeParams
from fpa_core.services.trend_analysis import TrendAnalyzer
from fpa_core.services.versioning import EstimateLifecycle

__all__ = [
    "FP_WEIGHTS",
    "classify",
    "classify_component",
    "classify_eq_dual",
    "function_points_for",
    "DEFAULT_STAGES",
    "ValidationContext",
    "ValidationPipeline",
    "FunctionPointCalculator",
    "TeamSizeEstimator",
    "TeamSizeParams",
    "TrendAnalyzer",
    "EstimateLifecycle",
]
