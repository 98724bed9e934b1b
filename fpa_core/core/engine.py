"""
FPA Engine - entry point for calculation requests.

This module provides:
1. Component validation and complexity classification
2. Estimate totals (UFP, VAF, AFP, effort)
3. Team size and duration estimation
4. Trend analysis across estimate versions
5. Batch calculation with per-request failure isolation

Every operation is a pure calculation over its inputs; the engine only adds
logging and metrics around the services.
"""

import time
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from fpa_core.config import EstimationSettings, get_settings
from fpa_core.core.ports import ComponentSource, EstimateHistory
from fpa_core.exceptions import ComponentValidationError, FPAError, UnknownComponentKindError
from fpa_core.models.schemas import (
    BatchItemResult,
    CalculationRequest,
    ComponentCounts,
    ComponentKind,
    ComponentRecord,
    Complexity,
    Estimate,
    EstimateTotals,
    EstimationMetrics,
    TeamConstraints,
    TeamSizeRange,
    TeamSizeResult,
    TrendMetric,
    TrendResult,
    ValidationResult,
)
from fpa_core.services.function_points import FunctionPointCalculator
from fpa_core.services.team_size import TeamSizeEstimator, TeamSizeParams
from fpa_core.services.trend_analysis import TrendAnalyzer
from fpa_core.services.validation import ValidationPipeline
from fpa_core.services.versioning import EstimateLifecycle
from fpa_core.utils.logging import bind_request_context, get_logger, log_calculation
from fpa_core.utils.metrics import record_calculation, record_validation

logger = get_logger(__name__)

CountsInput = Union[ComponentCounts, Mapping[str, Any]]


class FPAEngine:
    """
    Facade over the FPA calculation services.

    Manages:
    - Validation before any classification
    - Estimate calculation
    - Team sizing
    - Trend analysis
    """

    def __init__(
        self,
        settings: Optional[EstimationSettings] = None,
        pipeline: Optional[ValidationPipeline] = None,
        calculator: Optional[FunctionPointCalculator] = None,
        team_estimator: Optional[TeamSizeEstimator] = None,
        trend_analyzer: Optional[TrendAnalyzer] = None,
        metrics_enabled: Optional[bool] = None,
    ):
        """
        Initialize the engine.

        Args:
            settings: Estimation settings shared by the default services
            pipeline: Validation pipeline
            calculator: Function point calculator
            team_estimator: Team size estimator
            trend_analyzer: Trend analyzer
            metrics_enabled: Record Prometheus metrics (defaults to METRICS_ENABLED)
        """
        self.settings = settings or get_settings().estimation
        self.pipeline = pipeline or ValidationPipeline(settings=self.settings)
        self.calculator = calculator or FunctionPointCalculator(
            pipeline=self.pipeline, settings=self.settings
        )
        self.team_estimator = team_estimator or TeamSizeEstimator(settings=self.settings)
        self.trend_analyzer = trend_analyzer or TrendAnalyzer(settings=self.settings)
        self.lifecycle = EstimateLifecycle(calculator=self.calculator)
        self.metrics_enabled = (
            metrics_enabled if metrics_enabled is not None else get_settings().metrics_enabled
        )

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    def validate_component(
        self,
        kind: Union[ComponentKind, str],
        counts: CountsInput,
    ) -> ValidationResult:
        """Run a component submission through the validation pipeline."""
        result = self.pipeline.validate(kind, counts)
        kind_code = kind.value if isinstance(kind, ComponentKind) else str(kind)
        if self.metrics_enabled:
            record_validation(self._kind_label(kind), result.valid)

        if not result.valid:
            logger.info(
                "component_rejected",
                kind=kind_code,
                errors=result.errors,
                failed_stage=result.metadata.get("failed_stage"),
            )
        return result

    def classify_complexity(
        self,
        kind: Union[ComponentKind, str],
        counts: CountsInput,
    ) -> Complexity:
        """
        Classify a component after validating it.

        Raises:
            UnknownComponentKindError: If the kind is not one of the five function types
            ComponentValidationError: If validation fails; no rating is produced
        """
        kind = ComponentKind.parse(kind)
        result = self.validate_component(kind, counts)
        if not result.valid:
            raise ComponentValidationError(result.errors, result.warnings)
        return result.complexity

    # -------------------------------------------------------------------------
    # Estimates
    # -------------------------------------------------------------------------

    def calculate_estimate(
        self,
        components: Iterable[ComponentRecord],
        gsc: Sequence[int],
        productivity_factor: Optional[float],
    ) -> EstimateTotals:
        """Calculate UFP, VAF, AFP and effort hours for a set of components."""
        return self._run(
            "calculate_estimate",
            lambda: self.calculator.calculate_estimate(list(components), gsc, productivity_factor),
        )

    def calculate_metrics(
        self,
        components: Iterable[ComponentRecord],
        gsc: Sequence[int],
        productivity_factor: Optional[float],
        hours_per_day: float,
        team_size: int,
        hourly_rate: float,
    ) -> EstimationMetrics:
        """Calculate estimate totals with duration and cost for a team."""
        return self._run(
            "calculate_metrics",
            lambda: self.calculator.calculate_estimation_metrics(
                list(components), gsc, productivity_factor, hours_per_day, team_size, hourly_rate
            ),
        )

    def calculate_estimates(self, requests: Iterable[CalculationRequest]) -> List[BatchItemResult]:
        """
        Calculate several estimates.

        A failing request is reported in its own result and does not stop
        the rest of the batch.
        """
        results = []
        for request in requests:
            bind_request_context(request_id=request.request_id)
            try:
                totals = self.calculate_estimate(
                    request.components,
                    request.general_system_characteristics,
                    request.productivity_factor,
                )
            except FPAError as exc:
                results.append(
                    BatchItemResult(request_id=request.request_id, success=False, error=exc.to_dict())
                )
                continue
            results.append(BatchItemResult(request_id=request.request_id, success=True, totals=totals))

        failed = sum(1 for item in results if not item.success)
        logger.info("batch_completed", total=len(results), failed=failed)
        return results

    def recalculate_estimate(self, estimate: Estimate, source: ComponentSource) -> Estimate:
        """Reload a draft's components from storage and recalculate it."""
        components = source.fetch_components(estimate.id)
        return self._run(
            "recalculate_estimate",
            lambda: self.lifecycle.update_inputs(estimate, components=components),
        )

    # -------------------------------------------------------------------------
    # Team sizing
    # -------------------------------------------------------------------------

    def estimate_team(
        self,
        afp: float,
        productivity_factor: Optional[float],
        hours_per_day: float,
        constraints: Optional[Union[TeamConstraints, Mapping[str, Any]]] = None,
    ) -> TeamSizeResult:
        """Estimate team size and duration for an adjusted function point total."""
        if constraints is None:
            constraints = TeamConstraints()
        elif not isinstance(constraints, TeamConstraints):
            constraints = TeamConstraints.model_validate(dict(constraints))

        params = TeamSizeParams(
            adjusted_function_points=afp,
            productivity_factor=productivity_factor,
            hours_per_day_per_person=hours_per_day,
            duration_months=constraints.duration_months,
            team_size=constraints.team_size,
            buffer_percentage=constraints.buffer_percentage,
        )
        return self._run("estimate_team", lambda: self.team_estimator.estimate(params))

    def estimate_ideal_team_size(self, afp: float) -> TeamSizeRange:
        """Size-tier team band, for display next to estimate_team()."""
        return self.team_estimator.estimate_ideal_team_size(afp)

    # -------------------------------------------------------------------------
    # Trends
    # -------------------------------------------------------------------------

    def analyze_trend(
        self,
        estimates: Sequence[Estimate],
        metric: Union[TrendMetric, str],
    ) -> TrendResult:
        """Analyze a metric across estimates sorted by ascending version."""
        return self._run("analyze_trend", lambda: self.trend_analyzer.analyze_trend(estimates, metric))

    def analyze_project_trend(
        self,
        project_id: str,
        metric: Union[TrendMetric, str],
        history: EstimateHistory,
    ) -> TrendResult:
        """Load every version of a project's estimate and analyze a metric across them."""
        versions = sorted(history.list_versions(project_id), key=lambda estimate: estimate.version)
        return self.analyze_trend(versions, metric)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _kind_label(kind: Union[ComponentKind, str]) -> str:
        try:
            return ComponentKind.parse(kind).value
        except UnknownComponentKindError:
            return "unknown"

    def _run(self, operation: str, func):
        start = time.perf_counter()
        try:
            result = func()
        except FPAError as exc:
            duration = time.perf_counter() - start
            if self.metrics_enabled:
                record_calculation(operation, "error", duration)
            log_calculation(
                operation,
                "error",
                round(duration * 1000, 3),
                error=type(exc).__name__,
                message=exc.message,
            )
            raise

        duration = time.perf_counter() - start
        if self.metrics_enabled:
            record_calculation(operation, "success", duration)
        log_calculation(operation, "success", round(duration * 1000, 3))
        return result


def create_engine(settings: Optional[EstimationSettings] = None) -> FPAEngine:
    """Factory function to create an engine."""
    return FPAEngine(settings=settings)
