"""
Function Point Calculation Service.

Turns classified components into Unadjusted Function Points (UFP), applies
the Value Adjustment Factor (VAF) from the 14 General System Characteristics
and converts Adjusted Function Points (AFP) into effort hours.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from fpa_core.config import EstimationSettings, get_settings
from fpa_core.exceptions import (
    ComponentValidationError,
    InvalidGSCError,
    InvalidInputError,
    MissingProductivityFactorError,
)
from fpa_core.models.schemas import (
    BreakdownEntry,
    CalculationMethod,
    ComponentKind,
    ComponentRecord,
    Complexity,
    EstimateTotals,
    EstimationMetrics,
    ScoredComponent,
)
from fpa_core.services.complexity import FP_WEIGHTS
from fpa_core.services.validation import ValidationPipeline

logger = logging.getLogger(__name__)

GSC_COUNT = 14
GSC_MIN = 0
GSC_MAX = 5
VAF_BASE = 0.65
VAF_STEP = 0.01

# Accepted ranges for duration and cost inputs
PRODUCTIVITY_FACTOR_RANGE = (1, 100)
HOURS_PER_DAY_RANGE = (1, 24)
TEAM_SIZE_RANGE = (1, 100)
MIN_HOURLY_RATE = 0.01
WORKING_DAYS_PER_WEEK = 5


class FunctionPointCalculator:
    """Calculates UFP, VAF, AFP and effort for a set of components."""

    FP_WEIGHTS = FP_WEIGHTS

    # General System Characteristics, in vector order
    GSC_FACTORS = [
        "data_communications",
        "distributed_data_processing",
        "performance",
        "heavily_used_configuration",
        "transaction_rate",
        "online_data_entry",
        "end_user_efficiency",
        "online_update",
        "complex_processing",
        "reusability",
        "installation_ease",
        "operational_ease",
        "multiple_sites",
        "facilitate_change",
    ]

    def __init__(
        self,
        pipeline: Optional[ValidationPipeline] = None,
        settings: Optional[EstimationSettings] = None,
    ):
        """
        Initialize Function Point Calculator.

        Args:
            pipeline: Validation pipeline every component must pass before scoring
            settings: Estimation settings (working days per month for durations)
        """
        self.settings = settings or get_settings().estimation
        self.pipeline = pipeline or ValidationPipeline(settings=self.settings)

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    def score_component(self, component: ComponentRecord) -> ScoredComponent:
        """
        Validate and score a single component.

        Raises:
            ComponentValidationError: If the component fails validation
        """
        result = self.pipeline.validate(component.kind, component.counts)
        if not result.valid:
            raise ComponentValidationError(
                result.errors,
                result.warnings,
                component=component.name or component.id,
            )

        return ScoredComponent(
            component=component,
            complexity=result.complexity,
            function_points=result.function_points,
            calculation_method=result.metadata.get("calculation_method", CalculationMethod.STANDARD),
            warnings=result.warnings,
        )

    def score_components(self, components: Iterable[ComponentRecord]) -> List[ScoredComponent]:
        """Score each component independently."""
        return [self.score_component(component) for component in components]

    def compute_ufp(self, components: Iterable[ComponentRecord]) -> int:
        """Unadjusted Function Points: sum of component weights. Empty input gives 0."""
        return sum(scored.function_points for scored in self.score_components(components))

    # -------------------------------------------------------------------------
    # Value adjustment
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_gsc(gsc: Optional[Sequence[Any]]) -> List[int]:
        """
        Check a General System Characteristics vector.

        Returns:
            The vector as a list of ints

        Raises:
            InvalidGSCError: Wrong length or any value outside 0-5
        """
        if gsc is None:
            raise InvalidGSCError(f"General System Characteristics must have exactly {GSC_COUNT} values")

        values = list(gsc)
        if len(values) != GSC_COUNT:
            raise InvalidGSCError(
                f"General System Characteristics must have exactly {GSC_COUNT} values, got {len(values)}",
                details={"length": len(values)},
            )

        errors = []
        for index, value in enumerate(values):
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"GSC value {index + 1} must be an integer, got {value!r}")
            elif not GSC_MIN <= value <= GSC_MAX:
                errors.append(f"GSC value {index + 1} must be between {GSC_MIN} and {GSC_MAX}, got {value}")

        if errors:
            raise InvalidGSCError("; ".join(errors), details={"errors": errors})
        return values

    @classmethod
    def gsc_vector(cls, scores: Mapping[str, int]) -> List[int]:
        """Build an ordered GSC vector from scores keyed by characteristic name."""
        unknown = sorted(set(scores) - set(cls.GSC_FACTORS))
        missing = [name for name in cls.GSC_FACTORS if name not in scores]
        if unknown or missing:
            raise InvalidGSCError(
                "General System Characteristics must name each of the 14 characteristics",
                details={"unknown": unknown, "missing": missing},
            )
        return cls.validate_gsc([scores[name] for name in cls.GSC_FACTORS])

    @classmethod
    def compute_degree_of_influence(cls, gsc: Sequence[int]) -> int:
        """Total degree of influence (0-70)."""
        return sum(cls.validate_gsc(gsc))

    @classmethod
    def compute_vaf(cls, gsc: Sequence[int]) -> float:
        """
        Calculate Value Adjustment Factor (VAF).

        VAF = 0.65 + 0.01 * (sum of the 14 scores), so it ranges from 0.65 to 1.35.
        """
        total = cls.compute_degree_of_influence(gsc)
        return round(VAF_BASE + VAF_STEP * total, 2)

    @staticmethod
    def compute_afp(ufp: float, vaf: float) -> float:
        """Adjusted Function Points = UFP x VAF."""
        if ufp < 0:
            raise InvalidInputError(f"Unadjusted function points cannot be negative, got {ufp}")
        if not VAF_BASE <= vaf <= VAF_BASE + VAF_STEP * GSC_MAX * GSC_COUNT + 1e-9:
            raise InvalidInputError(f"Value adjustment factor must be between 0.65 and 1.35, got {vaf}")
        return ufp * vaf

    @staticmethod
    def compute_effort_hours(afp: float, productivity_factor: Optional[float]) -> float:
        """
        Effort hours = AFP x productivity factor (hours per function point).

        There is no default productivity factor; it is an organisational
        constant the caller must supply.
        """
        if productivity_factor is None:
            raise MissingProductivityFactorError(
                "Productivity factor (hours per function point) is required"
            )
        if isinstance(productivity_factor, bool) or productivity_factor <= 0:
            raise InvalidInputError(
                f"Productivity factor must be a positive number, got {productivity_factor!r}",
                details={"productivity_factor": productivity_factor},
            )
        return afp * productivity_factor

    # -------------------------------------------------------------------------
    # Estimate
    # -------------------------------------------------------------------------

    def calculate_estimate(
        self,
        components: Iterable[ComponentRecord],
        gsc: Sequence[int],
        productivity_factor: Optional[float],
    ) -> EstimateTotals:
        """
        Calculate the totals of an estimate.

        Args:
            components: Component records of the estimate
            gsc: The 14 General System Characteristics (0-5 each)
            productivity_factor: Hours per function point

        Returns:
            UFP, VAF, AFP, effort hours and breakdowns
        """
        gsc_values = self.validate_gsc(gsc)
        if productivity_factor is None:
            raise MissingProductivityFactorError(
                "Productivity factor (hours per function point) is required"
            )

        scored = self.score_components(components)
        ufp = sum(item.function_points for item in scored)
        degree_of_influence = sum(gsc_values)
        vaf = self.compute_vaf(gsc_values)
        afp = self.compute_afp(ufp, vaf)
        effort_hours = self.compute_effort_hours(afp, productivity_factor)

        logger.info(
            f"Calculated estimate: {len(scored)} components, UFP={ufp}, VAF={vaf}, "
            f"AFP={afp:.2f}, effort={effort_hours:.1f}h"
        )

        return EstimateTotals(
            ufp=ufp,
            vaf=vaf,
            afp=afp,
            effort_hours=effort_hours,
            total_degree_of_influence=degree_of_influence,
            components=scored,
            component_breakdown=self.component_breakdown(scored),
            complexity_breakdown=self.complexity_breakdown(scored),
        )

    @staticmethod
    def component_breakdown(scored: Iterable[ScoredComponent]) -> Dict[str, BreakdownEntry]:
        """Count and points per component kind, plus a total entry."""
        breakdown = {kind.value: BreakdownEntry() for kind in ComponentKind}
        total = BreakdownEntry()

        for item in scored:
            entry = breakdown[item.component.kind.value]
            entry.count += 1
            entry.points += item.function_points
            total.count += 1
            total.points += item.function_points

        breakdown["total"] = total
        return breakdown

    @staticmethod
    def complexity_breakdown(scored: Iterable[ScoredComponent]) -> Dict[str, BreakdownEntry]:
        """Count and points per complexity rating."""
        breakdown = {complexity.value: BreakdownEntry() for complexity in Complexity}

        for item in scored:
            entry = breakdown[item.complexity.value]
            entry.count += 1
            entry.points += item.function_points

        return breakdown

    # -------------------------------------------------------------------------
    # Duration and cost
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_estimation_inputs(
        hours_per_day: float,
        team_size: int,
        hourly_rate: float,
        productivity_factor: float,
        gsc: Optional[Sequence[Any]] = None,
    ) -> List[str]:
        """
        Check the inputs of a duration and cost calculation.

        Returns:
            Every problem found; an empty list means the inputs are usable
        """
        errors = []

        low, high = HOURS_PER_DAY_RANGE
        if hours_per_day is None or not low <= hours_per_day <= high:
            errors.append(f"Average daily working hours must be between {low} and {high}")

        low, high = TEAM_SIZE_RANGE
        if team_size is None or isinstance(team_size, bool) or not low <= team_size <= high:
            errors.append(f"Team size must be between {low} and {high}")

        if hourly_rate is None or hourly_rate < MIN_HOURLY_RATE:
            errors.append("Hourly rate must be positive")

        low, high = PRODUCTIVITY_FACTOR_RANGE
        if productivity_factor is not None and not low <= productivity_factor <= high:
            errors.append(
                f"Productivity factor must be between {low} and {high} hours per function point"
            )

        if gsc is not None:
            try:
                FunctionPointCalculator.validate_gsc(gsc)
            except InvalidGSCError as exc:
                errors.extend(exc.details.get("errors") or [exc.message])

        return errors

    @staticmethod
    def calculate_duration_days(effort_hours: float, team_size: int, hours_per_day: float) -> float:
        """Duration in working days = effort / (team size x daily hours)."""
        if team_size <= 0:
            raise InvalidInputError("Team size must be greater than 0")
        if hours_per_day <= 0:
            raise InvalidInputError("Average daily working hours must be greater than 0")
        return effort_hours / (team_size * hours_per_day)

    @staticmethod
    def calculate_total_cost(effort_hours: float, hourly_rate: float) -> float:
        """Total cost = effort x hourly rate."""
        return effort_hours * hourly_rate

    def calculate_estimation_metrics(
        self,
        components: Iterable[ComponentRecord],
        gsc: Sequence[int],
        productivity_factor: Optional[float],
        hours_per_day: float,
        team_size: int,
        hourly_rate: float,
    ) -> EstimationMetrics:
        """
        Calculate the totals of an estimate plus duration and cost for a team.

        Args:
            components: Component records of the estimate
            gsc: The 14 General System Characteristics (0-5 each)
            productivity_factor: Hours per function point (1-100)
            hours_per_day: Average daily working hours per person (1-24)
            team_size: People on the team (1-100)
            hourly_rate: Cost of one hour of effort

        Returns:
            Totals, duration in days/weeks/months and cost figures

        Raises:
            MissingProductivityFactorError: If no productivity factor is given
            InvalidInputError: With every out-of-range input listed in details
        """
        if productivity_factor is None:
            raise MissingProductivityFactorError(
                "Productivity factor (hours per function point) is required"
            )

        errors = self.validate_estimation_inputs(
            hours_per_day, team_size, hourly_rate, productivity_factor, gsc
        )
        if gsc is None:
            errors.append(f"General System Characteristics must have exactly {GSC_COUNT} values")
        if errors:
            raise InvalidInputError("; ".join(errors), details={"errors": errors})

        totals = self.calculate_estimate(components, gsc, productivity_factor)

        duration_days = self.calculate_duration_days(totals.effort_hours, team_size, hours_per_day)
        total_cost = self.calculate_total_cost(totals.effort_hours, hourly_rate)

        return EstimationMetrics(
            ufp=totals.ufp,
            total_degree_of_influence=totals.total_degree_of_influence,
            vaf=totals.vaf,
            afp=totals.afp,
            effort_hours=totals.effort_hours,
            duration_days=duration_days,
            duration_weeks=duration_days / WORKING_DAYS_PER_WEEK,
            duration_months=duration_days / self.settings.working_days_per_month,
            total_cost=total_cost,
            cost_per_function_point=total_cost / totals.afp if totals.afp > 0 else None,
            cost_per_person=total_cost / team_size,
            hours_per_person=totals.effort_hours / team_size,
            hours_per_day=hours_per_day,
            team_size=team_size,
            hourly_rate=hourly_rate,
            productivity_factor=productivity_factor,
        )
