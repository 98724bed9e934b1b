"""
Pydantic schemas for the FPA data model.

Defines component records, estimates and the results returned by each
calculation stage.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ConfigDict

from fpa_core.exceptions import UnknownComponentKindError, UnknownMetricError


# =============================================================================
# Enums
# =============================================================================

class ComponentKind(str, Enum):
    """The five IFPUG function types."""
    ILF = "ILF"
    EIF = "EIF"
    EI = "EI"
    EO = "EO"
    EQ = "EQ"

    @property
    def is_data_function(self) -> bool:
        return self in (ComponentKind.ILF, ComponentKind.EIF)

    @property
    def is_transactional(self) -> bool:
        return not self.is_data_function

    @classmethod
    def parse(cls, value: Union["ComponentKind", str, None]) -> "ComponentKind":
        """Resolve a kind from its code, raising a configuration error when unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        valid = ", ".join(k.value for k in cls)
        raise UnknownComponentKindError(
            f"Invalid component type: {value}. Must be one of: {valid}",
            details={"kind": value},
        )


class Complexity(str, Enum):
    """Complexity rating of a single component."""
    LOW = "low"
    AVERAGE = "average"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _COMPLEXITY_ORDER.index(self)


_COMPLEXITY_ORDER = [Complexity.LOW, Complexity.AVERAGE, Complexity.HIGH]


class CalculationMethod(str, Enum):
    """How a component's function points were derived."""
    STANDARD = "standard"
    EQ_DUAL = "eq_dual"


class TrendDirection(str, Enum):
    """Direction of a metric across estimate versions."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class TrendMetric(str, Enum):
    """Estimate field a trend is computed over. Values name the Estimate attribute."""
    UNADJUSTED_FP = "unadjusted_function_points"
    ADJUSTED_FP = "adjusted_function_points"
    EFFORT_HOURS = "estimated_effort_hours"
    VAF = "value_adjustment_factor"

    @classmethod
    def parse(cls, value: Union["TrendMetric", str, None]) -> "TrendMetric":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for metric in cls:
                if value in (metric.value, metric.name, metric.name.lower()):
                    return metric
        valid = ", ".join(m.name for m in cls)
        raise UnknownMetricError(
            f"Unknown trend metric: {value}. Must be one of: {valid}",
            details={"metric": value},
        )


class EstimateStatus(str, Enum):
    """Estimate lifecycle status."""
    DRAFT = "draft"
    FINALIZED = "finalized"
    ARCHIVED = "archived"


# =============================================================================
# Base Schemas
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# Component Schemas
# =============================================================================

class ComponentCounts(BaseSchema):
    """
    Raw counts for one component.

    Ranges are deliberately unconstrained here; the validation pipeline
    reports out-of-range values as accumulated errors.
    """

    det: Optional[int] = Field(None, description="Data Element Types")
    ret: Optional[int] = Field(None, description="Record Element Types (ILF, EIF)")
    ftr: Optional[int] = Field(None, description="File Types Referenced (EI, EO, EQ)")

    # EQ dual calculation: input and output sides scored independently
    input_ftr: Optional[int] = None
    input_det: Optional[int] = None
    output_ftr: Optional[int] = None
    output_det: Optional[int] = None

    @property
    def has_dual_counts(self) -> bool:
        return None not in (self.input_ftr, self.input_det, self.output_ftr, self.output_det)


class ComponentRecord(BaseSchema):
    """A counted function of the application."""

    id: Optional[str] = None
    name: str = Field(default="", max_length=255)
    kind: ComponentKind
    counts: ComponentCounts = Field(default_factory=ComponentCounts)


class ScoredComponent(BaseSchema):
    """Component with its resolved complexity and function points."""

    component: ComponentRecord
    complexity: Complexity
    function_points: int = Field(ge=0)
    calculation_method: CalculationMethod = CalculationMethod.STANDARD
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# Validation Schemas
# =============================================================================

class ValidationResult(BaseSchema):
    """Outcome of running one component through the validation pipeline."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    complexity: Optional[Complexity] = None
    function_points: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Estimate Schemas
# =============================================================================

class Estimate(BaseSchema):
    """
    A versioned function point count for a project.

    Estimates are frozen: recalculation and versioning return new instances,
    so a superseded version is never changed in place.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    id: Optional[str] = None
    project_id: str
    name: str = ""
    version: int = Field(default=1, ge=1)
    status: EstimateStatus = EstimateStatus.DRAFT
    components: List[ComponentRecord] = Field(default_factory=list)
    general_system_characteristics: Optional[List[int]] = None
    productivity_factor: Optional[float] = None

    unadjusted_function_points: float = 0.0
    value_adjustment_factor: float = 1.0
    adjusted_function_points: float = 0.0
    estimated_effort_hours: float = 0.0

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class BreakdownEntry(BaseSchema):
    """Count and points for one slice of an estimate."""

    count: int = 0
    points: int = 0


class EstimateTotals(BaseSchema):
    """Derived totals of an estimate calculation."""

    ufp: int = Field(ge=0)
    vaf: float = Field(ge=0.65, le=1.35)
    afp: float = Field(ge=0.0)
    effort_hours: float = Field(ge=0.0)
    total_degree_of_influence: int = Field(default=0, ge=0, le=70)
    components: List[ScoredComponent] = Field(default_factory=list)
    component_breakdown: Dict[str, BreakdownEntry] = Field(default_factory=dict)
    complexity_breakdown: Dict[str, BreakdownEntry] = Field(default_factory=dict)


class EstimationMetrics(BaseSchema):
    """Estimate totals extended with duration and cost for a given team."""

    ufp: int = Field(ge=0)
    total_degree_of_influence: int = Field(ge=0, le=70)
    vaf: float = Field(ge=0.65, le=1.35)
    afp: float = Field(ge=0.0)
    effort_hours: float = Field(ge=0.0)

    duration_days: float
    duration_weeks: float
    duration_months: float

    total_cost: float
    cost_per_function_point: Optional[float] = Field(
        None, description="None when the estimate has no adjusted function points"
    )
    cost_per_person: float
    hours_per_person: float

    # Inputs
    hours_per_day: float
    team_size: int
    hourly_rate: float
    productivity_factor: float


# =============================================================================
# Team Size Schemas
# =============================================================================

class TeamConstraints(BaseSchema):
    """Optional constraints for team estimation. At most one of duration or team size."""

    duration_months: Optional[float] = None
    team_size: Optional[int] = None
    buffer_percentage: Optional[float] = None


class TeamSizeResult(BaseSchema):
    """Effort-based team size and duration recommendation."""

    base_effort_hours: float
    buffer_hours: float
    total_effort_hours: float
    total_effort_days: float
    total_effort_months: float
    recommended_team_size: int = Field(ge=1)
    recommended_duration_months: float
    min_team_size: int = Field(ge=1)
    max_team_size: int = Field(ge=1)
    min_duration_months: float
    max_duration_months: float
    working_days_per_month: int


class TeamSizeRange(BaseSchema):
    """Rule-of-thumb team band for a project size tier."""

    min: int = Field(ge=1)
    max: int = Field(ge=1)


# =============================================================================
# Trend Schemas
# =============================================================================

class TrendPoint(BaseSchema):
    """One estimate version's value for a metric."""

    version: int
    value: float


class TrendResult(BaseSchema):
    """Trend of a metric across an ordered series of estimate versions."""

    metric: TrendMetric
    trend: TrendDirection
    percentage_change: Optional[float] = Field(
        None, description="None when the first value is zero and the last is not"
    )
    undefined_baseline: bool = False
    data: List[TrendPoint] = Field(default_factory=list)
    average_value: float = 0.0
    min_value: float = 0.0
    max_value: float = 0.0
    forecasted_value: Optional[float] = None
    confidence_level: Optional[float] = None


class BatchItemResult(BaseSchema):
    """Per-request outcome of a batch calculation."""

    request_id: str
    success: bool
    totals: Optional[EstimateTotals] = None
    error: Optional[Dict[str, Any]] = None


class CalculationRequest(BaseSchema):
    """One estimate's inputs in a batch calculation."""

    request_id: str
    components: List[ComponentRecord] = Field(default_factory=list)
    general_system_characteristics: List[int] = Field(default_factory=list)
    productivity_factor: Optional[float] = None
