"""
Component Validation Pipeline.

Runs a fixed, ordered list of validation stages over a component's raw
counts before any complexity classification happens. Each stage is a plain
function that appends errors or warnings to the context; the driver stops
after the first stage that leaves errors behind.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from fpa_core.config import EstimationSettings, get_settings
from fpa_core.exceptions import InvalidInputError, UnknownComponentKindError
from fpa_core.models.schemas import ComponentCounts, ComponentKind, ValidationResult
from fpa_core.services.complexity import (
    EI_MATRIX,
    EO_MATRIX,
    MATRICES,
    classify_component,
    det_boundaries,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationContext:
    """Transient state for one validation request."""

    kind: Any
    counts: ComponentCounts
    limits: EstimationSettings
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind_code(self) -> str:
        return self.kind.value if isinstance(self.kind, ComponentKind) else str(self.kind)

    @property
    def is_dual_eq(self) -> bool:
        return self.kind == ComponentKind.EQ and self.counts.has_dual_counts

    def resolve_kind(self) -> Optional[ComponentKind]:
        """Resolve the kind in place. Unknown kinds add an error and give None."""
        if isinstance(self.kind, ComponentKind):
            return self.kind
        try:
            self.kind = ComponentKind.parse(self.kind)
        except UnknownComponentKindError as exc:
            self.add_error(exc.message)
            return None
        return self.kind

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


ValidationStage = Callable[[ValidationContext], None]


# =============================================================================
# Stages
# =============================================================================

def check_component_kind(ctx: ValidationContext) -> None:
    """Resolve the component kind; unknown kinds end the pipeline."""
    if ctx.resolve_kind() is None:
        return
    ctx.metadata["kind_validated"] = True


def check_det_range(ctx: ValidationContext) -> None:
    """DET is required and at least 1. Dual-mode EQs are checked per side later."""
    kind = ctx.resolve_kind()
    if kind is None:
        return
    if ctx.is_dual_eq:
        ctx.metadata["det_check"] = "skipped_dual"
        return

    det = ctx.counts.det
    if det is None:
        ctx.add_error("DET (Data Element Types) is required")
        return
    if det < 1:
        ctx.add_error(f"DET must be at least 1, got {det}")
        return

    if kind.is_data_function and det > ctx.limits.data_det_warning:
        ctx.add_warning(
            f"DET value ({det}) seems unusually high for {kind.value}. "
            f"Typical range is 1-{ctx.limits.data_det_warning}."
        )
    elif kind.is_transactional and det > ctx.limits.transactional_det_warning:
        ctx.add_warning(
            f"DET value ({det}) seems unusually high for {kind.value}. "
            f"Typical range is 1-{ctx.limits.transactional_det_warning}."
        )
    ctx.metadata["det_check"] = "passed"


def check_primary_count_range(ctx: ValidationContext) -> None:
    """RET for data functions (at least 1), FTR for transactional functions (at least 0)."""
    kind = ctx.resolve_kind()
    if kind is None:
        return
    if ctx.is_dual_eq:
        ctx.metadata["primary_check"] = "skipped_dual"
        return

    if kind.is_data_function:
        ret = ctx.counts.ret
        if ret is None:
            ctx.add_error(f"RET (Record Element Types) is required for {kind.value}")
            return
        if ret < 1:
            ctx.add_error(f"RET must be at least 1, got {ret}")
            return
        if ret > ctx.limits.ret_warning:
            ctx.add_warning(
                f"RET value ({ret}) seems unusually high. Typical range is 1-{ctx.limits.ret_warning}."
            )
    else:
        ftr = ctx.counts.ftr
        if ftr is None:
            ctx.add_error(f"FTR (File Types Referenced) is required for {kind.value}")
            return
        if ftr < 0:
            ctx.add_error(f"FTR cannot be negative, got {ftr}")
            return
        if ftr > ctx.limits.ftr_warning:
            ctx.add_warning(
                f"FTR value ({ftr}) seems unusually high. Typical range is 0-{ctx.limits.ftr_warning}."
            )
    ctx.metadata["primary_check"] = "passed"


def check_cross_field_consistency(ctx: ValidationContext) -> None:
    """Checks that span several fields, including the EQ dual-count ceiling."""
    kind = ctx.resolve_kind()
    if kind is None:
        return
    counts = ctx.counts

    if ctx.is_dual_eq:
        for label, value in (
            ("Input FTR", counts.input_ftr),
            ("Output FTR", counts.output_ftr),
            ("Input DET", counts.input_det),
            ("Output DET", counts.output_det),
        ):
            if value < 0:
                ctx.add_error(f"{label} cannot be negative, got {value}")

        if ctx.errors:
            return

        total_det = counts.input_det + counts.output_det
        if total_det == 0:
            ctx.add_error("EQ dual calculation requires at least one data element on either side")
        elif total_det > ctx.limits.eq_dual_det_ceiling:
            ctx.add_error(
                f"Input DET + output DET ({total_det}) exceeds the allowed maximum "
                f"of {ctx.limits.eq_dual_det_ceiling}"
            )
        return

    dual_fields = (counts.input_ftr, counts.input_det, counts.output_ftr, counts.output_det)
    if any(value is not None for value in dual_fields):
        if kind == ComponentKind.EQ:
            ctx.add_warning(
                "Incomplete input/output counts; all four are needed for the EQ dual "
                "calculation, so the standard calculation is used"
            )
        else:
            ctx.add_warning(f"Input/output counts are only used for EQ and are ignored for {kind.value}")

    if kind.is_data_function and counts.ftr is not None:
        ctx.add_warning(f"FTR is not used for {kind.value}; complexity is based on RET and DET")
    if kind.is_transactional and counts.ret is not None:
        ctx.add_warning(f"RET is not used for {kind.value}; complexity is based on FTR and DET")

    ctx.metadata["consistency_check"] = "passed"


def check_band_boundaries(ctx: ValidationContext) -> None:
    """Warn when a DET sits on a band edge, and record the intermediate rating."""
    if ctx.resolve_kind() is None:
        return
    try:
        complexity, function_points, method = classify_component(ctx.kind, ctx.counts)
    except InvalidInputError as exc:
        ctx.add_error(f"Failed to calculate complexity: {exc.message}")
        return

    ctx.metadata["complexity"] = complexity
    ctx.metadata["function_points"] = function_points
    ctx.metadata["calculation_method"] = method

    if ctx.is_dual_eq:
        sides = (
            ("input DET", ctx.counts.input_det, EI_MATRIX),
            ("output DET", ctx.counts.output_det, EO_MATRIX),
        )
    else:
        sides = (("DET", ctx.counts.det, MATRICES[ctx.kind]),)

    for label, value, matrix in sides:
        if value in det_boundaries(matrix):
            ctx.add_warning(
                f"{label} ({value}) is at a complexity band boundary for {ctx.kind.value} - verify count"
            )


DEFAULT_STAGES: Sequence[ValidationStage] = (
    check_component_kind,
    check_det_range,
    check_primary_count_range,
    check_cross_field_consistency,
    check_band_boundaries,
)


# =============================================================================
# Driver
# =============================================================================

class ValidationPipeline:
    """Applies validation stages in order, stopping at the first failing stage."""

    def __init__(
        self,
        stages: Optional[Sequence[ValidationStage]] = None,
        settings: Optional[EstimationSettings] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            stages: Stage functions in the order they run (defaults to DEFAULT_STAGES)
            settings: Thresholds used by the stages
        """
        self.stages = tuple(stages) if stages is not None else tuple(DEFAULT_STAGES)
        self.settings = settings or get_settings().estimation

    def validate(
        self,
        kind: Union[ComponentKind, str],
        counts: Union[ComponentCounts, Mapping[str, Any]],
    ) -> ValidationResult:
        """
        Validate one component submission.

        Args:
            kind: Component kind (enum or code)
            counts: Raw counts, as a model or a mapping

        Returns:
            Validation result with accumulated errors and warnings. Counts that
            are not integers fail with one error per field.
        """
        if not isinstance(counts, ComponentCounts):
            try:
                counts = ComponentCounts.model_validate(dict(counts))
            except ValidationError as exc:
                return ValidationResult(
                    valid=False,
                    errors=[
                        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                        for error in exc.errors()
                    ],
                    metadata={"failed_stage": "parse_counts"},
                )

        ctx = ValidationContext(kind=kind, counts=counts, limits=self.settings)
        return self.run(ctx)

    def run(self, ctx: ValidationContext) -> ValidationResult:
        """Drive a prepared context through every stage."""
        for stage in self.stages:
            stage(ctx)
            if ctx.errors:
                logger.debug(f"Validation of {ctx.kind_code} stopped at {stage.__name__}: {ctx.errors}")
                return ValidationResult(
                    valid=False,
                    errors=list(ctx.errors),
                    warnings=list(ctx.warnings),
                    metadata=dict(ctx.metadata, failed_stage=stage.__name__),
                )

        return ValidationResult(
            valid=True,
            errors=[],
            warnings=list(ctx.warnings),
            complexity=ctx.metadata.get("complexity"),
            function_points=ctx.metadata.get("function_points"),
            metadata=dict(ctx.metadata),
        )
