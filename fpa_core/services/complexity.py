"""
Complexity Classification Service.

Rates ILF, EIF, EI, EO and EQ components as low, average or high complexity
from their raw counts, using the IFPUG band matrices.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from fpa_core.exceptions import InvalidInputError
from fpa_core.models.schemas import CalculationMethod, ComponentCounts, ComponentKind, Complexity

logger = logging.getLogger(__name__)

L = Complexity.LOW
A = Complexity.AVERAGE
H = Complexity.HIGH

Band = Tuple[int, Optional[int]]


@dataclass(frozen=True)
class ComplexityMatrix:
    """Bands for the primary count (RET or FTR) and DET, and the resulting 3x3 grid."""

    primary_label: str
    primary_bands: Tuple[Band, Band, Band]
    det_bands: Tuple[Band, Band, Band]
    grid: Tuple[Tuple[Complexity, Complexity, Complexity], ...]


# Rows: primary count band, columns: DET band
DATA_FUNCTION_MATRIX = ComplexityMatrix(
    primary_label="RET",
    primary_bands=((1, 1), (2, 5), (6, None)),
    det_bands=((1, 19), (20, 50), (51, None)),
    grid=(
        (L, L, A),
        (L, A, H),
        (A, H, H),
    ),
)

EI_MATRIX = ComplexityMatrix(
    primary_label="FTR",
    primary_bands=((0, 1), (2, 2), (3, None)),
    det_bands=((1, 4), (5, 15), (16, None)),
    grid=(
        (L, A, A),
        (L, A, H),
        (A, H, H),
    ),
)

EO_MATRIX = ComplexityMatrix(
    primary_label="FTR",
    primary_bands=((0, 1), (2, 3), (4, None)),
    det_bands=((1, 5), (6, 19), (20, None)),
    grid=(
        (L, L, A),
        (L, A, H),
        (A, H, H),
    ),
)

EQ_MATRIX = ComplexityMatrix(
    primary_label="FTR",
    primary_bands=((0, 1), (2, 3), (4, None)),
    det_bands=((1, 5), (6, 19), (20, None)),
    grid=(
        (L, L, A),
        (L, A, H),
        (A, H, H),
    ),
)

MATRICES: Dict[ComponentKind, ComplexityMatrix] = {
    ComponentKind.ILF: DATA_FUNCTION_MATRIX,
    ComponentKind.EIF: DATA_FUNCTION_MATRIX,
    ComponentKind.EI: EI_MATRIX,
    ComponentKind.EO: EO_MATRIX,
    ComponentKind.EQ: EQ_MATRIX,
}

# Function Point weights (IFPUG standard)
FP_WEIGHTS: Dict[ComponentKind, Dict[Complexity, int]] = {
    ComponentKind.ILF: {L: 7, A: 10, H: 15},  # Internal Logical File
    ComponentKind.EIF: {L: 5, A: 7, H: 10},  # External Interface File
    ComponentKind.EI: {L: 3, A: 4, H: 6},  # External Input
    ComponentKind.EO: {L: 4, A: 5, H: 7},  # External Output
    ComponentKind.EQ: {L: 3, A: 4, H: 6},  # External Inquiry
}


@dataclass(frozen=True)
class EQDualResult:
    """Both sides of an EQ dual calculation and the side that was kept."""

    input_complexity: Complexity
    input_function_points: int
    output_complexity: Complexity
    output_function_points: int
    winning_side: str

    @property
    def complexity(self) -> Complexity:
        return self.output_complexity if self.winning_side == "output" else self.input_complexity

    @property
    def function_points(self) -> int:
        return max(self.input_function_points, self.output_function_points)


def band_index(value: int, bands: Tuple[Band, Band, Band]) -> int:
    """Return the band a value falls in. Values below the first band rate as the first band."""
    for index, (_low, high) in enumerate(bands):
        if high is None or value <= high:
            return index
    return len(bands) - 1


def lookup(matrix: ComplexityMatrix, primary_count: int, det: int) -> Complexity:
    """Resolve a complexity rating from a matrix."""
    if primary_count < 0 or det < 0:
        raise InvalidInputError(
            f"Counts cannot be negative ({matrix.primary_label}={primary_count}, DET={det})",
            details={"primary_count": primary_count, "det": det},
        )
    row = band_index(primary_count, matrix.primary_bands)
    col = band_index(det, matrix.det_bands)
    return matrix.grid[row][col]


def classify(kind: ComponentKind, primary_count: int, det: int) -> Complexity:
    """
    Classify a component.

    Args:
        kind: Component kind
        primary_count: RET for data functions, FTR for transactional functions
        det: Data Element Types

    Returns:
        Complexity rating
    """
    kind = ComponentKind.parse(kind)
    return lookup(MATRICES[kind], primary_count, det)


def function_points_for(kind: ComponentKind, complexity: Complexity) -> int:
    """Weight of a component kind at a complexity rating."""
    return FP_WEIGHTS[ComponentKind.parse(kind)][Complexity(complexity)]


def classify_eq_dual(
    input_ftr: int,
    input_det: int,
    output_ftr: int,
    output_det: int,
) -> EQDualResult:
    """
    Score an EQ's input and output sides independently.

    The input side is rated on the EI matrix and the output side on the EO
    matrix; each rating is weighted with the EQ weights and the side with
    more function points is kept. Equal points keep the output side.
    """
    input_complexity = lookup(EI_MATRIX, input_ftr, input_det)
    output_complexity = lookup(EO_MATRIX, output_ftr, output_det)
    input_fp = FP_WEIGHTS[ComponentKind.EQ][input_complexity]
    output_fp = FP_WEIGHTS[ComponentKind.EQ][output_complexity]

    return EQDualResult(
        input_complexity=input_complexity,
        input_function_points=input_fp,
        output_complexity=output_complexity,
        output_function_points=output_fp,
        winning_side="input" if input_fp > output_fp else "output",
    )


def classify_component(
    kind: ComponentKind,
    counts: ComponentCounts,
) -> Tuple[Complexity, int, CalculationMethod]:
    """
    Classify a component from its counts record.

    Returns:
        Tuple of (complexity, function points, calculation method)
    """
    kind = ComponentKind.parse(kind)

    if kind == ComponentKind.EQ and counts.has_dual_counts:
        dual = classify_eq_dual(
            counts.input_ftr, counts.input_det, counts.output_ftr, counts.output_det
        )
        logger.debug(
            f"EQ dual calculation: input={dual.input_complexity.value}/{dual.input_function_points} "
            f"output={dual.output_complexity.value}/{dual.output_function_points} "
            f"kept={dual.winning_side}"
        )
        return dual.complexity, dual.function_points, CalculationMethod.EQ_DUAL

    primary = counts.ret if kind.is_data_function else counts.ftr
    if primary is None or counts.det is None:
        raise InvalidInputError(
            f"{kind.value} requires {MATRICES[kind].primary_label} and DET counts",
            details={"kind": kind.value},
        )

    complexity = lookup(MATRICES[kind], primary, counts.det)
    return complexity, FP_WEIGHTS[kind][complexity], CalculationMethod.STANDARD


def det_boundaries(matrix: ComplexityMatrix) -> FrozenSet[int]:
    """DET values where one more or one less element changes band."""
    edges = set()
    for (_low, high), (next_low, _next_high) in zip(matrix.det_bands, matrix.det_bands[1:]):
        edges.add(high)
        edges.add(next_low)
    return frozenset(edges)
