"""
Unit tests for complexity classification.
"""

import pytest

from fpa_core.exceptions import InvalidInputError, UnknownComponentKindError
from fpa_core.models.schemas import (
    CalculationMethod,
    ComponentCounts,
    ComponentKind,
    Complexity,
)
from fpa_core.services.complexity import (
    DATA_FUNCTION_MATRIX,
    EO_MATRIX,
    FP_WEIGHTS,
    MATRICES,
    band_index,
    classify,
    classify_component,
    classify_eq_dual,
    det_boundaries,
    function_points_for,
)


class TestMatrices:
    """Tests for the band matrices."""

    @pytest.mark.parametrize(
        "kind,primary,det,expected",
        [
            (ComponentKind.ILF, 2, 15, Complexity.LOW),
            (ComponentKind.ILF, 1, 50, Complexity.LOW),
            (ComponentKind.ILF, 1, 51, Complexity.AVERAGE),
            (ComponentKind.ILF, 6, 51, Complexity.HIGH),
            (ComponentKind.EIF, 3, 30, Complexity.AVERAGE),
            (ComponentKind.EI, 1, 10, Complexity.AVERAGE),
            (ComponentKind.EI, 0, 3, Complexity.LOW),
            (ComponentKind.EI, 3, 16, Complexity.HIGH),
            (ComponentKind.EO, 4, 20, Complexity.HIGH),
            (ComponentKind.EO, 2, 6, Complexity.AVERAGE),
            (ComponentKind.EQ, 1, 5, Complexity.LOW),
        ],
    )
    def test_classify(self, kind, primary, det, expected):
        assert classify(kind, primary, det) == expected

    def test_accepts_kind_code(self):
        assert classify("ilf", 2, 15) == Complexity.LOW

    def test_unknown_kind(self):
        with pytest.raises(UnknownComponentKindError):
            classify("XYZ", 1, 1)

    def test_negative_counts_rejected(self):
        with pytest.raises(InvalidInputError):
            classify(ComponentKind.EI, -1, 5)
        with pytest.raises(InvalidInputError):
            classify(ComponentKind.ILF, 1, -5)

    @pytest.mark.parametrize("kind", list(ComponentKind))
    def test_more_elements_never_lower_complexity(self, kind):
        """Adding a RET/FTR or a DET never makes a component simpler."""
        start = 1 if kind.is_data_function else 0
        for primary in range(start, 12):
            for det in range(1, 60):
                current = classify(kind, primary, det).rank
                assert classify(kind, primary + 1, det).rank >= current
                assert classify(kind, primary, det + 1).rank >= current

    def test_band_index_below_first_band(self):
        assert band_index(0, DATA_FUNCTION_MATRIX.det_bands) == 0

    def test_det_boundaries(self):
        assert det_boundaries(DATA_FUNCTION_MATRIX) == {19, 20, 50, 51}
        assert det_boundaries(EO_MATRIX) == {5, 6, 19, 20}

    def test_every_kind_has_a_matrix(self):
        assert set(MATRICES) == set(ComponentKind)


class TestWeights:
    """Tests for the IFPUG weights."""

    def test_weights(self):
        assert FP_WEIGHTS[ComponentKind.ILF] == {
            Complexity.LOW: 7,
            Complexity.AVERAGE: 10,
            Complexity.HIGH: 15,
        }
        assert function_points_for(ComponentKind.EIF, Complexity.HIGH) == 10
        assert function_points_for("EI", "average") == 4
        assert function_points_for(ComponentKind.EO, Complexity.LOW) == 4
        assert function_points_for(ComponentKind.EQ, Complexity.HIGH) == 6


class TestEQDual:
    """Tests for the EQ dual calculation."""

    def test_input_side_wins(self):
        result = classify_eq_dual(input_ftr=3, input_det=16, output_ftr=0, output_det=1)

        assert result.input_complexity == Complexity.HIGH
        assert result.output_complexity == Complexity.LOW
        assert result.winning_side == "input"
        assert result.complexity == Complexity.HIGH
        assert result.function_points == 6

    def test_output_side_wins(self):
        result = classify_eq_dual(input_ftr=0, input_det=1, output_ftr=2, output_det=10)

        assert result.winning_side == "output"
        assert result.complexity == Complexity.AVERAGE
        assert result.function_points == 4

    def test_tie_keeps_output_side(self):
        result = classify_eq_dual(input_ftr=0, input_det=2, output_ftr=1, output_det=3)

        assert result.input_function_points == result.output_function_points
        assert result.winning_side == "output"

    def test_zero_det_on_one_side_rates_lowest(self):
        result = classify_eq_dual(input_ftr=0, input_det=0, output_ftr=4, output_det=20)

        assert result.input_complexity == Complexity.LOW
        assert result.function_points == 6


class TestClassifyComponent:
    """Tests for classification from a counts record."""

    def test_standard(self):
        complexity, points, method = classify_component(
            ComponentKind.ILF, ComponentCounts(ret=2, det=15)
        )

        assert complexity == Complexity.LOW
        assert points == 7
        assert method == CalculationMethod.STANDARD

    def test_eq_with_all_dual_counts_uses_dual(self):
        counts = ComponentCounts(input_ftr=3, input_det=16, output_ftr=0, output_det=1)
        complexity, points, method = classify_component(ComponentKind.EQ, counts)

        assert complexity == Complexity.HIGH
        assert points == 6
        assert method == CalculationMethod.EQ_DUAL

    def test_eq_with_partial_dual_counts_uses_standard(self):
        counts = ComponentCounts(ftr=1, det=3, input_det=16)
        _, points, method = classify_component(ComponentKind.EQ, counts)

        assert points == 3
        assert method == CalculationMethod.STANDARD

    def test_missing_counts(self):
        with pytest.raises(InvalidInputError):
            classify_component(ComponentKind.EI, ComponentCounts(ftr=1))
