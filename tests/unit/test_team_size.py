"""
Unit tests for the Team Size Estimator.
"""

import pytest

from fpa_core.config import EstimationSettings
from fpa_core.exceptions import InvalidInputError, MissingProductivityFactorError
from fpa_core.services.team_size import TeamSizeEstimator, TeamSizeParams


@pytest.fixture
def estimator():
    """Estimator with 21 working days and a 20% default buffer."""
    return TeamSizeEstimator(settings=EstimationSettings())


class TestSolvers:
    """Tests for the team size / duration solvers."""

    def test_duration_for_fixed_team(self, estimator):
        # 1000 / (5 x 21 x 6)
        assert estimator.duration_for_team_size(1000, 5, 6) == pytest.approx(1.5873, rel=1e-4)

    def test_team_for_fixed_duration(self, estimator):
        assert estimator.team_size_for_duration(1008, 2, 8) == pytest.approx(3.0)

    def test_solvers_are_inverse(self, estimator):
        team = estimator.team_size_for_duration(1200, 3, 8)

        assert estimator.duration_for_team_size(1200, team, 8) == pytest.approx(3.0)

    @pytest.mark.parametrize("months,hours", [(0, 8), (2, 0), (-1, 8)])
    def test_team_for_duration_rejects_non_positive(self, estimator, months, hours):
        with pytest.raises(InvalidInputError):
            estimator.team_size_for_duration(1000, months, hours)

    def test_duration_rejects_zero_team(self, estimator):
        with pytest.raises(InvalidInputError):
            estimator.duration_for_team_size(1000, 0, 8)

    def test_calculate_duration_applies_buffer(self, estimator):
        # 100 AFP x 10 h x 1.2 = 1200 h over 5 people at 8 h/day
        assert estimator.calculate_duration(100, 5, 10, 8) == pytest.approx(1200 / 40 / 21)


class TestSizeBands:
    """Tests for the project size bands."""

    @pytest.mark.parametrize(
        "afp,months",
        [
            (50, 1.5),
            (99.9, 1.5),
            (100, 3.0),
            (299, 3.0),
            (300, 6.0),
            (1000, 9.0),
            (1500, 12.0),
            (2500, 14.0),
        ],
    )
    def test_optimal_duration(self, afp, months):
        assert TeamSizeEstimator.estimate_optimal_duration(afp) == pytest.approx(months)

    @pytest.mark.parametrize(
        "afp,low,high",
        [
            (50, 1, 3),
            (200, 2, 5),
            (500, 4, 8),
            (1200, 6, 12),
            (5000, 10, 20),
        ],
    )
    def test_ideal_team_size(self, afp, low, high):
        band = TeamSizeEstimator.estimate_ideal_team_size(afp)

        assert (band.min, band.max) == (low, high)


class TestEstimate:
    """Tests for full team estimates."""

    def test_fixed_team(self, estimator):
        result = estimator.estimate(
            TeamSizeParams(
                adjusted_function_points=100,
                productivity_factor=10,
                hours_per_day_per_person=6,
                team_size=5,
                buffer_percentage=0,
            )
        )

        assert result.total_effort_hours == pytest.approx(1000)
        assert result.recommended_team_size == 5
        assert result.recommended_duration_months == pytest.approx(1.5873, rel=1e-4)

    def test_fixed_duration(self, estimator):
        result = estimator.estimate(
            TeamSizeParams(
                adjusted_function_points=100,
                productivity_factor=10,
                hours_per_day_per_person=8,
                duration_months=2,
                buffer_percentage=0,
            )
        )

        # 1000 h / (2 x 21 x 8) = 2.98 people
        assert result.recommended_team_size == 3
        assert result.recommended_duration_months == 2
        assert result.min_team_size == 2
        assert result.max_team_size == 4
        assert result.min_duration_months == pytest.approx(1000 / 32 / 21)
        assert result.max_duration_months == pytest.approx(1000 / 16 / 21)

    def test_unconstrained_uses_size_band(self, estimator):
        result = estimator.estimate(
            TeamSizeParams(
                adjusted_function_points=100,
                productivity_factor=10,
                hours_per_day_per_person=8,
            )
        )

        assert result.base_effort_hours == pytest.approx(1000)
        assert result.buffer_hours == pytest.approx(200)
        assert result.total_effort_hours == pytest.approx(1200)
        assert result.total_effort_days == pytest.approx(150)
        assert result.total_effort_months == pytest.approx(150 / 21)
        assert result.recommended_duration_months == pytest.approx(3.0)
        assert result.recommended_team_size == 2
        assert result.working_days_per_month == 21

    def test_team_rounds_half_up(self, estimator):
        result = estimator.estimate(
            TeamSizeParams(
                adjusted_function_points=42,
                productivity_factor=10,
                hours_per_day_per_person=8,
                duration_months=1,
                buffer_percentage=0,
            )
        )

        # 420 h / 168 h = 2.5 people
        assert result.recommended_team_size == 3

    def test_small_project_has_at_least_one_person(self, estimator):
        result = estimator.estimate(
            TeamSizeParams(
                adjusted_function_points=1,
                productivity_factor=1,
                hours_per_day_per_person=8,
            )
        )

        assert result.recommended_team_size == 1
        assert result.min_team_size == 1

    def test_working_days_override(self):
        estimator = TeamSizeEstimator(working_days_per_month=20, default_buffer_percentage=0)

        assert estimator.duration_for_team_size(800, 5, 8) == pytest.approx(1.0)

    def test_missing_productivity_factor(self, estimator):
        with pytest.raises(MissingProductivityFactorError):
            estimator.estimate(
                TeamSizeParams(
                    adjusted_function_points=100,
                    productivity_factor=None,
                    hours_per_day_per_person=8,
                )
            )

    def test_duration_and_team_both_fixed(self, estimator):
        with pytest.raises(InvalidInputError, match="not both"):
            estimator.estimate(
                TeamSizeParams(
                    adjusted_function_points=100,
                    productivity_factor=10,
                    hours_per_day_per_person=8,
                    duration_months=2,
                    team_size=3,
                )
            )

    def test_invalid_inputs_accumulate(self, estimator):
        with pytest.raises(InvalidInputError) as exc_info:
            estimator.estimate(
                TeamSizeParams(
                    adjusted_function_points=0,
                    productivity_factor=10,
                    hours_per_day_per_person=25,
                    buffer_percentage=-5,
                )
            )

        assert len(exc_info.value.details["errors"]) == 3
