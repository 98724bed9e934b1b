"""
Team Size Estimation Service.

Converts adjusted function points into effort, then solves for team size,
duration, or both using project-size bands.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from fpa_core.config import EstimationSettings, get_settings
from fpa_core.exceptions import InvalidInputError, MissingProductivityFactorError
from fpa_core.models.schemas import TeamSizeRange, TeamSizeResult

logger = logging.getLogger(__name__)

MIN_TEAM_FACTOR = 0.8
MAX_TEAM_FACTOR = 1.2

# (upper AFP bound, months); projects past the last bound use the enterprise formula
OPTIMAL_DURATION_BANDS = (
    (100, 1.5),
    (300, 3.0),
    (750, 6.0),
    (1500, 9.0),
)

IDEAL_TEAM_BANDS = (
    (100, 1, 3),
    (300, 2, 5),
    (750, 4, 8),
    (1500, 6, 12),
)
ENTERPRISE_TEAM_BAND = (10, 20)


@dataclass
class TeamSizeParams:
    """Inputs for a team size / duration estimate."""

    adjusted_function_points: float
    productivity_factor: Optional[float]
    hours_per_day_per_person: float
    duration_months: Optional[float] = None
    team_size: Optional[int] = None
    buffer_percentage: Optional[float] = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TeamSizeEstimator:
    """Estimates team size and project duration from adjusted function points."""

    def __init__(
        self,
        working_days_per_month: Optional[int] = None,
        default_buffer_percentage: Optional[float] = None,
        settings: Optional[EstimationSettings] = None,
    ):
        """
        Initialize Team Size Estimator.

        Args:
            working_days_per_month: Working days in a standard month (21)
            default_buffer_percentage: Buffer added to effort when none is given (20%)
            settings: Estimation settings to take the defaults from
        """
        settings = settings or get_settings().estimation
        self.working_days_per_month = working_days_per_month or settings.working_days_per_month
        self.default_buffer_percentage = (
            default_buffer_percentage
            if default_buffer_percentage is not None
            else settings.default_buffer_percentage
        )

    def estimate(self, params: TeamSizeParams) -> TeamSizeResult:
        """
        Estimate team size and duration.

        With a fixed duration the team size is solved; with a fixed team the
        duration is solved; with neither, the duration comes from the project
        size band and the team size is solved from it.

        Args:
            params: Estimation inputs

        Returns:
            Recommended team size, duration and min/max ranges
        """
        self._check_params(params)

        afp = params.adjusted_function_points
        hours_per_day = params.hours_per_day_per_person
        buffer_percentage = (
            params.buffer_percentage
            if params.buffer_percentage is not None
            else self.default_buffer_percentage
        )

        base_effort_hours = afp * params.productivity_factor
        buffer_hours = base_effort_hours * buffer_percentage / 100
        total_effort_hours = base_effort_hours + buffer_hours
        total_effort_days = total_effort_hours / hours_per_day
        total_effort_months = total_effort_days / self.working_days_per_month

        if params.duration_months is not None:
            duration_months = params.duration_months
            team_size = self.team_size_for_duration(total_effort_hours, duration_months, hours_per_day)
        elif params.team_size is not None:
            team_size = float(params.team_size)
            duration_months = self.duration_for_team_size(total_effort_hours, params.team_size, hours_per_day)
        else:
            duration_months = self.estimate_optimal_duration(afp)
            team_size = self.team_size_for_duration(total_effort_hours, duration_months, hours_per_day)

        min_team_size = max(1, math.floor(team_size * MIN_TEAM_FACTOR))
        max_team_size = max(1, math.ceil(team_size * MAX_TEAM_FACTOR))

        # Larger team, shorter project
        min_duration_months = self.duration_for_team_size(total_effort_hours, max_team_size, hours_per_day)
        max_duration_months = self.duration_for_team_size(total_effort_hours, min_team_size, hours_per_day)

        recommended_team_size = max(1, _round_half_up(team_size))

        logger.debug(
            f"Team estimate for {afp:.1f} AFP: {total_effort_hours:.1f}h, "
            f"team={recommended_team_size}, duration={duration_months:.2f} months"
        )

        return TeamSizeResult(
            base_effort_hours=base_effort_hours,
            buffer_hours=buffer_hours,
            total_effort_hours=total_effort_hours,
            total_effort_days=total_effort_days,
            total_effort_months=total_effort_months,
            recommended_team_size=recommended_team_size,
            recommended_duration_months=duration_months,
            min_team_size=min_team_size,
            max_team_size=max_team_size,
            min_duration_months=min_duration_months,
            max_duration_months=max_duration_months,
            working_days_per_month=self.working_days_per_month,
        )

    def team_size_for_duration(
        self,
        total_effort_hours: float,
        duration_months: float,
        hours_per_day: float,
    ) -> float:
        """Team size needed to deliver the effort within a fixed duration."""
        if duration_months <= 0 or hours_per_day <= 0:
            raise InvalidInputError("Duration and hours per day must be positive")
        available_hours_per_person = duration_months * self.working_days_per_month * hours_per_day
        return total_effort_hours / available_hours_per_person

    def duration_for_team_size(
        self,
        total_effort_hours: float,
        team_size: float,
        hours_per_day: float,
    ) -> float:
        """Duration in months for a fixed team size."""
        if team_size <= 0 or hours_per_day <= 0:
            raise InvalidInputError("Team size and hours per day must be positive")
        days_needed = total_effort_hours / (team_size * hours_per_day)
        return days_needed / self.working_days_per_month

    @staticmethod
    def estimate_optimal_duration(adjusted_function_points: float) -> float:
        """Target duration in months for a project of this size."""
        for upper_bound, months in OPTIMAL_DURATION_BANDS:
            if adjusted_function_points < upper_bound:
                return months
        return 12 + (adjusted_function_points - 1500) / 500

    @staticmethod
    def estimate_ideal_team_size(adjusted_function_points: float) -> TeamSizeRange:
        """
        Rule-of-thumb team band for the project size tier.

        This is independent of the effort-based calculation in estimate() and
        only meant as a sanity check next to it.
        """
        for upper_bound, low, high in IDEAL_TEAM_BANDS:
            if adjusted_function_points < upper_bound:
                return TeamSizeRange(min=low, max=high)
        return TeamSizeRange(min=ENTERPRISE_TEAM_BAND[0], max=ENTERPRISE_TEAM_BAND[1])

    def calculate_duration(
        self,
        adjusted_function_points: float,
        team_size: int,
        productivity_factor: float,
        hours_per_day: float,
        buffer_percentage: Optional[float] = None,
    ) -> float:
        """Duration in months for a team, including the effort buffer."""
        if buffer_percentage is None:
            buffer_percentage = self.default_buffer_percentage
        total_effort_hours = adjusted_function_points * productivity_factor * (1 + buffer_percentage / 100)
        return self.duration_for_team_size(total_effort_hours, team_size, hours_per_day)

    def _check_params(self, params: TeamSizeParams) -> None:
        errors = []

        if params.productivity_factor is None:
            raise MissingProductivityFactorError(
                "Productivity factor (hours per function point) is required"
            )
        if params.adjusted_function_points is None or params.adjusted_function_points <= 0:
            errors.append("Adjusted function points must be greater than 0")
        if params.productivity_factor <= 0:
            errors.append("Productivity factor must be greater than 0")
        if params.hours_per_day_per_person is None or not 0 < params.hours_per_day_per_person <= 24:
            errors.append("Hours per day per person must be between 0 and 24")
        if params.duration_months is not None and params.team_size is not None:
            errors.append("Fix either the duration or the team size, not both")
        if params.duration_months is not None and params.duration_months <= 0:
            errors.append("Duration must be greater than 0 months")
        if params.team_size is not None and params.team_size < 1:
            errors.append("Team size must be at least 1")
        if params.buffer_percentage is not None and params.buffer_percentage < 0:
            errors.append("Buffer percentage cannot be negative")

        if errors:
            raise InvalidInputError("; ".join(errors), details={"errors": errors})
