"""
Trend Analysis Service.

Compares a metric across an ordered series of estimate versions: direction,
percentage change, summary statistics and a linear forecast.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from fpa_core.config import EstimationSettings, get_settings
from fpa_core.exceptions import InvalidInputError
from fpa_core.models.schemas import TrendDirection, TrendMetric, TrendPoint, TrendResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Regression:
    """Least-squares line through (version, value) points."""

    slope: float
    intercept: float
    r_squared: float

    def predict(self, version: float) -> float:
        return self.slope * version + self.intercept


class TrendAnalyzer:
    """Analyzes how an estimate metric evolves across versions."""

    def __init__(
        self,
        threshold_percent: Optional[float] = None,
        settings: Optional[EstimationSettings] = None,
    ):
        """
        Initialize Trend Analyzer.

        Args:
            threshold_percent: Percentage change treated as noise (stable trend)
            settings: Estimation settings to take the default threshold from
        """
        if threshold_percent is None:
            threshold_percent = (settings or get_settings().estimation).trend_threshold_percent
        if threshold_percent < 0:
            raise InvalidInputError("Trend threshold cannot be negative")
        self.threshold_percent = threshold_percent

    def analyze_trend(
        self,
        estimates: Sequence[Any],
        metric: Union[TrendMetric, str],
    ) -> TrendResult:
        """
        Analyze the trend of a metric across estimate versions.

        Args:
            estimates: Estimates sorted ascending by version
            metric: Metric to compare

        Returns:
            Trend direction, percentage change between first and last version,
            statistics and a forecast for the next version
        """
        metric = TrendMetric.parse(metric)
        data = self._extract(estimates, metric)
        values = [point.value for point in data]

        result = TrendResult(
            metric=metric,
            trend=TrendDirection.STABLE,
            percentage_change=0.0,
            data=data,
            average_value=sum(values) / len(values),
            min_value=min(values),
            max_value=max(values),
        )

        if len(data) == 1:
            return result

        first, last = values[0], values[-1]
        if first == 0:
            if last == 0:
                percentage_change = 0.0
                trend = TrendDirection.STABLE
            else:
                # No baseline to express a percentage against
                logger.info(f"Undefined baseline for {metric.value}: first value is 0, last is {last}")
                result.percentage_change = None
                result.undefined_baseline = True
                result.trend = TrendDirection.INCREASING if last > 0 else TrendDirection.DECREASING
                self._apply_regression(result, data)
                return result
        else:
            percentage_change = (last - first) / first * 100
            trend = self.classify(percentage_change)

        result.percentage_change = percentage_change
        result.trend = trend
        self._apply_regression(result, data)
        return result

    def classify(self, percentage_change: float) -> TrendDirection:
        """Classify a percentage change against the noise threshold."""
        if percentage_change > self.threshold_percent:
            return TrendDirection.INCREASING
        if percentage_change < -self.threshold_percent:
            return TrendDirection.DECREASING
        return TrendDirection.STABLE

    def forecast(
        self,
        estimates: Sequence[Any],
        metric: Union[TrendMetric, str],
        periods: int,
    ) -> List[TrendPoint]:
        """
        Project the metric onto the next versions with a linear fit.

        Args:
            estimates: Estimates sorted ascending by version (at least two)
            metric: Metric to forecast
            periods: Number of future versions

        Returns:
            Forecast points; values are never negative
        """
        if periods < 1:
            raise InvalidInputError("Forecast periods must be at least 1")

        data = self._extract(estimates, TrendMetric.parse(metric))
        if len(data) < 2:
            raise InvalidInputError("At least two estimates are required for forecasting")

        regression = self.linear_regression(data)
        last_version = data[-1].version
        return [
            TrendPoint(
                version=last_version + step,
                value=max(0.0, regression.predict(last_version + step)),
            )
            for step in range(1, periods + 1)
        ]

    def detect_anomalies(
        self,
        estimates: Sequence[Any],
        metric: Union[TrendMetric, str],
        threshold: float = 2.0,
    ) -> List[Any]:
        """
        Find estimates whose metric lies more than `threshold` standard deviations from the mean.

        Fewer than four estimates are not enough to judge and return no anomalies.
        """
        metric = TrendMetric.parse(metric)
        data = self._extract(estimates, metric)
        if len(data) < 4:
            return []

        values = [point.value for point in data]
        mean = sum(values) / len(values)
        std_dev = math.sqrt(sum((value - mean) ** 2 for value in values) / len(values))
        if std_dev == 0:
            return []

        return [
            estimate
            for estimate, value in zip(estimates, values)
            if abs(value - mean) / std_dev > threshold
        ]

    @staticmethod
    def linear_regression(data: Sequence[TrendPoint]) -> Regression:
        """Least-squares fit of value against version number."""
        n = len(data)
        x_values = [float(point.version) for point in data]
        y_values = [point.value for point in data]
        x_mean = sum(x_values) / n
        y_mean = sum(y_values) / n

        numerator = sum((x - x_mean) * (y - y_mean) for x, y in zip(x_values, y_values))
        denominator = sum((x - x_mean) ** 2 for x in x_values)
        slope = numerator / denominator if denominator != 0 else 0.0
        intercept = y_mean - slope * x_mean

        total_ss = sum((y - y_mean) ** 2 for y in y_values)
        residual_ss = sum(
            (y - (slope * x + intercept)) ** 2 for x, y in zip(x_values, y_values)
        )
        r_squared = 1 - residual_ss / total_ss if total_ss != 0 else 0.0

        return Regression(slope=slope, intercept=intercept, r_squared=r_squared)

    def _apply_regression(self, result: TrendResult, data: List[TrendPoint]) -> None:
        regression = self.linear_regression(data)
        result.forecasted_value = regression.predict(data[-1].version + 1)
        result.confidence_level = regression.r_squared * 100

    @staticmethod
    def _extract(estimates: Sequence[Any], metric: TrendMetric) -> List[TrendPoint]:
        if not estimates:
            raise InvalidInputError("At least one estimate is required for trend analysis")

        data = [
            TrendPoint(version=estimate.version, value=float(getattr(estimate, metric.value)))
            for estimate in estimates
        ]
        for previous, current in zip(data, data[1:]):
            if current.version <= previous.version:
                raise InvalidInputError(
                    "Estimates must be sorted by ascending version "
                    f"(version {current.version} follows {previous.version})"
                )
        return data
