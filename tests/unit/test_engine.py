"""
Unit tests for the FPA Engine.
"""

from typing import Dict, List

import pytest
from prometheus_client import REGISTRY

from fpa_core.config import EstimationSettings
from fpa_core.core.engine import FPAEngine
from fpa_core.exceptions import (
    ComponentValidationError,
    InvalidGSCError,
    InvalidInputError,
    UnknownComponentKindError,
    UnknownMetricError,
)
from fpa_core.models.schemas import (
    CalculationRequest,
    ComponentCounts,
    ComponentKind,
    ComponentRecord,
    Complexity,
    Estimate,
    TrendDirection,
)


class FakeComponentSource:
    """In-memory component storage keyed by estimate id."""

    def __init__(self, components: Dict[str, List[ComponentRecord]]):
        self.components = components

    def fetch_components(self, estimate_id: str) -> List[ComponentRecord]:
        return list(self.components.get(estimate_id, []))


class FakeEstimateHistory:
    """In-memory estimate history keyed by project id."""

    def __init__(self, estimates: List[Estimate]):
        self.estimates = estimates

    def list_versions(self, project_id: str) -> List[Estimate]:
        return [estimate for estimate in self.estimates if estimate.project_id == project_id]


@pytest.fixture
def engine():
    """Engine with default settings."""
    return FPAEngine(settings=EstimationSettings(), metrics_enabled=True)


@pytest.fixture
def components():
    """An ILF rated low (7) and an EI rated average (4)."""
    return [
        ComponentRecord(name="Accounts", kind=ComponentKind.ILF, counts=ComponentCounts(ret=2, det=15)),
        ComponentRecord(name="Open account", kind=ComponentKind.EI, counts=ComponentCounts(ftr=1, det=10)),
    ]


def sample_value(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestComponents:
    """Tests for validation and classification through the engine."""

    def test_validate_component_returns_errors(self, engine):
        result = engine.validate_component("EI", {"ftr": 1})

        assert result.valid is False
        assert result.errors

    def test_validate_component_records_metric(self, engine):
        labels = {"kind": "unknown", "outcome": "invalid"}
        before = sample_value("fpa_component_validations_total", labels)

        engine.validate_component("XYZ", {"det": 1, "ftr": 1})

        assert sample_value("fpa_component_validations_total", labels) == before + 1

    def test_lowercase_kind_recorded_under_its_code(self, engine):
        valid_labels = {"kind": "EI", "outcome": "valid"}
        unknown_labels = {"kind": "unknown", "outcome": "valid"}
        valid_before = sample_value("fpa_component_validations_total", valid_labels)
        unknown_before = sample_value("fpa_component_validations_total", unknown_labels)

        result = engine.validate_component("ei", {"det": 10, "ftr": 1})

        assert result.valid is True
        assert sample_value("fpa_component_validations_total", valid_labels) == valid_before + 1
        assert sample_value("fpa_component_validations_total", unknown_labels) == unknown_before

    def test_non_integer_counts_give_a_result(self, engine):
        result = engine.validate_component("EI", {"det": "ten", "ftr": 1})

        assert result.valid is False
        assert result.errors[0].startswith("det:")

    def test_classify_non_integer_counts(self, engine):
        with pytest.raises(ComponentValidationError):
            engine.classify_complexity("EI", {"det": "ten", "ftr": 1})

    def test_classify_complexity(self, engine):
        assert engine.classify_complexity("ILF", {"ret": 2, "det": 15}) == Complexity.LOW
        assert engine.classify_complexity(ComponentKind.EI, {"ftr": 1, "det": 10}) == Complexity.AVERAGE

    def test_classify_invalid_component(self, engine):
        with pytest.raises(ComponentValidationError) as exc_info:
            engine.classify_complexity("ILF", {"ret": 0, "det": 15})

        assert exc_info.value.errors == ["RET must be at least 1, got 0"]

    def test_classify_unknown_kind(self, engine):
        with pytest.raises(UnknownComponentKindError):
            engine.classify_complexity("XYZ", {"det": 1})


class TestEstimates:
    """Tests for estimate calculation."""

    def test_calculate_estimate(self, engine, components):
        totals = engine.calculate_estimate(components, [3] * 14, 8.0)

        assert totals.ufp == 11
        assert totals.afp == pytest.approx(11.77)

    def test_calculate_metrics(self, engine, components):
        metrics = engine.calculate_metrics(
            components, [3] * 14, 8.0, hours_per_day=8, team_size=2, hourly_rate=50.0
        )

        assert metrics.effort_hours == pytest.approx(94.16)
        assert metrics.duration_days == pytest.approx(5.885)
        assert metrics.total_cost == pytest.approx(4708.0)

    def test_calculate_metrics_invalid_inputs(self, engine, components):
        with pytest.raises(InvalidInputError):
            engine.calculate_metrics(components, [3] * 14, 8.0, 8, 0, 50.0)

    def test_failed_calculation_records_metric(self, engine, components):
        labels = {"operation": "calculate_estimate", "outcome": "error"}
        before = sample_value("fpa_calculations_total", labels)

        with pytest.raises(InvalidGSCError):
            engine.calculate_estimate(components, [3] * 5, 8.0)

        assert sample_value("fpa_calculations_total", labels) == before + 1

    def test_batch_isolates_failures(self, engine, components):
        requests = [
            CalculationRequest(
                request_id="ok",
                components=components,
                general_system_characteristics=[3] * 14,
                productivity_factor=8.0,
            ),
            CalculationRequest(
                request_id="bad-gsc",
                components=components,
                general_system_characteristics=[3] * 13,
                productivity_factor=8.0,
            ),
            CalculationRequest(
                request_id="no-factor",
                components=components,
                general_system_characteristics=[3] * 14,
            ),
        ]

        results = engine.calculate_estimates(requests)

        assert [item.success for item in results] == [True, False, False]
        assert results[0].totals.ufp == 11
        assert results[1].error["error"] == "InvalidGSCError"
        assert results[2].error["error"] == "MissingProductivityFactorError"

    def test_recalculate_from_source(self, engine, components):
        draft = engine.lifecycle.create_draft(
            project_id="proj-1",
            general_system_characteristics=[0] * 14,
            productivity_factor=10.0,
            estimate_id="est-1",
        )
        source = FakeComponentSource({"est-1": components})

        updated = engine.recalculate_estimate(draft, source)

        assert updated.unadjusted_function_points == 11
        assert updated.adjusted_function_points == pytest.approx(7.15)
        assert updated.estimated_effort_hours == pytest.approx(71.5)


class TestTeamSizing:
    """Tests for team estimation through the engine."""

    def test_constraints_as_mapping(self, engine):
        result = engine.estimate_team(100, 10, 6, {"team_size": 5, "buffer_percentage": 0})

        assert result.recommended_duration_months == pytest.approx(1.5873, rel=1e-4)

    def test_no_constraints(self, engine):
        result = engine.estimate_team(100, 10, 8)

        assert result.total_effort_hours == pytest.approx(1200)

    def test_ideal_team_size(self, engine):
        band = engine.estimate_ideal_team_size(500)

        assert (band.min, band.max) == (4, 8)


class TestTrends:
    """Tests for trend analysis through the engine."""

    def test_project_trend_sorts_versions(self, engine):
        history = FakeEstimateHistory(
            [
                Estimate(project_id="proj-1", version=3, adjusted_function_points=300),
                Estimate(project_id="proj-1", version=1, adjusted_function_points=200),
                Estimate(project_id="proj-2", version=2, adjusted_function_points=5),
                Estimate(project_id="proj-1", version=2, adjusted_function_points=250),
            ]
        )

        result = engine.analyze_project_trend("proj-1", "adjusted_fp", history)

        assert result.percentage_change == pytest.approx(50.0)
        assert result.trend == TrendDirection.INCREASING
        assert [point.version for point in result.data] == [1, 2, 3]

    def test_unknown_metric(self, engine):
        estimates = [Estimate(project_id="proj-1", version=1)]

        with pytest.raises(UnknownMetricError):
            engine.analyze_trend(estimates, "velocity")
