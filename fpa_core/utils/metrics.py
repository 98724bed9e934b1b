"""
Prometheus metrics for calculation requests.
"""

from prometheus_client import Counter, Histogram

VALIDATION_COUNT = Counter(
    "fpa_component_validations_total",
    "Component validations run through the pipeline",
    ["kind", "outcome"]
)
CALCULATION_COUNT = Counter(
    "fpa_calculations_total",
    "Calculation requests handled by the engine",
    ["operation", "outcome"]
)
CALCULATION_LATENCY = Histogram(
    "fpa_calculation_duration_seconds",
    "Calculation request latency",
    ["operation"]
)


def record_validation(kind: str, valid: bool) -> None:
    VALIDATION_COUNT.labels(kind=kind, outcome="valid" if valid else "invalid").inc()


def record_calculation(operation: str, outcome: str, duration_seconds: float) -> None:
    CALCULATION_COUNT.labels(operation=operation, outcome=outcome).inc()
    CALCULATION_LATENCY.labels(operation=operation).observe(duration_seconds)
