"""
Utilities package.

Contains logging and metrics utilities.
"""

from fpa_core.utils.logging import (
    configure_logging,
    get_logger,
    bind_request_context,
    log_calculation,
)
from fpa_core.utils.metrics import (
    VALIDATION_COUNT,
    CALCULATION_COUNT,
    CALCULATION_LATENCY,
    record_validation,
    record_calculation,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "bind_request_context",
    "log_calculation",
    # Metrics
    "VALIDATION_COUNT",
    "CALCULATION_COUNT",
    "CALCULATION_LATENCY",
    "record_validation",
    "record_calculation",
]
