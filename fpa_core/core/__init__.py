"""
Core package.

Contains the engine facade and the collaborator interfaces.
"""

from fpa_core.core.engine import FPAEngine, create_engine
from fpa_core.core.ports import ComponentSource, EstimateHistory

__all__ = [
    "FPAEngine",
    "create_engine",
    "ComponentSource",
    "EstimateHistory",
]
