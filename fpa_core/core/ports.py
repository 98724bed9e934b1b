"""
Interfaces to the collaborators that feed the calculation core.

Storage lives outside this package; anything that implements these
protocols can supply components and estimate history.
"""

from typing import List, Protocol

from fpa_core.models.schemas import ComponentRecord, Estimate


class ComponentSource(Protocol):
    """Supplies the component records of an estimate."""

    def fetch_components(self, estimate_id: str) -> List[ComponentRecord]:
        ...


class EstimateHistory(Protocol):
    """Supplies every stored version of a project's estimate, in any order."""

    def list_versions(self, project_id: str) -> List[Estimate]:
        ...
