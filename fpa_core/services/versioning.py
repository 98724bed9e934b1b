"""
Estimate lifecycle.

Estimates start as drafts, are recalculated whenever their components or
General System Characteristics change, and are versioned by cloning into a
new draft. Every operation returns a new Estimate; superseded versions are
never modified.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from fpa_core.exceptions import EstimateStateError
from fpa_core.models.schemas import ComponentRecord, Estimate, EstimateStatus
from fpa_core.services.function_points import FunctionPointCalculator

logger = logging.getLogger(__name__)


class EstimateLifecycle:
    """Creates, recalculates, finalizes and versions estimates."""

    def __init__(self, calculator: Optional[FunctionPointCalculator] = None):
        self.calculator = calculator or FunctionPointCalculator()

    def create_draft(
        self,
        project_id: str,
        name: str = "",
        components: Optional[Iterable[ComponentRecord]] = None,
        general_system_characteristics: Optional[Sequence[int]] = None,
        productivity_factor: Optional[float] = None,
        estimate_id: Optional[str] = None,
    ) -> Estimate:
        """Create version 1 of a project's estimate in draft status."""
        return Estimate(
            id=estimate_id,
            project_id=project_id,
            name=name,
            version=1,
            status=EstimateStatus.DRAFT,
            components=list(components or []),
            general_system_characteristics=(
                list(general_system_characteristics)
                if general_system_characteristics is not None
                else None
            ),
            productivity_factor=productivity_factor,
        )

    def recalculate(self, estimate: Estimate) -> Estimate:
        """
        Refresh the derived totals of a draft estimate.

        Raises:
            EstimateStateError: If the estimate is not a draft
            FPAError: If the components, GSC vector or productivity factor are invalid
        """
        self._require_draft(estimate, "recalculate")

        totals = self.calculator.calculate_estimate(
            estimate.components,
            estimate.general_system_characteristics,
            estimate.productivity_factor,
        )
        return estimate.model_copy(
            update={
                "unadjusted_function_points": float(totals.ufp),
                "value_adjustment_factor": totals.vaf,
                "adjusted_function_points": totals.afp,
                "estimated_effort_hours": totals.effort_hours,
                "updated_at": datetime.utcnow(),
            }
        )

    def update_inputs(
        self,
        estimate: Estimate,
        components: Optional[Iterable[ComponentRecord]] = None,
        general_system_characteristics: Optional[Sequence[int]] = None,
        productivity_factor: Optional[float] = None,
    ) -> Estimate:
        """Replace components, GSCs or productivity factor of a draft and recalculate."""
        self._require_draft(estimate, "update")

        update = {}
        if components is not None:
            update["components"] = list(components)
        if general_system_characteristics is not None:
            update["general_system_characteristics"] = list(general_system_characteristics)
        if productivity_factor is not None:
            update["productivity_factor"] = productivity_factor

        return self.recalculate(estimate.model_copy(update=update))

    def finalize(self, estimate: Estimate) -> Estimate:
        """Freeze a draft as the finalized version."""
        self._require_draft(estimate, "finalize")
        return estimate.model_copy(
            update={"status": EstimateStatus.FINALIZED, "updated_at": datetime.utcnow()}
        )

    def archive(self, estimate: Estimate) -> Estimate:
        if estimate.status == EstimateStatus.ARCHIVED:
            raise EstimateStateError(f"Estimate version {estimate.version} is already archived")
        return estimate.model_copy(
            update={"status": EstimateStatus.ARCHIVED, "updated_at": datetime.utcnow()}
        )

    def new_version(self, estimate: Estimate, history: Sequence[Estimate] = ()) -> Estimate:
        """
        Clone an estimate into a new draft version.

        Args:
            estimate: Version to clone
            history: Known versions of the same project; the new version
                number is one past the highest of these and the source

        Returns:
            The new draft; the source estimate is left as it was
        """
        versions: List[int] = [e.version for e in history if e.project_id == estimate.project_id]
        next_version = max(versions + [estimate.version]) + 1
        now = datetime.utcnow()

        clone = estimate.model_copy(
            update={
                "id": None,
                "version": next_version,
                "status": EstimateStatus.DRAFT,
                "created_at": now,
                "updated_at": now,
            },
            deep=True,
        )
        logger.info(
            f"Created version {next_version} of estimate for project {estimate.project_id} "
            f"from version {estimate.version}"
        )
        return clone

    @staticmethod
    def _require_draft(estimate: Estimate, action: str) -> None:
        if estimate.status != EstimateStatus.DRAFT:
            raise EstimateStateError(
                f"Cannot {action} estimate version {estimate.version}: status is {estimate.status.value}",
                details={"version": estimate.version, "status": estimate.status.value},
            )
