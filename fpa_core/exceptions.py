"""
Exceptions raised by the FPA calculation core.

Input problems, configuration problems and lifecycle violations each get
their own branch so callers can decide what to surface and what to skip.
"""

from typing import Any, Dict, List, Optional


class FPAError(Exception):
    """Base exception for FPA calculation errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(FPAError):
    """Malformed or out-of-range input values."""
    pass


class ComponentValidationError(InvalidInputError):
    """A component failed the validation pipeline."""

    def __init__(
        self,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        component: Optional[str] = None,
    ):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        self.component = component
        prefix = f"Component '{component}' failed validation" if component else "Component failed validation"
        super().__init__(
            f"{prefix}: {'; '.join(self.errors)}",
            details={"errors": self.errors, "warnings": self.warnings, "component": component},
        )


class InvalidGSCError(InvalidInputError):
    """General System Characteristics vector has the wrong length or range."""
    pass


class MissingProductivityFactorError(InvalidInputError):
    """No productivity factor supplied for an effort calculation."""
    pass


class ConfigurationError(FPAError):
    """Request refers to something the core does not know about."""
    pass


class UnknownComponentKindError(ConfigurationError):
    """Component kind is not one of ILF, EIF, EI, EO, EQ."""
    pass


class UnknownMetricError(ConfigurationError):
    """Trend metric selector is not recognised."""
    pass


class EstimateStateError(FPAError):
    """Operation not allowed in the estimate's current lifecycle state."""
    pass
