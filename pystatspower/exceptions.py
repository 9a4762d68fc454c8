"""
Exception hierarchy for pystatspower.

All exceptions inherit from PowerAnalysisError so that a host can catch any
engine error in one place. Each class carries a short ``kind`` tag that the
computation boundary uses when it turns an exception into an error value.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pystatspower.power._solver import SolverBracket


class PowerAnalysisError(Exception):
    """Base exception for all pystatspower errors."""

    kind = "error"


class ValidationError(PowerAnalysisError, ValueError):
    """
    A request field is missing or outside its domain.

    User-correctable; the message is meant to be shown verbatim.

    Attributes:
        field: Name of the offending request field, if known
    """

    kind = "validation"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidStructure(ValidationError):
    """
    Structural parameters of a test family are invalid.

    Raised when a design parameter is out of range (e.g. fewer than two
    groups) or when the degrees of freedom derived from the parameters and
    the sample size are not positive.
    """

    kind = "invalid_structure"


class DomainError(PowerAnalysisError, ValueError):
    """
    A distribution function was evaluated outside its support.

    Inside the engine this indicates a bracket derivation bug; from direct
    calls into ``pystatspower.distributions`` it flags bad arguments.
    """

    kind = "domain"


class SolverError(PowerAnalysisError):
    """Base class for root-finding failures."""

    kind = "solver"


class BracketingFailure(SolverError):
    """
    The supplied bracket does not straddle the target.

    Attributes:
        bracket: The evaluated bracket (bounds and function values)
        target: The value the solver was asked to reach
    """

    kind = "bracketing_failure"

    def __init__(self, message: str, bracket: SolverBracket, target: float):
        super().__init__(message)
        self.bracket = bracket
        self.target = target


class NoConvergence(SolverError):
    """
    The solver exhausted its iteration budget.

    Attributes:
        iterations: Number of iterations completed
        tolerance: The absolute tolerance that was not met
        last_estimate: Last root estimate, for diagnostics only
    """

    kind = "no_convergence"

    def __init__(
        self,
        message: str,
        iterations: int,
        tolerance: float | None = None,
        last_estimate: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.tolerance = tolerance
        self.last_estimate = last_estimate


class Infeasible(PowerAnalysisError):
    """
    The requested power cannot be reached within the search bounds.

    Attributes:
        field: The quantity being solved for
        bound: The search bound at which the target was still unreachable
        best_power: Power achieved at that bound
    """

    kind = "infeasible"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        bound: float | None = None,
        best_power: float | None = None,
    ):
        super().__init__(message)
        self.field = field
        self.bound = bound
        self.best_power = best_power
