"""Bracketing root solver used to invert the power function."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from scipy.optimize import brentq

from pystatspower._config import DEFAULT_SETTINGS, EngineSettings
from pystatspower.exceptions import BracketingFailure, DomainError, NoConvergence, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverBracket:
    """Search interval and the function values at its ends."""

    lower: float
    upper: float
    f_lower: float
    f_upper: float

    def straddles(self, target: float) -> bool:
        """True if ``target`` lies between the two function values."""
        return (self.f_lower - target) * (self.f_upper - target) <= 0.0


@dataclass(frozen=True)
class SolveResult:
    root: float
    iterations: int
    function_calls: int
    bracket: SolverBracket


def solve(
    func: Callable[[float], float],
    target: float,
    bracket: tuple[float, float],
    *,
    xtol: float | None = None,
    rtol: float | None = None,
    maxiter: int | None = None,
    settings: EngineSettings | None = None,
) -> SolveResult:
    """Solve ``func(x) == target`` inside ``bracket`` with Brent's method.

    Brent's method keeps a sign-changing bracket and takes inverse quadratic
    or secant steps when they land inside it, bisecting otherwise, so it
    converges for any continuous function whose bracket straddles the target.

    Parameters
    ----------
    func : callable
        Monotonic function of one variable (e.g. computes power as f(n)).
    target : float
        Target value (e.g. desired power).
    bracket : tuple
        ``(lower, upper)`` with ``lower < upper``.
    xtol, rtol, maxiter : optional
        Convergence controls; default to the values in *settings*.
    settings : EngineSettings, optional
        Defaults to ``DEFAULT_SETTINGS``.

    Returns
    -------
    SolveResult
        The root, the iteration and call counts, and the evaluated bracket.

    Raises
    ------
    BracketingFailure
        If ``func(lower) - target`` and ``func(upper) - target`` have the
        same sign. Widening the bracket is the caller's job.
    NoConvergence
        If the iteration budget runs out before the tolerance is met.
    """
    settings = settings or DEFAULT_SETTINGS
    xtol = settings.xtol if xtol is None else xtol
    rtol = settings.rtol if rtol is None else rtol
    maxiter = settings.maxiter if maxiter is None else maxiter

    lo, hi = (float(b) for b in bracket)
    if not lo < hi:
        raise ValidationError(f"bracket must satisfy lower < upper, got ({lo}, {hi})", field="bracket")

    evaluated = SolverBracket(lo, hi, func(lo), func(hi))
    if math.isnan(evaluated.f_lower) or math.isnan(evaluated.f_upper):
        raise DomainError(f"Function is NaN at a bracket end: {evaluated}")

    if evaluated.f_lower == target:
        return SolveResult(lo, 0, 2, evaluated)
    if evaluated.f_upper == target:
        return SolveResult(hi, 0, 2, evaluated)
    if not evaluated.straddles(target):
        raise BracketingFailure(
            f"Cannot solve: target {target:.6g} is outside the range "
            f"[{evaluated.f_lower:.6g}, {evaluated.f_upper:.6g}] spanned by the bracket "
            f"[{lo:.6g}, {hi:.6g}]",
            bracket=evaluated,
            target=target,
        )

    root, info = brentq(
        lambda x: func(x) - target,
        lo,
        hi,
        xtol=xtol,
        rtol=rtol,
        maxiter=maxiter,
        full_output=True,
        disp=False,
    )
    if not info.converged:
        raise NoConvergence(
            f"Solver did not converge within {maxiter} iterations "
            f"(xtol = {xtol:.3g}, last estimate {root:.10g})",
            iterations=info.iterations,
            tolerance=xtol,
            last_estimate=float(root),
        )

    logger.debug(
        "Solved f(x) = %.6g on [%.6g, %.6g]: x = %.10g after %d iterations",
        target, lo, hi, root, info.iterations,
    )
    return SolveResult(float(root), info.iterations, info.function_calls + 2, evaluated)
