"""Analysis dispatcher: solve for whichever quantity is unknown."""

from __future__ import annotations

import logging
import math

from pystatspower._config import DEFAULT_SETTINGS, EngineSettings
from pystatspower.exceptions import Infeasible
from pystatspower.power._common import (
    AnalysisTarget,
    PowerAnalysisRequest,
    PowerAnalysisResult,
    Tail,
    _check_request,
    _infer_target,
)
from pystatspower.power._families import TestFamily
from pystatspower.power._power import _power
from pystatspower.power._solver import solve

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-target solvers
# ---------------------------------------------------------------------------

def _solve_n(
    family: TestFamily,
    tail: Tail,
    alpha: float,
    power: float,
    effect_size: float,
    settings: EngineSettings,
) -> tuple[int, float, int]:
    """Return (integer n, continuous root, solver iterations)."""
    def func(x: float) -> float:
        return _power(family, tail, alpha, x, effect_size, settings)

    lower = family.min_n()
    p_lower = func(lower)
    if p_lower >= power:
        logger.debug("Power %.6g already reached at the smallest feasible n = %.6g", p_lower, lower)
        return math.ceil(lower), lower, 0

    # Widen by doubling so the solver works on a tight bracket.
    upper = max(2.0 * lower, 16.0)
    while True:
        upper = min(upper, settings.n_cap)
        p_upper = func(upper)
        if p_upper >= power:
            break
        if upper >= settings.n_cap:
            raise Infeasible(
                f"Power {power} is not reachable with n <= {settings.n_cap:.6g} "
                f"(power at the cap is {p_upper:.6g}); increase the effect size or alpha",
                field="n",
                bound=settings.n_cap,
                best_power=p_upper,
            )
        lower = upper
        upper *= 2.0

    res = solve(func, power, (lower, upper), settings=settings)
    n_exact = res.root
    # The continuous root may sit a hair above an integer that already works.
    n_int = max(math.ceil(n_exact - 1e-6), math.ceil(family.min_n()))
    while func(n_int) < power:
        n_int += 1
    return n_int, n_exact, res.iterations


def _solve_alpha(
    family: TestFamily,
    tail: Tail,
    n: float,
    power: float,
    effect_size: float,
    settings: EngineSettings,
) -> tuple[float, int]:
    def func(x: float) -> float:
        return _power(family, tail, x, n, effect_size, settings)

    eps = settings.alpha_eps
    lower, upper = eps, 1.0 - eps
    p_lower = func(lower)
    if p_lower > power:
        raise Infeasible(
            f"Power at alpha = {lower:.3g} is already {p_lower:.6g} > {power}; "
            f"the required alpha is below the search range",
            field="alpha",
            bound=lower,
            best_power=p_lower,
        )
    p_upper = func(upper)
    if p_upper < power:
        raise Infeasible(
            f"Power {power} is not reachable for any alpha < 1 (power at alpha = {upper:.12g} "
            f"is {p_upper:.6g})",
            field="alpha",
            bound=upper,
            best_power=p_upper,
        )
    res = solve(func, power, (lower, upper), settings=settings)
    return res.root, res.iterations


def _solve_effect(
    family: TestFamily,
    tail: Tail,
    alpha: float,
    n: float,
    power: float,
    settings: EngineSettings,
) -> tuple[float, int]:
    def func(x: float) -> float:
        return _power(family, tail, alpha, n, x, settings)

    # power(effect_size = 0) == alpha
    if power <= alpha:
        raise Infeasible(
            f"Requested power {power} does not exceed alpha = {alpha}; "
            f"no positive effect size is needed",
            field="effect_size",
            bound=0.0,
            best_power=alpha,
        )

    lower, upper = 0.0, 1.0
    while True:
        upper = min(upper, settings.es_cap)
        p_upper = func(upper)
        if p_upper >= power:
            break
        if upper >= settings.es_cap:
            raise Infeasible(
                f"Power {power} is not reachable with effect size <= {settings.es_cap:.6g} "
                f"at n = {n:.6g} (power at the cap is {p_upper:.6g})",
                field="effect_size",
                bound=settings.es_cap,
                best_power=p_upper,
            )
        lower = upper
        upper *= 2.0

    res = solve(func, power, (lower, upper), settings=settings)
    return res.root, res.iterations


def _check_solution(name: str, value: float, low: float, high: float, *, open_low: bool = False) -> None:
    ok = math.isfinite(value) and (value > low if open_low else value >= low) and value <= high
    if not ok:
        raise Infeasible(f"Solved {name} = {value} is outside its domain", field=name, bound=value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze(request: PowerAnalysisRequest, settings: EngineSettings | None = None) -> PowerAnalysisResult:
    """Compute the unknown quantity of a power analysis.

    Parameters
    ----------
    request : PowerAnalysisRequest
        The family, the target quantity, the tail and the three known
        quantities.
    settings : EngineSettings, optional
        Tolerances and search caps; ``DEFAULT_SETTINGS`` if omitted.

    Returns
    -------
    PowerAnalysisResult

    Raises
    ------
    ValidationError
        A known quantity is missing or out of domain (raised before solving).
    InvalidStructure
        The design has non-positive df at the given n.
    Infeasible
        The requested power cannot be reached within the search bounds.
    BracketingFailure, NoConvergence
        The solver could not establish or close a bracket.
    """
    settings = settings or DEFAULT_SETTINGS
    fields = _check_request(request)
    family: TestFamily = fields["family"]
    target: AnalysisTarget = fields["target"]
    tail: Tail = fields["tail"]
    n, alpha, power, es = fields["n"], fields["alpha"], fields["power"], fields["effect_size"]

    n_exact = None
    iterations = 0

    if target is AnalysisTarget.POWER:
        power = _power(family, tail, alpha, n, es, settings)
        achieved = power

    elif target is AnalysisTarget.SAMPLE_SIZE:
        n, n_exact, iterations = _solve_n(family, tail, alpha, power, es, settings)
        _check_solution("n", n_exact, 2.0, settings.n_cap)
        achieved = _power(family, tail, alpha, n, es, settings)

    elif target is AnalysisTarget.ALPHA:
        # n is fixed; make sure its df are valid before searching
        family.noncentrality(es, n)
        alpha, iterations = _solve_alpha(family, tail, n, power, es, settings)
        _check_solution("alpha", alpha, 0.0, 1.0, open_low=True)
        achieved = _power(family, tail, alpha, n, es, settings)

    else:  # target is AnalysisTarget.EFFECT_SIZE
        family.noncentrality(0.0, n)
        es, iterations = _solve_effect(family, tail, alpha, n, power, settings)
        _check_solution("effect_size", es, 0.0, settings.es_cap)
        achieved = _power(family, tail, alpha, n, es, settings)

    logger.debug(
        "%s: solved %s (n=%s, alpha=%.6g, power=%.6g, %s=%.6g) in %d iterations",
        family.describe(), target.value, n, alpha, power, family.effect_name, es, iterations,
    )

    tail_note = "" if family.distribution.symmetric else "F and chi-square tests are one-sided"
    return PowerAnalysisResult(
        family=family,
        target=target,
        tail=tail,
        n=n,
        alpha=alpha,
        power=power,
        effect_size=es,
        achieved_power=achieved,
        n_exact=n_exact,
        iterations=iterations,
        method=f"{family.describe()} power calculation",
        note=tail_note,
    )


def power_analysis(
    family: TestFamily,
    n: float | None = None,
    effect_size: float | None = None,
    alpha: float | None = 0.05,
    power: float | None = None,
    tail: Tail | str = Tail.TWO_SIDED,
    *,
    settings: EngineSettings | None = None,
) -> PowerAnalysisResult:
    """Power calculation with the unknown passed as ``None``.

    Exactly one of ``n``, ``effect_size``, ``alpha``, ``power`` must be
    ``None``; that parameter is solved for given the others.

    Examples
    --------
    >>> r = power_analysis(ANCOVA(k=3, q=2, p=1), effect_size=0.25, power=0.95)
    >>> r.n
    251
    >>> r = power_analysis(OneSampleTTest(), n=50, effect_size=0.5)
    >>> round(r.power, 4)
    0.9339
    """
    target = _infer_target(n=n, effect_size=effect_size, alpha=alpha, power=power)
    request = PowerAnalysisRequest(
        family=family,
        target=target,
        tail=tail,
        n=n,
        alpha=alpha,
        power=power,
        effect_size=effect_size,
    )
    return analyze(request, settings)
