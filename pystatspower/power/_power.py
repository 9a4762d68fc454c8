"""The power function: achieved power at fixed n, alpha and effect size."""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray

from pystatspower._config import DEFAULT_SETTINGS, EngineSettings
from pystatspower.distributions import cdf_noncentral, isf_central, sf_noncentral
from pystatspower.exceptions import ValidationError
from pystatspower.power._common import (
    Tail,
    _as_tail,
    _check_alpha,
    _check_effect,
    _check_family,
    _check_n,
)
from pystatspower.power._families import TestFamily


# ---------------------------------------------------------------------------
# Internal power computation (solver hot path, no validation)
# ---------------------------------------------------------------------------

def _power(
    family: TestFamily,
    tail: Tail,
    alpha: float,
    n: float,
    effect_size: float,
    settings: EngineSettings,
) -> float:
    params = family.noncentrality(effect_size, n)
    if math.isinf(params.ncp):
        # noncentrality overflowed: the statistic lies beyond any critical value
        return 1.0
    dist = params.distribution
    two_sided = tail is Tail.TWO_SIDED and dist.symmetric
    level = alpha / 2.0 if two_sided else alpha

    crit = isf_central(dist, level, *params.df)
    kw = dict(ncp=params.ncp, tol=settings.series_tol, max_terms=settings.max_series_terms)
    pwr = sf_noncentral(dist, crit, *params.df, **kw)
    if two_sided:
        # lower rejection region: P(T < -crit)
        pwr += cdf_noncentral(dist, -crit, *params.df, **kw)
    return min(1.0, pwr)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def achieved_power(
    family: TestFamily,
    alpha: float,
    n: float,
    effect_size: float,
    tail: Tail | str = Tail.TWO_SIDED,
    *,
    settings: EngineSettings | None = None,
) -> float:
    """Power of a test at the given significance level, sample size and effect.

    The critical value comes from the central distribution at level
    ``alpha`` (``alpha / 2`` per tail for two-sided t and z tests); power is
    the probability under the noncentral distribution of landing beyond it.
    F and chi-square tests are one-sided by construction and ignore ``tail``.

    Parameters
    ----------
    family : TestFamily
        The test design, e.g. ``ANCOVA(k=3, q=2, p=1)``.
    alpha : float
        Significance level in (0, 1).
    n : float
        Total sample size (>= 2; fractional values are allowed).
    effect_size : float
        Cohen's d, w or f depending on the family (>= 0).
    tail : Tail or str
        ``'one.sided'`` or ``'two.sided'`` (default).
    settings : EngineSettings, optional
        Series tolerances; ``DEFAULT_SETTINGS`` if omitted.

    Returns
    -------
    float
        Power in [0, 1]. Non-decreasing in ``n``, ``alpha`` and
        ``effect_size``; equal to ``alpha`` when ``effect_size == 0``.

    Examples
    --------
    >>> round(achieved_power(ANCOVA(k=3, q=2, p=1), 0.05, 100, 0.25), 4)
    0.5884
    """
    family = _check_family(family)
    return _power(
        family,
        _as_tail(tail),
        _check_alpha(alpha),
        _check_n(n),
        _check_effect(effect_size, family.effect_name),
        settings or DEFAULT_SETTINGS,
    )


_CURVE_AXES = ("n", "alpha", "effect_size")


def power_curve(
    family: TestFamily,
    over: str,
    values: Iterable[float],
    *,
    n: float | None = None,
    alpha: float | None = None,
    effect_size: float | None = None,
    tail: Tail | str = Tail.TWO_SIDED,
    settings: EngineSettings | None = None,
) -> NDArray[np.floating]:
    """Sample achieved power along one axis, e.g. for plotting.

    Parameters
    ----------
    family : TestFamily
        The test design.
    over : str
        The varying quantity: ``'n'``, ``'alpha'`` or ``'effect_size'``.
    values : iterable of float
        Points at which to evaluate power.
    n, alpha, effect_size : float
        The two quantities held fixed (the one named by ``over`` is ignored).
    tail : Tail or str
        Sidedness for t and z tests.

    Returns
    -------
    numpy.ndarray
        Power at each of ``values``.
    """
    if over not in _CURVE_AXES:
        raise ValidationError(f"over must be one of {_CURVE_AXES}, got {over!r}", field="over")
    fixed = {"n": n, "alpha": alpha, "effect_size": effect_size}
    fixed.pop(over)
    xs = np.asarray(list(values), dtype=np.float64)
    out = np.empty_like(xs)
    for i, x in enumerate(xs):
        out[i] = achieved_power(family, tail=tail, settings=settings, **fixed, **{over: float(x)})
    return out
