"""Noncentral F, t, chi-square and normal distribution functions.

Noncentral F and chi-square are Poisson(lambda / 2) mixtures of central
incomplete beta / gamma terms:

.. math::
    P(F \\le x) = \\sum_j \\mathrm{Pois}(j; \\lambda/2)\\, I_z(d_1/2 + j, d_2/2),
    \\quad z = \\frac{d_1 x}{d_1 x + d_2}

Noncentral t uses the mixture of Lenth (1989, AS 243): for ``t >= 0``

.. math::
    P(T \\le t) = \\Phi(-\\delta) + \\tfrac12 \\sum_j
        \\left[p_j I_x(j + \\tfrac12, \\tfrac{v}{2}) + q_j I_x(j + 1, \\tfrac{v}{2})\\right],
    \\quad x = \\frac{t^2}{t^2 + v}

with ``p_j = Pois(j; delta^2 / 2)`` and
``q_j = p_j * delta / sqrt(2) * Gamma(j + 1) / Gamma(j + 3/2)``.

The series run over a window of Poisson indices chosen by
``_poisson_window``: the truncation error is below ``tol`` (absolute) unless
the ``max_terms`` cap is reached first.

When the Poisson mean exceeds ``_MAX_WINDOW_MU`` the noncentral part is
replaced by its mean (its relative spread is below 1e-7): F and t reduce to
a central chi-square tail in the denominator, chi-square to its normal limit.
"""

from __future__ import annotations

import math

import numpy as np
from scipy import special

from pystatspower._config import DEFAULT_SETTINGS
from pystatspower.distributions._central import _central
from pystatspower.distributions._common import (
    Distribution,
    _MAX_WINDOW_MU,
    _as_distribution,
    _check_df,
    _check_ncp,
    _check_x,
    _clip_prob,
    _poisson_window,
)


# ---------------------------------------------------------------------------
# Mixture series
# ---------------------------------------------------------------------------

def _ncf(x: float, d1: float, d2: float, ncp: float, upper: bool, tol: float, max_terms: int) -> float:
    if x == 0.0 or math.isinf(x):
        return float(upper) if x == 0.0 else float(not upper)
    if ncp / 2.0 > _MAX_WINDOW_MU:
        # numerator chi-square at its mean d1 + ncp: F <= x iff chi2(d2) >= c
        c = ((d1 + ncp) / d1) * (d2 / x)
        return float(special.gammainc(d2 / 2.0, c / 2.0) if upper else special.gammaincc(d2 / 2.0, c / 2.0))
    j, w = _poisson_window(ncp / 2.0, tol, max_terms)
    if upper:
        terms = special.betainc(d2 / 2.0, d1 / 2.0 + j, d2 / (d1 * x + d2))
    else:
        terms = special.betainc(d1 / 2.0 + j, d2 / 2.0, d1 * x / (d1 * x + d2))
    return float(np.dot(w, terms))


def _ncchisq(x: float, k: float, ncp: float, upper: bool, tol: float, max_terms: int) -> float:
    if ncp / 2.0 > _MAX_WINDOW_MU:
        # normal limit N(k + ncp, 2 (k + 2 ncp))
        z = (x - k - ncp) / (math.sqrt(ncp) * math.sqrt(4.0 + 2.0 * k / ncp))
        return float(special.ndtr(-z) if upper else special.ndtr(z))
    j, w = _poisson_window(ncp / 2.0, tol, max_terms)
    if upper:
        terms = special.gammaincc(k / 2.0 + j, x / 2.0)
    else:
        terms = special.gammainc(k / 2.0 + j, x / 2.0)
    return float(np.dot(w, terms))


def _nct_lower(t: float, v: float, delta: float, tol: float, max_terms: int) -> float:
    """P(T <= t) for t >= 0."""
    if math.isinf(t):
        return 1.0
    if delta * delta / 2.0 > _MAX_WINDOW_MU:
        return _nct_lower_limit(t, v, delta)
    j, p = _poisson_window(delta * delta / 2.0, tol, max_terms)
    q = (delta / math.sqrt(2.0)) * p / special.poch(j + 1.0, 0.5)
    x = t * t / (t * t + v)
    s = np.dot(p, special.betainc(j + 0.5, v / 2.0, x)) + np.dot(q, special.betainc(j + 1.0, v / 2.0, x))
    return float(special.ndtr(-delta)) + 0.5 * float(s)


def _nct_lower_limit(t: float, v: float, delta: float) -> float:
    """P(T <= t) for t >= 0 with Z + delta replaced by delta."""
    if delta < 0.0:
        return 1.0
    if t == 0.0:
        return float(special.ndtr(-delta))
    r = delta / t
    return float(special.gammaincc(v / 2.0, v / 2.0 * r * r))


def _nct(t: float, v: float, delta: float, upper: bool, tol: float, max_terms: int) -> float:
    # Reflection: P(T <= t; delta) = 1 - P(T <= -t; -delta)
    if t >= 0.0:
        lower = _nct_lower(t, v, delta, tol, max_terms)
        return 1.0 - lower if upper else lower
    reflected = _nct_lower(-t, v, -delta, tol, max_terms)
    return reflected if upper else 1.0 - reflected


def _noncentral(
    dist: Distribution,
    x: float,
    df: tuple[float, ...],
    ncp: float,
    upper: bool,
    tol: float,
    max_terms: int,
) -> float:
    if ncp == 0.0:
        return _central(dist, x, df, upper)
    if dist is Distribution.F:
        return _ncf(x, df[0], df[1], ncp, upper, tol, max_terms)
    if dist is Distribution.T:
        return _nct(x, df[0], ncp, upper, tol, max_terms)
    if dist is Distribution.CHISQ:
        return _ncchisq(x, df[0], ncp, upper, tol, max_terms)
    return float(special.ndtr(ncp - x if upper else x - ncp))


def _resolve(
    dist: Distribution | str,
    x: float,
    df: tuple[float, ...],
    ncp: float,
    tol: float | None,
    max_terms: int | None,
) -> tuple[Distribution, float, tuple[float, ...], float, float, int]:
    d = _as_distribution(dist)
    df = _check_df(d, df)
    x = _check_x(d, x)
    ncp = _check_ncp(d, ncp)
    tol = DEFAULT_SETTINGS.series_tol if tol is None else tol
    max_terms = DEFAULT_SETTINGS.max_series_terms if max_terms is None else max_terms
    return d, x, df, ncp, tol, max_terms


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def cdf_noncentral(
    dist: Distribution | str,
    x: float,
    *df: float,
    ncp: float,
    tol: float | None = None,
    max_terms: int | None = None,
) -> float:
    """Cumulative distribution function of a noncentral distribution.

    Parameters
    ----------
    dist : Distribution or str
        ``'F'``, ``'t'``, ``'chisq'`` or ``'z'``.
    x : float
        Evaluation point, inside the support.
    *df : float
        Degrees of freedom (two for F, one for t and chi-square, none for z).
    ncp : float
        Noncentrality: ``lambda >= 0`` for F and chi-square, a signed
        ``delta`` for t, the mean shift for z.
    tol : float, optional
        Absolute truncation tolerance of the mixture series
        (default ``DEFAULT_SETTINGS.series_tol``).
    max_terms : int, optional
        Cap on mixture terms (default ``DEFAULT_SETTINGS.max_series_terms``).

    Returns
    -------
    float
        ``P(X <= x)`` clipped to [0, 1].

    Raises
    ------
    DomainError
        For invalid df, a negative ``lambda``, or ``x`` outside the support.
    """
    d, x, df, ncp, tol, max_terms = _resolve(dist, x, df, ncp, tol, max_terms)
    return _clip_prob(_noncentral(d, x, df, ncp, False, tol, max_terms))


def sf_noncentral(
    dist: Distribution | str,
    x: float,
    *df: float,
    ncp: float,
    tol: float | None = None,
    max_terms: int | None = None,
) -> float:
    """Survival function ``P(X > x)`` of a noncentral distribution.

    Same arguments as :func:`cdf_noncentral`. For F and chi-square the
    series is summed over complementary incomplete beta / gamma terms, so
    the result does not lose precision when it is small.
    """
    d, x, df, ncp, tol, max_terms = _resolve(dist, x, df, ncp, tol, max_terms)
    return _clip_prob(_noncentral(d, x, df, ncp, True, tol, max_terms))
