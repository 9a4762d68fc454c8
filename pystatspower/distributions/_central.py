"""Central F, t, chi-square and normal distribution functions.

The CDFs are written in terms of the regularized incomplete beta (F, t) and
gamma (chi-square) functions from ``scipy.special``; those switch between
series and continued-fraction evaluation by parameter regime. Quantiles are
closed-form inverses of the same functions. For each quantity the form that
avoids subtracting from 1 is used, so upper-tail probabilities as small as
the significance levels met in practice keep full relative precision.
"""

from __future__ import annotations

import math

from scipy import special

from pystatspower.distributions._common import (
    Distribution,
    _as_distribution,
    _check_df,
    _check_prob,
    _check_x,
    _clip_prob,
)


# ---------------------------------------------------------------------------
# CDF / survival function
# ---------------------------------------------------------------------------

def _f_cdf(x: float, d1: float, d2: float, upper: bool) -> float:
    if math.isinf(x):
        return 0.0 if upper else 1.0
    if upper:
        return float(special.betainc(d2 / 2.0, d1 / 2.0, d2 / (d2 + d1 * x)))
    return float(special.betainc(d1 / 2.0, d2 / 2.0, d1 * x / (d1 * x + d2)))


def _t_lower_tail(x: float, v: float) -> float:
    """P(T <= -|x|) for Student's t with *v* df."""
    return 0.5 * float(special.betainc(v / 2.0, 0.5, v / (v + x * x)))


def _t_cdf(x: float, v: float, upper: bool) -> float:
    if upper:
        x = -x
    if math.isinf(x):
        return 0.0 if x < 0 else 1.0
    tail = _t_lower_tail(x, v)
    return tail if x < 0.0 else 1.0 - tail


def _chisq_cdf(x: float, k: float, upper: bool) -> float:
    if upper:
        return float(special.gammaincc(k / 2.0, x / 2.0))
    return float(special.gammainc(k / 2.0, x / 2.0))


def _z_cdf(x: float, upper: bool) -> float:
    return float(special.ndtr(-x if upper else x))


def _central(dist: Distribution, x: float, df: tuple[float, ...], upper: bool) -> float:
    if dist is Distribution.F:
        return _f_cdf(x, df[0], df[1], upper)
    if dist is Distribution.T:
        return _t_cdf(x, df[0], upper)
    if dist is Distribution.CHISQ:
        return _chisq_cdf(x, df[0], upper)
    return _z_cdf(x, upper)


def cdf_central(dist: Distribution | str, x: float, *df: float) -> float:
    """Cumulative distribution function of a central distribution.

    Parameters
    ----------
    dist : Distribution or str
        ``'F'``, ``'t'``, ``'chisq'`` or ``'z'``.
    x : float
        Point at which to evaluate. Must lie in the support
        (``x >= 0`` for F and chi-square).
    *df : float
        Degrees of freedom: two for F, one for t and chi-square, none for z.

    Returns
    -------
    float
        ``P(X <= x)`` in [0, 1].

    Raises
    ------
    DomainError
        For non-positive df, a wrong number of df, or ``x`` outside the support.
    """
    d = _as_distribution(dist)
    df = _check_df(d, df)
    x = _check_x(d, x)
    return _clip_prob(_central(d, x, df, upper=False))


def sf_central(dist: Distribution | str, x: float, *df: float) -> float:
    """Survival function ``P(X > x)`` of a central distribution.

    Computed directly (not as ``1 - cdf``) so small upper tails are exact.
    """
    d = _as_distribution(dist)
    df = _check_df(d, df)
    x = _check_x(d, x)
    return _clip_prob(_central(d, x, df, upper=True))


# ---------------------------------------------------------------------------
# Quantiles
# ---------------------------------------------------------------------------

def _f_from_lower(p: float, d1: float, d2: float) -> float:
    """F quantile from the lower-tail probability *p* (best for p <= 0.5)."""
    if p == 0.0:
        return 0.0
    z = float(special.betaincinv(d1 / 2.0, d2 / 2.0, p))
    if z >= 1.0:
        return math.inf
    return d2 * z / (d1 * (1.0 - z))


def _f_from_upper(q: float, d1: float, d2: float) -> float:
    """F quantile from the upper-tail probability *q* (best for q <= 0.5)."""
    if q == 0.0:
        return math.inf
    y = float(special.betaincinv(d2 / 2.0, d1 / 2.0, q))
    if y <= 0.0:
        return math.inf
    return d2 * (1.0 - y) / (d1 * y)


def _t_from_lower(p: float, v: float) -> float:
    """t quantile for a lower-tail probability p <= 0.5 (result <= 0)."""
    if p == 0.0:
        return -math.inf
    if p == 0.5:
        return 0.0
    two_p = 2.0 * p
    if two_p <= 0.5:
        # x = v / (v + t^2) is small here; solve for it directly
        x = float(special.betaincinv(v / 2.0, 0.5, two_p))
        if x <= 0.0:
            return -math.inf
        t2 = v * (1.0 - x) / x
    else:
        # x is close to 1; solve for 1 - x to avoid cancellation
        w = float(special.betaincinv(0.5, v / 2.0, 1.0 - two_p))
        t2 = v * w / (1.0 - w)
    return -math.sqrt(t2)


def _central_quantile(dist: Distribution, p: float, df: tuple[float, ...], upper: bool) -> float:
    # Reduce to a probability in the tail where the inverse is well conditioned.
    if dist is Distribution.F:
        d1, d2 = df
        if upper:
            return _f_from_upper(p, d1, d2) if p <= 0.5 else _f_from_lower(1.0 - p, d1, d2)
        return _f_from_lower(p, d1, d2) if p <= 0.5 else _f_from_upper(1.0 - p, d1, d2)

    if dist is Distribution.CHISQ:
        a = df[0] / 2.0
        if upper:
            return 2.0 * float(special.gammainccinv(a, p))
        return 2.0 * float(special.gammaincinv(a, p))

    if dist is Distribution.T:
        # symmetry: isf(q) = -quantile(q)
        v = df[0]
        x = _t_from_lower(p, v) if p <= 0.5 else -_t_from_lower(1.0 - p, v)
        return -x if upper else x

    z = float(special.ndtri(p))
    return -z if upper else z


def quantile_central(dist: Distribution | str, p: float, *df: float) -> float:
    """Quantile (inverse CDF) of a central distribution.

    Parameters
    ----------
    dist : Distribution or str
        ``'F'``, ``'t'``, ``'chisq'`` or ``'z'``.
    p : float
        Lower-tail probability in [0, 1].
    *df : float
        Degrees of freedom, as for :func:`cdf_central`.

    Returns
    -------
    float
        ``x`` with ``cdf_central(dist, x, *df) == p``. ``p = 0`` and ``p = 1``
        map to the ends of the support.
    """
    d = _as_distribution(dist)
    df = _check_df(d, df)
    p = _check_prob(p)
    return _central_quantile(d, p, df, upper=False)


def isf_central(dist: Distribution | str, q: float, *df: float) -> float:
    """Inverse survival function: ``x`` with ``sf_central(dist, x, *df) == q``.

    This is the critical value of a test at upper-tail level ``q``.
    """
    d = _as_distribution(dist)
    df = _check_df(d, df)
    q = _check_prob(q, "q")
    return _central_quantile(d, q, df, upper=True)
