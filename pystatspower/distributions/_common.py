"""Shared pieces of the distribution layer: the distribution tag, argument
checks and the Poisson mixture window used by the noncentral series."""

from __future__ import annotations

import logging
import math
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from pystatspower.exceptions import DomainError

logger = logging.getLogger(__name__)


class Distribution(str, Enum):
    """Test-statistic distributions known to the engine."""

    F = "F"
    T = "t"
    CHISQ = "chisq"
    Z = "z"

    @property
    def n_df(self) -> int:
        """Number of degrees-of-freedom parameters."""
        return _N_DF[self]

    @property
    def symmetric(self) -> bool:
        """True when the central distribution is symmetric about zero."""
        return self in (Distribution.T, Distribution.Z)

    @property
    def lower_support(self) -> float:
        return -math.inf if self.symmetric else 0.0


_N_DF = {
    Distribution.F: 2,
    Distribution.T: 1,
    Distribution.CHISQ: 1,
    Distribution.Z: 0,
}

_ALIASES = {
    "f": Distribution.F,
    "t": Distribution.T,
    "chisq": Distribution.CHISQ,
    "chi2": Distribution.CHISQ,
    "z": Distribution.Z,
    "norm": Distribution.Z,
}


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------

def _as_distribution(dist: Distribution | str) -> Distribution:
    if isinstance(dist, Distribution):
        return dist
    try:
        return _ALIASES[str(dist).lower()]
    except KeyError:
        raise DomainError(
            f"Unknown distribution {dist!r}; expected one of {sorted(_ALIASES)}"
        ) from None


def _check_df(dist: Distribution, df: tuple[float, ...]) -> tuple[float, ...]:
    if len(df) != dist.n_df:
        raise DomainError(
            f"{dist.value} distribution takes {dist.n_df} degrees of freedom, got {len(df)}"
        )
    out = tuple(float(v) for v in df)
    for i, v in enumerate(out, start=1):
        if not (math.isfinite(v) and v > 0.0):
            raise DomainError(f"df{i} must be positive and finite, got {v}")
    return out


def _check_ncp(dist: Distribution, ncp: float) -> float:
    ncp = float(ncp)
    if not math.isfinite(ncp):
        raise DomainError(f"noncentrality must be finite, got {ncp}")
    # t and z take a signed location shift; F and chisq take lambda >= 0
    if ncp < 0.0 and not dist.symmetric:
        raise DomainError(f"noncentrality of the {dist.value} distribution must be >= 0, got {ncp}")
    return ncp


def _check_x(dist: Distribution, x: float) -> float:
    x = float(x)
    if math.isnan(x):
        raise DomainError("x must not be NaN")
    if x < dist.lower_support:
        raise DomainError(f"x = {x} is outside the support of the {dist.value} distribution")
    return x


def _check_prob(p: float, name: str = "p") -> float:
    p = float(p)
    if not (0.0 <= p <= 1.0):
        raise DomainError(f"{name} must be in [0, 1], got {p}")
    return p


def _clip_prob(p: float) -> float:
    return min(1.0, max(0.0, float(p)))


# ---------------------------------------------------------------------------
# Poisson mixture window
# ---------------------------------------------------------------------------

# Largest Poisson mean whose mixture indices are exact float integers
_MAX_WINDOW_MU = 2.0 ** 52


def _geometric_tail(edge: float, ratio: float) -> float:
    """Bound sum(edge * ratio**i, i >= 1) for a tail whose term ratios
    never exceed *ratio*."""
    if ratio >= 1.0:
        return math.inf
    return edge * ratio / (1.0 - ratio)


def _relative_log_weights(mu: float, mode: int, lo: int, hi: int) -> NDArray[np.floating]:
    """log(w_j / w_mode) for j in [lo, hi], built by ratio recurrences.

    Forward: w_{j+1} = w_j * mu / (j + 1). Backward: w_{j-1} = w_j * j / mu.
    Every increment is O(1) so the result stays accurate for huge mu, where
    ``j log(mu) - mu - lgamma(j + 1)`` would cancel catastrophically.
    """
    fwd = np.cumsum(np.log(mu / np.arange(mode + 1, hi + 1, dtype=np.float64)))
    bwd = np.cumsum(np.log(np.arange(mode, lo, -1, dtype=np.float64) / mu))
    return np.concatenate((bwd[::-1], [0.0], fwd))


def _poisson_window(
    mu: float,
    tol: float,
    max_terms: int,
) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
    """Indices and Poisson(mu) probabilities covering all but *tol* of the mass.

    The window starts around the mode and doubles until the geometric bound
    on the excluded mass drops below *tol*, or until it holds *max_terms*
    terms. Probabilities are normalized over the window.

    Returns
    -------
    tuple
        ``(j, pmf)`` as float arrays of equal length.
    """
    if mu == 0.0:
        return np.zeros(1), np.ones(1)
    if not mu <= _MAX_WINDOW_MU:
        raise DomainError(f"Poisson mean {mu:.6g} exceeds the summable range (<= {_MAX_WINDOW_MU:.6g})")

    mode = int(math.floor(mu))
    half = max(32, int(math.ceil(10.0 * math.sqrt(mu))))

    while True:
        lo = max(0, mode - half)
        hi = mode + half
        capped = hi - lo + 1 >= max_terms
        if capped:
            lo = max(0, mode - max_terms // 2)
            hi = lo + max_terms - 1

        w = np.exp(_relative_log_weights(mu, mode, lo, hi))
        total = float(w.sum())

        excluded = _geometric_tail(float(w[-1]), mu / (hi + 1.0))
        if lo > 0:
            excluded += _geometric_tail(float(w[0]), lo / mu)
        excluded /= total

        if excluded < tol or capped:
            if excluded >= tol:
                logger.debug(
                    "Mixture series truncated at %d terms (mu=%.6g, excluded mass <= %.3g)",
                    hi - lo + 1, mu, excluded,
                )
            j = np.arange(lo, hi + 1, dtype=np.float64)
            return j, w / total

        half *= 2
