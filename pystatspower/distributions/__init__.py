"""
Central and noncentral distribution functions for power analysis.

Central CDFs and quantiles of the F, t, chi-square and normal distributions
through the regularized incomplete beta / gamma functions, and noncentral
CDFs as Poisson-weighted mixtures of those central terms.

Validates against: scipy.stats f, t, chi2, norm, ncf, nct, ncx2.
"""

from pystatspower.distributions._common import Distribution
from pystatspower.distributions._central import (
    cdf_central,
    sf_central,
    quantile_central,
    isf_central,
)
from pystatspower.distributions._noncentral import cdf_noncentral, sf_noncentral

__all__ = [
    "Distribution",
    "cdf_central",
    "sf_central",
    "quantile_central",
    "isf_central",
    "cdf_noncentral",
    "sf_noncentral",
]
