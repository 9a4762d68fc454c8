"""
PyStatsPower: power analysis for parametric statistical tests.

Compute one missing quantity among sample size, significance level, power
and effect size for t, z, chi-square and F test designs, given the other
three. The engine is a set of pure functions: central and noncentral
distribution functions, a noncentrality model per test design, the power
function and a bracketing root solver that inverts it.

Usage:
    from pystatspower import power, distributions
    from pystatspower.power import ANCOVA, power_analysis
"""

__version__ = "0.1.0"
__author__ = "Hai-Shuo"
__email__ = "contact@sgcx.org"

from pystatspower import distributions
from pystatspower import power
from pystatspower import exceptions
from pystatspower._config import DEFAULT_SETTINGS, EngineSettings, settings_from_env
from pystatspower.power import analyze, power_analysis, achieved_power

__all__ = [
    "__version__",
    "distributions",
    "power",
    "exceptions",
    "DEFAULT_SETTINGS",
    "EngineSettings",
    "settings_from_env",
    "analyze",
    "power_analysis",
    "achieved_power",
]
