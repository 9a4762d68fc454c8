"""
Power analysis for parametric tests.

Solve for any one of sample size, significance level, power or effect size
given the other three, for t, z, chi-square and F test designs.

Validates against: G*Power 3, scipy.stats ncf / nct / ncx2.
"""

from pystatspower.power._common import (
    AnalysisTarget,
    PowerAnalysisRequest,
    PowerAnalysisResult,
    Tail,
)
from pystatspower.power._families import (
    FAMILIES,
    ANCOVA,
    BetweenRepeatedANOVA,
    DeviationFromZeroMultipleRegression,
    GoodnessOfFitChisqTest,
    IncreaseMultipleRegression,
    IndependentSamplesTTest,
    NoncentralParams,
    OneSampleTTest,
    OneSampleZTest,
    OneWayANOVA,
    TestFamily,
    TwoWayANOVA,
    WithinBetweenRepeatedANOVA,
    WithinRepeatedANOVA,
    noncentrality,
)
from pystatspower.power._power import achieved_power, power_curve
from pystatspower.power._solver import SolveResult, SolverBracket, solve
from pystatspower.power._analysis import analyze, power_analysis

__all__ = [
    "AnalysisTarget",
    "PowerAnalysisRequest",
    "PowerAnalysisResult",
    "Tail",
    "FAMILIES",
    "TestFamily",
    "NoncentralParams",
    "noncentrality",
    "OneSampleTTest",
    "IndependentSamplesTTest",
    "OneSampleZTest",
    "GoodnessOfFitChisqTest",
    "DeviationFromZeroMultipleRegression",
    "IncreaseMultipleRegression",
    "ANCOVA",
    "OneWayANOVA",
    "TwoWayANOVA",
    "BetweenRepeatedANOVA",
    "WithinRepeatedANOVA",
    "WithinBetweenRepeatedANOVA",
    "achieved_power",
    "power_curve",
    "SolverBracket",
    "SolveResult",
    "solve",
    "analyze",
    "power_analysis",
]
