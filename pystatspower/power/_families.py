"""Test families and their noncentrality models.

Each family is a frozen dataclass holding the structural parameters of one
design. It knows which test-statistic distribution it uses and how the
effect size and total sample size ``n`` map to the noncentrality parameter
and degrees of freedom. The set of families is closed: ``TestFamily`` is the
union of the variants below and ``FAMILIES`` maps host-facing names to them.

Formulas follow the G*Power 3 paper (Faul et al., 2007,
https://doi.org/10.3758/BF03193146); effect sizes are Cohen's d (t, z),
w (chi-square) and f (F).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import ClassVar, Union

from pystatspower.distributions import Distribution
from pystatspower.exceptions import DomainError, InvalidStructure


@dataclass(frozen=True)
class NoncentralParams:
    """Distribution parameters of the test statistic under the alternative."""

    distribution: Distribution
    ncp: float
    df1: float | None = None
    df2: float | None = None

    @property
    def df(self) -> tuple[float, ...]:
        """Degrees of freedom in positional order."""
        return tuple(d for d in (self.df1, self.df2) if d is not None)


# ---------------------------------------------------------------------------
# Structural parameter checks
# ---------------------------------------------------------------------------

def _check_count(name: str, value: int, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidStructure(f"{name} must be an integer, got {value!r}", field=name)
    if value < minimum:
        raise InvalidStructure(f"{name} must be >= {minimum}, got {value}", field=name)


def _check_correlation(rho: float) -> None:
    if not (math.isfinite(rho) and -1.0 < rho < 1.0):
        raise InvalidStructure(f"rho must be in (-1, 1), got {rho}", field="rho")


def _check_epsilon(epsilon: float, m: int) -> None:
    lower = 1.0 / (m - 1)
    if not (math.isfinite(epsilon) and lower <= epsilon <= 1.0):
        raise InvalidStructure(
            f"epsilon must be in [1 / (m - 1), 1] = [{lower:.6g}, 1], got {epsilon}",
            field="epsilon",
        )


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class _Family(ABC):
    """Shared behaviour of all test families (not a public extension point).

    Every variant implements ``_params``.
    """

    name: ClassVar[str]
    label: ClassVar[str]
    distribution: ClassVar[Distribution]
    effect_name: ClassVar[str] = "f"

    @abstractmethod
    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        """Distribution parameters without the df checks."""

    def min_n(self) -> float:
        """Smallest total sample size at which every df is at least 1."""
        return 2.0

    def structure(self) -> dict[str, int | float]:
        """Structural parameters as a plain mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def noncentrality(self, effect_size: float, n: float) -> NoncentralParams:
        """Noncentrality parameter and degrees of freedom for this design.

        Parameters
        ----------
        effect_size : float
            Standardized effect size (>= 0).
        n : float
            Total sample size; may be fractional while solving for n.

        Raises
        ------
        DomainError
            If ``effect_size`` is negative or not finite.
        InvalidStructure
            If the degrees of freedom are not positive at this ``n``.
        """
        if not (math.isfinite(effect_size) and effect_size >= 0.0):
            raise DomainError(f"{self.effect_name} must be finite and >= 0, got {effect_size}")
        params = self._params(effect_size, n)
        for i, d in enumerate(params.df, start=1):
            if not d > 0.0:
                raise InvalidStructure(
                    f"{self.label}: df{i} = {d:.6g} is not positive at n = {n:.6g} "
                    f"(need n >= {self.min_n():.6g})",
                    field="n",
                )
        return params

    def describe(self) -> str:
        parts = ", ".join(f"{k} = {v}" for k, v in self.structure().items())
        return f"{self.label} ({parts})" if parts else self.label


def noncentrality(family: TestFamily, effect_size: float, n: float) -> NoncentralParams:
    """Functional form of :meth:`_Family.noncentrality`."""
    return family.noncentrality(effect_size, n)


# ---------------------------------------------------------------------------
# t and z tests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OneSampleTTest(_Family):
    """Means: difference from constant (one sample case)."""

    name: ClassVar[str] = "oneSampleTTest"
    label: ClassVar[str] = "One-sample t test"
    distribution: ClassVar[Distribution] = Distribution.T
    effect_name: ClassVar[str] = "d"

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(self.distribution, math.sqrt(n) * effect_size, n - 1.0)


@dataclass(frozen=True)
class IndependentSamplesTTest(_Family):
    """Means: difference between two independent means, equal group sizes.

    ``n`` is the total over both groups, so ``delta = d * sqrt(n1 n2 / n)``
    reduces to ``d * sqrt(n / 4)``.
    """

    name: ClassVar[str] = "independentSamplesTTest"
    label: ClassVar[str] = "Two-sample t test"
    distribution: ClassVar[Distribution] = Distribution.T
    effect_name: ClassVar[str] = "d"

    def min_n(self) -> float:
        return 3.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(self.distribution, math.sqrt(n / 4.0) * effect_size, n - 2.0)


@dataclass(frozen=True)
class OneSampleZTest(_Family):
    """Means: difference from constant with known variance."""

    name: ClassVar[str] = "oneSampleZTest"
    label: ClassVar[str] = "One-sample z test"
    distribution: ClassVar[Distribution] = Distribution.Z
    effect_name: ClassVar[str] = "d"

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(self.distribution, math.sqrt(n) * effect_size)


# ---------------------------------------------------------------------------
# chi-square tests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GoodnessOfFitChisqTest(_Family):
    """Goodness-of-fit tests: contingency tables."""

    df: int

    name: ClassVar[str] = "goodnessOfFitChisqTest"
    label: ClassVar[str] = "Chi-square goodness-of-fit test"
    distribution: ClassVar[Distribution] = Distribution.CHISQ
    effect_name: ClassVar[str] = "w"

    def __post_init__(self) -> None:
        _check_count("df", self.df, 1)

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(self.distribution, effect_size * effect_size * n, float(self.df))


# ---------------------------------------------------------------------------
# F tests: regression
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeviationFromZeroMultipleRegression(_Family):
    """Linear multiple regression, fixed model: R^2 deviation from zero."""

    n_predictors: int

    name: ClassVar[str] = "deviationFromZeroMultipleRegression"
    label: ClassVar[str] = "Multiple regression, R^2 deviation from zero"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("n_predictors", self.n_predictors, 1)

    def min_n(self) -> float:
        return self.n_predictors + 2.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        p = float(self.n_predictors)
        return NoncentralParams(self.distribution, effect_size * effect_size * n, p, n - p - 1.0)


@dataclass(frozen=True)
class IncreaseMultipleRegression(_Family):
    """Linear multiple regression, fixed model: R^2 increase.

    ``n_predictors`` is the total number of predictors, ``q`` the number of
    tested predictors among them.
    """

    n_predictors: int
    q: int

    name: ClassVar[str] = "increaseMultipleRegression"
    label: ClassVar[str] = "Multiple regression, R^2 increase"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("n_predictors", self.n_predictors, 1)
        _check_count("q", self.q, 1)
        if self.q > self.n_predictors:
            raise InvalidStructure(
                f"q ({self.q}) cannot exceed n_predictors ({self.n_predictors})", field="q",
            )

    def min_n(self) -> float:
        return self.n_predictors + 2.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(
            self.distribution, effect_size * effect_size * n, float(self.q), n - self.n_predictors - 1.0,
        )


# ---------------------------------------------------------------------------
# F tests: ANOVA / ANCOVA
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ANCOVA(_Family):
    """ANCOVA: fixed effects, main effects and interactions.

    ``k`` is the number of groups (cells; A*B*C in a factorial design),
    ``q`` the numerator df of the tested effect, ``p`` the number of
    covariates. Each covariate costs one error df:
    ``df1 = q``, ``df2 = n - k - p``, ``lambda = f^2 n``.
    """

    k: int
    q: int
    p: int = 0

    name: ClassVar[str] = "ANCOVA"
    label: ClassVar[str] = "ANCOVA"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("k", self.k, 2)
        _check_count("q", self.q, 1)
        _check_count("p", self.p, 0)
        if self.q > self.k - 1:
            raise InvalidStructure(f"q ({self.q}) cannot exceed k - 1 ({self.k - 1})", field="q")

    def min_n(self) -> float:
        return self.k + self.p + 1.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(
            self.distribution, effect_size * effect_size * n, float(self.q), n - self.k - self.p,
        )


@dataclass(frozen=True)
class OneWayANOVA(_Family):
    """ANOVA: fixed effects, omnibus, one-way."""

    k: int

    name: ClassVar[str] = "oneWayANOVA"
    label: ClassVar[str] = "One-way ANOVA"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("k", self.k, 2)

    def min_n(self) -> float:
        return self.k + 1.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(self.distribution, effect_size * effect_size * n, self.k - 1.0, n - self.k)


@dataclass(frozen=True)
class TwoWayANOVA(_Family):
    """ANOVA: fixed effects, special, main effects and interactions.

    ``k`` is the total number of cells, ``q`` the numerator df of the
    tested effect.
    """

    k: int
    q: int

    name: ClassVar[str] = "twoWayANOVA"
    label: ClassVar[str] = "Factorial ANOVA"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("k", self.k, 2)
        _check_count("q", self.q, 1)
        if self.q > self.k - 1:
            raise InvalidStructure(f"q ({self.q}) cannot exceed k - 1 ({self.k - 1})", field="q")

    def min_n(self) -> float:
        return self.k + 1.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        return NoncentralParams(self.distribution, effect_size * effect_size * n, float(self.q), n - self.k)


# ---------------------------------------------------------------------------
# F tests: repeated measures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BetweenRepeatedANOVA(_Family):
    """Repeated-measures ANOVA, between factors.

    ``k`` levels of the between factor, ``m`` repeated measurements with
    correlation ``rho``; ``lambda = f^2 n m / (1 + (m - 1) rho)``.
    """

    k: int
    m: int
    rho: float

    name: ClassVar[str] = "betweenRepeatedANOVA"
    label: ClassVar[str] = "Repeated-measures ANOVA, between factors"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("k", self.k, 2)
        _check_count("m", self.m, 2)
        _check_correlation(self.rho)
        if 1.0 + (self.m - 1) * self.rho <= 0.0:
            raise InvalidStructure(
                f"rho must be > -1 / (m - 1) = {-1.0 / (self.m - 1):.6g}, got {self.rho}", field="rho",
            )

    def min_n(self) -> float:
        return self.k + 1.0

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        u = self.m / (1.0 + (self.m - 1) * self.rho)
        return NoncentralParams(self.distribution, effect_size * effect_size * u * n, self.k - 1.0, n - self.k)


@dataclass(frozen=True)
class WithinRepeatedANOVA(_Family):
    """Repeated-measures ANOVA, within factors.

    ``epsilon`` is the nonsphericity correction; it scales both df and the
    noncentrality: ``lambda = f^2 n eps m / (1 - rho)``.
    """

    k: int
    m: int
    rho: float
    epsilon: float = 1.0

    name: ClassVar[str] = "withinRepeatedANOVA"
    label: ClassVar[str] = "Repeated-measures ANOVA, within factors"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("k", self.k, 1)
        _check_count("m", self.m, 2)
        _check_correlation(self.rho)
        _check_epsilon(self.epsilon, self.m)

    def min_n(self) -> float:
        return max(2.0, self.k + 1.0 / ((self.m - 1) * self.epsilon))

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        scale = (self.m - 1) * self.epsilon
        u = self.m / (1.0 - self.rho)
        return NoncentralParams(
            self.distribution, effect_size * effect_size * u * n * self.epsilon, scale, (n - self.k) * scale,
        )


@dataclass(frozen=True)
class WithinBetweenRepeatedANOVA(_Family):
    """Repeated-measures ANOVA, within-between interaction."""

    k: int
    m: int
    rho: float
    epsilon: float = 1.0

    name: ClassVar[str] = "withinBetweenRepeatedANOVA"
    label: ClassVar[str] = "Repeated-measures ANOVA, within-between interaction"
    distribution: ClassVar[Distribution] = Distribution.F

    def __post_init__(self) -> None:
        _check_count("k", self.k, 2)
        _check_count("m", self.m, 2)
        _check_correlation(self.rho)
        _check_epsilon(self.epsilon, self.m)

    def min_n(self) -> float:
        return self.k + 1.0 / ((self.m - 1) * self.epsilon)

    def _params(self, effect_size: float, n: float) -> NoncentralParams:
        scale = (self.m - 1) * self.epsilon
        u = self.m / (1.0 - self.rho)
        return NoncentralParams(
            self.distribution,
            effect_size * effect_size * u * n * self.epsilon,
            (self.k - 1) * scale,
            (n - self.k) * scale,
        )


TestFamily = Union[
    OneSampleTTest,
    IndependentSamplesTTest,
    OneSampleZTest,
    GoodnessOfFitChisqTest,
    DeviationFromZeroMultipleRegression,
    IncreaseMultipleRegression,
    ANCOVA,
    OneWayANOVA,
    TwoWayANOVA,
    BetweenRepeatedANOVA,
    WithinRepeatedANOVA,
    WithinBetweenRepeatedANOVA,
]

FAMILIES: dict[str, type[_Family]] = {
    cls.name: cls
    for cls in (
        OneSampleTTest,
        IndependentSamplesTTest,
        OneSampleZTest,
        GoodnessOfFitChisqTest,
        DeviationFromZeroMultipleRegression,
        IncreaseMultipleRegression,
        ANCOVA,
        OneWayANOVA,
        TwoWayANOVA,
        BetweenRepeatedANOVA,
        WithinRepeatedANOVA,
        WithinBetweenRepeatedANOVA,
    )
}
