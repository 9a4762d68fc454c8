"""Tests for the test families and their noncentrality models."""

import math

import pytest

from pystatspower.distributions import Distribution
from pystatspower.exceptions import DomainError, InvalidStructure, ValidationError
from pystatspower.power import (
    ANCOVA,
    FAMILIES,
    BetweenRepeatedANOVA,
    DeviationFromZeroMultipleRegression,
    GoodnessOfFitChisqTest,
    IncreaseMultipleRegression,
    IndependentSamplesTTest,
    OneSampleTTest,
    OneSampleZTest,
    OneWayANOVA,
    TwoWayANOVA,
    WithinBetweenRepeatedANOVA,
    WithinRepeatedANOVA,
    noncentrality,
)
from pystatspower.power._families import _Family


class TestNoncentralityFormulas:
    """Distribution parameters per design."""

    def test_ancova(self):
        p = noncentrality(ANCOVA(k=3, q=2, p=1), 0.25, 100)
        assert p.distribution is Distribution.F
        assert p.ncp == pytest.approx(6.25)
        assert p.df == (2.0, 96.0)

    def test_ancova_without_covariates_matches_one_way_anova(self):
        a = ANCOVA(k=4, q=3, p=0).noncentrality(0.3, 80)
        b = OneWayANOVA(k=4).noncentrality(0.3, 80)
        assert a == b

    def test_one_sample_t(self):
        p = OneSampleTTest().noncentrality(0.5, 50)
        assert p.distribution is Distribution.T
        assert p.ncp == pytest.approx(math.sqrt(50) * 0.5)
        assert p.df == (49.0,)

    def test_independent_samples_t(self):
        """n is the total; delta = d * sqrt(n1 * n2 / (n1 + n2))."""
        p = IndependentSamplesTTest().noncentrality(0.5, 128)
        assert p.ncp == pytest.approx(0.5 * math.sqrt(64 * 64 / 128))
        assert p.df == (126.0,)

    def test_z(self):
        p = OneSampleZTest().noncentrality(0.2, 25)
        assert p.distribution is Distribution.Z
        assert p.ncp == pytest.approx(1.0)
        assert p.df == ()

    def test_chisq(self):
        p = GoodnessOfFitChisqTest(df=5).noncentrality(0.3, 100)
        assert p.ncp == pytest.approx(9.0)
        assert p.df == (5.0,)

    def test_regressions(self):
        p = DeviationFromZeroMultipleRegression(n_predictors=5).noncentrality(0.4, 60)
        assert p.df == (5.0, 54.0)
        assert p.ncp == pytest.approx(9.6)
        p = IncreaseMultipleRegression(n_predictors=9, q=3).noncentrality(0.4, 60)
        assert p.df == (3.0, 50.0)

    def test_two_way(self):
        p = TwoWayANOVA(k=6, q=2).noncentrality(0.25, 120)
        assert p.df == (2.0, 114.0)

    def test_between_repeated(self):
        p = BetweenRepeatedANOVA(k=2, m=3, rho=0.5).noncentrality(0.25, 40)
        assert p.df == (1.0, 38.0)
        assert p.ncp == pytest.approx(0.0625 * 40 * 3 / 2.0)

    def test_within_repeated_scales_by_epsilon(self):
        fam = WithinRepeatedANOVA(k=1, m=4, rho=0.5, epsilon=0.5)
        p = fam.noncentrality(0.25, 30)
        assert p.df == pytest.approx((1.5, 43.5))
        assert p.ncp == pytest.approx(0.0625 * 30 * 8.0 * 0.5)

    def test_within_between(self):
        p = WithinBetweenRepeatedANOVA(k=3, m=3, rho=0.2, epsilon=1.0).noncentrality(0.1, 60)
        assert p.df == pytest.approx((4.0, 114.0))
        assert p.ncp == pytest.approx(0.01 * 60 * 3 / 0.8)

    def test_zero_effect_is_central(self):
        for fam in [OneSampleTTest(), ANCOVA(k=3, q=2, p=1), GoodnessOfFitChisqTest(df=2)]:
            assert fam.noncentrality(0.0, 50).ncp == 0.0


class TestMinimumN:
    """Smallest feasible n keeps every df >= 1."""

    @pytest.mark.parametrize(
        "family",
        [
            OneSampleTTest(),
            IndependentSamplesTTest(),
            OneSampleZTest(),
            GoodnessOfFitChisqTest(df=3),
            DeviationFromZeroMultipleRegression(n_predictors=4),
            IncreaseMultipleRegression(n_predictors=4, q=2),
            ANCOVA(k=3, q=2, p=1),
            OneWayANOVA(k=5),
            TwoWayANOVA(k=6, q=2),
            BetweenRepeatedANOVA(k=3, m=2, rho=0.3),
            WithinRepeatedANOVA(k=2, m=3, rho=0.3, epsilon=0.6),
            WithinBetweenRepeatedANOVA(k=2, m=3, rho=0.3, epsilon=0.6),
        ],
    )
    def test_df_positive_at_min_n(self, family):
        n = family.min_n()
        assert n >= 2.0
        params = family.noncentrality(0.2, n)
        assert all(d >= 1.0 - 1e-12 for d in params.df)

    def test_ancova_min_n(self):
        assert ANCOVA(k=3, q=2, p=1).min_n() == 5.0


class TestStructureValidation:
    """Invalid structural parameters are rejected at construction."""

    def test_too_few_groups(self):
        with pytest.raises(InvalidStructure, match="k must be >= 2"):
            OneWayANOVA(k=1)

    def test_q_exceeds_k_minus_one(self):
        with pytest.raises(InvalidStructure, match="q"):
            ANCOVA(k=3, q=3, p=0)

    def test_negative_covariates(self):
        with pytest.raises(InvalidStructure, match="p must be >= 0"):
            ANCOVA(k=3, q=2, p=-1)

    def test_non_integer_count(self):
        with pytest.raises(InvalidStructure, match="integer"):
            OneWayANOVA(k=2.5)

    def test_q_exceeds_predictors(self):
        with pytest.raises(InvalidStructure, match="cannot exceed n_predictors"):
            IncreaseMultipleRegression(n_predictors=2, q=3)

    def test_epsilon_lower_bound(self):
        with pytest.raises(InvalidStructure, match="epsilon"):
            WithinRepeatedANOVA(k=1, m=3, rho=0.5, epsilon=0.4)

    def test_rho_range(self):
        with pytest.raises(InvalidStructure, match="rho"):
            BetweenRepeatedANOVA(k=2, m=3, rho=1.0)
        with pytest.raises(InvalidStructure, match="rho"):
            BetweenRepeatedANOVA(k=2, m=3, rho=-0.6)

    def test_invalid_structure_is_validation_error(self):
        with pytest.raises(ValidationError):
            GoodnessOfFitChisqTest(df=0)


class TestNoncentralityErrors:
    def test_nonpositive_df_for_n(self):
        """Too few observations for the groups and covariates."""
        with pytest.raises(InvalidStructure, match="df2"):
            ANCOVA(k=3, q=2, p=1).noncentrality(0.25, 4)

    def test_negative_effect(self):
        with pytest.raises(DomainError):
            OneWayANOVA(k=3).noncentrality(-0.1, 30)


class TestRegistry:
    def test_names_round_trip(self):
        for name, cls in FAMILIES.items():
            assert cls.name == name
        assert "ANCOVA" in FAMILIES
        assert len(FAMILIES) == 12

    def test_describe(self):
        assert ANCOVA(k=3, q=2, p=1).describe() == "ANCOVA (k = 3, q = 2, p = 1)"
        assert OneSampleTTest().describe() == "One-sample t test"

    def test_frozen(self):
        fam = ANCOVA(k=3, q=2, p=1)
        with pytest.raises(AttributeError):
            fam.k = 4

    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            _Family()
