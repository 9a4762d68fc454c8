"""Tests for the bracketing root solver."""

import math

import pytest

from pystatspower.exceptions import BracketingFailure, DomainError, NoConvergence, SolverError, ValidationError
from pystatspower.power import SolverBracket, solve


class TestConvergence:
    """Roots of smooth monotone functions are found within xtol."""

    @pytest.mark.parametrize("xtol", [1e-6, 1e-9, 1e-12])
    def test_cubic(self, xtol):
        res = solve(lambda x: x ** 3, 2.0, (0.0, 5.0), xtol=xtol)
        assert abs(res.root - 2.0 ** (1.0 / 3.0)) <= 10 * xtol

    @pytest.mark.parametrize("xtol", [1e-6, 1e-10])
    def test_sigmoid_like_power_curve(self, xtol):
        """Flat at both ends, like power as a function of n."""
        def f(x):
            return 1.0 / (1.0 + math.exp(-(x - 120.0) / 15.0))

        res = solve(f, 0.95, (2.0, 1000.0), xtol=xtol)
        expected = 120.0 + 15.0 * math.log(0.95 / 0.05)
        assert abs(res.root - expected) <= 10 * xtol

    def test_decreasing_function(self):
        res = solve(lambda x: math.exp(-x), 0.5, (0.0, 10.0), xtol=1e-12)
        assert res.root == pytest.approx(math.log(2.0), abs=1e-11)

    def test_reports_bracket_and_counts(self):
        res = solve(lambda x: x, 0.25, (0.0, 1.0))
        assert isinstance(res.bracket, SolverBracket)
        assert res.bracket.f_lower == 0.0
        assert res.bracket.f_upper == 1.0
        assert res.function_calls >= res.iterations >= 1

    def test_exact_endpoint(self):
        res = solve(lambda x: x * x, 4.0, (2.0, 3.0))
        assert res.root == 2.0
        assert res.iterations == 0


class TestFailures:
    def test_target_outside_bracket(self):
        with pytest.raises(BracketingFailure, match="outside the range") as exc:
            solve(lambda x: x, 5.0, (0.0, 1.0))
        assert exc.value.target == 5.0
        assert not exc.value.bracket.straddles(5.0)
        assert exc.value.kind == "bracketing_failure"

    def test_iteration_budget(self):
        with pytest.raises(NoConvergence, match="did not converge") as exc:
            solve(lambda x: x ** 3 - x, 0.5, (1.0, 100.0), xtol=1e-14, maxiter=2)
        assert exc.value.last_estimate is not None
        assert isinstance(exc.value, SolverError)

    def test_reversed_bracket(self):
        with pytest.raises(ValidationError, match="lower < upper"):
            solve(lambda x: x, 0.5, (1.0, 0.0))

    def test_nan_at_bracket_end(self):
        with pytest.raises(DomainError, match="NaN"):
            solve(lambda x: math.nan if x > 0.5 else x, 0.3, (0.0, 1.0))


class TestBracket:
    def test_straddles(self):
        b = SolverBracket(0.0, 1.0, 0.1, 0.9)
        assert b.straddles(0.5)
        assert b.straddles(0.9)
        assert not b.straddles(0.95)
