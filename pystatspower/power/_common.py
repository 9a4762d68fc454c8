"""Shared request/result types and validation for power analysis."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pystatspower.exceptions import ValidationError
from pystatspower.power._families import FAMILIES, TestFamily, _Family


class Tail(str, Enum):
    """Sidedness of the test. Only t and z tests are affected."""

    ONE_SIDED = "one.sided"
    TWO_SIDED = "two.sided"


class AnalysisTarget(str, Enum):
    """The unknown quantity of a power analysis."""

    SAMPLE_SIZE = "n"
    ALPHA = "alpha"
    POWER = "power"
    EFFECT_SIZE = "effect_size"


@dataclass(frozen=True)
class PowerAnalysisRequest:
    """A power analysis to run.

    The three quantities other than ``target`` must be given; the one
    matching ``target`` is ignored.
    """

    family: TestFamily
    target: AnalysisTarget | str
    tail: Tail | str = Tail.TWO_SIDED
    n: float | None = None
    alpha: float | None = None
    power: float | None = None
    effect_size: float | None = None


@dataclass(frozen=True)
class PowerAnalysisResult:
    """Result of a power analysis.

    ``n``, ``alpha``, ``power`` and ``effect_size`` hold the solved value
    and the three inputs. When the sample size is solved for, ``n`` is the
    smallest integer reaching the requested power and ``n_exact`` the
    continuous root. ``achieved_power`` is recomputed at the reported
    inputs as a numerical sanity check.
    """

    family: TestFamily
    target: AnalysisTarget
    tail: Tail
    n: float
    alpha: float
    power: float
    effect_size: float
    achieved_power: float
    n_exact: float | None = None
    iterations: int = 0
    method: str = ""
    note: str = ""

    @property
    def value(self) -> float:
        """The solved quantity."""
        return getattr(self, self.target.value)

    def summary(self) -> str:
        """Human-readable summary, similar to R's print.power.htest."""
        effect_name = self.family.effect_name
        lines = [self.method, ""]
        n_text = f"{self.n}" if isinstance(self.n, int) else f"{self.n:.6g}"
        lines.append(f"              n = {n_text}")
        lines.append(f"    effect size = {self.effect_size:.6f} ({effect_name})")
        lines.append(f"          alpha = {self.alpha:.6g}")
        lines.append(f"          power = {self.power:.6f}")
        lines.append(f" achieved power = {self.achieved_power:.6f}")
        lines.append(f"    alternative = {self.tail.value}")
        if self.note:
            lines.append("")
            lines.append(f"NOTE: {self.note}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping for serialization across the host boundary."""
        return {
            "test": self.family.name,
            "structure": self.family.structure(),
            "analysis": self.target.value,
            "tail": self.tail.value,
            "n": self.n,
            "alpha": self.alpha,
            "power": self.power,
            "effect_size": self.effect_size,
            "achieved_power": self.achieved_power,
            "n_exact": self.n_exact,
            "iterations": self.iterations,
            "method": self.method,
            "note": self.note,
        }


# ---------------------------------------------------------------------------
# Shared validation
# ---------------------------------------------------------------------------

def _as_tail(tail: Tail | str | int) -> Tail:
    if isinstance(tail, Tail):
        return tail
    if tail in (1, "1"):
        return Tail.ONE_SIDED
    if tail in (2, "2"):
        return Tail.TWO_SIDED
    try:
        return Tail(tail)
    except ValueError:
        raise ValidationError(
            f"tail must be one of {[t.value for t in Tail]} (or 1 / 2), got {tail!r}", field="tail",
        ) from None


def _as_target(target: AnalysisTarget | str) -> AnalysisTarget:
    if isinstance(target, AnalysisTarget):
        return target
    try:
        return AnalysisTarget(target)
    except ValueError:
        raise ValidationError(
            f"target must be one of {[t.value for t in AnalysisTarget]}, got {target!r}", field="target",
        ) from None


def _check_family(family: Any) -> TestFamily:
    if not isinstance(family, _Family):
        raise ValidationError(
            f"family must be one of {sorted(FAMILIES)}, got {type(family).__name__}", field="family",
        )
    return family


def _check_number(value: Any, name: str) -> float:
    if value is None:
        raise ValidationError(f"{name} is required", field=name)
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number, got {value!r}", field=name)
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}", field=name) from None
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value}", field=name)
    return value


def _check_alpha(alpha: Any) -> float:
    alpha = _check_number(alpha, "alpha")
    if not (0.0 < alpha < 1.0):
        raise ValidationError(f"alpha must be in (0, 1), got {alpha}", field="alpha")
    return alpha


def _check_power(power: Any) -> float:
    power = _check_number(power, "power")
    if not (0.0 < power < 1.0):
        raise ValidationError(f"power must be in (0, 1), got {power}", field="power")
    return power


def _check_n(n: Any) -> float:
    n = _check_number(n, "n")
    if n < 2.0:
        raise ValidationError(f"n must be >= 2, got {n}", field="n")
    return n


def _check_effect(effect: Any, effect_name: str = "effect_size") -> float:
    effect = _check_number(effect, "effect_size")
    if effect < 0.0:
        raise ValidationError(f"effect_size ({effect_name}) must be >= 0, got {effect}", field="effect_size")
    return effect


_CHECKS = {
    AnalysisTarget.SAMPLE_SIZE: ("n", _check_n),
    AnalysisTarget.ALPHA: ("alpha", _check_alpha),
    AnalysisTarget.POWER: ("power", _check_power),
    AnalysisTarget.EFFECT_SIZE: ("effect_size", _check_effect),
}


def _check_request(request: PowerAnalysisRequest) -> dict[str, Any]:
    """Validate a request. Return its normalized fields.

    Rules
    -----
    - ``family`` is one of the known test families.
    - ``target`` and ``tail`` are valid (strings are converted).
    - The three quantities other than ``target`` are present and in domain:
      ``n >= 2``, ``alpha`` and ``power`` in (0, 1), ``effect_size >= 0``.

    Raises
    ------
    ValidationError
        Naming the first offending field.
    """
    family = _check_family(request.family)
    target = _as_target(request.target)
    out: dict[str, Any] = {
        "family": family,
        "target": target,
        "tail": _as_tail(request.tail),
    }
    for kind, (name, check) in _CHECKS.items():
        out[name] = None if kind is target else check(getattr(request, name))
    return out


def _infer_target(
    *,
    n: float | None,
    effect_size: float | None,
    alpha: float | None,
    power: float | None,
) -> AnalysisTarget:
    """Return the quantity passed as None. Exactly one must be None."""
    missing = [
        target
        for target, value in (
            (AnalysisTarget.SAMPLE_SIZE, n),
            (AnalysisTarget.EFFECT_SIZE, effect_size),
            (AnalysisTarget.ALPHA, alpha),
            (AnalysisTarget.POWER, power),
        )
        if value is None
    ]
    if len(missing) != 1:
        raise ValidationError(
            f"Exactly one of n, effect_size, alpha, power must be None "
            f"(got {len(missing)} None values)"
        )
    return missing[0]
