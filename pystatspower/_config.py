"""
Engine settings: numerical tolerances and search caps.

Settings are an explicit, frozen parameter struct. Nothing is read from the
environment at import time; ``settings_from_env`` is opt-in (the CLI uses it).
"""

from __future__ import annotations

import logging
import math
import os
import sys
from dataclasses import dataclass, fields, replace

from pystatspower.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Numerical knobs shared by the special functions, solver and dispatcher.

    Attributes
    ----------
    series_tol : float
        Absolute truncation tolerance for the noncentral mixture series.
    max_series_terms : int
        Hard cap on the number of mixture terms.
    xtol, rtol : float
        Absolute / relative convergence tolerances of the root solver.
    maxiter : int
        Iteration budget of the root solver.
    n_cap : float
        Largest sample size the dispatcher will search.
    es_cap : float
        Largest effect size the dispatcher will search.
    alpha_eps : float
        Distance of the alpha search bracket from 0 and 1.
    """

    series_tol: float = 1e-12
    max_series_terms: int = 500_000
    xtol: float = 1e-10
    rtol: float = 4.0 * sys.float_info.epsilon
    maxiter: int = 500
    n_cap: float = 1e6
    es_cap: float = 100.0
    alpha_eps: float = 1e-10

    def __post_init__(self) -> None:
        for name in ("series_tol", "xtol", "n_cap", "es_cap", "alpha_eps"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0.0):
                raise ValidationError(f"{name} must be a positive finite number, got {value}", field=name)
        if self.rtol < 4.0 * sys.float_info.epsilon:
            raise ValidationError(
                f"rtol must be >= 4 * machine epsilon ({4.0 * sys.float_info.epsilon:.3g}), got {self.rtol}",
                field="rtol",
            )
        if self.max_series_terms < 1:
            raise ValidationError(f"max_series_terms must be >= 1, got {self.max_series_terms}", field="max_series_terms")
        if self.maxiter < 1:
            raise ValidationError(f"maxiter must be >= 1, got {self.maxiter}", field="maxiter")
        if self.alpha_eps >= 0.5:
            raise ValidationError(f"alpha_eps must be < 0.5, got {self.alpha_eps}", field="alpha_eps")
        if self.n_cap <= 2.0:
            raise ValidationError(f"n_cap must be > 2, got {self.n_cap}", field="n_cap")


DEFAULT_SETTINGS = EngineSettings()


def settings_from_env(prefix: str = "PYSTATSPOWER_", base: EngineSettings | None = None) -> EngineSettings:
    """Build settings from environment variables such as ``PYSTATSPOWER_N_CAP``.

    Unset variables keep the value from *base* (default: ``DEFAULT_SETTINGS``).
    """
    base = base or DEFAULT_SETTINGS
    overrides: dict[str, float | int] = {}
    for f in fields(EngineSettings):
        raw = os.getenv(prefix + f.name.upper(), "").strip()
        if not raw:
            continue
        try:
            value = int(raw) if f.name in ("max_series_terms", "maxiter") else float(raw)
        except ValueError as e:
            raise ValidationError(f"{prefix + f.name.upper()}: cannot parse {raw!r}: {e}", field=f.name) from e
        overrides[f.name] = value
    if overrides:
        logger.debug("Settings overridden from environment: %s", overrides)
    return replace(base, **overrides)
