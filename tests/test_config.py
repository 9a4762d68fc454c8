"""Tests for engine settings."""

import dataclasses

import pytest

from pystatspower import DEFAULT_SETTINGS, EngineSettings, settings_from_env
from pystatspower.exceptions import ValidationError


class TestEngineSettings:
    def test_defaults(self):
        s = EngineSettings()
        assert s.series_tol == 1e-12
        assert s.max_series_terms == 500_000
        assert s.n_cap == 1e6
        assert s == DEFAULT_SETTINGS

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_SETTINGS.xtol = 1.0

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"series_tol": 0.0}, "series_tol"),
            ({"xtol": -1e-8}, "xtol"),
            ({"rtol": 1e-20}, "rtol"),
            ({"maxiter": 0}, "maxiter"),
            ({"max_series_terms": 0}, "max_series_terms"),
            ({"alpha_eps": 0.5}, "alpha_eps"),
            ({"n_cap": 2.0}, "n_cap"),
            ({"es_cap": float("inf")}, "es_cap"),
        ],
    )
    def test_invalid(self, kwargs, field):
        with pytest.raises(ValidationError) as exc:
            EngineSettings(**kwargs)
        assert exc.value.field == field


class TestFromEnv:
    def test_no_overrides(self, monkeypatch):
        for name in ("N_CAP", "MAXITER", "SERIES_TOL"):
            monkeypatch.delenv(f"PYSTATSPOWER_{name}", raising=False)
        assert settings_from_env() == DEFAULT_SETTINGS

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PYSTATSPOWER_N_CAP", "5000")
        monkeypatch.setenv("PYSTATSPOWER_MAXITER", " 50 ")
        s = settings_from_env()
        assert s.n_cap == 5000.0
        assert s.maxiter == 50
        assert isinstance(s.maxiter, int)
        assert s.xtol == DEFAULT_SETTINGS.xtol

    def test_custom_prefix_and_base(self, monkeypatch):
        monkeypatch.setenv("POWER_ES_CAP", "10")
        base = EngineSettings(xtol=1e-8)
        s = settings_from_env(prefix="POWER_", base=base)
        assert s.es_cap == 10.0
        assert s.xtol == 1e-8

    def test_unparseable(self, monkeypatch):
        monkeypatch.setenv("PYSTATSPOWER_MAX_SERIES_TERMS", "1.5")
        with pytest.raises(ValidationError, match="cannot parse") as exc:
            settings_from_env()
        assert exc.value.field == "max_series_terms"

    def test_out_of_range_value(self, monkeypatch):
        monkeypatch.setenv("PYSTATSPOWER_ALPHA_EPS", "0.7")
        with pytest.raises(ValidationError, match="alpha_eps"):
            settings_from_env()
