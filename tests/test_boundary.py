"""Tests for the host boundary and the command-line entry point."""

import io
import json

import pytest

from pystatspower.__main__ import main
from pystatspower.boundary import error_value, handle, handle_json, parse_family, parse_request
from pystatspower.exceptions import BracketingFailure, InvalidStructure, ValidationError
from pystatspower.power import ANCOVA, AnalysisTarget, IncreaseMultipleRegression, Tail

ANCOVA_POWER = {
    "test": "ANCOVA",
    "analysis": "power",
    "k": 3,
    "q": 2,
    "p": 1,
    "n": 100,
    "alpha": 0.05,
    "es": 0.25,
}


class TestParsing:
    def test_string_values(self):
        payload = {k: str(v) for k, v in ANCOVA_POWER.items()}
        req = parse_request(payload)
        assert req.family == ANCOVA(k=3, q=2, p=1)
        assert req.target is AnalysisTarget.POWER
        assert req.n == 100.0
        assert req.power is None

    def test_tail_codes(self):
        assert parse_request({**ANCOVA_POWER, "tail": 1}).tail is Tail.ONE_SIDED
        assert parse_request({**ANCOVA_POWER, "tail": "2"}).tail is Tail.TWO_SIDED
        assert parse_request(ANCOVA_POWER).tail is Tail.TWO_SIDED

    def test_optional_structure_key(self):
        data = {"k": 3, "q": 2}
        assert parse_family("ANCOVA", data) == ANCOVA(k=3, q=2, p=0)

    def test_camel_case_key(self):
        fam = parse_family("increaseMultipleRegression", {"nPredictors": "5", "q": "2"})
        assert fam == IncreaseMultipleRegression(n_predictors=5, q=2)

    def test_unknown_test(self):
        with pytest.raises(ValidationError, match="Unknown test: Foo") as exc:
            parse_request({**ANCOVA_POWER, "test": "Foo"})
        assert exc.value.field == "test"

    def test_missing_field(self):
        payload = dict(ANCOVA_POWER)
        del payload["alpha"]
        with pytest.raises(ValidationError, match="Missing field: alpha"):
            parse_request(payload)

    def test_missing_structure_field(self):
        with pytest.raises(ValidationError, match="Missing field: q"):
            parse_family("ANCOVA", {"k": 3})

    def test_non_numeric(self):
        with pytest.raises(ValidationError, match="could not be converted") as exc:
            parse_request({**ANCOVA_POWER, "n": "lots"})
        assert exc.value.field == "n"

    def test_non_integer_structure(self):
        with pytest.raises(ValidationError, match="k must be an integer"):
            parse_family("oneWayANOVA", {"k": "2.5"})

    def test_unknown_analysis(self):
        with pytest.raises(ValidationError, match="Unknown analysis"):
            parse_request({**ANCOVA_POWER, "analysis": "beta"})

    def test_target_quantity_not_required(self):
        payload = {**ANCOVA_POWER, "analysis": "n", "power": "0.95"}
        del payload["n"]
        req = parse_request(payload)
        assert req.target is AnalysisTarget.SAMPLE_SIZE
        assert req.n is None


class TestHandle:
    def test_success(self):
        out = handle(ANCOVA_POWER)
        assert out["ok"] is True
        assert out["result"]["power"] == pytest.approx(0.5884, abs=1e-3)
        assert out["result"]["structure"] == {"k": 3, "q": 2, "p": 1}

    def test_sample_size(self):
        payload = {**ANCOVA_POWER, "analysis": "n", "power": 0.95}
        out = handle(payload)
        assert out["result"]["n"] == 251

    def test_validation_error_is_tagged(self):
        out = handle({**ANCOVA_POWER, "alpha": 1.5})
        assert out == {
            "ok": False,
            "error": {"kind": "validation", "message": "alpha must be in (0, 1), got 1.5", "field": "alpha"},
        }

    def test_structure_error_is_tagged(self):
        out = handle({**ANCOVA_POWER, "q": 5})
        assert out["ok"] is False
        assert out["error"]["kind"] == "invalid_structure"

    def test_infeasible_is_tagged(self):
        out = handle({**ANCOVA_POWER, "analysis": "n", "power": 0.999999, "es": 0})
        assert out["error"]["kind"] == "infeasible"
        assert out["error"]["field"] == "n"

    @pytest.mark.parametrize("test", ["ANCOVA", "oneSampleTTest", "goodnessOfFitChisqTest"])
    def test_huge_effect_size(self, test):
        payload = {**ANCOVA_POWER, "test": test, "df": 3, "es": 1e200}
        out = handle(payload)
        assert out["ok"] is True
        assert out["result"]["power"] == 1.0
        assert json.loads(handle_json(json.dumps(payload)))["ok"] is True

    @pytest.mark.parametrize("analysis,code", [("power", "power"), ("n", "n"), ("es", "es"), ("effect_size", "es")])
    def test_analysis_code_echoed(self, analysis, code):
        payload = {**ANCOVA_POWER, "analysis": analysis, "power": 0.8}
        out = handle(payload)
        assert out["ok"] is True
        assert out["result"]["analysis"] == code

    def test_solver_error_message(self):
        exc = BracketingFailure("target 2 is outside the range", bracket=None, target=2.0)
        err = error_value(exc)
        assert err["kind"] == "bracketing_failure"
        assert err["message"].startswith("No solution in the feasible range: ")

    def test_invalid_structure_field(self):
        err = error_value(InvalidStructure("k must be >= 2, got 1", field="k"))
        assert err == {"kind": "invalid_structure", "message": "k must be >= 2, got 1", "field": "k"}

    def test_not_a_mapping(self):
        out = handle(["ANCOVA"])
        assert out["ok"] is False

    def test_json(self):
        out = json.loads(handle_json(json.dumps(ANCOVA_POWER)))
        assert out["ok"] is True
        bad = json.loads(handle_json("{not json"))
        assert bad["ok"] is False
        assert bad["error"]["message"].startswith("Invalid JSON")


class TestCli:
    def test_argument(self, capsys):
        code = main([json.dumps(ANCOVA_POWER)])
        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert out["result"]["analysis"] == "power"

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({**ANCOVA_POWER, "analysis": "n", "power": 0.95})))
        code = main(["--pretty"])
        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert out["result"]["n"] == 251

    def test_error_exit_code(self, capsys):
        code = main([json.dumps({**ANCOVA_POWER, "test": "Foo"})])
        out = json.loads(capsys.readouterr().out)
        assert code == 1
        assert out["error"]["field"] == "test"

    def test_bad_env_setting(self, capsys, monkeypatch):
        monkeypatch.setenv("PYSTATSPOWER_MAXITER", "many")
        code = main([json.dumps(ANCOVA_POWER)])
        out = json.loads(capsys.readouterr().out)
        assert code == 1
        assert out["error"]["field"] == "maxiter"
