"""Computation boundary between a host (web UI, CLI) and the engine.

The host sends a flat mapping of form values; numbers may arrive as strings.
``handle`` returns a mapping that is either a result or a tagged error and
never raises for engine errors.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from dataclasses import MISSING, fields
from typing import Any

from pystatspower._config import EngineSettings
from pystatspower.exceptions import PowerAnalysisError, SolverError, ValidationError
from pystatspower.power import FAMILIES, AnalysisTarget, PowerAnalysisRequest, analyze
from pystatspower.power._common import _as_tail
from pystatspower.power._families import TestFamily

logger = logging.getLogger(__name__)

# Host-facing keys that differ from the dataclass field names
_FIELD_KEYS = {"n_predictors": "nPredictors"}

_ANALYSES = {
    "n": AnalysisTarget.SAMPLE_SIZE,
    "sample_size": AnalysisTarget.SAMPLE_SIZE,
    "alpha": AnalysisTarget.ALPHA,
    "power": AnalysisTarget.POWER,
    "es": AnalysisTarget.EFFECT_SIZE,
    "effect_size": AnalysisTarget.EFFECT_SIZE,
}

# Host key of each analysis quantity
_QUANTITY_KEYS = {
    AnalysisTarget.SAMPLE_SIZE: "n",
    AnalysisTarget.ALPHA: "alpha",
    AnalysisTarget.POWER: "power",
    AnalysisTarget.EFFECT_SIZE: "es",
}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_float(data: Mapping[str, Any], key: str) -> float:
    if key not in data or data[key] is None or data[key] == "":
        raise ValidationError(f"Missing field: {key}", field=key)
    value = data[key]
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number, got {value!r}", field=key)
    try:
        return float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} could not be converted to a number: {value!r}", field=key) from None


def _parse_int(data: Mapping[str, Any], key: str) -> int:
    value = _parse_float(data, key)
    if not (math.isfinite(value) and value == int(value)):
        raise ValidationError(f"{key} must be an integer, got {data[key]!r}", field=key)
    return int(value)


def parse_family(name: str, data: Mapping[str, Any]) -> TestFamily:
    """Build the test family named *name* from the structural keys in *data*."""
    try:
        cls = FAMILIES[name]
    except KeyError:
        raise ValidationError(f"Unknown test: {name}", field="test") from None
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = _FIELD_KEYS.get(f.name, f.name)
        if key not in data and f.default is not MISSING:
            # optional structural parameter with a default, e.g. ANCOVA p
            continue
        kwargs[f.name] = _parse_int(data, key) if f.type == "int" else _parse_float(data, key)
    return cls(**kwargs)


def parse_request(payload: Mapping[str, Any]) -> PowerAnalysisRequest:
    """Convert a host payload into a :class:`PowerAnalysisRequest`.

    Expected keys: ``test``, ``analysis`` (``n``, ``alpha``, ``power`` or
    ``es``), ``tail`` (``1`` / ``2`` or ``one.sided`` / ``two.sided``,
    default two-sided), the three known quantities among ``n``, ``alpha``,
    ``power``, ``es``, and the structural keys of the test.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(f"request must be a mapping, got {type(payload).__name__}")
    if "test" not in payload:
        raise ValidationError("Missing field: test", field="test")
    if "analysis" not in payload:
        raise ValidationError("Missing field: analysis", field="analysis")

    family = parse_family(str(payload["test"]), payload)
    try:
        target = _ANALYSES[str(payload["analysis"])]
    except KeyError:
        raise ValidationError(
            f"Unknown analysis: {payload['analysis']!r}; expected one of {sorted(_ANALYSES)}",
            field="analysis",
        ) from None
    tail = _as_tail(payload.get("tail", "two.sided"))

    quantities: dict[str, float | None] = {}
    for kind, key in _QUANTITY_KEYS.items():
        quantities[kind.value] = None if kind is target else _parse_float(payload, key)

    return PowerAnalysisRequest(family=family, target=target, tail=tail, **quantities)


# ---------------------------------------------------------------------------
# Handling
# ---------------------------------------------------------------------------

def error_value(exc: PowerAnalysisError) -> dict[str, Any]:
    """Tagged error mapping for the host."""
    message = str(exc)
    if isinstance(exc, SolverError):
        message = f"No solution in the feasible range: {message}"
    return {
        "kind": exc.kind,
        "message": message,
        "field": getattr(exc, "field", None),
    }


def handle(payload: Mapping[str, Any], settings: EngineSettings | None = None) -> dict[str, Any]:
    """Run one request; return ``{"ok": True, "result": ...}`` or
    ``{"ok": False, "error": {"kind", "message", "field"}}``."""
    try:
        request = parse_request(payload)
        result = analyze(request, settings)
    except PowerAnalysisError as e:
        logger.info("Request failed (%s): %s", e.kind, e)
        return {"ok": False, "error": error_value(e)}
    out = result.to_dict()
    # answer in the host's analysis codes
    out["analysis"] = _QUANTITY_KEYS[result.target]
    return {"ok": True, "result": out}


def handle_json(text: str, settings: EngineSettings | None = None) -> str:
    """JSON-in, JSON-out variant of :func:`handle`."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        return json.dumps({"ok": False, "error": {"kind": ValidationError.kind, "message": f"Invalid JSON: {e}", "field": None}})
    return json.dumps(handle(payload, settings))
