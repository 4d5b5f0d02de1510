"""Distance conditions in the event rule definitions attached to geofences."""

from __future__ import annotations

import json
from typing import Any, Union

DISTANCE_KEY = "distance_from_geofence_km"

RawDefinition = Union[str, bytes, bytearray]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def _as_text(raw: RawDefinition) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return raw


def ensure_distance_condition(raw: RawDefinition, type_zone: str) -> str:
    """Return the definition as JSON text with a distance condition in conditions.and.

    A definition that already mentions the distance key is returned as is.
    Safe zones get {"gte": 0}; every other zone gets {"lte": 0}.
    Text that is not a JSON object is replaced by a definition holding only
    the distance condition.
    """
    text = _as_text(raw)
    operator = "gte" if type_zone == "safe" else "lte"
    if DISTANCE_KEY in text:
        return text

    condition = {DISTANCE_KEY: {operator: 0}}

    try:
        definition = _loads(text)
    except ValueError:
        return _dumps({"conditions": {"and": [condition]}})
    if definition is None:
        definition = {}
    if not isinstance(definition, dict):
        return _dumps({"conditions": {"and": [condition]}})

    if "conditions" not in definition:
        definition["conditions"] = {"and": [condition]}
        return _dumps(definition)

    conditions = definition["conditions"]
    if not isinstance(conditions, dict):
        return _dumps(definition)

    if "and" in conditions:
        clauses = conditions["and"]
        if isinstance(clauses, list):
            conditions["and"] = [*clauses, condition]
    else:
        conditions["and"] = [condition]

    definition["conditions"] = conditions
    return _dumps(definition)


def _is_zero(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def remove_zero_distance(definition: dict) -> dict:
    """Drop distance conditions whose thresholds are all zero from conditions.and.

    The mapping is changed in place and also returned.
    """
    conditions = definition.get("conditions")
    if not isinstance(conditions, dict):
        return definition
    clauses = conditions.get("and")
    if not isinstance(clauses, list):
        return definition

    kept = []
    for clause in clauses:
        if not isinstance(clause, dict) or DISTANCE_KEY not in clause:
            kept.append(clause)
            continue
        thresholds = clause[DISTANCE_KEY]
        if not isinstance(thresholds, dict):
            kept.append(clause)
            continue
        if not all(_is_zero(v) for v in thresholds.values()):
            kept.append(clause)

    conditions["and"] = kept
    definition["conditions"] = conditions
    return definition