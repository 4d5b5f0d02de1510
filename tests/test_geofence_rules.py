import json

import pytest

from telemetry_core.geofence_rules import (
    DISTANCE_KEY,
    ensure_distance_condition,
    remove_zero_distance,
)


def test_existing_distance_condition_is_left_alone():
    raw = '{"conditions":{"and":[{"distance_from_geofence_km":{"gte":2}}]}}'
    assert ensure_distance_condition(raw, "safe") == raw


def test_bytes_input_is_accepted():
    raw = b'{"conditions":{"and":[]}}'
    result = json.loads(ensure_distance_condition(raw, "danger"))
    assert result["conditions"]["and"] == [{DISTANCE_KEY: {"lte": 0}}]


def test_unparseable_definition_is_wrapped_for_safe_zone():
    result = json.loads(ensure_distance_condition("not json", "safe"))
    assert result == {"conditions": {"and": [{DISTANCE_KEY: {"gte": 0}}]}}


@pytest.mark.parametrize("zone", ["danger", "normal", ""])
def test_non_safe_zones_use_lte(zone):
    result = json.loads(ensure_distance_condition("[1, 2]", zone))
    assert result["conditions"]["and"][0][DISTANCE_KEY] == {"lte": 0}


def test_missing_conditions_are_added():
    result = json.loads(ensure_distance_condition('{"foo": 1}', "safe"))
    assert result["foo"] == 1
    assert result["conditions"] == {"and": [{DISTANCE_KEY: {"gte": 0}}]}


def test_condition_is_appended_to_existing_and_list():
    existing = {"battery": {"lt": 10}}
    raw = json.dumps({"conditions": {"and": [existing]}})
    result = json.loads(ensure_distance_condition(raw, "danger"))
    clauses = result["conditions"]["and"]
    assert len(clauses) == 2
    assert clauses[0] == existing
    assert clauses[1] == {DISTANCE_KEY: {"lte": 0}}


def test_and_list_created_when_absent():
    raw = json.dumps({"conditions": {"or": []}})
    result = json.loads(ensure_distance_condition(raw, "safe"))
    assert result["conditions"]["or"] == []
    assert result["conditions"]["and"] == [{DISTANCE_KEY: {"gte": 0}}]


def test_non_mapping_conditions_are_kept():
    original = {"conditions": "x", "name": "n"}
    result = json.loads(ensure_distance_condition(json.dumps(original), "safe"))
    assert result == original


def test_non_list_and_is_kept():
    original = {"conditions": {"and": "oops"}}
    result = json.loads(ensure_distance_condition(json.dumps(original), "safe"))
    assert result == original


def test_remove_zero_distance_drops_zero_thresholds():
    definition = {
        "conditions": {
            "and": [
                {"battery": {"lt": 10}},
                {DISTANCE_KEY: {"lte": 0}},
                {DISTANCE_KEY: {"gte": 0.0}},
            ]
        }
    }
    result = remove_zero_distance(definition)
    assert result["conditions"]["and"] == [{"battery": {"lt": 10}}]
    assert result is definition


def test_remove_zero_distance_keeps_non_zero_and_odd_items():
    clauses = [
        {DISTANCE_KEY: {"lte": 5}},
        {DISTANCE_KEY: {"lte": 0, "gte": 3}},
        {DISTANCE_KEY: "far"},
        {DISTANCE_KEY: {"lte": False}},
        "plain",
    ]
    definition = {"conditions": {"and": list(clauses)}}
    assert remove_zero_distance(definition)["conditions"]["and"] == clauses


def test_remove_zero_distance_drops_empty_threshold_map():
    definition = {"conditions": {"and": [{DISTANCE_KEY: {}}]}}
    assert remove_zero_distance(definition)["conditions"]["and"] == []


@pytest.mark.parametrize(
    "definition",
    [{}, {"conditions": 3}, {"conditions": {"and": "x"}}, {"conditions": {}}],
)
def test_remove_zero_distance_ignores_other_shapes(definition):
    snapshot = json.loads(json.dumps(definition))
    assert remove_zero_distance(definition) == snapshot


@pytest.mark.parametrize("zone", ["safe", "danger"])
def test_round_trip_restores_original(zone):
    original = {"conditions": {"and": [{"speed": {"gt": 40}}]}, "mode": "m"}
    added = json.loads(ensure_distance_condition(json.dumps(original), zone))
    assert len(added["conditions"]["and"]) == 2
    assert remove_zero_distance(added) == original