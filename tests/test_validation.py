"""
Tests for plan validation: structural checks and fetch-only source references.
"""
import itertools
import sys
import os

# Ensure src is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from game_agent.state import CalculateAction, CompareAction, FetchAction
from game_agent.validation import ACTIONS_REQUIRED_ERROR, validate_plan


def _fetch(action_id):
    return {"action": "fetch", "id": action_id, "params": {"platforms": ["pc"]}, "description": ""}


def _calc(action_id, source, operation="average", field="metacritic"):
    return {"action": "calculate", "id": action_id, "operation": operation,
            "source": source, "field": field, "description": ""}


def _compare(action_id, *sources):
    return {
        "action": "compare",
        "id": action_id,
        "groups": [{"name": f"G{i}", "source": s, "field": "rating"} for i, s in enumerate(sources)],
        "description": "",
    }


def test_valid_plan_returns_typed_plan():
    candidate = {"reasoning": "r", "actions": [_fetch("f1"), _fetch("f2"), _calc("c1", "f1"), _compare("cmp", "f1", "f2")]}

    result = validate_plan(candidate)

    assert result.valid
    assert result.errors == []
    assert isinstance(result.plan.actions[0], FetchAction)
    assert isinstance(result.plan.actions[2], CalculateAction)
    assert isinstance(result.plan.actions[3], CompareAction)
    assert result.plan.fetch_ids == ["f1", "f2"]


def test_calculate_sourced_from_calculate_is_rejected():
    candidate = {"actions": [_fetch("f1"), _calc("c1", "f1"), _calc("c2", "c1")]}

    result = validate_plan(candidate)

    assert not result.valid
    assert result.plan is None
    assert len(result.errors) == 1
    assert 'invalid source "c1"' in result.errors[0]
    assert '"c2"' in result.errors[0]
    assert "Available fetch actions: f1" in result.errors[0]


def test_all_bad_references_reported_in_one_pass():
    candidate = {"actions": [_fetch("f1"), _calc("c1", "missing"), _compare("cmp", "f1", "c1", "nope")]}

    result = validate_plan(candidate)

    assert not result.valid
    assert len(result.errors) == 3
    assert any('group "G1"' in e for e in result.errors)
    assert any('group "G2"' in e for e in result.errors)


def test_missing_or_non_list_actions_is_structural():
    for candidate in ({"reasoning": "r"}, {"actions": "fetch"}, None, []):
        result = validate_plan(candidate)
        assert not result.valid
        assert result.errors == [ACTIONS_REQUIRED_ERROR]


def test_empty_action_list_is_valid():
    assert validate_plan({"actions": []}).valid


def test_schema_violation_is_reported():
    candidate = {"actions": [_fetch("f1"), _calc("c1", "f1", operation="median")]}

    result = validate_plan(candidate)

    assert not result.valid
    assert any(e.startswith("Invalid plan field") for e in result.errors)


def test_duplicate_ids_are_not_rejected():
    candidate = {"actions": [_fetch("f1"), _fetch("f1"), _calc("c1", "f1"), _calc("c1", "f1")]}
    assert validate_plan(candidate).valid


def test_valid_iff_every_source_is_a_fetch_id():
    ids = ["f1", "f2", "c1", "x"]
    fetch_ids = {"f1", "f2"}
    for calc_source, group_a, group_b in itertools.product(ids, repeat=3):
        candidate = {"actions": [
            _fetch("f1"),
            _fetch("f2"),
            _calc("c1", calc_source),
            _compare("cmp", group_a, group_b),
        ]}
        expected = {calc_source, group_a, group_b} <= fetch_ids
        assert validate_plan(candidate).valid == expected, (calc_source, group_a, group_b)


def test_non_string_sources_are_invalid_not_fatal():
    candidate = {"actions": [
        _fetch("f1"),
        _calc("c1", ["f1"]),
        {"action": "compare", "id": "cmp", "groups": [{"name": "A", "source": {"id": "f1"}, "field": "rating"}]},
    ]}

    result = validate_plan(candidate)

    assert not result.valid
    assert sum("invalid source" in e for e in result.errors) == 2


if __name__ == "__main__":
    test_calculate_sourced_from_calculate_is_rejected()
    test_valid_iff_every_source_is_a_fetch_id()
    print("✅ PASSED: validation")
