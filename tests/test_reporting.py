"""
Tests for the results digest shown to the reviewer and answer writer.
"""
import sys
import os

# Ensure src is on path
sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from fakes import game, response
from game_agent.reporting import format_results_for_llm, is_counting_question, serialize_results
from game_agent.state import FetchResult, Plan


def _fetch_result(games, total_count=None, **echoed) -> FetchResult:
    resp = response(games, total_count, **echoed)
    return FetchResult(
        records=resp.records,
        total_count=resp.total_count,
        returned_count=len(resp.records),
        echoed_params=resp.echoed_params,
    )


PLAN = Plan.model_validate({"actions": [
    {"action": "fetch", "id": "zelda", "params": {"search": "zelda"}, "description": "Zelda games"},
    {"action": "calculate", "id": "avg", "operation": "average", "source": "zelda",
     "field": "metacritic", "description": "Average score"},
    {"action": "compare", "id": "cmp", "groups": [
        {"name": "A", "source": "zelda", "field": "rating"},
        {"name": "B", "source": "zelda", "field": "rating"},
    ], "description": "A vs B"},
]})


def test_counting_heuristic():
    assert is_counting_question("How many Zelda games are there?")
    assert is_counting_question("What is the total number of RPGs?")
    assert not is_counting_question("Which genre scored best in 2023?")


def test_counting_query_foregrounds_total():
    results = {"zelda": _fetch_result([game("Zelda", metacritic=95)], total_count=57, search="zelda")}

    digest = format_results_for_llm("How many zelda games?", results, PLAN)

    assert "**TOTAL MATCHING GAMES IN DATABASE: 57**" in digest
    assert '"search": "zelda"' in digest


def test_sample_is_bounded():
    games = [game(f"Game {i}", metacritic=70 + i) for i in range(15)]
    results = {"zelda": _fetch_result(games, total_count=40)}

    digest = format_results_for_llm("Best zelda games", results, PLAN)

    assert "Total games found: 40" in digest
    assert "Game 9 " in digest
    assert "Game 10 " not in digest
    assert "... and 30 more games" in digest


def test_calculate_and_compare_sections():
    results = {
        "zelda": _fetch_result([game("Zelda", metacritic=95)]),
        "avg": 95.0,
        "cmp": {"A": 4.5, "B": 4.5},
    }

    digest = format_results_for_llm("Compare", results, PLAN)

    assert "- Result: **95**" in digest
    assert "  - A: **4.5**" in digest
    assert "- Highest: **A** (4.5)" in digest


def test_missing_result_is_reported():
    digest = format_results_for_llm("q", {}, PLAN)
    assert digest.count("- No result recorded") == 3


def test_serialize_results_is_plain_data():
    results = {"zelda": _fetch_result([game("Zelda", rating=4.2)]), "avg": 4.2}
    serialized = serialize_results(results)
    assert serialized["zelda"]["records"][0]["name"] == "Zelda"
    assert serialized["avg"] == 4.2


def test_fetch_id_reused_by_calculate_is_not_fatal():
    plan = Plan.model_validate({"actions": [
        {"action": "fetch", "id": "x", "params": {}, "description": "All games"},
        {"action": "calculate", "id": "x", "operation": "average", "source": "x",
         "field": "rating", "description": "Average rating"},
    ]})

    digest = format_results_for_llm("q", {"x": 3.5}, plan)

    assert "### All games\n- No result recorded" in digest
    assert "- Result: **3.5**" in digest


if __name__ == "__main__":
    test_counting_query_foregrounds_total()
    test_sample_is_bounded()
    print("✅ PASSED: reporting")
