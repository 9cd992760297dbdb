"""
Tests for JSON extraction from model output.
"""
import sys
import os

# Ensure src is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from game_agent.parsing import normalize_llm_content, parse_json_response


def test_whole_text_json():
    assert parse_json_response('{"reasoning": "r", "actions": []}') == {"reasoning": "r", "actions": []}


def test_fenced_block_with_surrounding_prose():
    raw = (
        "Sure! Here is the plan you asked for:\n"
        "```json\n"
        '{"reasoning": "fetch pc games", "actions": [{"action": "fetch", "id": "pc"}]}\n'
        "```\n"
        "Let me know if you need anything else."
    )
    parsed = parse_json_response(raw)
    assert parsed["reasoning"] == "fetch pc games"
    assert parsed["actions"][0]["id"] == "pc"


def test_fence_without_language_tag():
    assert parse_json_response('```\n{"a": 1}\n```') == {"a": 1}


def test_brace_span_inside_prose():
    assert parse_json_response('The plan is {"a": {"b": 2}} as requested.') == {"a": {"b": 2}}


def test_unparsable_fence_falls_through_to_brace_span():
    raw = '```\nnot json at all\n```\nAnyway: {"a": 1}'
    assert parse_json_response(raw) == {"a": 1}


def test_non_object_json_is_not_a_plan():
    assert parse_json_response("[1, 2, 3]") is None
    assert parse_json_response('"just a string"') is None


def test_garbage_returns_none():
    assert parse_json_response("I could not come up with a plan, sorry.") is None
    assert parse_json_response("{not: valid json}") is None
    assert parse_json_response("") is None


def test_normalize_content_blocks():
    content = [{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}, {"type": "image"}]
    assert normalize_llm_content(content) == '{"a": 1}'
    assert normalize_llm_content("plain") == "plain"


def test_deeply_nested_input_returns_none():
    raw = "[" * 100000 + "]" * 100000
    assert parse_json_response(raw) is None


if __name__ == "__main__":
    test_fenced_block_with_surrounding_prose()
    test_unparsable_fence_falls_through_to_brace_span()
    print("✅ PASSED: parsing")
