"""
Renders the result store as the markdown digest the model reads.

The same digest feeds both the reviewer and the answer writer, so it is the
only view of execution results the model ever gets.
"""
import json
import re
from typing import Any, Dict

from .state import CalculateAction, CompareAction, FetchAction, FetchResult, Plan
from .tools.calculate import pick_winner

RECORD_SAMPLE_SIZE = 10
_COUNTING_RE = re.compile(r"how many|count|number of|total", re.IGNORECASE)


def is_counting_question(query: str) -> bool:
    return bool(_COUNTING_RE.search(query or ""))


def _fmt(value: Any) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_fetch(action: FetchAction, result: FetchResult, counting: bool) -> list:
    lines = [f"### {action.description or action.id}"]
    if counting:
        lines.append(
            f'- **TOTAL MATCHING GAMES IN DATABASE: {result.total_count}** '
            f'(This is the answer to "how many")'
        )
    else:
        lines.append(f"- Total games found: {result.total_count}")
    lines.append(f"- Games retrieved on this page: {result.returned_count}")
    if result.echoed_params:
        lines.append(f"- Search parameters used: {json.dumps(result.echoed_params)}")

    if result.records:
        lines.append("- Sample of matching games:")
        for record in result.records[:RECORD_SAMPLE_SIZE]:
            lines.append(
                f"  - {record.name} (Metacritic: {_fmt(record.metacritic)}, "
                f"Rating: {_fmt(record.rating)}, Released: {record.released or 'N/A'})"
            )
        if result.total_count > RECORD_SAMPLE_SIZE:
            lines.append(f"  - ... and {result.total_count - RECORD_SAMPLE_SIZE} more games")
    return lines


def _format_calculate(action: CalculateAction, result: Any) -> list:
    return [
        f"### {action.description or action.id}",
        f"- Operation: {action.operation}",
        f"- Field: {action.field}",
        f"- Result: **{_fmt(result)}**",
    ]


def _format_compare(action: CompareAction, result: Any) -> list:
    lines = [f"### {action.description or action.id}", "- Results by group:"]
    averages = result if isinstance(result, dict) else {}
    if not averages:
        lines.append("  - No group had any valid values")
        return lines
    for group, avg in averages.items():
        lines.append(f"  - {group}: **{_fmt(avg)}**")
    winner, best = pick_winner(averages)
    lines.append(f"- Highest: **{winner}** ({_fmt(best)})")
    return lines


def format_results_for_llm(query: str, results: Dict[str, Any], plan: Plan) -> str:
    """Digest of every action's result, in plan order."""
    counting = is_counting_question(query)
    lines = ["## Original Question", query, "", "## Execution Results", ""]

    for action in plan.actions:
        result = results.get(action.id)
        if result is None:
            lines.extend([f"### {action.description or action.id}", "- No result recorded"])
        elif isinstance(action, FetchAction) and not isinstance(result, FetchResult):
            # id reused by a later action
            lines.extend([f"### {action.description or action.id}", "- No result recorded"])
        elif isinstance(action, FetchAction):
            lines.extend(_format_fetch(action, result, counting))
        elif isinstance(action, CalculateAction):
            lines.extend(_format_calculate(action, result))
        elif isinstance(action, CompareAction):
            lines.extend(_format_compare(action, result))
        else:
            raise TypeError(f"Unhandled action type: {type(action).__name__}")
        lines.append("")

    return "\n".join(lines)


def serialize_results(results: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-friendly copy of the result store for step details."""
    out = {}
    for key, value in results.items():
        out[key] = value.model_dump() if isinstance(value, FetchResult) else value
    return out
