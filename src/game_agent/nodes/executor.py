from typing import Any, Dict, List, Optional, Tuple
from langchain_core.runnables import RunnableConfig

from ..errors import SourceReferenceError
from ..events import StepSink, get_step_sink, make_step
from ..state import (
    CalculateAction, CompareAction, FetchAction, FetchResult, Plan, QueryState, active_plan,
)
from ..tools.calculate import execute_calculation, extract_field, raw_field_values

SAMPLE_SIZE = 8


async def _notify(on_step: Optional[StepSink], kind: str, name: str, summary: str, details: Dict[str, Any]):
    if on_step is not None:
        await on_step(make_step(kind, name, summary, details))


def _available_sources(results: Dict[str, Any]) -> List[str]:
    return [key for key, value in results.items() if isinstance(value, FetchResult)]


def _resolve_source(results: Dict[str, Any], source: str, context: str) -> FetchResult:
    """Fetch result stored under `source`. Raises SourceReferenceError otherwise."""
    entry = results.get(source)
    if not isinstance(entry, FetchResult):
        available = _available_sources(results)
        raise SourceReferenceError(
            f'Source data "{source}"{context} not found or invalid. '
            f"Only fetch action IDs can be used as sources. "
            f"Available sources: {', '.join(available) or 'none'}",
            available=available,
        )
    return entry


def _record_rows(records, field: str) -> List[Dict[str, Any]]:
    rows = []
    for record in records:
        row = record.display_fields()
        row[field] = getattr(record, field, None)
        rows.append(row)
    return rows


async def _run_fetch(action: FetchAction, data_source, results, widgets, on_step):
    await _notify(on_step, "tool_call", "Fetching Game Data", action.description or action.id,
                  {"params": action.params.model_dump(exclude_none=True)})

    response = await data_source.fetch(action.params)
    results[action.id] = FetchResult(
        records=response.records,
        total_count=response.total_count,
        returned_count=len(response.records),
        echoed_params=response.echoed_params,
    )
    widgets[action.id] = {
        "type": "data",
        "description": action.description,
        "total_count": response.total_count,
        "returned_count": len(response.records),
        "query_params": response.echoed_params,
        "games_data": [r.display_fields() for r in response.records],
    }
    print(f"DEBUG: fetch '{action.id}' -> {response.total_count} total, {len(response.records)} returned", flush=True)

    await _notify(on_step, "tool_result", "Data Retrieved",
                  f"Found {response.total_count} total matching games in database",
                  {
                      "count": response.total_count,
                      "returned": len(response.records),
                      "query_params": response.echoed_params,
                      "sample": [r.display_fields() for r in response.records[:SAMPLE_SIZE]],
                  })


async def _run_calculate(action: CalculateAction, results, widgets, on_step):
    await _notify(on_step, "tool_call", "Running Calculation", action.description or action.id,
                  {"operation": action.operation, "field": action.field, "source": action.source})

    source = _resolve_source(results, action.source, "")
    numbers = extract_field(source.records, action.field)
    # count works on items, not on valid numbers
    data = raw_field_values(source.records, action.field) if action.operation == "count" else numbers
    output = execute_calculation(action.operation, data)

    results[action.id] = output.result
    widgets[action.id] = {
        "type": "calculation",
        "operation": action.operation,
        "field": action.field,
        "result": output.result,
        "formula": output.formula,
        "explanation": output.details,
        "input_values": numbers,
        "games_data": _record_rows(source.records, action.field),
    }

    await _notify(on_step, "tool_result", "Calculation Complete",
                  f"{action.operation} of {action.field}: {output.result}",
                  {
                      "result": output.result,
                      "formula": output.formula,
                      "explanation": output.details,
                      "input_count": len(numbers),
                      "widget_id": action.id,
                  })


async def _run_compare(action: CompareAction, results, widgets, on_step):
    await _notify(on_step, "tool_call", "Comparing Groups", action.description or action.id,
                  {"groups": [g.name for g in action.groups]})

    group_values: Dict[str, List[float]] = {}
    group_games: Dict[str, List[Dict[str, Any]]] = {}
    for group in action.groups:
        source = _resolve_source(results, group.source, f' for group "{group.name}"')
        if group.field == "count":
            group_values[group.name] = [source.total_count]
        else:
            group_values[group.name] = extract_field(source.records, group.field)
        group_games[group.name] = _record_rows(source.records, group.field)

    output = execute_calculation("compare", group_values)

    results[action.id] = output.result
    widgets[action.id] = {
        "type": "comparison",
        "groups": list(group_values),
        "result": output.result,
        "formula": output.formula,
        "explanation": output.details,
        "group_values": group_values,
        "group_games": group_games,
    }

    await _notify(on_step, "tool_result", "Comparison Complete", output.details,
                  {
                      "result": output.result,
                      "formula": output.formula,
                      "explanation": output.details,
                      "widget_id": action.id,
                  })


async def execute_plan(
    plan: Plan,
    data_source,
    on_step: Optional[StepSink] = None,
) -> Tuple[Dict[str, Any], Dict[str, Dict[str, Any]]]:
    """
    Runs the plan's actions strictly in order against a fresh result store.

    Returns (results, widgets): the result store keyed by action id, and the
    display snapshots for the UI. Any exception aborts the remaining actions.
    """
    results: Dict[str, Any] = {}
    widgets: Dict[str, Dict[str, Any]] = {}

    for action in plan.actions:
        if isinstance(action, FetchAction):
            await _run_fetch(action, data_source, results, widgets, on_step)
        elif isinstance(action, CalculateAction):
            await _run_calculate(action, results, widgets, on_step)
        elif isinstance(action, CompareAction):
            await _run_compare(action, results, widgets, on_step)
        else:
            raise TypeError(f"Unhandled action type: {type(action).__name__}")

    return results, widgets


async def executor_node(state: QueryState, config: RunnableConfig) -> Dict[str, Any]:
    print("DEBUG: executor_node entered", flush=True)
    plan = active_plan(state)
    data_source = (config.get("configurable") or {}).get("data_source")
    if data_source is None:
        raise RuntimeError("No data source configured for this query")

    results, widgets = await execute_plan(plan, data_source, get_step_sink(config))

    print(f"DEBUG: executed {len(plan.actions)} actions "
          f"({'revised' if state.get('replanned') else 'original'} plan)", flush=True)
    return {"results": results, "widgets": widgets}
