"""
Query lifecycle entry points.

`run_query_streaming` drives the graph for one query and reports every Step,
then exactly one terminal event ("answer" or "error"), through the `emit`
callback. `run_query` collects the same events into an AgentResponse.
Each call builds its own graph state and step sink; nothing is shared
between queries.
"""
import traceback
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .config import load_settings
from .events import make_step
from .graph import create_graph
from .state import AgentResponse, Step
from .tools.rawg import RawgClient

Emit = Callable[[Dict[str, Any]], Awaitable[None]]

_app = None


def get_app():
    global _app
    if _app is None:
        _app = create_graph()
    return _app


def initial_state(query: str) -> Dict[str, Any]:
    return {
        "query": query,
        "plan": None,
        "raw_plan": None,
        "revised_plan": None,
        "replanned": False,
        "results": {},
        "widgets": {},
        "review": None,
        "answer": None,
        "outcome": "running",
        "errors": [],
    }


async def _run_graph(query: str, emit: Emit, data_source, google_api_key: Optional[str]):
    async def step_sink(step: Step):
        await emit({"type": "step", "data": step.model_dump()})

    config = {
        "configurable": {
            "step_sink": step_sink,
            "data_source": data_source,
            "google_api_key": google_api_key,
        }
    }
    final_state = await get_app().ainvoke(initial_state(query), config=config)

    outcome = final_state.get("outcome")
    if outcome == "plan_parse_failed":
        await emit({"type": "answer", "data": {"answer": final_state["answer"]}})
    elif outcome == "plan_invalid":
        await emit({"type": "error", "data": {"error": final_state["answer"]}})
    else:
        widgets = list((final_state.get("widgets") or {}).values())
        await emit({"type": "answer", "data": {
            "answer": final_state.get("answer") or "",
            "calculation_widgets": widgets,
        }})


async def run_query_streaming(
    query: str,
    emit: Emit,
    *,
    data_source=None,
    google_api_key: Optional[str] = None,
    rawg_api_key: Optional[str] = None,
) -> None:
    """
    Runs one query end to end. Never raises for failures inside the query:
    those become an error Step followed by an "error" event.
    """
    settings = load_settings()
    owned_client: Optional[RawgClient] = None

    try:
        if data_source is None:
            key = rawg_api_key or settings.rawg_api_key
            if not key:
                raise ValueError("RAWG API key not configured")
            owned_client = RawgClient(key, settings.rawg_base_url)
            data_source = owned_client

        await _run_graph(query, emit, data_source, google_api_key or settings.google_api_key)

    except Exception as e:
        print(f"DEBUG: FATAL ERROR in query lifecycle: {str(e)}", flush=True)
        step = make_step("error", "Error", str(e), {
            "error": str(e),
            "traceback": traceback.format_exc(),
        })
        await emit({"type": "step", "data": step.model_dump()})
        await emit({"type": "error", "data": {"error": f"Sorry, an error occurred: {str(e)}"}})

    finally:
        if owned_client is not None:
            await owned_client.close()


async def run_query(
    query: str,
    *,
    data_source=None,
    google_api_key: Optional[str] = None,
    rawg_api_key: Optional[str] = None,
) -> AgentResponse:
    steps: List[Step] = []
    outcome: Dict[str, Any] = {"answer": "", "widgets": []}

    async def collect(event: Dict[str, Any]):
        data = event["data"]
        if event["type"] == "step":
            steps.append(Step.model_validate(data))
        elif event["type"] == "answer":
            outcome["answer"] = data.get("answer", "")
            outcome["widgets"] = data.get("calculation_widgets", [])
        elif event["type"] == "error":
            outcome["answer"] = data.get("error", "")

    await run_query_streaming(
        query,
        collect,
        data_source=data_source,
        google_api_key=google_api_key,
        rawg_api_key=rawg_api_key,
    )
    return AgentResponse(answer=outcome["answer"], steps=steps, widgets=outcome["widgets"])
