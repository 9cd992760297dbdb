from typing import Any, Dict
from langchain_core.messages import SystemMessage, HumanMessage
from langchain_core.runnables import RunnableConfig

from ..config import ainvoke_with_retry, get_llm
from ..errors import PlanParseFailure
from ..events import emit_step
from ..parsing import normalize_llm_content, parse_json_response
from ..prompts.planner_prompts import PLANNER_SYSTEM_PROMPT, PLANNER_USER_PROMPT
from ..state import QueryState

PLAN_PARSE_FAILED_ANSWER = "Sorry, I could not create a plan to answer your question. Please try rephrasing."


async def request_plan(query: str, api_key: str = None) -> Dict[str, Any]:
    """
    Asks the model for a plan and returns the parsed candidate.
    Raises PlanParseFailure when no JSON object can be recovered.
    """
    llm = get_llm("planner", api_key)
    messages = [
        SystemMessage(content=PLANNER_SYSTEM_PROMPT),
        HumanMessage(content=PLANNER_USER_PROMPT.format(query=query)),
    ]
    response = await ainvoke_with_retry(llm, messages, "Planner")
    raw = normalize_llm_content(response.content)

    candidate = parse_json_response(raw)
    if candidate is None:
        raise PlanParseFailure(raw)
    return candidate


async def planner_node(state: QueryState, config: RunnableConfig) -> Dict[str, Any]:
    print("DEBUG: planner_node entered", flush=True)
    query = state["query"]
    api_key = (config.get("configurable") or {}).get("google_api_key")

    await emit_step(config, "thinking", "Analyzing Query", f'Understanding: "{query}"', {"query": query})
    await emit_step(config, "thinking", "Creating Plan",
                    "Determining what data to fetch and how to analyze it...")

    try:
        candidate = await request_plan(query, api_key)
    except PlanParseFailure as e:
        print(f"⚠️  Planner returned no parsable plan ({len(e.raw_response)} chars)", flush=True)
        await emit_step(config, "error", "Plan Generation Failed",
                        "Could not generate a valid execution plan",
                        {"raw_response": e.raw_response})
        return {
            "outcome": "plan_parse_failed",
            "answer": PLAN_PARSE_FAILED_ANSWER,
            "errors": [str(e)],
        }

    reasoning = candidate.get("reasoning")
    await emit_step(config, "plan", "Plan Created",
                    reasoning if isinstance(reasoning, str) else "",
                    {"plan": candidate})
    return {"raw_plan": candidate}
