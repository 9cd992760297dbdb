from typing import Any, Dict
from langchain_core.messages import SystemMessage, HumanMessage
from langchain_core.runnables import RunnableConfig

from ..config import ainvoke_with_retry, get_llm
from ..events import emit_step
from ..parsing import normalize_llm_content
from ..prompts.answer_prompts import ANSWER_SYSTEM_PROMPT, ANSWER_USER_PROMPT
from ..reporting import format_results_for_llm, serialize_results
from ..state import QueryState, active_plan

SUMMARY_PREVIEW_CHARS = 200


def preview(answer: str) -> str:
    if len(answer) > SUMMARY_PREVIEW_CHARS:
        return answer[:SUMMARY_PREVIEW_CHARS] + "..."
    return answer


async def answer_generator_node(state: QueryState, config: RunnableConfig) -> Dict[str, Any]:
    print("DEBUG: answer_generator_node entered", flush=True)
    query = state["query"]
    results = state.get("results") or {}
    widgets = state.get("widgets") or {}
    api_key = (config.get("configurable") or {}).get("google_api_key")

    await emit_step(config, "generating_answer", "Generating Answer",
                    "Analyzing results and writing response...",
                    {"results_summary": list(results)})

    summary = format_results_for_llm(query, results, active_plan(state))
    llm = get_llm("answer", api_key)
    messages = [
        SystemMessage(content=ANSWER_SYSTEM_PROMPT),
        HumanMessage(content=ANSWER_USER_PROMPT.format(results_summary=summary)),
    ]
    response = await ainvoke_with_retry(llm, messages, "Answer")
    answer = normalize_llm_content(response.content).strip()

    await emit_step(config, "answer", "Final Answer", preview(answer), {
        "full_answer": answer,
        "execution_results": serialize_results(results),
        "calculation_widgets": list(widgets.values()),
    })
    return {"answer": answer, "outcome": "answered"}
