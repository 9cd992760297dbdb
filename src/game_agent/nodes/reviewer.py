from typing import Any, Dict
from langchain_core.messages import SystemMessage, HumanMessage
from langchain_core.runnables import RunnableConfig
from pydantic import ValidationError

from ..config import ainvoke_with_retry, get_llm
from ..errors import ReviewParseFailure
from ..events import emit_step
from ..parsing import normalize_llm_content, parse_json_response
from ..prompts.reviewer_prompts import REVIEWER_SYSTEM_PROMPT, REVIEWER_USER_PROMPT
from ..reporting import format_results_for_llm
from ..state import QueryState, ReviewResult, active_plan

REVIEW_FALLBACK_REASONING = "Failed to parse review response, proceeding with current results."


def parse_review(raw: str) -> ReviewResult:
    """Typed verdict from the reviewer's reply. Raises ReviewParseFailure."""
    verdict = parse_json_response(raw)
    if verdict is None:
        raise ReviewParseFailure(raw)
    try:
        return ReviewResult.model_validate(verdict)
    except ValidationError as e:
        raise ReviewParseFailure(raw) from e


async def review_results(query: str, results_summary: str, api_key: str = None) -> ReviewResult:
    llm = get_llm("reviewer", api_key)
    messages = [
        SystemMessage(content=REVIEWER_SYSTEM_PROMPT),
        HumanMessage(content=REVIEWER_USER_PROMPT.format(results_summary=results_summary, query=query)),
    ]
    response = await ainvoke_with_retry(llm, messages, "Reviewer")
    raw = normalize_llm_content(response.content)

    try:
        return parse_review(raw)
    except ReviewParseFailure:
        print("⚠️  Reviewer verdict unparsable; proceeding with current results", flush=True)
        return ReviewResult(satisfactory=True, reasoning=REVIEW_FALLBACK_REASONING)


def needs_revision(review: ReviewResult) -> bool:
    return not review.satisfactory and review.new_plan is not None


async def reviewer_node(state: QueryState, config: RunnableConfig) -> Dict[str, Any]:
    print("DEBUG: reviewer_node entered", flush=True)
    query = state["query"]
    results = state.get("results") or {}
    api_key = (config.get("configurable") or {}).get("google_api_key")

    await emit_step(config, "thinking", "Reviewing Results", "Checking if results are satisfactory...")

    summary = format_results_for_llm(query, results, active_plan(state))
    review = await review_results(query, summary, api_key)
    review_payload = review.model_dump()

    if needs_revision(review):
        await emit_step(config, "review", "Plan Revision Needed", review.reasoning,
                        {"original_results_summary": list(results), "review": review_payload})
    elif not review.satisfactory:
        await emit_step(config, "review", "Results Unsatisfactory",
                        "No revised plan was offered, proceeding with current results.",
                        {"review": review_payload})
    else:
        await emit_step(config, "review", "Results Satisfactory",
                        "Proceeding to answer generation.",
                        {"review": review_payload})

    print(f"DEBUG: review satisfactory={review.satisfactory} "
          f"new_plan={'yes' if review.new_plan is not None else 'no'}", flush=True)
    return {"review": review}
