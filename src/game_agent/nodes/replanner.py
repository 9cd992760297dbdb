"""
Replan controller.

Accepts at most one reviewer-supplied plan per query. An accepted plan is
stored as `revised_plan` beside the original, never in place of it; the
executor then rebuilds the result store from empty. A rejected plan is
logged and the original results stand.
"""
from typing import Any, Dict
from langchain_core.runnables import RunnableConfig

from ..errors import ReplanValidationFailure
from ..events import emit_step
from ..state import Plan, QueryState, ReviewResult
from ..validation import ACTIONS_REQUIRED_ERROR, has_action_list, validate_plan


def accept_revision(review: ReviewResult) -> Plan:
    """Validated replacement plan. Raises ReplanValidationFailure."""
    candidate = review.new_plan
    if not has_action_list(candidate):
        raise ReplanValidationFailure([ACTIONS_REQUIRED_ERROR], missing_actions=True)

    validation = validate_plan(candidate)
    if not validation.valid:
        raise ReplanValidationFailure(validation.errors)
    return validation.plan


async def replanner_node(state: QueryState, config: RunnableConfig) -> Dict[str, Any]:
    print("DEBUG: replanner_node entered", flush=True)
    review = state["review"]

    try:
        plan = accept_revision(review)
    except ReplanValidationFailure as e:
        if e.missing_actions:
            print("⚠️  Revised plan has no actions; keeping original results", flush=True)
            await emit_step(config, "error", "New Plan Missing Actions",
                            "The revised plan was missing actions, proceeding with original results.",
                            {"review": review.model_dump()})
        else:
            print(f"⚠️  Revised plan invalid ({len(e.errors)} error(s)); keeping original results", flush=True)
            await emit_step(config, "error", "New Plan Invalid",
                            "The revised plan was invalid, proceeding with original results.",
                            {"errors": e.errors})
        return {"errors": (state.get("errors") or []) + e.errors}

    await emit_step(config, "plan", "New Plan Created", plan.reasoning or "",
                    {"plan": plan.model_dump()})
    return {"revised_plan": plan, "replanned": True}
