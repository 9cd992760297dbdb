from typing import Any, Dict, List
from langchain_core.runnables import RunnableConfig

from ..errors import PlanValidationFailure
from ..events import emit_step
from ..state import QueryState
from ..validation import validate_plan


def invalid_plan_answer(errors: List[str]) -> str:
    return "Sorry, I created an invalid plan. The issue is:\n" + "\n".join(errors)


async def validator_node(state: QueryState, config: RunnableConfig) -> Dict[str, Any]:
    print("DEBUG: validator_node entered", flush=True)
    validation = validate_plan(state.get("raw_plan"))

    if not validation.valid:
        failure = PlanValidationFailure(validation.errors)
        print(f"DEBUG: plan rejected with {len(failure.errors)} error(s)", flush=True)
        await emit_step(config, "error", "Plan Validation Failed",
                        "The generated plan has invalid source references",
                        {"errors": failure.errors})
        return {
            "outcome": "plan_invalid",
            "answer": invalid_plan_answer(failure.errors),
            "errors": failure.errors,
        }

    print(f"DEBUG: plan accepted ({len(validation.plan.actions)} actions)", flush=True)
    return {"plan": validation.plan}
