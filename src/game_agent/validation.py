"""
Structural and referential checks for candidate plans.

Calculate and compare actions may only read raw fetch results, so every
`source` must name a fetch action in the same plan. All violations are
collected in one pass; the validator never repairs a plan.
"""
from typing import Any, Dict, List, Optional, Set
from pydantic import BaseModel, Field, ValidationError

from .state import Plan

ACTIONS_REQUIRED_ERROR = 'Plan must contain an "actions" array'


class PlanValidation(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    plan: Optional[Plan] = None


def has_action_list(candidate: Any) -> bool:
    return isinstance(candidate, dict) and isinstance(candidate.get("actions"), list)


def _collect_fetch_ids(actions: List[Any]) -> List[str]:
    # Ordered set. Duplicate fetch ids collapse silently here.
    seen: Dict[str, None] = {}
    for action in actions:
        if isinstance(action, dict) and action.get("action") == "fetch":
            seen[str(action.get("id"))] = None
    return list(seen)


def _is_fetch_reference(source: Any, known: Set[str]) -> bool:
    return isinstance(source, str) and source in known


def _reference_errors(actions: List[Any], fetch_ids: List[str]) -> List[str]:
    errors = []
    available = ", ".join(fetch_ids)
    known = set(fetch_ids)

    for action in actions:
        if not isinstance(action, dict):
            continue
        kind = action.get("action")
        action_id = action.get("id")

        if kind == "calculate":
            source = action.get("source")
            if not _is_fetch_reference(source, known):
                errors.append(
                    f'Calculate action "{action_id}" has invalid source "{source}". '
                    f"The source must be the ID of a fetch action. Available fetch actions: {available}"
                )
        elif kind == "compare":
            groups = action.get("groups")
            for group in groups if isinstance(groups, list) else []:
                if not isinstance(group, dict):
                    continue
                source = group.get("source")
                if not _is_fetch_reference(source, known):
                    errors.append(
                        f'Compare action "{action_id}" group "{group.get("name")}" has invalid source "{source}". '
                        f"The source must be the ID of a fetch action. Available fetch actions: {available}"
                    )
    return errors


def _schema_errors(exc: ValidationError) -> List[str]:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"Invalid plan field {location}: {err.get('msg')}")
    return messages


def validate_plan(candidate: Any) -> PlanValidation:
    """Check a parsed candidate plan and return every violation found."""
    if not has_action_list(candidate):
        return PlanValidation(valid=False, errors=[ACTIONS_REQUIRED_ERROR])

    actions = candidate["actions"]
    fetch_ids = _collect_fetch_ids(actions)
    errors = _reference_errors(actions, fetch_ids)

    plan = None
    try:
        plan = Plan.model_validate(candidate)
    except ValidationError as e:
        errors.extend(_schema_errors(e))

    if errors:
        return PlanValidation(valid=False, errors=errors)
    return PlanValidation(valid=True, errors=[], plan=plan)
