import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from langchain_core.runnables import RunnableConfig

from .state import Step, StepKind

StepSink = Callable[[Step], Awaitable[None]]


def new_step_id() -> str:
    return uuid.uuid4().hex[:7]


def make_step(kind: StepKind, name: str, summary: str, details: Optional[Dict[str, Any]] = None) -> Step:
    return Step(
        id=new_step_id(),
        kind=kind,
        name=name,
        summary=summary,
        details=details or {},
        timestamp=int(time.time() * 1000),
    )


def get_step_sink(config: Optional[RunnableConfig]) -> Optional[StepSink]:
    if not config:
        return None
    return (config.get("configurable") or {}).get("step_sink")


async def emit_step(
    config: Optional[RunnableConfig],
    kind: StepKind,
    name: str,
    summary: str,
    details: Optional[Dict[str, Any]] = None,
) -> Step:
    """Build a step and hand it to the sink injected for this query, if any."""
    step = make_step(kind, name, summary, details)
    sink = get_step_sink(config)
    if sink is not None:
        await sink(step)
    return step
