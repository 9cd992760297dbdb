from langgraph.graph import StateGraph, END
from .state import QueryState
from .nodes.planner import planner_node
from .nodes.validator import validator_node
from .nodes.executor import executor_node
from .nodes.reviewer import reviewer_node, needs_revision
from .nodes.replanner import replanner_node
from .nodes.answer_generator import answer_generator_node


def route_after_planner(state: QueryState) -> str:
    if state.get("outcome") == "plan_parse_failed":
        return "end"
    return "validator"


def route_after_validator(state: QueryState) -> str:
    if state.get("outcome") == "plan_invalid":
        return "end"
    return "executor"


def route_after_executor(state: QueryState) -> str:
    # A revised plan is executed once and never reviewed again.
    if state.get("replanned"):
        return "answer_generator"
    return "reviewer"


def route_after_reviewer(state: QueryState) -> str:
    review = state.get("review")
    if review is not None and needs_revision(review):
        return "replanner"
    return "answer_generator"


def route_after_replanner(state: QueryState) -> str:
    if state.get("revised_plan") is not None:
        return "executor"
    return "answer_generator"


def create_graph():
    graph = StateGraph(QueryState)

    graph.add_node("planner", planner_node)
    graph.add_node("validator", validator_node)
    graph.add_node("executor", executor_node)
    graph.add_node("reviewer", reviewer_node)
    graph.add_node("replanner", replanner_node)
    graph.add_node("answer_generator", answer_generator_node)

    graph.set_entry_point("planner")

    graph.add_conditional_edges(
        "planner",
        route_after_planner,
        {
            "validator": "validator",
            "end": END
        }
    )
    graph.add_conditional_edges(
        "validator",
        route_after_validator,
        {
            "executor": "executor",
            "end": END
        }
    )
    graph.add_conditional_edges(
        "executor",
        route_after_executor,
        {
            "reviewer": "reviewer",
            "answer_generator": "answer_generator"
        }
    )
    graph.add_conditional_edges(
        "reviewer",
        route_after_reviewer,
        {
            "replanner": "replanner",
            "answer_generator": "answer_generator"
        }
    )
    graph.add_conditional_edges(
        "replanner",
        route_after_replanner,
        {
            "executor": "executor",
            "answer_generator": "answer_generator"
        }
    )

    graph.add_edge("answer_generator", END)

    return graph.compile()
