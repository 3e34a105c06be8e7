"""LangGraph StateGraph definition for the evaluate-refine loop."""

import sys
import threading

from langgraph.graph import END, START, StateGraph

from refinery.agents.base import Evaluator, Refiner
from refinery.errors import NoProgressError
from refinery.state import Artifact, LoopOutcome, LoopState
from refinery.utils.validator import validate_max_iterations

CANCELLED_REASON = "Cancelled at a cycle boundary."


def _route_after_evaluation(state: LoopState) -> str:
    """Conditional edge: decide next step after the evaluate node.

    Priority order:
    1. pass → quality_met
    2. fail + this was the last allowed evaluation → timeout
    3. fail + iterations left → refine
    """
    if state["evaluation"].passed:
        return "quality_met"
    if state["iteration"] + 1 >= state["max_iterations"]:
        return "timeout"
    return "refine"


def _route_after_refine(state: LoopState) -> str:
    if state["status"] == "aborted":
        return "end"
    return "increment"


def _route_after_increment(state: LoopState) -> str:
    if state["status"] == "aborted":
        return "end"
    return "evaluate"


def _set_quality_met(state: LoopState) -> dict:
    return {"status": "quality_met"}


def _set_timeout(state: LoopState) -> dict:
    """Set status to max_iterations_reached when the loop ceiling is hit."""
    return {"status": "max_iterations_reached"}


def build_refinement_graph(
    evaluator: Evaluator,
    refiner: Refiner,
    cancel_event: threading.Event | None = None,
):
    """Compile the loop graph around the given collaborators.

    Collaborator exceptions are not caught here; they propagate out of
    ``invoke`` to the caller.
    """

    def evaluate_node(state: LoopState) -> dict:
        result = evaluator.evaluate(state["artifact"])
        history = state["history"] + [result]
        print(
            f"[Refinery] Review {len(history)}/{state['max_iterations']} — "
            f"{result.verdict} ({len(result.unmet)} unmet)",
            file=sys.stderr,
        )
        return {"evaluation": result, "history": history}

    def refine_node(state: LoopState) -> dict:
        current = state["artifact"]
        feedback = state["evaluation"].feedback
        try:
            revised = refiner.refine(current, feedback)
        except NoProgressError as exc:
            return {"status": "aborted", "abort_reason": exc.feedback or feedback}

        if revised.content == current.content:
            return {"status": "aborted", "abort_reason": feedback}
        return {"artifact": revised}

    def increment_node(state: LoopState) -> dict:
        """Bump the iteration counter; the only place cancellation is honoured."""
        if cancel_event is not None and cancel_event.is_set():
            return {"iteration": state["iteration"] + 1,
                    "status": "aborted", "abort_reason": CANCELLED_REASON}
        return {"iteration": state["iteration"] + 1}

    workflow = StateGraph(LoopState)

    workflow.add_node("evaluate", evaluate_node)
    workflow.add_node("refine", refine_node)
    workflow.add_node("increment", increment_node)
    workflow.add_node("quality_met", _set_quality_met)
    workflow.add_node("timeout", _set_timeout)

    workflow.add_edge(START, "evaluate")

    workflow.add_conditional_edges(
        "evaluate",
        _route_after_evaluation,
        {
            "quality_met": "quality_met",
            "timeout": "timeout",
            "refine": "refine",
        },
    )
    workflow.add_conditional_edges(
        "refine",
        _route_after_refine,
        {"end": END, "increment": "increment"},
    )
    workflow.add_conditional_edges(
        "increment",
        _route_after_increment,
        {"end": END, "evaluate": "evaluate"},
    )

    workflow.add_edge("quality_met", END)
    workflow.add_edge("timeout", END)

    return workflow.compile()


def initial_state(seed: Artifact, max_iterations: int) -> LoopState:
    return {
        "artifact": seed,
        "iteration": 0,
        "max_iterations": max_iterations,
        "evaluation": None,
        "history": [],
        "status": "running",
        "abort_reason": "",
    }


def _recursion_limit(max_iterations: int) -> int:
    # evaluate + refine + increment per cycle, then evaluate + terminal node.
    return 3 * max_iterations + 10


def _outcome(state: LoopState) -> LoopOutcome:
    status = state["status"]
    if status == "aborted":
        feedback = state["abort_reason"]
    elif status == "max_iterations_reached":
        feedback = state["evaluation"].feedback
    else:
        feedback = ""

    return LoopOutcome(
        artifact=state["artifact"],
        reason=status,
        iterations=state["iteration"],
        history=list(state["history"]),
        feedback=feedback,
    )


def run_refinement_loop(
    seed: Artifact,
    evaluator: Evaluator,
    refiner: Refiner,
    max_iterations: int,
    cancel_event: threading.Event | None = None,
) -> LoopOutcome:
    """Run evaluate → refine cycles on seed until a terminal state is reached.

    Performs at most ``max_iterations`` evaluations and ``max_iterations - 1``
    refinements. Raises CallerConfigurationError for a non-positive bound
    before calling any collaborator.
    """
    validate_max_iterations(max_iterations)
    state = initial_state(seed, max_iterations)

    if cancel_event is not None and cancel_event.is_set():
        state["status"] = "aborted"
        state["abort_reason"] = CANCELLED_REASON
        return _outcome(state)

    evaluator.reset()
    graph = build_refinement_graph(evaluator, refiner, cancel_event)
    final_state = graph.invoke(
        state, config={"recursion_limit": _recursion_limit(max_iterations)}
    )
    return _outcome(final_state)
