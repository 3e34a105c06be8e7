"""Pipeline driver: generate once, then hand the seed to the refinement loop."""

import threading

from refinery.agents.base import Evaluator, Generator, Refiner
from refinery.graph import run_refinement_loop
from refinery.state import LoopOutcome
from refinery.utils.validator import validate_input, validate_max_iterations

PipelineResult = LoopOutcome


def run_pipeline(
    generation_input: str,
    max_iterations: int,
    generator: Generator,
    evaluator: Evaluator,
    refiner: Refiner,
    cancel_event: threading.Event | None = None,
) -> PipelineResult:
    """Run the full pipeline on one generation input.

    Both arguments are validated before the generator is called. The loop's
    final artifact and termination reason are returned unchanged.
    """
    validated = validate_input(generation_input)
    validate_max_iterations(max_iterations)

    seed = generator.generate(validated)
    return run_refinement_loop(seed, evaluator, refiner, max_iterations, cancel_event)


def build_default_pipeline(rules_only: bool = False) -> tuple[Generator, Evaluator, Refiner]:
    """Wire the configured model-backed collaborators.

    With rules_only, drafts are judged by the deterministic criteria alone
    and no reviewer model is created.
    """
    from refinery.agents.generator import DraftGenerator
    from refinery.agents.refiner import DraftRefiner
    from refinery.agents.reviewer import DraftReviewer, RuleEvaluator

    evaluator = RuleEvaluator() if rules_only else DraftReviewer()
    return DraftGenerator(), evaluator, DraftRefiner()
