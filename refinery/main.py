"""Entry point: validates input, runs the pipeline, writes the report."""

import sys

from refinery.config import get_config
from refinery.pipeline import build_default_pipeline, run_pipeline
from refinery.utils.formatter import write_report
from refinery.utils.validator import validate_input, validate_max_iterations

USAGE = "usage: python -m refinery.main [--max-iterations N] [--rules-only] [topic ...]"


def run(topic: str, max_iterations: int | None = None, rules_only: bool = False) -> int:
    """Run the full pipeline on a topic string.

    Args:
        topic: What the draft should be about.
        max_iterations: Override for the loop bound. None uses config default.
        rules_only: Judge drafts with the deterministic criteria only.

    Returns a process exit code: 0 on quality met, 1 otherwise.
    """
    config = get_config()
    bound = max_iterations if max_iterations is not None else config["max_iterations"]
    validated = validate_input(topic)
    validate_max_iterations(bound)

    generator, evaluator, refiner = build_default_pipeline(rules_only=rules_only)
    result = run_pipeline(validated, bound, generator, evaluator, refiner)

    output_path = write_report(result, topic=validated)
    print(f"[Refinery] Status: {result.reason}")
    print(f"[Refinery] Iterations: {result.iterations}")
    print(f"[Refinery] Output written to: {output_path}")
    if result.feedback:
        print(f"[Refinery] Unresolved:\n{result.feedback}")

    return 0 if result.reason == "quality_met" else 1


def main() -> None:
    """CLI entry point — accepts the topic as arguments or from stdin."""
    args = sys.argv[1:]
    max_iterations = None
    rules_only = False

    if "--rules-only" in args:
        rules_only = True
        args.remove("--rules-only")

    if "--max-iterations" in args:
        idx = args.index("--max-iterations")
        try:
            max_iterations = int(args[idx + 1])
        except (IndexError, ValueError):
            print(USAGE, file=sys.stderr)
            sys.exit(2)
        del args[idx:idx + 2]

    if args:
        topic = " ".join(args)
    else:
        print("Enter the topic (Ctrl+D / Ctrl+Z to submit):")
        topic = sys.stdin.read()

    sys.exit(run(topic, max_iterations=max_iterations, rules_only=rules_only))


if __name__ == "__main__":
    main()
