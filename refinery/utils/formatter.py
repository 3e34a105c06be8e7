"""Output Formatter — writes the final draft and its review trail as Markdown."""

from pathlib import Path

from refinery.config import get_config
from refinery.state import LoopOutcome

_REASON_LABELS = {
    "quality_met": "Quality met",
    "max_iterations_reached": "Max iterations reached (best effort)",
    "aborted": "Aborted",
}


def _slugify(text: str, max_words: int = 6) -> str:
    words = "".join(ch.lower() if ch.isalnum() else " " for ch in text).split()
    return "-".join(words[:max_words])


def _render_markdown(outcome: LoopOutcome, topic: str = "") -> str:
    """Render the outcome as a Markdown document."""
    lines = []

    lines.append(f"# {topic or 'Refined Draft'}")
    lines.append("")
    lines.append(f"- **Status:** {_REASON_LABELS.get(outcome.reason, outcome.reason)}")
    lines.append(f"- **Version:** {outcome.artifact.version}")
    lines.append(f"- **Reviews:** {outcome.evaluations}")
    lines.append("")

    lines.append("## Draft")
    lines.append("")
    lines.append(outcome.artifact.content)
    lines.append("")

    last = outcome.last_evaluation
    if last is not None and last.criteria:
        lines.append("## Criteria")
        lines.append("")
        for check in last.criteria:
            mark = "x" if check.satisfied else " "
            lines.append(f"- [{mark}] `{check.name}`")
        lines.append("")

    return "\n".join(lines)


def _render_trace_log(outcome: LoopOutcome) -> str:
    """Unresolved feedback at termination, for runs that did not meet quality."""
    if outcome.reason == "quality_met" or not outcome.feedback:
        return ""

    content = "\n---\n\n## Trace Log — "
    content += _REASON_LABELS.get(outcome.reason, outcome.reason) + "\n\n"
    if outcome.reason == "max_iterations_reached":
        content += "Unmet criteria at termination:\n\n"
    else:
        content += "Reason the loop stopped:\n\n"
    content += outcome.feedback + "\n"
    return content


def write_report(outcome: LoopOutcome, topic: str = "") -> Path:
    """Write the outcome as Markdown to the configured output path.

    A relative output_path is resolved against the current working directory.
    Returns the Path to the written file. Never overwrites an existing file.
    """
    config = get_config()
    base_path = Path(config["output_path"])
    if not base_path.is_absolute():
        base_path = Path.cwd() / base_path
    output_dir = base_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = _slugify(topic) or base_path.stem

    # Find a non-conflicting filename
    output_path = output_dir / f"{stem}.md"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).md"

    content = _render_markdown(outcome, topic=topic)
    content += _render_trace_log(outcome)

    output_path.write_text(content, encoding="utf-8")
    return output_path
