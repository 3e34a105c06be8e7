"""Reviewer Agent — checks the current draft against the acceptance criteria.

Rule criteria (length, phrases, emojis, hashtags) are computed locally.
Editorial criteria are judged by the reviewer model, which must answer with
this schema:
{
  "criteria": [
    {
      "name": "string (one of the configured editorial criterion names)",
      "satisfied": true | false,
      "feedback": "string (actionable fix, required when satisfied is false)"
    }
  ]
}
"""

import json
import sys

from langchain_anthropic import ChatAnthropic

from refinery.agents.base import Evaluator
from refinery.config import get_config, get_criteria
from refinery.errors import CollaboratorUnavailable
from refinery.state import Artifact, CriterionCheck, EvaluationResult
from refinery.utils.criteria import run_rule_checks
from refinery.utils.parsing import invoke_with_retry, response_text, strip_fences
from refinery.utils.validator import require_content

SYSTEM_PROMPT = """\
You are the Reviewer agent in an iterative drafting pipeline.

Your job is to judge a draft against a fixed list of editorial criteria and return \
structured feedback. A refiner will rewrite the draft using ONLY your feedback, so every \
unmet criterion needs a concrete, actionable instruction.

Criteria:
{criteria}

You MUST respond with valid JSON matching this exact schema:
{{
  "criteria": [
    {{
      "name": "criterion name exactly as listed above",
      "satisfied": true or false,
      "feedback": "what to change (empty string when satisfied)"
    }}
  ]
}}

Rules:
- Report EVERY listed criterion exactly once, in the listed order.
- Judge only the listed criteria. Length, emojis and hashtags are checked elsewhere.
- Be strict but fair: mark a criterion satisfied only if a careful editor would agree.
- Respond ONLY with the JSON object. No markdown fences, no commentary.
"""

_BOOL_STRINGS = {"true": True, "yes": True, "pass": True, "false": False, "no": False, "fail": False}


def _validate_response(data: dict, expected_names: list[str]) -> None:
    """Validate and normalize the Reviewer response to match the required schema."""
    if not isinstance(data, dict) or "criteria" not in data:
        raise ValueError("Reviewer response missing 'criteria' field.")
    if not isinstance(data["criteria"], list):
        raise ValueError("'criteria' must be a list.")

    seen = set()
    for i, entry in enumerate(data["criteria"]):
        if not isinstance(entry, dict) or "name" not in entry or "satisfied" not in entry:
            raise ValueError(f"Criterion {i} missing required fields (name, satisfied).")
        if not isinstance(entry["name"], str):
            raise ValueError(f"Criterion {i} has invalid 'name' {entry['name']!r}. Must be a string.")
        if entry["name"] in seen:
            raise ValueError(f"Criterion '{entry['name']}' reported more than once.")
        seen.add(entry["name"])

        satisfied = entry["satisfied"]
        if isinstance(satisfied, str) and satisfied.strip().lower() in _BOOL_STRINGS:
            entry["satisfied"] = _BOOL_STRINGS[satisfied.strip().lower()]
        elif not isinstance(satisfied, bool):
            raise ValueError(
                f"Criterion {i} has invalid 'satisfied' value {satisfied!r}. Must be a boolean."
            )

        if "feedback" not in entry or entry["feedback"] is None:
            entry["feedback"] = ""
        if not isinstance(entry["feedback"], str):
            raise ValueError(
                f"Criterion {i} has invalid 'feedback' {entry['feedback']!r}. Must be a string."
            )

        if entry["name"] not in expected_names:
            print(
                f"[Refinery] Warning: reviewer reported unknown criterion "
                f"'{entry['name']}'. Ignoring it.",
                file=sys.stderr,
            )


def _to_checks(data: dict | None, editorial: list[dict]) -> list[CriterionCheck]:
    """Map the reviewer's verdicts onto the configured editorial criteria, in order.

    A criterion the reviewer did not report counts as unmet.
    """
    reported = {}
    if data:
        for entry in data["criteria"]:
            reported[entry["name"]] = entry

    checks = []
    for item in editorial:
        name = item["name"]
        entry = reported.get(name)
        if entry is None:
            checks.append(CriterionCheck(
                name,
                False,
                f"Check '{name}' could not be computed (no verdict from the reviewer). "
                f"Make sure the draft clearly satisfies: {item['description']}",
            ))
        elif entry["satisfied"]:
            checks.append(CriterionCheck(name, True))
        else:
            checks.append(CriterionCheck(
                name, False, entry["feedback"].strip() or item["description"]
            ))
    return checks


class RuleEvaluator(Evaluator):
    """Evaluator that runs only the deterministic rule criteria."""

    def __init__(self, criteria: dict | None = None):
        if criteria is None:
            criteria = get_criteria()
        self.criteria = criteria

    def evaluate(self, artifact: Artifact) -> EvaluationResult:
        require_content(artifact)
        return EvaluationResult.from_checks(run_rule_checks(artifact.content, self.criteria))


class DraftReviewer(RuleEvaluator):
    """Rule criteria plus editorial criteria judged by the configured Claude model.

    Results are memoised by content for the current run, so evaluating the
    same draft twice returns the identical result without a second model call.
    The memo is cleared by reset() when a new refinement loop starts.
    """

    def __init__(self, criteria: dict | None = None, llm=None):
        super().__init__(criteria)
        config = get_config()
        self.llm = llm or ChatAnthropic(
            model=config["reviewer_model"],
            temperature=config.get("temperature", 0),
        )
        self._cache: dict[str, EvaluationResult] = {}

    def reset(self) -> None:
        self._cache.clear()

    def evaluate(self, artifact: Artifact) -> EvaluationResult:
        require_content(artifact)
        cached = self._cache.get(artifact.content)
        if cached is not None:
            return cached

        checks = run_rule_checks(artifact.content, self.criteria)
        editorial = self.criteria.get("editorial") or []
        if editorial:
            checks.extend(self._review_editorial(artifact.content, editorial))

        result = EvaluationResult.from_checks(checks)
        self._cache[artifact.content] = result
        return result

    def _invoke(self, messages):
        try:
            return invoke_with_retry(self.llm, messages)
        except Exception as exc:
            raise CollaboratorUnavailable("Reviewer", repr(exc)) from exc

    def _review_editorial(self, content: str, editorial: list[dict]) -> list[CriterionCheck]:
        names = [item["name"] for item in editorial]
        listing = "\n".join(f"- {item['name']}: {item['description']}" for item in editorial)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT.format(criteria=listing)},
            {"role": "user", "content": f"## Current Draft\n{content}"},
        ]

        # First attempt
        response = self._invoke(messages)
        try:
            data = json.loads(strip_fences(response_text(response)))
            _validate_response(data, names)
        except (json.JSONDecodeError, ValueError):
            # Re-prompt once before giving up on the editorial checks
            messages.append({"role": "assistant", "content": response_text(response)})
            messages.append({
                "role": "user",
                "content": (
                    "Your response did not match the required JSON schema. "
                    "Please try again with ONLY the raw JSON object — "
                    "no markdown fences, no commentary."
                ),
            })
            response = self._invoke(messages)
            try:
                data = json.loads(strip_fences(response_text(response)))
                _validate_response(data, names)
            except (json.JSONDecodeError, ValueError) as exc:
                print(
                    f"[Refinery] Warning: reviewer response unusable after re-prompt "
                    f"({exc}). Editorial checks marked as not computed.",
                    file=sys.stderr,
                )
                data = None

        return _to_checks(data, editorial)
