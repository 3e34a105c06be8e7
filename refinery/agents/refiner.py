"""Refiner Agent — rewrites the current draft from the reviewer's feedback.

The full feedback text goes into the request verbatim; the refiner is
expected to address every numbered point in one pass.
"""

from langchain_google_genai import ChatGoogleGenerativeAI

from refinery.agents.base import Refiner
from refinery.agents.generator import build_requirements
from refinery.config import get_config, get_criteria
from refinery.errors import CollaboratorUnavailable
from refinery.state import Artifact
from refinery.utils.parsing import invoke_with_retry, response_text, strip_draft_fences
from refinery.utils.validator import require_content, require_feedback

SYSTEM_PROMPT = """\
You are the Refiner agent in an iterative drafting pipeline.

Your job is to improve the current draft so that it satisfies every point of the \
reviewer's feedback while keeping its core message.

Refinement process:
1. Read every numbered feedback point.
2. Apply ALL of them. Do not skip any point, even if it seems minor.
3. Keep everything that the feedback does not ask you to change.
4. Re-check the requirements below before answering.

Requirements the draft must keep satisfying:
{requirements}

Respond ONLY with the full revised draft. No markdown fences, no commentary, \
no list of changes.
"""


class DraftRefiner(Refiner):
    """Feedback-driven refiner backed by the configured Gemini model."""

    def __init__(self, llm=None):
        config = get_config()
        self.criteria = get_criteria()
        self.llm = llm or ChatGoogleGenerativeAI(
            model=config["refiner_model"],
            temperature=config.get("temperature", 0),
        )

    def _build_user_prompt(self, artifact: Artifact, feedback: str) -> str:
        return (
            f"## Current Draft (version {artifact.version})\n{artifact.content}\n\n"
            f"## Reviewer Feedback\n{feedback}"
        )

    def refine(self, artifact: Artifact, feedback: str) -> Artifact:
        require_content(artifact)
        require_feedback(feedback)

        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(requirements=build_requirements(self.criteria)),
            },
            {"role": "user", "content": self._build_user_prompt(artifact, feedback)},
        ]

        try:
            response = invoke_with_retry(self.llm, messages)
        except Exception as exc:
            raise CollaboratorUnavailable("Refiner", repr(exc)) from exc

        content = strip_draft_fences(response_text(response))
        if not content:
            raise CollaboratorUnavailable("Refiner", "model returned an empty draft")

        return artifact.revise(content)
