"""Generator Agent — writes the first draft from the caller's topic.

The draft only needs to be a solid starting point; the refinement loop is
responsible for bringing it in line with every acceptance criterion.
"""

from langchain_google_genai import ChatGoogleGenerativeAI

from refinery.agents.base import Generator
from refinery.config import get_config, get_criteria
from refinery.errors import CollaboratorUnavailable
from refinery.state import Artifact
from refinery.utils.parsing import invoke_with_retry, response_text, strip_draft_fences

SYSTEM_PROMPT = """\
You are the Generator agent in an iterative drafting pipeline.

Write a first draft of a short professional post on the topic the user gives you. \
A reviewer will check the draft and a refiner will polish it afterwards, so aim for \
a complete, well-structured draft rather than perfection.

Guidelines:
- Professional yet conversational tone, aimed at practitioners.
- Concrete details and practical applications over generalities.
- Close with a clear call-to-action.
{requirements}
- Respond ONLY with the draft text. No title line, no markdown fences, no commentary.
"""


def build_requirements(criteria: dict) -> str:
    """Render the configured acceptance criteria as prompt bullet points."""
    lines = []
    min_length = criteria.get("min_length")
    max_length = criteria.get("max_length")
    if min_length and max_length:
        lines.append(f"- Length between {min_length} and {max_length} characters.")
    elif min_length:
        lines.append(f"- At least {min_length} characters.")
    elif max_length:
        lines.append(f"- At most {max_length} characters.")
    for phrase in criteria.get("required_phrases") or []:
        lines.append(f"- Mention '{phrase}'.")
    for phrase in criteria.get("forbidden_phrases") or []:
        lines.append(f"- Never use '{phrase}'.")
    if criteria.get("forbid_emojis", True):
        lines.append("- No emojis.")
    if criteria.get("forbid_hashtags", True):
        lines.append("- No hashtags.")
    for item in criteria.get("editorial") or []:
        lines.append(f"- {item['description']}")
    return "\n".join(lines)


class DraftGenerator(Generator):
    """Seed-draft generator backed by the configured Gemini model."""

    def __init__(self, llm=None):
        config = get_config()
        self.criteria = get_criteria()
        self.llm = llm or ChatGoogleGenerativeAI(
            model=config["generator_model"],
            temperature=config.get("temperature", 0),
        )

    def generate(self, generation_input: str) -> Artifact:
        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(requirements=build_requirements(self.criteria)),
            },
            {"role": "user", "content": f"## Topic\n{generation_input}"},
        ]

        try:
            response = invoke_with_retry(self.llm, messages)
        except Exception as exc:
            raise CollaboratorUnavailable("Generator", repr(exc)) from exc

        content = strip_draft_fences(response_text(response))
        if not content:
            raise CollaboratorUnavailable("Generator", "model returned an empty draft")

        return Artifact(content=content, version=0)
