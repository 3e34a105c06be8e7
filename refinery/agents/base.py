"""Collaborator contracts for the refinement pipeline.

Implement these for a domain-specific pipeline:
  - Generator: writes the seed draft once
  - Evaluator: judges a draft against acceptance criteria
  - Refiner: rewrites a draft from evaluator feedback
"""

from abc import ABC, abstractmethod

from refinery.state import Artifact, EvaluationResult


class Generator(ABC):
    @abstractmethod
    def generate(self, generation_input: str) -> Artifact:
        """Produce the seed draft (version 0) from the caller's input."""


class Evaluator(ABC):
    @abstractmethod
    def evaluate(self, artifact: Artifact) -> EvaluationResult:
        """Check artifact against every criterion.

        Must not mutate the artifact. On "fail" the feedback lists every
        unsatisfied criterion; a check that cannot be computed counts as unmet.
        """

    def reset(self) -> None:
        """Forget per-run state. Called once at the start of every refinement loop."""


class Refiner(ABC):
    @abstractmethod
    def refine(self, artifact: Artifact, feedback: str) -> Artifact:
        """Return a new draft, one version later, addressing all of feedback.

        May raise NoProgressError when it cannot make any change.
        """
