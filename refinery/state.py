"""Refinery state — the values passed between generator, reviewer, refiner and loop."""

from dataclasses import dataclass, field
from typing import Literal, TypedDict

Verdict = Literal["pass", "fail"]
TerminationReason = Literal["quality_met", "max_iterations_reached", "aborted"]


@dataclass(frozen=True)
class Artifact:
    """The draft under refinement. Each refinement produces a new value."""

    content: str
    version: int = 0

    def revise(self, content: str) -> "Artifact":
        return Artifact(content=content, version=self.version + 1)


@dataclass(frozen=True)
class CriterionCheck:
    name: str
    satisfied: bool
    message: str = ""  # Actionable description shown when unmet.


@dataclass(frozen=True)
class EvaluationResult:
    verdict: Verdict
    feedback: str  # Empty when verdict is "pass".
    criteria: tuple[CriterionCheck, ...] = ()

    @property
    def passed(self) -> bool:
        return self.verdict == "pass"

    @property
    def unmet(self) -> list[CriterionCheck]:
        return [c for c in self.criteria if not c.satisfied]

    @classmethod
    def from_checks(cls, checks) -> "EvaluationResult":
        """Build a result from ordered checks.

        The verdict is "pass" iff every check is satisfied. On "fail" the
        feedback lists every unsatisfied check, in order, one per line.
        """
        checks = tuple(checks)
        unmet = [c for c in checks if not c.satisfied]
        if not unmet:
            return cls(verdict="pass", feedback="", criteria=checks)

        lines = [
            f"{i}. [{c.name}] {c.message or 'Criterion not satisfied.'}"
            for i, c in enumerate(unmet, 1)
        ]
        return cls(verdict="fail", feedback="\n".join(lines), criteria=checks)


class LoopState(TypedDict):
    artifact: Artifact  # Current draft. Replaced only by the refine node.
    iteration: int  # Completed refinement cycles. Starts at 0.
    max_iterations: int  # Fixed for the run.
    evaluation: EvaluationResult | None  # Latest evaluation.
    history: list[EvaluationResult]  # All evaluations, in order.
    status: Literal["running", "quality_met", "max_iterations_reached", "aborted"]
    abort_reason: str


@dataclass
class LoopOutcome:
    """What the refinement loop hands back once it reaches a terminal state."""

    artifact: Artifact
    reason: TerminationReason
    iterations: int
    history: list[EvaluationResult] = field(default_factory=list)
    feedback: str = ""

    @property
    def evaluations(self) -> int:
        return len(self.history)

    @property
    def last_evaluation(self) -> EvaluationResult | None:
        return self.history[-1] if self.history else None
