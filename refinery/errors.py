"""Exceptions raised by the refinement pipeline."""


class RefineryError(Exception):
    """Base class for pipeline errors."""


class CallerConfigurationError(RefineryError, ValueError):
    """Invalid caller input: non-positive bound, empty input, empty content or feedback."""


class NoProgressError(RefineryError):
    """A refiner produced no change despite non-empty feedback."""

    def __init__(self, feedback: str):
        super().__init__("Refiner returned unchanged content.")
        self.feedback = feedback


class CollaboratorUnavailable(RefineryError):
    """A generator, evaluator or refiner could not complete its call."""

    def __init__(self, collaborator: str, detail: str = ""):
        message = f"{collaborator} unavailable"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.collaborator = collaborator
