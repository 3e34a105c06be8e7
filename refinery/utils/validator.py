"""Input validation — rejects caller mistakes before any model is called."""

from refinery.errors import CallerConfigurationError


def validate_input(generation_input: str) -> str:
    """Validate that the generation input is a non-empty string.

    Returns the stripped input on success.
    Raises CallerConfigurationError if input is empty or whitespace-only.
    """
    if not isinstance(generation_input, str) or not generation_input.strip():
        raise CallerConfigurationError("Generation input must be a non-empty string.")
    return generation_input.strip()


def validate_max_iterations(max_iterations: int) -> int:
    """Validate that the iteration bound is a strictly positive integer."""
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int):
        raise CallerConfigurationError(
            f"max_iterations must be an integer, got {type(max_iterations).__name__}."
        )
    if max_iterations <= 0:
        raise CallerConfigurationError(
            f"max_iterations must be strictly positive, got {max_iterations}."
        )
    return max_iterations


def require_content(artifact) -> None:
    """Raise if the artifact has no content to evaluate or refine."""
    if not artifact.content or not artifact.content.strip():
        raise CallerConfigurationError("Artifact content must be non-empty.")


def require_feedback(feedback: str) -> str:
    if not isinstance(feedback, str) or not feedback.strip():
        raise CallerConfigurationError("Refinement feedback must be non-empty.")
    return feedback
