"""Shared fixtures for the Refinery test suite."""

import pytest
from unittest.mock import patch

from refinery.agents.base import Evaluator, Generator, Refiner
from refinery.state import Artifact, CriterionCheck, EvaluationResult


@pytest.fixture
def criteria():
    """Small, test-friendly acceptance criteria."""
    return {
        "min_length": 20,
        "max_length": 80,
        "required_phrases": ["refinery"],
        "forbidden_phrases": ["synergy"],
        "forbid_emojis": True,
        "forbid_hashtags": True,
        "editorial": [
            {"name": "call_to_action", "description": "Ends with a call-to-action."},
            {"name": "practical_examples", "description": "Has a practical example."},
        ],
    }


@pytest.fixture
def mock_config(criteria, tmp_path):
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "generator_model": "gemini-2.0-flash",
        "refiner_model": "gemini-2.0-flash",
        "reviewer_model": "claude-sonnet-4-6",
        "temperature": 0,
        "max_iterations": 8,
        "llm_max_retries": 0,
        "output_path": str(tmp_path / "output" / "draft.md"),
        "criteria": criteria,
    }
    with patch("refinery.config._config", test_config):
        yield test_config


def fail_result(feedback: str = "1. [length] Draft is too short.") -> EvaluationResult:
    return EvaluationResult(
        verdict="fail",
        feedback=feedback,
        criteria=(CriterionCheck("length", False, "Draft is too short."),),
    )


def pass_result() -> EvaluationResult:
    return EvaluationResult(
        verdict="pass", feedback="", criteria=(CriterionCheck("length", True),)
    )


class ScriptedEvaluator(Evaluator):
    """Returns pre-scripted results in order; repeats the last one when exhausted."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    def evaluate(self, artifact):
        self.calls.append(artifact)
        index = min(len(self.calls), len(self.results)) - 1
        return self.results[index]


class AppendingRefiner(Refiner):
    """Appends a marker per call so every refinement changes the content."""

    def __init__(self):
        self.calls = []

    def refine(self, artifact, feedback):
        self.calls.append((artifact, feedback))
        return artifact.revise(f"{artifact.content} +r{len(self.calls)}")


class StubGenerator(Generator):
    def __init__(self, content: str = "seed draft"):
        self.content = content
        self.calls = []

    def generate(self, generation_input):
        self.calls.append(generation_input)
        return Artifact(content=self.content)


@pytest.fixture
def seed():
    return Artifact(content="seed draft")
