"""Tests for the CLI entry point."""

import sys
from unittest.mock import patch

import pytest

from conftest import AppendingRefiner, ScriptedEvaluator, StubGenerator, fail_result, pass_result
from refinery import main as cli
from refinery.errors import CallerConfigurationError


def _collaborators(results):
    return StubGenerator(), ScriptedEvaluator(results), AppendingRefiner()


class TestRun:
    def test_quality_met_exit_code_and_output(self, mock_config, capsys):
        with patch.object(cli, "build_default_pipeline", return_value=_collaborators([pass_result()])):
            code = cli.run("Agent loops")

        out = capsys.readouterr().out
        assert code == 0
        assert "[Refinery] Status: quality_met" in out
        assert "agent-loops.md" in out

    def test_max_iterations_exit_code(self, mock_config, capsys):
        with patch.object(cli, "build_default_pipeline", return_value=_collaborators([fail_result("x")])):
            code = cli.run("Agent loops", max_iterations=2)

        out = capsys.readouterr().out
        assert code == 1
        assert "[Refinery] Iterations: 1" in out
        assert "Unresolved:\nx" in out

    def test_invalid_bound_rejected_before_building(self, mock_config):
        with patch.object(cli, "build_default_pipeline") as build:
            with pytest.raises(CallerConfigurationError):
                cli.run("Agent loops", max_iterations=0)
        build.assert_not_called()


class TestMain:
    def test_parses_flags(self, mock_config):
        argv = ["refinery", "--max-iterations", "3", "--rules-only", "Agent", "loops"]
        with patch.object(sys, "argv", argv), patch.object(cli, "run", return_value=0) as run:
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        run.assert_called_once_with("Agent loops", max_iterations=3, rules_only=True)
        assert exc_info.value.code == 0

    def test_bad_bound_prints_usage(self, mock_config, capsys):
        with patch.object(sys, "argv", ["refinery", "--max-iterations", "many", "topic"]):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err
