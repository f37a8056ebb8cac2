"""Tests for the costgate CLI."""

import json

import pytest
from click.testing import CliRunner

from costgate.cli import cli
from costgate.config import CostgateConfig


@pytest.fixture(autouse=True)
def offline_cli(monkeypatch, encode):
    """Keep the CLI away from the user's config file and tiktoken downloads."""
    monkeypatch.setattr("costgate.cli.load_config", lambda: CostgateConfig(encoding="cl100k_base"))
    monkeypatch.setattr("costgate.scanner.get_encoder", lambda name: encode)


@pytest.fixture
def runner():
    """A click test runner."""
    return CliRunner()


def test_scan(runner, project_tree):
    """scan prints a human-readable token report."""
    result = runner.invoke(cli, ["scan", str(project_tree)])
    assert result.exit_code == 0
    assert "Tokens" in result.output
    assert "18" in result.output


def test_scan_json(runner, project_tree):
    """With --json, scan prints the summed counters; the image and the missing path are skips."""
    result = runner.invoke(cli, ["scan", "--json", str(project_tree), str(project_tree / "gone.py")])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"tokens": 18, "files_counted": 3, "files_skipped": 2}


def test_scan_requires_paths(runner):
    """scan without paths is a usage error."""
    result = runner.invoke(cli, ["scan"])
    assert result.exit_code != 0


def test_estimate_json(runner, project_tree):
    """estimate applies the tier's search overhead and keeps iterations above the floor."""
    result = runner.invoke(
        cli, ["estimate", str(project_tree), "--tier", "high", "--iterations", "4", "--json"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["complexity_tier"] == "HIGH"
    assert payload["effective_iterations"] == 4
    assert payload["base_context_tokens"] == 18 + 60_000 + 90_000


def test_estimate_text(runner, project_tree):
    """estimate titles the report with the task name."""
    result = runner.invoke(cli, ["estimate", str(project_tree), "--task", "Add tests"])
    assert result.exit_code == 0
    assert "Cost estimate: Add tests" in result.output
    assert "Estimated total" in result.output


def test_estimate_rejects_unknown_tier(runner):
    """An unknown --tier is rejected by click."""
    result = runner.invoke(cli, ["estimate", "--tier", "HUGE"])
    assert result.exit_code != 0


def test_breakdown_defaults(runner):
    """breakdown with no options reports the default total."""
    result = runner.invoke(cli, ["breakdown", "--json"])
    assert result.exit_code == 0
    assert json.loads(result.output)["final_total_tokens"] == 77_000


def test_breakdown_refactor_warning(runner):
    """A refactor task name triggers the cache-read warning."""
    result = runner.invoke(
        cli, ["breakdown", "--task", "Refactor the router", "--cache-read", "30000", "--iterations", "2"]
    )
    assert result.exit_code == 0
    assert "WARNING:" in result.output
    assert "180,000" in result.output
