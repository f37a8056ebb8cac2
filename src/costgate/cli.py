"""CLI entrypoint — costgate serve, costgate scan, costgate estimate, costgate breakdown."""

from __future__ import annotations

import click

from costgate.config import load_config
from costgate.cost import compute_budget_breakdown, fill_budget_defaults
from costgate.logging_config import setup_logging
from costgate.models import TaskEstimateInput
from costgate.report import render_budget_breakdown, render_scan_result, render_task_estimate, to_json
from costgate.risk import build_rules
from costgate.server import estimate_task, measure, run_server

TIER_CHOICES = click.Choice(["LOW", "MEDIUM", "HIGH", "CRITICAL"], case_sensitive=False)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every skipped file to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """costgate — estimate what an agent task will cost before running it."""
    config = load_config()
    setup_logging(config.log_level, verbose=verbose)
    ctx.obj = config


@cli.command()
@click.pass_obj
def serve(config):
    """Run the MCP server on stdio."""
    run_server(config)


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON.")
@click.pass_obj
def scan(config, paths: tuple[str, ...], as_json: bool):
    """Count tokens in files and directories."""
    result = measure(paths, config)
    click.echo(to_json(result) if as_json else render_scan_result(result))


@cli.command()
@click.argument("paths", nargs=-1)
@click.option("--tier", default="MEDIUM", type=TIER_CHOICES, help="Complexity tier.")
@click.option("--iterations", default=1, type=int, help="Expected conversational iterations.")
@click.option("--task", default=None, help="Task name shown in the report.")
@click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON.")
@click.pass_obj
def estimate(config, paths: tuple[str, ...], tier: str, iterations: int, task: str | None, as_json: bool):
    """Price a task from the files it will touch (no approval step)."""
    task_input = TaskEstimateInput(paths=paths, complexity_tier=tier, estimated_iterations=iterations)
    result = estimate_task(task_input, config)
    click.echo(to_json(result) if as_json else render_task_estimate(result, task))


@cli.command()
@click.option("--task", "task_name", default="", help="Task name (checked for risky keywords).")
@click.option("--plan", default="", help="Plan text (checked for risky keywords).")
@click.option("--cache-read", type=int, default=None, help="Declared cache-read tokens.")
@click.option("--ide-overhead", type=int, default=None, help="IDE overhead tokens.")
@click.option("--cache-write", type=int, default=None, help="Cache-write tokens.")
@click.option("--input", "input_tokens", type=int, default=None, help="Input tokens.")
@click.option("--output", "output_tokens", type=int, default=None, help="Output tokens.")
@click.option("--tool-calls", type=int, default=None, help="Expected tool calls.")
@click.option("--iterations", type=int, default=None, help="Expected iterations.")
@click.option("--context-accumulation", type=int, default=None, help="Context accumulation tokens.")
@click.option("--safety", type=float, default=None, help="Safety multiplier.")
@click.option("--tier", default=None, type=TIER_CHOICES, help="Complexity tier.")
@click.option("--total-override", default=None, help="Total to display instead of the computed one.")
@click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON.")
@click.pass_obj
def breakdown(
    config,
    task_name: str,
    plan: str,
    cache_read: int | None,
    ide_overhead: int | None,
    cache_write: int | None,
    input_tokens: int | None,
    output_tokens: int | None,
    tool_calls: int | None,
    iterations: int | None,
    context_accumulation: int | None,
    safety: float | None,
    tier: str | None,
    total_override: str | None,
    as_json: bool,
):
    """Aggregate a declared token budget (no approval step)."""
    budget = fill_budget_defaults(
        task_name=task_name,
        plan=plan,
        cache_read_tokens=cache_read,
        ide_overhead_tokens=ide_overhead,
        cache_write_tokens=cache_write,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        tool_call_count=tool_calls,
        iteration_count=iterations,
        context_accumulation_tokens=context_accumulation,
        safety_multiplier=safety,
        complexity_tier=tier,
        total_override=total_override,
    )
    rules = build_rules(config.risk_phrases) if config.risk_phrases is not None else None
    result = compute_budget_breakdown(budget, rules)
    click.echo(to_json(result) if as_json else render_budget_breakdown(result))
