"""MCP server — exposes the estimators as tools gated by user approval.

The tool bodies are plain coroutines taking an ``elicit`` callable so they
can be exercised without a live host; ``create_server`` binds them to the
session of each incoming request.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from costgate.approval import Elicit, request_approval
from costgate.config import CostgateConfig, load_config
from costgate.cost import compute_budget_breakdown, estimate_task_cost, fill_budget_defaults
from costgate.models import ApprovalOutcome, ScanResult, TaskEstimate, TaskEstimateInput
from costgate.report import render_budget_breakdown, render_scan_result, render_task_estimate, to_json
from costgate.risk import build_rules
from costgate.scanner import IGNORED_DIRS, IGNORED_EXTENSIONS, scan_paths
from costgate.tokens import Encoder

logger = logging.getLogger(__name__)

SERVER_NAME = "costgate"


def _payload(*parts: str) -> str:
    return "\n\n".join(p for p in parts if p)


def _json_block(text: str) -> str:
    return f"```json\n{text}\n```"


def _finish(task_name: str, outcome: ApprovalOutcome, breakdown_text: str, json_text: str) -> str:
    if outcome.is_error:
        raise ToolError(outcome.text)
    logger.info("%r %s by user", task_name, "approved" if outcome.accepted else "declined")
    return _payload(outcome.text, breakdown_text, _json_block(json_text))


def measure(
    paths: Iterable[str],
    config: CostgateConfig,
    encode: Encoder | None = None,
    base_dir: str | Path | None = None,
) -> ScanResult:
    """Scan ``paths`` with the configured encoding and extra ignore entries."""
    return scan_paths(
        paths,
        encode=encode,
        encoding=config.encoding,
        base_dir=base_dir,
        ignored_dirs=IGNORED_DIRS | set(config.extra_ignored_dirs),
        ignored_extensions=IGNORED_EXTENSIONS | set(config.extra_ignored_extensions),
    )


def estimate_task(
    task: TaskEstimateInput,
    config: CostgateConfig,
    encode: Encoder | None = None,
    base_dir: str | Path | None = None,
) -> TaskEstimate:
    """Measure the task's paths and price it with the configured rates."""
    scan = measure(task.paths, config, encode, base_dir)
    return estimate_task_cost(scan, task.complexity_tier, task.estimated_iterations, config.pricing)


async def run_estimate_cost(
    elicit: Elicit,
    config: CostgateConfig,
    *,
    task_name: str,
    paths: list[str],
    complexity_tier: str = "MEDIUM",
    estimated_iterations: int = 1,
    plan: str = "",
    encode: Encoder | None = None,
    base_dir: str | Path | None = None,
) -> str:
    """Exact mode: measure ``paths``, price the task, then ask for approval."""
    task = TaskEstimateInput(
        paths=tuple(paths),
        complexity_tier=complexity_tier,
        estimated_iterations=estimated_iterations,
    )
    estimate = estimate_task(task, config, encode, base_dir)
    logger.info(
        "estimate %r: %d tokens in %d files (%d skipped), $%.3f",
        task_name,
        estimate.measured_tokens,
        estimate.files_counted,
        estimate.files_skipped,
        estimate.total_cost_usd,
    )

    breakdown_text = render_task_estimate(estimate, task_name)
    outcome = await request_approval(
        elicit,
        title=task_name,
        headline=f"${estimate.total_cost_usd:.2f}",
        breakdown_text=breakdown_text,
        risk_level=estimate.complexity_tier,
        plan=plan,
    )
    return _finish(task_name, outcome, breakdown_text, to_json(estimate))


async def run_estimate_token_budget(elicit: Elicit, config: CostgateConfig, **fields) -> str:
    """Heuristic mode: aggregate declared figures, then ask for approval.

    ``fields`` are the raw tool arguments; absent ones are filled with defaults.
    """
    budget = fill_budget_defaults(**fields)
    rules = build_rules(config.risk_phrases) if config.risk_phrases is not None else None
    breakdown = compute_budget_breakdown(budget, rules)
    if breakdown.risk_phrases:
        logger.warning(
            "budget %r: cache reads x%g for risky wording (%s)",
            budget.task_name,
            breakdown.risk_multiplier,
            ", ".join(breakdown.risk_phrases),
        )

    breakdown_text = render_budget_breakdown(breakdown)
    outcome = await request_approval(
        elicit,
        title=budget.task_name,
        headline=f"{breakdown.display_total} tokens",
        breakdown_text=breakdown_text,
        risk_level=breakdown.complexity_tier,
        plan=budget.plan,
    )
    return _finish(budget.task_name, outcome, breakdown_text, to_json(breakdown))


def run_scan_tokens(
    config: CostgateConfig,
    paths: list[str],
    encode: Encoder | None = None,
    base_dir: str | Path | None = None,
) -> str:
    scan = measure(paths, config, encode, base_dir)
    return _payload(render_scan_result(scan), _json_block(to_json(scan)))


def create_server(config: CostgateConfig | None = None) -> FastMCP:
    """Build the FastMCP app with all tools registered."""
    if config is None:
        config = load_config()

    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(
        title="Estimate task cost",
        description=(
            "Measure the files a task will touch, project its USD cost from the "
            "complexity tier and expected iterations, and ask the user to approve "
            "it before any work starts. Follow the returned instruction."
        ),
    )
    async def estimate_cost(
        task_name: str,
        paths: list[str],
        ctx: Context,
        complexity_tier: str = "MEDIUM",
        estimated_iterations: int = 1,
        plan: str = "",
    ) -> str:
        return await run_estimate_cost(
            ctx.session.elicit,
            config,
            task_name=task_name,
            paths=paths,
            complexity_tier=complexity_tier,
            estimated_iterations=estimated_iterations,
            plan=plan,
        )

    @mcp.tool(
        title="Estimate token budget",
        description=(
            "Aggregate declared token figures (cache reads, IDE overhead, tool "
            "calls, iterations) into a safety-buffered total and ask the user to "
            "approve it. Follow the returned instruction."
        ),
    )
    async def estimate_token_budget(
        task_name: str,
        ctx: Context,
        plan: str = "",
        estimated_cache_read_tokens: int | None = None,
        ide_overhead_tokens: int | None = None,
        cache_write_tokens: int | None = None,
        input_tokens: int | None = None,
        output_tokens: int | None = None,
        tool_call_count: int | None = None,
        iteration_count: int | None = None,
        context_accumulation_tokens: int | None = None,
        safety_multiplier: float | None = None,
        complexity_tier: str | None = None,
        total_override: str | None = None,
    ) -> str:
        return await run_estimate_token_budget(
            ctx.session.elicit,
            config,
            task_name=task_name,
            plan=plan,
            cache_read_tokens=estimated_cache_read_tokens,
            ide_overhead_tokens=ide_overhead_tokens,
            cache_write_tokens=cache_write_tokens,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            tool_call_count=tool_call_count,
            iteration_count=iteration_count,
            context_accumulation_tokens=context_accumulation_tokens,
            safety_multiplier=safety_multiplier,
            complexity_tier=complexity_tier,
            total_override=total_override,
        )

    @mcp.tool(
        title="Count tokens",
        description="Count tokens in files and directories without asking for approval.",
    )
    def scan_tokens(paths: list[str]) -> str:
        return run_scan_tokens(config, paths)

    return mcp


def run_server(config: CostgateConfig | None = None) -> None:
    """Serve over stdio until the host disconnects."""
    mcp = create_server(config)
    logger.info("%s MCP server running on stdio", SERVER_NAME)
    mcp.run()
