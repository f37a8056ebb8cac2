"""Plain-text and JSON rendering of scan results and cost estimates."""

from __future__ import annotations

import json
from dataclasses import asdict

from costgate.models import BudgetBreakdown, ScanResult, TaskEstimate

RULE = "-" * 44


def _row(label: str, value: str) -> str:
    return f"{label:<30}{value:>14}"


def render_scan_result(scan: ScanResult) -> str:
    return "\n".join(
        [
            _row("Tokens", f"{scan.tokens:,}"),
            _row("Files counted", f"{scan.files_counted:,}"),
            _row("Files skipped", f"{scan.files_skipped:,}"),
        ]
    )


def render_task_estimate(estimate: TaskEstimate, title: str | None = None) -> str:
    """Text breakdown of an exact-mode estimate, dollars shown to 2 places."""
    lines = []
    if title:
        lines.append(f"Cost estimate: {title}")
    lines += [
        f"Complexity tier: {estimate.complexity_tier}",
        RULE,
        _row("Measured file tokens", f"{estimate.measured_tokens:,}"),
        _row("  files counted / skipped", f"{estimate.files_counted} / {estimate.files_skipped}"),
        _row("Search overhead", f"{estimate.search_overhead_tokens:,}"),
        _row("IDE overhead", f"{estimate.ide_overhead_tokens:,}"),
        _row("Base context per turn", f"{estimate.base_context_tokens:,}"),
        _row(
            "Iterations",
            f"{estimate.effective_iterations} (requested {estimate.requested_iterations})",
        ),
        _row("Total processed input", f"{estimate.total_processed_input:,}"),
        RULE,
        _row("New input tokens", f"{estimate.new_input_tokens:,}"),
        _row("  cost", f"${estimate.new_input_cost_usd:.2f}"),
        _row("Cache read tokens", f"{estimate.cache_read_tokens:,}"),
        _row("  cost", f"${estimate.cache_read_cost_usd:.2f}"),
        _row("Output tokens", f"{estimate.output_tokens:,}"),
        _row("  cost", f"${estimate.output_cost_usd:.2f}"),
        RULE,
        _row("Estimated total", f"${estimate.total_cost_usd:.2f}"),
    ]
    return "\n".join(lines)


def render_budget_breakdown(breakdown: BudgetBreakdown) -> str:
    """Text breakdown of a heuristic-mode estimate, meant to be shown verbatim."""
    lines = []
    if breakdown.task_name:
        lines.append(f"Token budget: {breakdown.task_name}")
    lines += [
        f"Complexity tier: {breakdown.complexity_tier}",
        RULE,
        _row("Declared cache read", f"{breakdown.declared_cache_read_tokens:,}"),
    ]
    if breakdown.risk_multiplier != 1.0:
        lines.append(_row("  risk multiplier", f"x{breakdown.risk_multiplier:g}"))
    lines += [
        _row("  iterations", f"x{breakdown.iteration_count}"),
        _row("Cache read total", f"{breakdown.cache_read_total:,}"),
        _row("IDE overhead", f"{breakdown.ide_overhead_tokens:,}"),
        _row("Cache write", f"{breakdown.cache_write_tokens:,}"),
        _row("Input", f"{breakdown.input_tokens:,}"),
        _row("Output", f"{breakdown.output_tokens:,}"),
        _row(
            f"Tool calls ({breakdown.tool_call_count})",
            f"{breakdown.tool_call_overhead_tokens:,}",
        ),
        _row("Context accumulation", f"{breakdown.context_accumulation_tokens:,}"),
        RULE,
        _row("Subtotal", f"{breakdown.subtotal_tokens:,}"),
        _row("Safety multiplier", f"x{breakdown.safety_multiplier:g}"),
        _row("Final total", breakdown.display_total),
    ]
    if breakdown.total_override:
        lines.append(_row("  computed total", f"{breakdown.final_total_tokens:,}"))
    for warning in breakdown.warnings:
        lines.append(f"WARNING: {warning}")
    return "\n".join(lines)


def to_json(result: ScanResult | TaskEstimate | BudgetBreakdown) -> str:
    """Machine-readable form of any result dataclass."""
    payload = asdict(result)
    if isinstance(result, BudgetBreakdown):
        payload["warnings"] = list(result.warnings)
        payload["risk_phrases"] = list(result.risk_phrases)
        payload["display_total"] = result.display_total
    return json.dumps(payload, indent=2)
