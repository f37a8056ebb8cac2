"""Cost estimation for upcoming agent tasks based on API pricing.

Two models live here:

* ``estimate_task_cost`` — exact mode. Starts from a measured ScanResult,
  applies complexity-tier floors and history growth, and prices the result
  in USD with a fixed new-input / cache-read split.
* ``compute_budget_breakdown`` — heuristic mode. Works purely on the token
  figures a caller declares, applies keyword risk rules and a safety
  multiplier, and reports a raw token total.

Both are pure; defaults are filled once by ``fill_budget_defaults``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from costgate.models import BudgetBreakdown, BudgetInput, ScanResult, TaskEstimate, TierProfile
from costgate.risk import RiskRule, assess_risk

# Default pricing per million tokens (Sonnet-level)
DEFAULT_PRICING = {
    "input": 3.00,
    "output": 15.00,
    "cache_read": 0.30,
    "cache_creation": 3.75,
}

TIERS: dict[str, TierProfile] = {
    "LOW": TierProfile("LOW", min_iterations=1, output_per_turn=2_000, search_overhead=0),
    "MEDIUM": TierProfile("MEDIUM", min_iterations=2, output_per_turn=4_000, search_overhead=0),
    "HIGH": TierProfile("HIGH", min_iterations=3, output_per_turn=8_000, search_overhead=60_000),
    "CRITICAL": TierProfile("CRITICAL", min_iterations=5, output_per_turn=12_000, search_overhead=150_000),
}
DEFAULT_TIER = "MEDIUM"

# Exact mode: project index, rules files and open editors loaded by the IDE
IDE_CONTEXT_OVERHEAD = 90_000
HISTORY_GROWTH_PER_TURN = 5_000
NEW_INPUT_RATIO = 0.30  # the remaining 70% is billed as cache reads

# Heuristic mode defaults
DEFAULT_IDE_OVERHEAD = 55_000
DEFAULT_SAFETY_MULTIPLIER = 1.4
DEFAULT_ITERATIONS = 1
TOOL_CALL_OVERHEAD = 1_500  # schema + request + response per tool call


def resolve_pricing(overrides: Mapping[str, float] | None = None) -> dict[str, float]:
    """DEFAULT_PRICING with any known keys replaced by ``overrides``."""
    pricing = dict(DEFAULT_PRICING)
    if overrides:
        for key, rate in overrides.items():
            if key in pricing and rate is not None and rate >= 0:
                pricing[key] = float(rate)
    return pricing


def get_tier(name: str | None) -> TierProfile:
    """Look up a complexity tier case-insensitively; unknown names get MEDIUM."""
    if name:
        tier = TIERS.get(name.strip().upper())
        if tier is not None:
            return tier
    return TIERS[DEFAULT_TIER]


def price_tokens(tokens: int, rate_per_million: float) -> float:
    return tokens * rate_per_million / 1_000_000


# ---------------------------------------------------------------------------
# Exact-measurement mode
# ---------------------------------------------------------------------------


def total_processed_input(base_context: int, iterations: int, growth: int = HISTORY_GROWTH_PER_TURN) -> int:
    """Input reprocessed across all turns.

    Every turn re-sends the accumulated history, so turn ``i`` costs
    ``base_context + i * growth`` and the total is the sum over all turns.
    """
    return sum(base_context + i * growth for i in range(max(iterations, 0)))


def estimate_task_cost(
    scan: ScanResult,
    complexity_tier: str | None,
    estimated_iterations: int | None,
    pricing: Mapping[str, float] | None = None,
) -> TaskEstimate:
    """Price a task from measured file tokens, tier floors and iteration count.

    Returns a TaskEstimate whose total_cost_usd is rounded to 3 decimals.
    """
    tier = get_tier(complexity_tier)
    rates = resolve_pricing(pricing)

    requested = _non_negative_int(estimated_iterations, 0)
    iterations = max(requested, tier.min_iterations)

    base_context = scan.tokens + tier.search_overhead + IDE_CONTEXT_OVERHEAD
    processed = total_processed_input(base_context, iterations)

    new_input = round(processed * NEW_INPUT_RATIO)
    cache_read = processed - new_input
    output = iterations * tier.output_per_turn

    new_input_cost = price_tokens(new_input, rates["input"])
    cache_read_cost = price_tokens(cache_read, rates["cache_read"])
    output_cost = price_tokens(output, rates["output"])

    return TaskEstimate(
        complexity_tier=tier.name,
        measured_tokens=scan.tokens,
        files_counted=scan.files_counted,
        files_skipped=scan.files_skipped,
        requested_iterations=requested,
        effective_iterations=iterations,
        search_overhead_tokens=tier.search_overhead,
        ide_overhead_tokens=IDE_CONTEXT_OVERHEAD,
        base_context_tokens=base_context,
        total_processed_input=processed,
        new_input_tokens=new_input,
        cache_read_tokens=cache_read,
        output_tokens=output,
        new_input_cost_usd=round(new_input_cost, 4),
        cache_read_cost_usd=round(cache_read_cost, 4),
        output_cost_usd=round(output_cost, 4),
        total_cost_usd=round(new_input_cost + cache_read_cost + output_cost, 3),
    )


# ---------------------------------------------------------------------------
# Heuristic-breakdown mode
# ---------------------------------------------------------------------------


def _non_negative_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return max(int(round(number)), 0)


def _positive_float(value: object, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return default
    return number


def fill_budget_defaults(
    task_name: str | None = None,
    plan: str | None = None,
    cache_read_tokens: object = None,
    ide_overhead_tokens: object = None,
    cache_write_tokens: object = None,
    input_tokens: object = None,
    output_tokens: object = None,
    tool_call_count: object = None,
    iteration_count: object = None,
    context_accumulation_tokens: object = None,
    safety_multiplier: object = None,
    complexity_tier: str | None = None,
    total_override: str | None = None,
) -> BudgetInput:
    """Build a BudgetInput from loosely-typed caller fields.

    Missing or unparseable numbers take their documented default, negatives
    clamp to 0, iteration count never drops below 1, and a non-positive
    safety multiplier falls back to the default.
    """
    override = str(total_override).strip() if total_override is not None else ""
    return BudgetInput(
        task_name=task_name or "",
        plan=plan or "",
        cache_read_tokens=_non_negative_int(cache_read_tokens, 0),
        ide_overhead_tokens=_non_negative_int(ide_overhead_tokens, DEFAULT_IDE_OVERHEAD),
        cache_write_tokens=_non_negative_int(cache_write_tokens, 0),
        input_tokens=_non_negative_int(input_tokens, 0),
        output_tokens=_non_negative_int(output_tokens, 0),
        tool_call_count=_non_negative_int(tool_call_count, 0),
        iteration_count=max(_non_negative_int(iteration_count, DEFAULT_ITERATIONS), 1),
        context_accumulation_tokens=_non_negative_int(context_accumulation_tokens, 0),
        safety_multiplier=_positive_float(safety_multiplier, DEFAULT_SAFETY_MULTIPLIER),
        complexity_tier=get_tier(complexity_tier).name,
        total_override=override or None,
    )


def compute_budget_breakdown(budget: BudgetInput, rules: Sequence[RiskRule] | None = None) -> BudgetBreakdown:
    """Aggregate a declared budget into per-category token totals.

    Cache reads are charged once per iteration (times any risk multiplier);
    IDE overhead, cache writes, input and output are charged once per task.
    """
    risk = assess_risk(budget.task_name, budget.plan, budget.cache_read_tokens, rules)

    cache_read_total = round(budget.cache_read_tokens * risk.multiplier * budget.iteration_count)
    tool_overhead = budget.tool_call_count * TOOL_CALL_OVERHEAD

    subtotal = (
        cache_read_total
        + budget.ide_overhead_tokens
        + budget.cache_write_tokens
        + budget.input_tokens
        + budget.output_tokens
        + tool_overhead
        + budget.context_accumulation_tokens
    )

    return BudgetBreakdown(
        task_name=budget.task_name,
        complexity_tier=budget.complexity_tier,
        declared_cache_read_tokens=budget.cache_read_tokens,
        risk_multiplier=risk.multiplier,
        iteration_count=budget.iteration_count,
        cache_read_total=cache_read_total,
        ide_overhead_tokens=budget.ide_overhead_tokens,
        cache_write_tokens=budget.cache_write_tokens,
        input_tokens=budget.input_tokens,
        output_tokens=budget.output_tokens,
        tool_call_count=budget.tool_call_count,
        tool_call_overhead_tokens=tool_overhead,
        context_accumulation_tokens=budget.context_accumulation_tokens,
        subtotal_tokens=subtotal,
        safety_multiplier=budget.safety_multiplier,
        final_total_tokens=round(subtotal * budget.safety_multiplier),
        warnings=risk.warnings,
        risk_phrases=risk.matched_phrases if risk.is_elevated else (),
        total_override=budget.total_override,
    )
