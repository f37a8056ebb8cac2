"""Shared data models — the contract between scanner, cost model, and consumers.

Scanner produces ScanResult objects. The cost model turns them (or
caller-declared budgets) into TaskEstimate / BudgetBreakdown objects, which
report.py renders and approval.py forwards to the host.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScanResult:
    """Token count for one scan target, summed across recursion."""

    tokens: int = 0
    files_counted: int = 0
    files_skipped: int = 0

    @classmethod
    def zero(cls) -> ScanResult:
        return cls()

    @classmethod
    def skipped(cls) -> ScanResult:
        return cls(files_skipped=1)

    def __add__(self, other: ScanResult) -> ScanResult:
        if not isinstance(other, ScanResult):
            return NotImplemented
        return ScanResult(
            tokens=self.tokens + other.tokens,
            files_counted=self.files_counted + other.files_counted,
            files_skipped=self.files_skipped + other.files_skipped,
        )


@dataclass(frozen=True)
class TierProfile:
    """Floors implied by a complexity tier."""

    name: str
    min_iterations: int
    output_per_turn: int
    search_overhead: int


@dataclass(frozen=True)
class TaskEstimateInput:
    """An exact-mode request: what to measure and how big the task is."""

    paths: tuple[str, ...]
    complexity_tier: str = "MEDIUM"
    estimated_iterations: int = 1


@dataclass(frozen=True)
class TaskEstimate:
    """Exact-measurement result, priced in USD."""

    complexity_tier: str
    measured_tokens: int
    files_counted: int
    files_skipped: int
    requested_iterations: int
    effective_iterations: int
    search_overhead_tokens: int
    ide_overhead_tokens: int
    base_context_tokens: int
    total_processed_input: int
    new_input_tokens: int
    cache_read_tokens: int
    output_tokens: int
    new_input_cost_usd: float
    cache_read_cost_usd: float
    output_cost_usd: float
    total_cost_usd: float  # rounded to 3 places


@dataclass(frozen=True)
class BudgetInput:
    """Caller-declared token budget with every default already filled in.

    Built by cost.fill_budget_defaults at the tool boundary; the cost
    function never sees a missing field.
    """

    task_name: str
    plan: str
    cache_read_tokens: int
    ide_overhead_tokens: int
    cache_write_tokens: int
    input_tokens: int
    output_tokens: int
    tool_call_count: int
    iteration_count: int
    context_accumulation_tokens: int
    safety_multiplier: float
    complexity_tier: str
    total_override: str | None = None


@dataclass(frozen=True)
class RiskAssessment:
    """Outcome of running the keyword rule table against a task."""

    multiplier: float = 1.0
    matched_phrases: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_elevated(self) -> bool:
        return self.multiplier != 1.0


@dataclass(frozen=True)
class BudgetBreakdown:
    """Heuristic-mode result — raw token totals, no pricing."""

    task_name: str
    complexity_tier: str
    declared_cache_read_tokens: int
    risk_multiplier: float
    iteration_count: int
    cache_read_total: int
    ide_overhead_tokens: int
    cache_write_tokens: int
    input_tokens: int
    output_tokens: int
    tool_call_count: int
    tool_call_overhead_tokens: int
    context_accumulation_tokens: int
    subtotal_tokens: int
    safety_multiplier: float
    final_total_tokens: int
    warnings: tuple[str, ...] = field(default_factory=tuple)
    risk_phrases: tuple[str, ...] = field(default_factory=tuple)
    total_override: str | None = None

    @property
    def display_total(self) -> str:
        if self.total_override:
            return self.total_override
        return f"{self.final_total_tokens:,}"


@dataclass(frozen=True)
class ApprovalOutcome:
    """What the approval gate hands back to the caller."""

    text: str
    accepted: bool = False
    is_error: bool = False
