"""Rules table for spotting tasks whose cache-read estimate is probably too low.

Refactors and cross-cutting changes tend to read far more of the codebase
than the author declares. Each rule maps trigger phrases to a multiplier on
the declared cache-read figure. All rules are keyword-based — no LLM calls.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from costgate.models import RiskAssessment

# Declared cache-read volumes at or above this are trusted as-is
CACHE_READ_TRUST_THRESHOLD = 100_000

REFACTOR_MULTIPLIER = 3.0

DEFAULT_RISK_PHRASES = (
    "refactor",
    "extract",
    "share",
    "sharing",
    "common",
    "duplicate",
    "duplication",
    "dedupe",
    "deduplicate",
    "deduplication",
    "consolidate",
    "consolidation",
    "codebase search",
    "search the codebase",
    "across the codebase",
    "codebase-wide",
)


@dataclass(frozen=True)
class RiskRule:
    name: str
    phrases: tuple[str, ...]
    multiplier: float
    threshold: int
    warning: str

    def matches(self, text: str) -> list[str]:
        """Phrases of this rule found in ``text``, matched at word starts."""
        return [p for p in self.phrases if _phrase_pattern(p).search(text)]


def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    # Word-start anchor only: "share" also matches "shared", not "reshare"
    words = [re.escape(w) for w in phrase.split()]
    return re.compile(r"\b" + r"[\s_-]+".join(words), re.IGNORECASE)


def build_rules(phrases: Iterable[str] | None = None) -> list[RiskRule]:
    """The default rule table, optionally with a replacement phrase list."""
    phrase_list = tuple(p.strip() for p in (phrases if phrases is not None else DEFAULT_RISK_PHRASES))
    phrase_list = tuple(p for p in phrase_list if p)
    return [
        RiskRule(
            name="refactor_scope",
            phrases=phrase_list,
            multiplier=REFACTOR_MULTIPLIER,
            threshold=CACHE_READ_TRUST_THRESHOLD,
            warning=(
                "Task looks like a refactor or cross-cutting change but declares "
                "only {cache_read:,} cache-read tokens; applying a {multiplier:g}x "
                "multiplier to cache reads (matched: {matched})."
            ),
        )
    ]


DEFAULT_RULES: Sequence[RiskRule] = tuple(build_rules())


def assess_risk(
    task_name: str,
    plan: str,
    cache_read_tokens: int,
    rules: Sequence[RiskRule] | None = None,
) -> RiskAssessment:
    """Run every rule against the task name and plan.

    A rule only fires when the declared cache-read volume is below its
    threshold. Multipliers of several firing rules compound.
    """
    if rules is None:
        rules = DEFAULT_RULES
    text = f"{task_name or ''}\n{plan or ''}"

    multiplier = 1.0
    matched_all: list[str] = []
    warnings: list[str] = []

    for rule in rules:
        if cache_read_tokens >= rule.threshold:
            continue
        matched = rule.matches(text)
        if not matched:
            continue
        multiplier *= rule.multiplier
        matched_all.extend(matched)
        warnings.append(
            rule.warning.format(
                cache_read=cache_read_tokens,
                multiplier=rule.multiplier,
                matched=", ".join(matched),
            )
        )

    return RiskAssessment(
        multiplier=multiplier,
        matched_phrases=tuple(matched_all),
        warnings=tuple(warnings),
    )
