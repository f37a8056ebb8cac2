"""Approval gate — asks the host to confirm an estimate before work starts.

The host round-trip itself is an injected ``elicit(message, requested_schema)``
coroutine (ServerSession.elicit when serving over MCP). Everything here turns
its outcome into an instruction for the calling agent.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from costgate.models import ApprovalOutcome

logger = logging.getLogger(__name__)

Elicit = Callable[[str, dict[str, Any]], Awaitable[Any]]

ACCEPT = "accept"


def _fixed_field(title: str, value: str) -> dict[str, Any]:
    # A single-option enum: the host can display the value but not edit it
    return {
        "type": "string",
        "title": title,
        "enum": [value],
        "default": value,
    }


def build_requested_schema(breakdown_text: str, risk_level: str, plan: str) -> dict[str, Any]:
    """Elicitation schema presenting the estimate as read-only fields."""
    return {
        "type": "object",
        "properties": {
            "breakdown": _fixed_field("Cost breakdown", breakdown_text),
            "risk_level": _fixed_field("Risk level", risk_level),
            "plan": _fixed_field("Plan", plan or "(no plan provided)"),
        },
        "required": ["breakdown", "risk_level", "plan"],
    }


def build_message(title: str, headline: str) -> str:
    return (
        f"Authorization required: review the estimated cost of '{title}' "
        f"({headline}). Accept to proceed or decline to stop and re-plan."
    )


def relay_decision(action: str | None, title: str) -> ApprovalOutcome:
    """Turn the host's ``action`` into the instruction returned to the agent."""
    if action == ACCEPT:
        return ApprovalOutcome(
            text=(
                f"APPROVED: the user accepted the estimated cost for '{title}'. "
                "Proceed with the task exactly as planned; do not ask for "
                "confirmation again."
            ),
            accepted=True,
        )
    return ApprovalOutcome(
        text=(
            f"REJECTED: the user declined the estimated cost for '{title}'. "
            "Stop immediately, make no further changes, and ask the user for a "
            "revised plan."
        ),
    )


def _read_action(response: Any) -> str | None:
    if response is None:
        raise ValueError("host returned an empty elicitation response")
    if isinstance(response, Mapping):
        action = response.get("action")
    else:
        action = getattr(response, "action", None)
    return action if isinstance(action, str) else None


async def request_approval(
    elicit: Elicit,
    *,
    title: str,
    headline: str,
    breakdown_text: str,
    risk_level: str,
    plan: str,
) -> ApprovalOutcome:
    """Send one confirmation request and relay the decision.

    No retry and no timeout. Any failure talking to the host comes back as
    an error outcome carrying the failure description.
    """
    message = build_message(title, headline)
    schema = build_requested_schema(breakdown_text, risk_level, plan)
    try:
        response = await elicit(message, schema)
        action = _read_action(response)
    except Exception as exc:
        logger.warning("approval request for %r failed: %s", title, exc)
        return ApprovalOutcome(text=f"Interaction failed: {exc}", is_error=True)

    logger.debug("approval for %r: host answered %s", title, action or "no action")
    return relay_decision(action, title)
