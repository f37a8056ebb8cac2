"""Tests for the approval gate."""

from types import SimpleNamespace

import pytest

from costgate.approval import build_requested_schema, relay_decision, request_approval


class FakeHost:
    """Records elicitation requests and answers with a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def __call__(self, message, requested_schema):
        self.calls.append((message, requested_schema))
        if self.error is not None:
            raise self.error
        return self.response


async def _ask(host):
    """Run request_approval against host with fixed arguments."""
    return await request_approval(
        host,
        title="Rename models",
        headline="$1.23",
        breakdown_text="Estimated total  $1.23",
        risk_level="HIGH",
        plan="rename and update imports",
    )


def test_schema_fields_are_single_choice():
    """Every field is a required string with exactly one allowed value."""
    schema = build_requested_schema("breakdown text", "LOW", "the plan")
    assert schema["type"] == "object"
    assert set(schema["required"]) == {"breakdown", "risk_level", "plan"}
    for name, value in (("breakdown", "breakdown text"), ("risk_level", "LOW"), ("plan", "the plan")):
        prop = schema["properties"][name]
        assert prop["type"] == "string"
        assert prop["enum"] == [value]
        assert prop["default"] == value


def test_schema_placeholder_for_empty_plan():
    """An empty plan is replaced by a placeholder."""
    schema = build_requested_schema("b", "LOW", "")
    assert schema["properties"]["plan"]["enum"] == ["(no plan provided)"]


def test_relay_accept():
    """Only 'accept' approves."""
    outcome = relay_decision("accept", "Task")
    assert outcome.accepted
    assert not outcome.is_error
    assert outcome.text.startswith("APPROVED")


@pytest.mark.parametrize("action", ["decline", "cancel", "", None, "ACCEPT"])
def test_relay_anything_else_halts(action):
    """Any other action, including a wrongly cased accept, halts the task."""
    outcome = relay_decision(action, "Task")
    assert not outcome.accepted
    assert not outcome.is_error
    assert outcome.text.startswith("REJECTED")
    assert "revised plan" in outcome.text


@pytest.mark.asyncio()
async def test_accept_sends_one_request():
    """Acceptance takes a single elicitation carrying the title, headline and tier."""
    host = FakeHost(SimpleNamespace(action="accept", content={}))
    outcome = await _ask(host)
    assert outcome.accepted
    assert len(host.calls) == 1
    message, schema = host.calls[0]
    assert "Rename models" in message
    assert "$1.23" in message
    assert schema["properties"]["risk_level"]["enum"] == ["HIGH"]


@pytest.mark.asyncio()
async def test_decline_halts():
    """A decline is relayed as a rejection."""
    outcome = await _ask(FakeHost(SimpleNamespace(action="decline")))
    assert not outcome.accepted
    assert "REJECTED" in outcome.text


@pytest.mark.asyncio()
async def test_mapping_response_is_understood():
    """Dict-shaped responses are read like result objects."""
    assert (await _ask(FakeHost({"action": "accept"}))).accepted
    assert not (await _ask(FakeHost({"content": {}}))).accepted


@pytest.mark.asyncio()
async def test_response_without_action_halts():
    """A response without an action is a rejection, not an error."""
    outcome = await _ask(FakeHost(object()))
    assert not outcome.accepted
    assert not outcome.is_error


@pytest.mark.asyncio()
async def test_transport_failure_is_reported_not_raised():
    """Host exceptions come back as an error outcome."""
    outcome = await _ask(FakeHost(error=RuntimeError("client does not support elicitation")))
    assert outcome.is_error
    assert not outcome.accepted
    assert "client does not support elicitation" in outcome.text


@pytest.mark.asyncio()
async def test_empty_response_is_an_error():
    """A None response is an error outcome."""
    outcome = await _ask(FakeHost(None))
    assert outcome.is_error
