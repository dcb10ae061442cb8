"""Tests for the session exchange coordinator."""

import asyncio
from datetime import timedelta

import pytest

from session_handoff.exchange import (
    EstablishOutcome,
    IssuerValidator,
    SessionExchangeCoordinator,
    UNKNOWN_USER_ID,
    ValidationResult,
)
from tests.stubs import StubValidator

FIVE_MINUTES = timedelta(minutes=5)


def make_coordinator(token_store, session_store, validator):
    return SessionExchangeCoordinator(
        token_store=token_store,
        session_store=session_store,
        validator=validator,
        session_ttl=timedelta(minutes=20),
    )


@pytest.mark.asyncio
async def test_successful_exchange_creates_session(token_store, session_store, stub_validator, clock):
    coordinator = make_coordinator(token_store, session_store, stub_validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    result = await coordinator.establish_session("ref-1")

    assert result.is_success
    assert result.user_id == "u42"
    assert stub_validator.calls == [("tok-abc", "ref-1")]

    session = await session_store.get("ref-1")
    assert session.user_id == "u42"
    assert session.session_expiry == clock.now + timedelta(minutes=20)


@pytest.mark.asyncio
async def test_second_exchange_is_replay(token_store, session_store, stub_validator):
    coordinator = make_coordinator(token_store, session_store, stub_validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    await coordinator.establish_session("ref-1")
    result = await coordinator.establish_session("ref-1")

    assert result.outcome == EstablishOutcome.TOKEN_REPLAY
    assert len(stub_validator.calls) == 1


@pytest.mark.asyncio
async def test_empty_reference_id_is_invalid(token_store, session_store, stub_validator):
    coordinator = make_coordinator(token_store, session_store, stub_validator)

    result = await coordinator.establish_session("")

    assert result.outcome == EstablishOutcome.INVALID_REQUEST
    assert stub_validator.calls == []


@pytest.mark.asyncio
async def test_unknown_reference_id_has_no_pending_token(token_store, session_store, stub_validator):
    coordinator = make_coordinator(token_store, session_store, stub_validator)

    result = await coordinator.establish_session("never-stored")

    assert result.outcome == EstablishOutcome.NO_PENDING_TOKEN
    assert stub_validator.calls == []


@pytest.mark.asyncio
async def test_expired_token_is_not_validated(token_store, session_store, stub_validator):
    coordinator = make_coordinator(token_store, session_store, stub_validator)
    await token_store.put("ref-2", "tok-xyz", timedelta(seconds=-1))

    result = await coordinator.establish_session("ref-2")

    assert result.outcome == EstablishOutcome.TOKEN_EXPIRED
    assert stub_validator.calls == []
    assert await session_store.get("ref-2") is None

    result = await coordinator.establish_session("ref-2")
    assert result.outcome == EstablishOutcome.TOKEN_REPLAY


@pytest.mark.asyncio
async def test_rejection_carries_issuer_message(token_store, session_store):
    validator = StubValidator(ValidationResult.rejected("Token signature mismatch"))
    coordinator = make_coordinator(token_store, session_store, validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    result = await coordinator.establish_session("ref-1")

    assert result.outcome == EstablishOutcome.VALIDATION_REJECTED
    assert "Token signature mismatch" in result.message
    assert not result.outcome.is_retriable
    assert await session_store.get("ref-1") is None


@pytest.mark.asyncio
async def test_unreachable_validator_burns_token(token_store, session_store):
    validator = StubValidator(ValidationResult.unreachable("connection refused"))
    coordinator = make_coordinator(token_store, session_store, validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    result = await coordinator.establish_session("ref-1")

    assert result.outcome == EstablishOutcome.VALIDATOR_UNREACHABLE
    assert result.outcome.is_retriable
    assert (await token_store.get("ref-1")).used is True

    validator.result = ValidationResult.accepted("u42")
    result = await coordinator.establish_session("ref-1")
    assert result.outcome == EstablishOutcome.TOKEN_REPLAY
    assert len(validator.calls) == 1


@pytest.mark.asyncio
async def test_missing_user_id_defaults_to_unknown(token_store, session_store):
    validator = StubValidator(ValidationResult.accepted(None))
    coordinator = make_coordinator(token_store, session_store, validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    result = await coordinator.establish_session("ref-1")

    assert result.user_id == UNKNOWN_USER_ID
    assert (await session_store.get("ref-1")).user_id == UNKNOWN_USER_ID


@pytest.mark.asyncio
async def test_concurrent_exchanges_have_single_winner(token_store, session_store):
    validator = StubValidator(delay=0.01)
    coordinator = make_coordinator(token_store, session_store, validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    results = await asyncio.gather(*(coordinator.establish_session("ref-1") for _ in range(10)))
    outcomes = [r.outcome for r in results]

    assert outcomes.count(EstablishOutcome.SUCCESS) == 1
    assert outcomes.count(EstablishOutcome.TOKEN_REPLAY) == 9
    assert len(validator.calls) == 1


@pytest.mark.asyncio
async def test_different_references_proceed_in_parallel(token_store, session_store):
    validator = StubValidator(delay=0.01)
    coordinator = make_coordinator(token_store, session_store, validator)
    for i in range(5):
        await token_store.put(f"ref-{i}", f"tok-{i}", FIVE_MINUTES)

    results = await asyncio.gather(*(coordinator.establish_session(f"ref-{i}") for i in range(5)))

    assert all(r.is_success for r in results)
    assert session_store.session_count == 5


class BlockingValidator(IssuerValidator):
    def __init__(self):
        self.started = asyncio.Event()

    async def validate(self, token, reference_id):
        self.started.set()
        await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_cancelled_exchange_leaves_token_consumed(token_store, session_store):
    validator = BlockingValidator()
    coordinator = make_coordinator(token_store, session_store, validator)
    await token_store.put("ref-1", "tok-abc", FIVE_MINUTES)

    task = asyncio.create_task(coordinator.establish_session("ref-1"))
    await validator.started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert (await token_store.get("ref-1")).used is True
    assert await session_store.get("ref-1") is None

    result = await make_coordinator(token_store, session_store, StubValidator()).establish_session("ref-1")
    assert result.outcome == EstablishOutcome.TOKEN_REPLAY
