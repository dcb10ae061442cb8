"""Shared fixtures for handoff receiver tests."""

import pytest

from session_handoff.storage import (
    InMemorySessionStore,
    InMemoryTokenStore,
    StorageBundle,
)
from tests.stubs import FakeClock, StubValidator


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_store(clock: FakeClock) -> InMemoryTokenStore:
    return InMemoryTokenStore(clock=clock)


@pytest.fixture
def session_store(clock: FakeClock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def storage() -> StorageBundle:
    return StorageBundle(tokens=InMemoryTokenStore(), sessions=InMemorySessionStore())


@pytest.fixture
def stub_validator() -> StubValidator:
    return StubValidator()
