"""
Storage Factory

Builds the StorageBundle used by the receiver.

Only the in-memory backend exists: token and session state is
process-local and does not survive restarts.

Usage:
    bundle = await create_memory_storage()
    coordinator = SessionExchangeCoordinator(
        token_store=bundle.tokens,
        session_store=bundle.sessions,
        validator=validator,
    )
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from session_handoff.utils.time import utc_now

from .memory import InMemorySessionStore, InMemoryTokenStore
from .ports import StorageBundle


async def create_memory_storage(
    clock: Callable[[], datetime] = utc_now,
) -> StorageBundle:
    """
    Create an in-memory storage bundle.

    Args:
        clock: Time source shared by both stores (override in tests)
    """
    return StorageBundle(
        tokens=InMemoryTokenStore(clock=clock),
        sessions=InMemorySessionStore(clock=clock),
    )
