"""
In-Memory Storage Adapters

Thread-safe implementations backed by plain dicts.
Uses asyncio locks for concurrent async safety.

Everything is lost on restart, which is acceptable here: tokens live for
minutes and sessions are re-established through a fresh handoff.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable

from session_handoff.storage.ports import (
    ClaimOutcome,
    SessionRecord,
    SessionStore,
    StorageError,
    TokenRecord,
    TokenStore,
)
from session_handoff.utils.time import utc_now

logger = logging.getLogger(__name__)


class InMemoryTokenStore(TokenStore):
    """
    In-memory token storage.

    A single lock guards the whole dict. Contention is low (one claim per
    handoff) and it makes claim-and-mark indivisible without per-key locks.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._tokens: dict[str, TokenRecord] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def put(
        self,
        reference_id: str,
        token: str,
        ttl: timedelta
    ) -> TokenRecord:
        if not reference_id:
            raise StorageError("reference_id is required")

        async with self._lock:
            now = self._clock()
            existing = self._tokens.get(reference_id)
            if existing is not None and existing.is_live(now):
                logger.warning(
                    f"Overwriting unused token for reference_id '{reference_id}' "
                    f"(received at {existing.received_at.isoformat()})"
                )

            record = TokenRecord(
                reference_id=reference_id,
                token=token,
                expiry=now + ttl,
                used=False,
                received_at=now,
            )
            self._tokens[reference_id] = record
            return replace(record)

    async def try_claim(
        self,
        reference_id: str
    ) -> tuple[TokenRecord | None, ClaimOutcome]:
        async with self._lock:
            record = self._tokens.get(reference_id)
            if record is None:
                return None, ClaimOutcome.NOT_FOUND

            if record.used:
                return replace(record), ClaimOutcome.ALREADY_USED

            # Expired and claimed both leave the token dead
            record.used = True
            if record.is_expired(self._clock()):
                return replace(record), ClaimOutcome.EXPIRED

            return replace(record), ClaimOutcome.CLAIMED

    async def get(self, reference_id: str) -> TokenRecord | None:
        async with self._lock:
            record = self._tokens.get(reference_id)
            return replace(record) if record else None

    @property
    def token_count(self) -> int:
        """Total number of token records held."""
        return len(self._tokens)

    @property
    def pending_count(self) -> int:
        """Number of tokens still claimable."""
        now = self._clock()
        return sum(1 for t in self._tokens.values() if t.is_live(now))


class InMemorySessionStore(SessionStore):
    """
    In-memory session storage.

    Uses dict with asyncio.Lock for thread-safety.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def put(
        self,
        reference_id: str,
        user_id: str,
        ttl: timedelta
    ) -> SessionRecord:
        if not reference_id:
            raise StorageError("reference_id is required")

        async with self._lock:
            now = self._clock()
            record = SessionRecord(
                reference_id=reference_id,
                user_id=user_id,
                session_expiry=now + ttl,
                created_at=now,
            )
            self._sessions[reference_id] = record
            return replace(record)

    async def get(self, reference_id: str) -> SessionRecord | None:
        async with self._lock:
            record = self._sessions.get(reference_id)
            return replace(record) if record else None

    @property
    def session_count(self) -> int:
        """Total number of sessions."""
        return len(self._sessions)

    @property
    def active_count(self) -> int:
        """Number of sessions not yet past their expiry."""
        now = self._clock()
        return sum(1 for s in self._sessions.values() if not s.is_expired(now))
