"""
Storage Port Interfaces

Abstract base classes defining the storage contracts for the handoff receiver.
All store APIs are async.

- Handoff code depends only on these interfaces
- Adapters implement these interfaces (in-memory today)
- Stores are injected into the coordinator and HTTP layer

Thread-safety: All implementations must be safe for concurrent async usage.
The claim operation in particular must be atomic per reference_id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


# =============================================================================
# Token Store
# =============================================================================

class ClaimOutcome(str, Enum):
    """Result of attempting to claim a pending token."""
    NOT_FOUND = "not_found"        # Nothing was ever stored for the id
    ALREADY_USED = "already_used"  # Token was consumed earlier
    EXPIRED = "expired"            # Token outlived its TTL (now retired)
    CLAIMED = "claimed"            # Caller owns the token


@dataclass
class TokenRecord:
    """
    A one-time token forwarded by the issuer.

    Once ``used`` is set the record is dead for good, whatever its expiry.
    """
    reference_id: str
    token: str
    expiry: datetime
    used: bool
    received_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expiry <= now

    def is_live(self, now: datetime) -> bool:
        """Unused and not yet expired."""
        return not self.used and not self.is_expired(now)


class TokenStore(ABC):
    """
    Storage interface for pending one-time tokens.

    Holds at most one record per reference_id; a new arrival replaces
    the previous one.
    """

    @abstractmethod
    async def put(
        self,
        reference_id: str,
        token: str,
        ttl: timedelta
    ) -> TokenRecord:
        """
        Store a fresh, unused token.

        Args:
            reference_id: Correlation key shared with the issuer
            token: Opaque token value
            ttl: Lifetime measured from now

        Returns:
            The stored record
        """
        ...

    @abstractmethod
    async def try_claim(
        self,
        reference_id: str
    ) -> tuple[TokenRecord | None, ClaimOutcome]:
        """
        Atomically look up and consume a token.

        The lookup and the ``used`` flag update happen as one step, so
        two concurrent claims for the same id never both see CLAIMED.
        An expired token is retired (marked used) as a side effect.

        Args:
            reference_id: Correlation key

        Returns:
            Tuple of (record or None when not found, outcome)
        """
        ...

    @abstractmethod
    async def get(self, reference_id: str) -> TokenRecord | None:
        """Inspect a token record without changing it."""
        ...

    @property
    @abstractmethod
    def token_count(self) -> int:
        """Total number of token records held."""
        ...

    @property
    @abstractmethod
    def pending_count(self) -> int:
        """Number of tokens still claimable."""
        ...


# =============================================================================
# Session Store
# =============================================================================

@dataclass
class SessionRecord:
    """
    Local session materialized after a successful validation round-trip.

    Expiry is advisory: nothing purges stale records, readers compare
    ``session_expiry`` themselves.
    """
    reference_id: str
    user_id: str
    session_expiry: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.session_expiry <= now


class SessionStore(ABC):
    """
    Storage interface for established local sessions.
    """

    @abstractmethod
    async def put(
        self,
        reference_id: str,
        user_id: str,
        ttl: timedelta
    ) -> SessionRecord:
        """
        Create or overwrite the session for a reference_id.

        Args:
            reference_id: Correlation key
            user_id: Identity asserted by the issuer
            ttl: Session lifetime measured from now

        Returns:
            The stored record
        """
        ...

    @abstractmethod
    async def get(self, reference_id: str) -> SessionRecord | None:
        """
        Get a session by reference_id.

        No liveness filtering is applied.
        """
        ...

    @property
    @abstractmethod
    def session_count(self) -> int:
        """Total number of sessions."""
        ...

    @property
    @abstractmethod
    def active_count(self) -> int:
        """Number of sessions not yet past their expiry."""
        ...


# =============================================================================
# Storage Bundle
# =============================================================================

@dataclass
class StorageBundle:
    """
    Container for both stores.

    Created once at startup and shared by the coordinator and handlers.
    """
    tokens: TokenStore
    sessions: SessionStore

    async def close(self) -> None:
        """
        Release storage resources.

        Called during shutdown.
        """
        pass


# =============================================================================
# Exceptions
# =============================================================================

class StorageError(Exception):
    """Base exception for storage errors."""
    pass
