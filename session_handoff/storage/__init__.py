# Storage Layer
# Token and session state for the handoff receiver
#
# This module provides:
# - Port interfaces (ABCs) defining storage contracts
# - In-memory implementations guarded by asyncio locks
# - Factory for building the shared StorageBundle

from .ports import (
    ClaimOutcome,
    TokenRecord,
    TokenStore,
    SessionRecord,
    SessionStore,
    StorageBundle,
    StorageError,
)
from .memory import InMemoryTokenStore, InMemorySessionStore
from .factory import create_memory_storage

__all__ = [
    # Ports
    "ClaimOutcome",
    "TokenRecord",
    "TokenStore",
    "SessionRecord",
    "SessionStore",
    "StorageBundle",
    "StorageError",
    # Adapters
    "InMemoryTokenStore",
    "InMemorySessionStore",
    # Factory
    "create_memory_storage",
]
