# Session Handoff Receiver
# Accepts one-time tokens from an issuing application and trades them,
# after validation with the issuer, for local sessions

__version__ = "0.1.0"

# Re-export commonly used components for convenience
from session_handoff.storage import (
    ClaimOutcome,
    TokenRecord,
    SessionRecord,
    StorageBundle,
    create_memory_storage,
)

from session_handoff.exchange import (
    SessionExchangeCoordinator,
    EstablishOutcome,
    EstablishResult,
    IssuerValidator,
    HttpIssuerValidator,
    ValidationResult,
    ValidationStatus,
)

from session_handoff.config import HandoffSettings, settings_from_env

__all__ = [
    "__version__",
    # Storage
    "ClaimOutcome",
    "TokenRecord",
    "SessionRecord",
    "StorageBundle",
    "create_memory_storage",
    # Exchange
    "SessionExchangeCoordinator",
    "EstablishOutcome",
    "EstablishResult",
    "IssuerValidator",
    "HttpIssuerValidator",
    "ValidationResult",
    "ValidationStatus",
    # Config
    "HandoffSettings",
    "settings_from_env",
]
