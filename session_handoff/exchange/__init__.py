# Session Exchange
# Claims a pending token, validates it with the issuer, establishes a session

from session_handoff.exchange.validator import (
    IssuerValidator,
    HttpIssuerValidator,
    ValidationResult,
    ValidationStatus,
    parse_validation_response,
)
from session_handoff.exchange.coordinator import (
    SessionExchangeCoordinator,
    EstablishOutcome,
    EstablishResult,
    UNKNOWN_USER_ID,
)

__all__ = [
    "IssuerValidator",
    "HttpIssuerValidator",
    "ValidationResult",
    "ValidationStatus",
    "parse_validation_response",
    "SessionExchangeCoordinator",
    "EstablishOutcome",
    "EstablishResult",
    "UNKNOWN_USER_ID",
]
